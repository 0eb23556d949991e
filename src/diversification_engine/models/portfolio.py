"""
Models Module
=============
Frozen dataclasses for every value that crosses a component boundary.

Each analysis call builds fresh instances; nothing here is mutated after
construction. Sequences are tuples, sets are frozensets and read-only
mappings are MappingProxyType so a PortfolioAnalysis can be shared freely
between callers.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple
import json
import math

from diversification_engine.utils.exceptions import ConfigurationError


# ================================================================================
# ENUMS
# ================================================================================

class ConcentrationRisk(str, Enum):
    """Qualitative concentration tier."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Priority(str, Enum):
    """Rebalancing opportunity priority."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class DataSource(str, Enum):
    """Provenance of a regional inflation figure."""
    LIVE = "live"
    CACHED = "cached"
    ESTIMATED = "estimated"

    @classmethod
    def parse(cls, value: Any) -> "DataSource":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.ESTIMATED


class DiversificationRating(str, Enum):
    """Human-facing label for the 0-100 diversification score."""
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    VERY_POOR = "Very Poor"

    @classmethod
    def from_score(cls, score: int) -> "DiversificationRating":
        if score >= 80:
            return cls.EXCELLENT
        if score >= 60:
            return cls.GOOD
        if score >= 40:
            return cls.FAIR
        if score >= 20:
            return cls.POOR
        return cls.VERY_POOR


class Goal(str, Enum):
    """
    Advisory user goal.

    Threaded through to the advice layer only: it never changes the
    scoring formulas.
    """
    INFLATION_PROTECTION = "inflation_protection"
    GEOGRAPHIC_DIVERSIFICATION = "geographic_diversification"
    RWA_ACCESS = "rwa_access"
    EXPLORING = "exploring"

    @classmethod
    def parse(cls, value: Any) -> "Goal":
        """Unknown or empty goals fall back to EXPLORING."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.EXPLORING
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.EXPLORING


# ================================================================================
# ENGINE SETTINGS
# ================================================================================

@dataclass(frozen=True)
class AnalysisSettings:
    """
    Validated thresholds consumed by the analytics.

    Built from the 'thresholds' section of get_config() via from_config().
    Percent values are 0-100, share values are 0-1.
    """
    dust_floor_usd: float = 0.01
    total_mismatch_tolerance_usd: float = 0.01
    default_inflation_rate: float = 3.0
    min_inflation_delta: float = 1.5
    min_source_value_usd: float = 5.0
    suggested_fraction: float = 0.5
    min_suggested_amount_usd: float = 1.0
    max_opportunities: int = 10
    high_priority_savings_usd: float = 20.0
    high_priority_delta: float = 5.0
    medium_priority_savings_usd: float = 5.0
    hhi_high: float = 0.50
    hhi_medium: float = 0.25
    region_share_high: float = 0.70
    over_exposed_share: float = 0.50
    under_exposed_share: float = 0.10
    projection_years: int = 3

    def __post_init__(self):
        if not 0 < self.suggested_fraction <= 1:
            raise ConfigurationError(f"suggested_fraction must be in (0, 1], got {self.suggested_fraction}")
        if self.max_opportunities < 0:
            raise ConfigurationError("max_opportunities must be >= 0")
        if self.projection_years <= 0:
            raise ConfigurationError("projection_years must be > 0")
        if not 0 <= self.hhi_medium <= self.hhi_high <= 1:
            raise ConfigurationError("HHI tiers must satisfy 0 <= hhi_medium <= hhi_high <= 1")
        for name in ("dust_floor_usd", "min_inflation_delta", "min_source_value_usd",
                     "min_suggested_amount_usd", "default_inflation_rate"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(f"{name} must be a finite value >= 0, got {value}")

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "AnalysisSettings":
        """Build settings from a full config dict or a bare thresholds dict."""
        if config is None:
            return cls()
        thresholds = config.get("thresholds", config)
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in thresholds.items() if k in known}
        for int_key in ("max_opportunities", "projection_years"):
            if int_key in kwargs:
                kwargs[int_key] = int(kwargs[int_key])
        return cls(**kwargs)


# ================================================================================
# ANALYSIS CONTEXT (versioned schema)
# ================================================================================

@dataclass(frozen=True)
class AnalysisContext:
    """
    Auxiliary caller context, schema version 1.

    Accepts snake_case or camelCase keys; unknown fields are ignored so
    newer callers do not break older engines.
    """
    schema_version: int = 1
    goal: Optional[str] = None
    user_region: Optional[str] = None
    risk_tolerance: Optional[str] = None
    time_horizon_months: Optional[int] = None

    _ALIASES = {
        "schemaVersion": "schema_version",
        "userGoal": "goal",
        "userRegion": "user_region",
        "riskTolerance": "risk_tolerance",
        "timeHorizonMonths": "time_horizon_months",
    }

    @classmethod
    def from_dict(cls, payload: Optional[Mapping[str, Any]]) -> "AnalysisContext":
        if not payload:
            return cls()
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in payload.items():
            name = cls._ALIASES.get(key, key)
            if name in known and value is not None:
                kwargs[name] = value
        if "time_horizon_months" in kwargs:
            try:
                kwargs["time_horizon_months"] = int(kwargs["time_horizon_months"])
            except (TypeError, ValueError):
                del kwargs["time_horizon_months"]
        if "schema_version" in kwargs:
            try:
                kwargs["schema_version"] = int(kwargs["schema_version"])
            except (TypeError, ValueError):
                del kwargs["schema_version"]
        return cls(**kwargs)


# ================================================================================
# PORTFOLIO INPUT MODEL
# ================================================================================

@dataclass(frozen=True)
class TokenHolding:
    """
    One logical holding.

    chain_id is the chain holding the largest share of the value;
    chain_ids lists every chain the symbol was seen on, in input order.
    """
    symbol: str
    chain_id: Optional[int]
    region: str
    value_usd: float
    chain_ids: Tuple[int, ...] = ()


@dataclass(frozen=True)
class AggregatedPortfolio:
    """Normalized snapshot: total_value always equals the sum of holdings."""
    total_value: float
    holdings: Tuple[TokenHolding, ...] = ()
    chains: FrozenSet[int] = frozenset()
    chain_holdings: Tuple[TokenHolding, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.total_value <= 0 or not self.holdings

    def region_values(self) -> Dict[str, float]:
        """Region -> summed value, in first-seen order."""
        values: Dict[str, float] = {}
        for holding in self.holdings:
            values[holding.region] = values.get(holding.region, 0.0) + holding.value_usd
        return values

    def find(self, symbol: str) -> Optional[TokenHolding]:
        symbol = symbol.upper()
        for holding in self.holdings:
            if holding.symbol == symbol:
                return holding
        return None


@dataclass(frozen=True)
class RegionalInflationRecord:
    """Annual inflation for one region, in percent."""
    region: str
    annual_rate_percent: float
    data_source: DataSource = DataSource.ESTIMATED


# ================================================================================
# ANALYTICS OUTPUT
# ================================================================================

@dataclass(frozen=True)
class TokenAllocation:
    symbol: str
    value: float
    percentage: float
    region: str
    inflation_rate: float
    yield_rate: float
    chain_id: Optional[int] = None


@dataclass(frozen=True)
class RegionalExposure:
    region: str
    value: float
    percentage: float
    inflation_rate: float
    tokens: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DiversificationResult:
    """Output of the diversification scorer."""
    diversification_score: int
    hhi: float
    entropy_ratio: float
    concentration_risk: ConcentrationRisk
    rating: DiversificationRating
    over_exposed_regions: Tuple[str, ...] = ()
    missing_regions: Tuple[str, ...] = ()
    under_exposed_regions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RebalancingOpportunity:
    """
    A proposed swap out of a higher-inflation region.

    inflation_delta = from_inflation - to_inflation (percentage points)
    annual_savings  = suggested_amount * inflation_delta / 100
    """
    from_token: str
    to_token: str
    from_region: str
    to_region: str
    from_inflation: float
    to_inflation: float
    inflation_delta: float
    suggested_amount: float
    annual_savings: float
    priority: Priority
    source_value: float = 0.0


@dataclass(frozen=True)
class RebalancingPlan:
    """Capped, ordered opportunities plus the uncapped count."""
    opportunities: Tuple[RebalancingOpportunity, ...] = ()
    total_count: int = 0

    @property
    def top(self) -> Optional[RebalancingOpportunity]:
        return self.opportunities[0] if self.opportunities else None

    @property
    def hidden_count(self) -> int:
        """How many opportunities were cut by the cap (the UI's "+N more")."""
        return max(0, self.total_count - len(self.opportunities))


@dataclass(frozen=True)
class ProjectionResult:
    """Do-nothing vs rebalance purchasing-power paths."""
    years: int
    current_path_value: float
    optimized_path_value: float
    difference: float
    current_value_1y: float = 0.0
    optimized_value_1y: float = 0.0
    purchasing_power_lost: float = 0.0
    purchasing_power_preserved: float = 0.0
    residual_inflation_risk: float = 0.0

    @property
    def timeframe(self) -> str:
        return "1 year" if self.years == 1 else f"{self.years} years"


@dataclass(frozen=True)
class YieldSummary:
    total_annual_yield: float = 0.0
    total_inflation_cost: float = 0.0
    net_annual_gain: float = 0.0
    avg_yield_rate: float = 0.0
    net_rate: float = 0.0
    is_net_positive: bool = True


@dataclass(frozen=True)
class GoalScores:
    """0-100 fit of the current holdings to each advisory goal."""
    hedge: float = 0.0
    diversify: int = 0
    rwa: int = 0


@dataclass(frozen=True)
class TargetAllocation:
    symbol: str
    region: str
    target_percentage: float
    reason: str


@dataclass(frozen=True)
class GoalAnalysis:
    goal: Goal
    title: str
    description: str
    recommendations: Tuple[RebalancingOpportunity, ...] = ()


# ================================================================================
# AGGREGATE RESULT
# ================================================================================

@dataclass(frozen=True)
class PortfolioAnalysis:
    """
    Complete, read-only analysis result.

    Always fully populated: insufficient input yields zeros and empty
    sequences, never missing fields.
    """
    # Aggregate stats
    total_value: float
    token_count: int
    region_count: int

    # Risk metrics
    diversification_score: int
    weighted_inflation_risk: float
    concentration_risk: ConcentrationRisk
    over_exposed_regions: Tuple[str, ...]
    missing_regions: Tuple[str, ...]
    rebalancing_opportunities: Tuple[RebalancingOpportunity, ...]

    # Supplementary detail
    total_opportunity_count: int = 0
    hhi: float = 0.0
    entropy_ratio: float = 0.0
    diversification_rating: DiversificationRating = DiversificationRating.VERY_POOR
    under_exposed_regions: Tuple[str, ...] = ()
    holdings: Tuple[TokenHolding, ...] = ()
    chain_holdings: Tuple[TokenHolding, ...] = ()
    chains: FrozenSet[int] = frozenset()
    token_allocations: Tuple[TokenAllocation, ...] = ()
    regional_exposure: Tuple[RegionalExposure, ...] = ()
    projection: ProjectionResult = field(default_factory=lambda: ProjectionResult(3, 0.0, 0.0, 0.0))
    yield_summary: YieldSummary = field(default_factory=YieldSummary)
    goal_scores: GoalScores = field(default_factory=GoalScores)

    # Advice layer
    goal: Goal = Goal.EXPLORING
    goal_analysis: Optional[GoalAnalysis] = None
    target_allocations: Mapping[str, Tuple[TargetAllocation, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    diversification_tips: Tuple[str, ...] = ()
    recommended_action: Any = None

    @property
    def top_opportunity(self) -> Optional[RebalancingOpportunity]:
        return self.rebalancing_opportunities[0] if self.rebalancing_opportunities else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dictionary."""
        data = to_jsonable(self)
        data["projection"]["timeframe"] = self.projection.timeframe
        return data

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


# ================================================================================
# HELPER FUNCTIONS
# ================================================================================

def to_jsonable(obj: Any) -> Any:
    """
    Recursively convert models to plain JSON types.

    Enums become their values, frozensets become sorted lists and
    action variants contribute their own to_dict().
    """
    if isinstance(obj, Enum):
        return obj.value
    if hasattr(obj, "to_dict") and not isinstance(obj, PortfolioAnalysis) and not isinstance(obj, type):
        return obj.to_dict()
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (frozenset, set)):
        return sorted(to_jsonable(v) for v in obj)
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    if isinstance(obj, float):
        return float(obj)
    return obj
