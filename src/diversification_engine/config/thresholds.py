# Threshold Documentation and Sources
# ===================================
# Documents every threshold the diversification engine uses, with the
# reasoning behind each value and the alternatives that were considered.

"""
THRESHOLD DOCUMENTATION WITH SOURCES
=====================================

Every numeric decision boundary in the engine is listed here with its
provenance. The live values are read from config/user_config.py;
check_config_consistency() reports any drift between the two.

METHODOLOGY:
- Each threshold includes: value, source, sensitivity, and alternatives
- Sources are ranked: academic > institutional > industry standard > empirical
- ARBITRARY entries are product heuristics and say so
"""

from typing import Dict, Any, List
from dataclasses import dataclass
from enum import Enum


class ThresholdSource(Enum):
    """Classification of threshold sources by reliability."""
    ACADEMIC = "Academic peer-reviewed paper"
    INSTITUTIONAL = "Institutional guidance (regulators, central banks)"
    INDUSTRY = "Industry standard/convention"
    EMPIRICAL = "Empirical analysis of historical data"
    ARBITRARY = "Product heuristic - requires justification"


@dataclass(frozen=True)
class DocumentedThreshold:
    """A threshold with full documentation."""
    name: str
    config_key: str
    value: float
    source_type: ThresholdSource
    source_citation: str
    sensitivity: str
    alternative_values: Dict[str, float]
    notes: str


# ================================================================================
# CONCENTRATION THRESHOLDS
# ================================================================================

HHI_HIGH_THRESHOLD = DocumentedThreshold(
    name="HHI High Concentration",
    config_key="hhi_high",
    value=0.50,
    source_type=ThresholdSource.INDUSTRY,
    source_citation="HHI > 0.5 means one holding is larger than all others combined",
    sensitivity="At 0.40: three-token portfolios with a 60% leader flip to HIGH. Impact: MODERATE",
    alternative_values={"Strict": 0.40, "Lenient": 0.60},
    notes="""
    An HHI above 0.5 can only happen when a single position dominates, so
    the tier reads as "one bet" regardless of how many dust positions exist.
    """
)

HHI_MEDIUM_THRESHOLD = DocumentedThreshold(
    name="HHI Medium Concentration",
    config_key="hhi_medium",
    value=0.25,
    source_type=ThresholdSource.INSTITUTIONAL,
    source_citation="US DOJ/FTC Horizontal Merger Guidelines (2010): HHI > 2500 = highly concentrated",
    sensitivity="At 0.20: even four-way splits flag MEDIUM. Impact: HIGH",
    alternative_values={"DOJ 2023 guidelines": 0.18, "DOJ 2010 guidelines": 0.25},
    notes="The merger-review scale (0-10000) divided by 10000."
)

REGION_SHARE_HIGH_THRESHOLD = DocumentedThreshold(
    name="Single Region High Concentration",
    config_key="region_share_high",
    value=0.70,
    source_type=ThresholdSource.ARBITRARY,
    source_citation="Carried over from the dashboard's regional concentration rule",
    sensitivity="At 0.60: home-currency savers flip to HIGH earlier. Impact: MODERATE",
    alternative_values={"Dashboard MEDIUM tier": 0.50},
    notes="""
    Several tokens from the same currency bloc keep HHI low while leaving the
    portfolio exposed to one central bank. The regional check catches that.
    """
)

OVER_EXPOSED_THRESHOLD = DocumentedThreshold(
    name="Over-Exposed Region Share",
    config_key="over_exposed_share",
    value=0.50,
    source_type=ThresholdSource.ARBITRARY,
    source_citation="Majority of value in one region",
    sensitivity="At most one region can exceed 50%, so the list has 0 or 1 entries. Impact: LOW",
    alternative_values={"Dashboard tip rule": 0.40},
    notes="Lowering below 0.5 allows several over-exposed regions at once."
)


# ================================================================================
# REBALANCING MATERIALITY
# ================================================================================

MIN_INFLATION_DELTA_THRESHOLD = DocumentedThreshold(
    name="Minimum Inflation Delta",
    config_key="min_inflation_delta",
    value=1.5,
    source_type=ThresholdSource.EMPIRICAL,
    source_citation="Typical stablecoin swap + bridge cost is well under 1.5% of notional",
    sensitivity="At 1.0: USD <-> EUR swaps surface in most years. At 2.0: only EM -> DM swaps. Impact: HIGH",
    alternative_values={"Geographic diversification goal": 1.0, "Inflation protection goal": 2.0},
    notes="""
    Below 1.5 percentage points a single year of savings rarely pays for the
    round trip, and month-to-month noise in the inflation prints is of the
    same order.
    """
)

MIN_SOURCE_VALUE_THRESHOLD = DocumentedThreshold(
    name="Minimum Source Holding Value",
    config_key="min_source_value_usd",
    value=5.0,
    source_type=ThresholdSource.ARBITRARY,
    source_citation="Gas + slippage on a $2.50 swap exceeds a year of savings",
    sensitivity="Affects only dust-sized wallets. Impact: LOW",
    alternative_values={"L2-only deployments": 1.0},
    notes="Holdings below this are still scored, they are just never a swap source."
)

SUGGESTED_FRACTION_THRESHOLD = DocumentedThreshold(
    name="Suggested Swap Fraction",
    config_key="suggested_fraction",
    value=0.5,
    source_type=ThresholdSource.ARBITRARY,
    source_citation="Staged rebalancing: never liquidate a whole position in one step",
    sensitivity="Scales annual savings linearly. Impact: MODERATE",
    alternative_values={"Cautious": 0.25, "Aggressive": 0.75},
    notes="Always capped at the holding value; floored at $1 for holdings worth >= $1."
)


# ================================================================================
# PRIORITY TIERS
# ================================================================================

HIGH_PRIORITY_SAVINGS_THRESHOLD = DocumentedThreshold(
    name="High Priority Annual Savings",
    config_key="high_priority_savings_usd",
    value=20.0,
    source_type=ThresholdSource.ARBITRARY,
    source_citation="Roughly one month of a retail subscription; worth a user's attention",
    sensitivity="Impact: LOW (delta rule promotes large spreads anyway)",
    alternative_values={},
    notes="HIGH also applies whenever the inflation delta is >= 5 points."
)

HIGH_PRIORITY_DELTA_THRESHOLD = DocumentedThreshold(
    name="High Priority Inflation Delta",
    config_key="high_priority_delta",
    value=5.0,
    source_type=ThresholdSource.EMPIRICAL,
    source_citation="Spread between EM and DM headline inflation in 2022-2024",
    sensitivity="At 4.0: most Africa/LatAm holdings become HIGH. Impact: MODERATE",
    alternative_values={"Original dashboard": 5.0},
    notes="A 5 point spread compounds to ~14% of purchasing power over 3 years."
)

DEFAULT_INFLATION_THRESHOLD = DocumentedThreshold(
    name="Default Inflation Rate",
    config_key="default_inflation_rate",
    value=3.0,
    source_type=ThresholdSource.INSTITUTIONAL,
    source_citation="IMF World Economic Outlook: advanced-economy inflation averages ~2-3%",
    sensitivity="Only affects regions absent from the inflation table. Impact: LOW",
    alternative_values={"Central bank target": 2.0},
    notes="Neutral fallback: neither rewards nor punishes unknown regions."
)


# ================================================================================
# INTROSPECTION HELPERS
# ================================================================================

def get_all_thresholds() -> Dict[str, DocumentedThreshold]:
    """Return all documented thresholds keyed by config key."""
    thresholds = [
        HHI_HIGH_THRESHOLD,
        HHI_MEDIUM_THRESHOLD,
        REGION_SHARE_HIGH_THRESHOLD,
        OVER_EXPOSED_THRESHOLD,
        MIN_INFLATION_DELTA_THRESHOLD,
        MIN_SOURCE_VALUE_THRESHOLD,
        SUGGESTED_FRACTION_THRESHOLD,
        HIGH_PRIORITY_SAVINGS_THRESHOLD,
        HIGH_PRIORITY_DELTA_THRESHOLD,
        DEFAULT_INFLATION_THRESHOLD,
    ]
    return {t.config_key: t for t in thresholds}


def get_threshold_sensitivity_report() -> str:
    """Generate a report of threshold sensitivities."""
    report = ["# Threshold Sensitivity Report", "=" * 50, ""]

    for key, threshold in get_all_thresholds().items():
        report.append(f"## {threshold.name} ({key})")
        report.append(f"Current value: {threshold.value}")
        report.append(f"Source: {threshold.source_type.value}")
        report.append(f"Citation: {threshold.source_citation}")
        report.append(f"Sensitivity: {threshold.sensitivity}")
        report.append(f"Alternatives: {threshold.alternative_values}")
        report.append("")

    return "\n".join(report)


def check_config_consistency(thresholds: Dict[str, Any]) -> List[str]:
    """
    Compare live threshold values against the documented ones.

    Returns:
        Messages for every documented key whose live value differs
        (empty list when everything matches).
    """
    drift = []
    for key, documented in get_all_thresholds().items():
        if key not in thresholds:
            drift.append(f"{key}: missing from config (documented {documented.value})")
        elif float(thresholds[key]) != documented.value:
            drift.append(f"{key}: config {thresholds[key]} != documented {documented.value}")
    return drift
