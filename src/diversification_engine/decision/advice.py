"""
Advice Module
=============
Goal-aware text and target allocations layered on top of the numbers.

The goal never changes a score or an opportunity: it only picks the
wording of the goal analysis and which target allocation is highlighted.
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from diversification_engine.data.definitions.regions import RegionClassifier
from diversification_engine.data.loader import inflation_rate
from diversification_engine.models.portfolio import (
    AggregatedPortfolio,
    ConcentrationRisk,
    Goal,
    GoalAnalysis,
    GoalScores,
    RebalancingOpportunity,
    RegionalExposure,
    RegionalInflationRecord,
    TargetAllocation,
)
from diversification_engine.utils.logger import get_logger

logger = get_logger(__name__)


# Inflation risk (%) above which the inflation-protection goal asks for action
INFLATION_ALERT_RATE = 5.0
RWA_GOAL_SCORE = 85
MIN_REGIONS_TIP = 3


# =========================
# TARGET ALLOCATIONS
# =========================

def allocation_reason(region: str, goal: Goal, rate: float) -> str:
    reasons = {
        Goal.INFLATION_PROTECTION: {
            "Europe": f"Low inflation anchor ({rate:g}%) provides stability",
            "USA": f"Reserve currency ({rate:g}%) for global stability",
            "Global": "Gold-backed PAXG as hard asset hedge",
            "Asia": f"Moderate inflation ({rate:g}%) with growth exposure",
        },
        Goal.GEOGRAPHIC_DIVERSIFICATION: {
            "Europe": "Diversification into stable Eurozone",
            "USA": "USD reserve currency exposure",
            "Asia": "High-growth Asian markets",
            "Africa": "Emerging market diversification",
            "LatAm": "Regional diversification into LatAm",
            "Global": "Commodity hedge with gold",
        },
        Goal.RWA_ACCESS: {
            "Global": "Gold (PAXG) or yield (SYRUPUSDC) for wealth preservation",
            "Europe": "Stable European exposure",
            "USA": "USD Treasury yield (USDY) for stable returns",
            "Asia": "Asian market diversification",
        },
        Goal.EXPLORING: {
            "Europe": "Explore Eurozone stability",
            "USA": "USD as benchmark",
            "Asia": "Asian market exposure",
            "Africa": "African emerging markets",
            "LatAm": "Latin American diversification",
            "Global": "Gold as alternative asset",
        },
    }
    return reasons.get(goal, {}).get(region, f"Targeting {region} for balanced exposure")


def generate_target_allocations(
    goal: Goal,
    goal_allocations: Mapping[str, Mapping[str, float]],
    classifier: RegionClassifier,
    table: Mapping[str, RegionalInflationRecord],
    default_rate: float,
) -> Tuple[TargetAllocation, ...]:
    """Target mix for one goal; zero-weight regions and regions without a token are left out."""
    targets: List[TargetAllocation] = []
    for region, percentage in goal_allocations.get(goal.value, {}).items():
        if percentage <= 0:
            continue
        symbol = classifier.token_for_region(region)
        if symbol is None:
            logger.debug(f"No target token for {region}; skipped in {goal.value} allocation")
            continue
        rate = inflation_rate(table, region, default_rate)
        targets.append(TargetAllocation(
            symbol=symbol,
            region=region,
            target_percentage=float(percentage),
            reason=allocation_reason(region, goal, rate),
        ))
    return tuple(targets)


def all_target_allocations(
    goal_allocations: Mapping[str, Mapping[str, float]],
    classifier: RegionClassifier,
    table: Mapping[str, RegionalInflationRecord],
    default_rate: float,
) -> Mapping[str, Tuple[TargetAllocation, ...]]:
    """Goal value -> target allocation, for every goal."""
    return MappingProxyType({
        goal.value: generate_target_allocations(goal, goal_allocations, classifier, table, default_rate)
        for goal in Goal
    })


# =========================
# GOAL ANALYSIS
# =========================

def build_goal_analysis(
    goal: Goal,
    opportunities: Sequence[RebalancingOpportunity],
    weighted_risk: float,
    portfolio: AggregatedPortfolio,
    rwa_symbols: Iterable[str],
) -> GoalAnalysis:
    """Headline and description for the advisory goal."""
    opportunities = tuple(opportunities)

    if goal == Goal.GEOGRAPHIC_DIVERSIFICATION:
        title = "Regional Diversification"
        if opportunities:
            top = opportunities[0]
            description = (f"Spreading your {top.from_token} into {top.to_token} improves your "
                           f"regional balance and reduces concentration risk.")
        else:
            description = "Your portfolio is regionally balanced. Consider exploring new emerging markets."
    elif goal == Goal.RWA_ACCESS:
        title = "Real-World Assets"
        if has_rwa_exposure(portfolio, rwa_symbols):
            description = ("You have RWA exposure. Consider increasing your allocation to gold "
                           "or yield-bearing treasuries.")
        else:
            description = ("Add gold-backed PAXG or yield-bearing USDY to protect your "
                           "purchasing power with hard assets.")
    elif goal == Goal.INFLATION_PROTECTION:
        title = "Inflation Protection"
        if weighted_risk > INFLATION_ALERT_RATE:
            description = (f"Your holdings face {weighted_risk:.1f}% inflation. Move into lower "
                           f"inflation stablecoins or gold to preserve value.")
        else:
            description = "Your inflation risk is low. Continue monitoring global rates to stay protected."
    else:
        title = "Portfolio Opportunities"
        description = "Get personalized recommendations based on your holdings and market conditions."

    return GoalAnalysis(goal=goal, title=title, description=description, recommendations=opportunities)


def has_rwa_exposure(portfolio: AggregatedPortfolio, rwa_symbols: Iterable[str]) -> bool:
    rwa = {s.upper() for s in rwa_symbols}
    return any(h.symbol in rwa for h in portfolio.holdings)


def calculate_goal_scores(weighted_risk: float, diversification_score: int, has_rwa: bool) -> GoalScores:
    return GoalScores(
        hedge=max(0.0, 100 - weighted_risk * 10),
        diversify=diversification_score,
        rwa=RWA_GOAL_SCORE if has_rwa else 0,
    )


# =========================
# TIPS
# =========================

def diversification_tips(
    diversification_score: int,
    missing_regions: Sequence[str],
    concentration_risk: ConcentrationRisk,
    has_rwa: bool,
    regional_exposure: Sequence[RegionalExposure] = (),
    user_region: Optional[str] = None,
    home_share_limit: float = 0.5,
) -> Tuple[str, ...]:
    """Short, ordered advice strings for the UI."""
    tips: List[str] = []

    if diversification_score < 60:
        tips.append(f"Aim to have at least {MIN_REGIONS_TIP} different regions in your portfolio.")
    if missing_regions:
        tips.append(f"Consider adding exposure to {', '.join(missing_regions[:2])} to improve diversification.")
    if concentration_risk == ConcentrationRisk.HIGH:
        tips.append("High concentration detected. Consider rebalancing to other regions.")
    if not has_rwa:
        tips.append("Add gold-backed PAXG as a hedge against currency debasement.")

    if user_region:
        shares: Dict[str, float] = {e.region: e.percentage for e in regional_exposure}
        home_share = shares.get(user_region, 0.0)
        if home_share > home_share_limit * 100:
            tips.append(f"{home_share:.0f}% of your value sits in your home region ({user_region}). "
                        f"Holding other currencies protects you from a local shock.")

    return tuple(tips)
