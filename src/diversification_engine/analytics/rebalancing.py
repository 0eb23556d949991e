"""
Rebalancing Opportunity Generator
=================================
Ranked swap proposals out of high-inflation regions.

Rules:
1. Target regions are the regions of the inflation table that have a
   target token in the classifier.
2. A holding is a source when it is worth at least min_source_value_usd and
   its rate beats the lowest target rate by at least min_inflation_delta.
3. Each source keeps only its best-delta target (ties: catalog order, then
   region name), skipping its own region and its own token.
4. suggested_amount = suggested_fraction of the holding, floored at
   min_suggested_amount_usd for holdings worth at least that much, never
   above the holding itself.
5. Sort: annual_savings desc, inflation_delta desc, source value desc,
   source symbol asc. The list is capped, the full count reported apart.

Never raises: no viable move means an empty plan.
"""

from dataclasses import dataclass
from typing import List, Mapping, Optional

from diversification_engine.data.definitions.regions import RegionClassifier
from diversification_engine.data.loader import inflation_rate
from diversification_engine.models.portfolio import (
    AggregatedPortfolio,
    AnalysisSettings,
    Priority,
    RebalancingOpportunity,
    RebalancingPlan,
    RegionalInflationRecord,
    TokenHolding,
)
from diversification_engine.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class _Target:
    region: str
    token: str
    rate: float
    order: int


# =========================
# HELPERS
# =========================

def suggested_amount(value: float, settings: AnalysisSettings) -> float:
    """Staged swap size for a holding worth `value` USD."""
    amount = value * settings.suggested_fraction
    if value >= settings.min_suggested_amount_usd:
        amount = max(amount, settings.min_suggested_amount_usd)
    return min(amount, value)


def classify_priority(annual_savings: float, inflation_delta: float, settings: AnalysisSettings) -> Priority:
    if annual_savings >= settings.high_priority_savings_usd or inflation_delta >= settings.high_priority_delta:
        return Priority.HIGH
    if annual_savings >= settings.medium_priority_savings_usd:
        return Priority.MEDIUM
    return Priority.LOW


def _available_targets(
    table: Mapping[str, RegionalInflationRecord],
    classifier: RegionClassifier,
    default_rate: float,
) -> List[_Target]:
    targets = []
    for region in table:
        token = classifier.token_for_region(region)
        if token is None:
            continue
        targets.append(_Target(
            region=region,
            token=token,
            rate=inflation_rate(table, region, default_rate),
            order=classifier.catalog_index(region),
        ))
    return targets


def _best_target(
    holding: TokenHolding,
    source_rate: float,
    targets: List[_Target],
    min_delta: float,
) -> Optional[_Target]:
    candidates = [
        t for t in targets
        if t.region != holding.region
        and t.token != holding.symbol
        and source_rate - t.rate > 0
        and source_rate - t.rate >= min_delta
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda t: (-(source_rate - t.rate), t.order, t.region))


# =========================
# GENERATOR
# =========================

def generate_rebalancing_opportunities(
    portfolio: AggregatedPortfolio,
    table: Mapping[str, RegionalInflationRecord],
    classifier: RegionClassifier,
    settings: Optional[AnalysisSettings] = None,
) -> RebalancingPlan:
    """
    Build the ranked rebalancing plan.

    Args:
        portfolio: aggregated holdings
        table: normalized inflation table (region -> record)
        classifier: supplies the target token for each region
        settings: materiality, sizing, priority and cap thresholds

    Returns:
        RebalancingPlan with at most settings.max_opportunities entries and
        total_count set to the uncapped number of opportunities.
    """
    settings = settings or AnalysisSettings()
    if portfolio.is_empty:
        return RebalancingPlan()

    default_rate = settings.default_inflation_rate
    targets = _available_targets(table, classifier, default_rate)
    if not targets:
        logger.debug("No target regions with a token in the inflation table; nothing to rebalance")
        return RebalancingPlan()

    lowest_rate = min(t.rate for t in targets)
    opportunities: List[RebalancingOpportunity] = []

    for holding in portfolio.holdings:
        if holding.value_usd < settings.min_source_value_usd:
            continue

        source_rate = inflation_rate(table, holding.region, default_rate)
        if source_rate - lowest_rate < settings.min_inflation_delta:
            continue

        target = _best_target(holding, source_rate, targets, settings.min_inflation_delta)
        if target is None:
            continue

        delta = source_rate - target.rate
        amount = suggested_amount(holding.value_usd, settings)
        savings = amount * delta / 100

        opportunities.append(RebalancingOpportunity(
            from_token=holding.symbol,
            to_token=target.token,
            from_region=holding.region,
            to_region=target.region,
            from_inflation=source_rate,
            to_inflation=target.rate,
            inflation_delta=delta,
            suggested_amount=amount,
            annual_savings=savings,
            priority=classify_priority(savings, delta, settings),
            source_value=holding.value_usd,
        ))

    opportunities.sort(key=lambda o: (-o.annual_savings, -o.inflation_delta, -o.source_value, o.from_token))

    logger.debug(f"Rebalancing: {len(opportunities)} opportunities "
                 f"(showing up to {settings.max_opportunities})")

    return RebalancingPlan(
        opportunities=tuple(opportunities[:settings.max_opportunities]),
        total_count=len(opportunities),
    )
