"""
Inflation Risk Module
=====================
Value-weighted inflation exposure plus the per-token / per-region views
built on the same lookups.

Formula: risk = sum(value_i / total * rate(region_i)), rate falling back to
the configured default for regions missing from the table.
"""

from typing import Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from diversification_engine.data.loader import inflation_rate
from diversification_engine.models.portfolio import (
    AggregatedPortfolio,
    RegionalExposure,
    RegionalInflationRecord,
    TokenAllocation,
    YieldSummary,
)


# =========================
# WEIGHTED RISK
# =========================

def weighted_risk_from_region_values(
    region_values: Mapping[str, float],
    table: Mapping[str, RegionalInflationRecord],
    default_rate: float,
) -> float:
    """
    Weighted inflation (%) of a region -> value mapping.

    Used both for the live portfolio and for hypothetical re-weightings
    (the projection's post-swap residual). Never negative, 0 when the
    mapping holds no value.
    """
    regions = [r for r, v in region_values.items() if v > 0]
    if not regions:
        return 0.0

    values = np.array([region_values[r] for r in regions], dtype=float)
    rates = np.array([inflation_rate(table, r, default_rate) for r in regions], dtype=float)

    risk = float(np.dot(values / values.sum(), rates))
    return max(0.0, risk)


def weighted_inflation_risk(
    portfolio: AggregatedPortfolio,
    table: Mapping[str, RegionalInflationRecord],
    default_rate: float,
) -> float:
    """Value-weighted annual inflation exposure (%) of the portfolio."""
    if portfolio.is_empty:
        return 0.0
    return weighted_risk_from_region_values(portfolio.region_values(), table, default_rate)


# =========================
# ALLOCATION VIEWS
# =========================

def calculate_token_allocations(
    portfolio: AggregatedPortfolio,
    table: Mapping[str, RegionalInflationRecord],
    default_rate: float,
    yield_apy: Optional[Mapping[str, float]] = None,
) -> Tuple[TokenAllocation, ...]:
    """Per-token value, percentage (0-100), inflation and yield, in holding order."""
    if portfolio.is_empty:
        return ()
    yield_apy = yield_apy or {}
    total = portfolio.total_value

    return tuple(
        TokenAllocation(
            symbol=h.symbol,
            value=h.value_usd,
            percentage=h.value_usd / total * 100,
            region=h.region,
            inflation_rate=inflation_rate(table, h.region, default_rate),
            yield_rate=float(yield_apy.get(h.symbol, 0.0)),
            chain_id=h.chain_id,
        )
        for h in portfolio.holdings
    )


def calculate_regional_exposure(
    portfolio: AggregatedPortfolio,
    table: Mapping[str, RegionalInflationRecord],
    default_rate: float,
    catalog: Sequence[str] = (),
) -> Tuple[RegionalExposure, ...]:
    """
    Per-region value and share, ordered by value descending.

    Ties are broken by catalog position, then by name.
    """
    if portfolio.is_empty:
        return ()

    df = pd.DataFrame(
        [(h.region, h.symbol, h.value_usd) for h in portfolio.holdings],
        columns=["region", "symbol", "value"],
    )
    grouped = df.groupby("region", sort=False).agg(value=("value", "sum"), tokens=("symbol", list))

    catalog = tuple(catalog)
    order = sorted(
        grouped.index,
        key=lambda r: (-grouped.at[r, "value"], catalog.index(r) if r in catalog else len(catalog), r),
    )

    total = portfolio.total_value
    return tuple(
        RegionalExposure(
            region=str(region),
            value=float(grouped.at[region, "value"]),
            percentage=float(grouped.at[region, "value"]) / total * 100,
            inflation_rate=inflation_rate(table, str(region), default_rate),
            tokens=tuple(grouped.at[region, "tokens"]),
        )
        for region in order
    )


# =========================
# YIELD
# =========================

def calculate_yield_summary(
    allocations: Sequence[TokenAllocation],
    total_value: float,
    weighted_risk: float,
) -> YieldSummary:
    """
    Annual yield vs annual inflation cost of the current allocations.

    net_rate is the average yield rate minus the weighted inflation risk,
    both in percent.
    """
    if total_value <= 0 or not allocations:
        return YieldSummary()

    total_yield = sum(a.value * a.yield_rate / 100 for a in allocations)
    inflation_cost = sum(a.value * a.inflation_rate / 100 for a in allocations)
    net_gain = total_yield - inflation_cost
    avg_yield_rate = total_yield / total_value * 100

    return YieldSummary(
        total_annual_yield=float(total_yield),
        total_inflation_cost=float(inflation_cost),
        net_annual_gain=float(net_gain),
        avg_yield_rate=float(avg_yield_rate),
        net_rate=float(avg_yield_rate - weighted_risk),
        is_net_positive=net_gain >= 0,
    )

