"""
Projection Engine
=================
Purchasing-power paths over a fixed horizon.

current   = total * (1 - risk / 100) ** years
optimized = total * (1 - residual / 100) ** years

residual is the weighted risk recomputed after moving the top
opportunity's suggested amount from its source region to its target
region. Without an opportunity the optimized path is the current path.
"""

from numbers import Integral
from typing import Mapping, Optional

from diversification_engine.analytics.inflation import weighted_risk_from_region_values
from diversification_engine.models.portfolio import (
    AggregatedPortfolio,
    AnalysisSettings,
    ProjectionResult,
    RebalancingOpportunity,
    RegionalInflationRecord,
)
from diversification_engine.utils.exceptions import PortfolioValidationError


def _erosion_factor(risk: float, years: int) -> float:
    # Rates above 100% would flip the sign of the base
    return max(0.0, 1 - risk / 100) ** years


def validate_horizon(years) -> int:
    if isinstance(years, bool) or not isinstance(years, Integral) or years <= 0:
        raise PortfolioValidationError("Projection horizon must be a positive integer number of years",
                                       field="years", value=years)
    return int(years)


def residual_inflation_risk(
    portfolio: AggregatedPortfolio,
    opportunity: RebalancingOpportunity,
    table: Mapping[str, RegionalInflationRecord],
    default_rate: float,
) -> float:
    """Weighted risk as if the opportunity's swap had been executed."""
    region_values = dict(portfolio.region_values())
    moved = min(opportunity.suggested_amount, region_values.get(opportunity.from_region, 0.0))
    region_values[opportunity.from_region] = region_values.get(opportunity.from_region, 0.0) - moved
    region_values[opportunity.to_region] = region_values.get(opportunity.to_region, 0.0) + moved
    return weighted_risk_from_region_values(region_values, table, default_rate)


def project_paths(
    portfolio: AggregatedPortfolio,
    weighted_risk: float,
    top_opportunity: Optional[RebalancingOpportunity],
    table: Mapping[str, RegionalInflationRecord],
    settings: Optional[AnalysisSettings] = None,
    years: Optional[int] = None,
) -> ProjectionResult:
    """
    Do-nothing vs rebalance projection.

    Args:
        portfolio: aggregated holdings (total and region weights)
        weighted_risk: current weighted inflation risk (%)
        top_opportunity: highest-ranked opportunity, or None
        table: inflation table used to re-weight after the swap
        settings: supplies the default horizon and default rate
        years: horizon override

    Raises:
        PortfolioValidationError: if years is not a positive integer
    """
    settings = settings or AnalysisSettings()
    years = validate_horizon(settings.projection_years if years is None else years)

    total = portfolio.total_value if not portfolio.is_empty else 0.0
    if total <= 0:
        return ProjectionResult(years=years, current_path_value=0.0, optimized_path_value=0.0, difference=0.0)

    if top_opportunity is None:
        residual = weighted_risk
    else:
        residual = residual_inflation_risk(portfolio, top_opportunity, table, settings.default_inflation_rate)

    current_value = total * _erosion_factor(weighted_risk, years)
    current_1y = total * _erosion_factor(weighted_risk, 1)
    if top_opportunity is None:
        optimized_value, optimized_1y = current_value, current_1y
    else:
        optimized_value = total * _erosion_factor(residual, years)
        optimized_1y = total * _erosion_factor(residual, 1)

    return ProjectionResult(
        years=years,
        current_path_value=current_value,
        optimized_path_value=optimized_value,
        difference=optimized_value - current_value,
        current_value_1y=current_1y,
        optimized_value_1y=optimized_1y,
        purchasing_power_lost=total - current_value,
        purchasing_power_preserved=optimized_value - current_value,
        residual_inflation_risk=residual,
    )
