"""
Pipeline Module
===============
Orchestration of one analysis pass.

Flow (one direction, no callbacks):
    aggregate -> {diversification, inflation risk} -> rebalancing
    -> projection -> advice assembly -> PortfolioAnalysis

Every stage is a pure function of its inputs: no I/O, no clock, no shared
state, so identical inputs give identical (byte-equal to_json) results.
"""

from typing import Any, Dict, Mapping, Optional, Union

from diversification_engine.analytics.diversification import score_diversification
from diversification_engine.analytics.inflation import (
    calculate_regional_exposure,
    calculate_token_allocations,
    calculate_yield_summary,
    weighted_inflation_risk,
)
from diversification_engine.analytics.projection import project_paths, validate_horizon
from diversification_engine.analytics.rebalancing import generate_rebalancing_opportunities
from diversification_engine.config.user_config import get_config
from diversification_engine.data.aggregator import aggregate_portfolio
from diversification_engine.data.definitions.regions import RegionClassifier, classifier_from_config
from diversification_engine.data.loader import InflationTable, load_inflation_table
from diversification_engine.decision.actions import HoldAction, action_for_opportunity
from diversification_engine.decision.advice import (
    all_target_allocations,
    build_goal_analysis,
    calculate_goal_scores,
    diversification_tips,
    has_rwa_exposure,
)
from diversification_engine.models.portfolio import (
    AnalysisContext,
    AnalysisSettings,
    ConcentrationRisk,
    Goal,
    GoalAnalysis,
    PortfolioAnalysis,
    ProjectionResult,
)
from diversification_engine.utils.logger import get_logger, log_performance

logger = get_logger(__name__)


# =========================
# HELPER FUNCTIONS
# =========================

def _resolve_context(context: Union[AnalysisContext, Mapping[str, Any], None]) -> AnalysisContext:
    if isinstance(context, AnalysisContext):
        return context
    return AnalysisContext.from_dict(context)


def _resolve_goal(goal: Optional[Union[str, Goal]], context: AnalysisContext) -> Goal:
    return Goal.parse(goal if goal is not None else context.goal)


def create_empty_analysis(
    goal: Optional[Union[str, Goal]] = None,
    *,
    inflation_table: Optional[InflationTable] = None,
    classifier: Optional[RegionClassifier] = None,
    settings: Optional[AnalysisSettings] = None,
    config: Optional[Dict[str, Any]] = None,
    years: Optional[int] = None,
) -> PortfolioAnalysis:
    """
    Fully populated result for a portfolio with no value.

    Scores and money are zero, risk is LOW, every catalog region is
    missing and target allocations are still offered for every goal.
    """
    config = config or get_config()
    settings = settings or AnalysisSettings.from_config(config)
    classifier = classifier or classifier_from_config(config)
    table = load_inflation_table(inflation_table)
    goal = Goal.parse(goal)
    years = validate_horizon(settings.projection_years if years is None else years)

    return PortfolioAnalysis(
        total_value=0.0,
        token_count=0,
        region_count=0,
        diversification_score=0,
        weighted_inflation_risk=0.0,
        concentration_risk=ConcentrationRisk.LOW,
        over_exposed_regions=(),
        missing_regions=classifier.catalog,
        rebalancing_opportunities=(),
        projection=ProjectionResult(years=years, current_path_value=0.0,
                                    optimized_path_value=0.0, difference=0.0),
        goal=goal,
        goal_analysis=GoalAnalysis(
            goal=goal,
            title="Portfolio Analysis",
            description="Add holdings to find inflation protection opportunities.",
        ),
        target_allocations=all_target_allocations(
            config["goal_allocations"], classifier, table, settings.default_inflation_rate
        ),
        recommended_action=HoldAction(reasoning="Portfolio is empty."),
    )


# =========================
# MAIN ENTRY POINT
# =========================

@log_performance(logger)
def analyze_portfolio(
    portfolio: Optional[Mapping[str, Any]],
    inflation_table: Optional[Mapping[str, Any]],
    goal: Optional[Union[str, Goal]] = None,
    *,
    classifier: Optional[RegionClassifier] = None,
    settings: Optional[AnalysisSettings] = None,
    context: Union[AnalysisContext, Mapping[str, Any], None] = None,
    config: Optional[Dict[str, Any]] = None,
    per_chain: bool = False,
    years: Optional[int] = None,
) -> PortfolioAnalysis:
    """
    Analyze a multi-chain stablecoin portfolio.

    Args:
        portfolio: {"totalValue", "chains": [{"chainId", "balances": [{"symbol", "valueUSD"}]}]}
        inflation_table: region -> {"annualRatePercent", "dataSource"} (or a bare rate)
        goal: advisory goal; falls back to context.goal, then "exploring"
        classifier: region classification (defaults to the configured tables)
        settings: thresholds (defaults to the config thresholds)
        context: versioned auxiliary context (AnalysisContext or a plain mapping)
        config: full engine config, e.g. from build_runtime_config()
        per_chain: also expose per-chain holdings
        years: projection horizon override

    Returns:
        PortfolioAnalysis, always fully populated.

    Raises:
        PortfolioValidationError: wrongly typed portfolio fields or horizon
        InflationTableError: inflation table that is not a mapping
    """
    config = config or get_config()
    settings = settings or AnalysisSettings.from_config(config)
    classifier = classifier or classifier_from_config(config)
    context = _resolve_context(context)
    resolved_goal = _resolve_goal(goal, context)
    default_rate = settings.default_inflation_rate

    # 1. Normalize inputs
    table = load_inflation_table(inflation_table)
    aggregated = aggregate_portfolio(portfolio, classifier=classifier, settings=settings, per_chain=per_chain)

    if aggregated.is_empty:
        logger.info("Empty portfolio: returning zeroed analysis")
        return create_empty_analysis(
            resolved_goal, inflation_table=table, classifier=classifier,
            settings=settings, config=config, years=years,
        )

    # 2. Scores
    diversification = score_diversification(aggregated, classifier.catalog, settings)
    risk = weighted_inflation_risk(aggregated, table, default_rate)

    # 3. Opportunities and projection
    plan = generate_rebalancing_opportunities(aggregated, table, classifier, settings)
    projection = project_paths(aggregated, risk, plan.top, table, settings, years=years)

    # 4. Detail views
    allocations = calculate_token_allocations(aggregated, table, default_rate, config.get("yield_apy"))
    exposure = calculate_regional_exposure(aggregated, table, default_rate, classifier.catalog)
    yield_summary = calculate_yield_summary(allocations, aggregated.total_value, risk)

    # 5. Advice
    rwa_symbols = config.get("rwa_symbols", [])
    has_rwa = has_rwa_exposure(aggregated, rwa_symbols)
    tips = diversification_tips(
        diversification.diversification_score,
        diversification.missing_regions,
        diversification.concentration_risk,
        has_rwa,
        regional_exposure=exposure,
        user_region=context.user_region,
        home_share_limit=settings.over_exposed_share,
    )

    logger.info(
        f"Analyzed ${aggregated.total_value:,.2f} across {len(aggregated.holdings)} tokens: "
        f"score={diversification.diversification_score}, risk={risk:.2f}%, "
        f"opportunities={plan.total_count}"
    )

    return PortfolioAnalysis(
        total_value=aggregated.total_value,
        token_count=len(aggregated.holdings),
        region_count=len(exposure),
        diversification_score=diversification.diversification_score,
        weighted_inflation_risk=risk,
        concentration_risk=diversification.concentration_risk,
        over_exposed_regions=diversification.over_exposed_regions,
        missing_regions=diversification.missing_regions,
        rebalancing_opportunities=plan.opportunities,
        total_opportunity_count=plan.total_count,
        hhi=diversification.hhi,
        entropy_ratio=diversification.entropy_ratio,
        diversification_rating=diversification.rating,
        under_exposed_regions=diversification.under_exposed_regions,
        holdings=aggregated.holdings,
        chain_holdings=aggregated.chain_holdings,
        chains=aggregated.chains,
        token_allocations=allocations,
        regional_exposure=exposure,
        projection=projection,
        yield_summary=yield_summary,
        goal_scores=calculate_goal_scores(risk, diversification.diversification_score, has_rwa),
        goal=resolved_goal,
        goal_analysis=build_goal_analysis(resolved_goal, plan.opportunities, risk, aggregated, rwa_symbols),
        target_allocations=all_target_allocations(
            config["goal_allocations"], classifier, table, default_rate
        ),
        diversification_tips=tips,
        recommended_action=action_for_opportunity(plan.top, aggregated),
    )
