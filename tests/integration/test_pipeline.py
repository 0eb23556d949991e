"""
End-to-end tests for analyze_portfolio().

Covers the documented behaviour of the whole engine: bounds, extremes,
empty input, ordering, projection consistency, idempotence and the two
reference scenarios.
"""

import copy
import logging

import numpy as np
import pytest

from diversification_engine import analyze_portfolio, create_empty_analysis
from diversification_engine.config.user_config import REGION_CATALOG, REGION_TOKEN_MAP
from diversification_engine.decision.actions import HoldAction, SwapAction
from diversification_engine.models.portfolio import AnalysisContext, ConcentrationRisk, Goal, Priority
from diversification_engine.utils.exceptions import InflationTableError, PortfolioValidationError
from tests.fixtures.synthetic_data import build_portfolio, inflation_table, make_classifier


# =========================
# REFERENCE SCENARIOS
# =========================

def test_single_holding_with_no_other_region():
    classifier = make_classifier()
    analysis = analyze_portfolio(
        build_portfolio({1: [("AAA", 1000.0)]}),
        inflation_table({"A": 10.0}),
        classifier=classifier,
    )
    assert analysis.diversification_score == 0
    assert analysis.weighted_inflation_risk == pytest.approx(10.0)
    assert analysis.rebalancing_opportunities == ()
    assert analysis.concentration_risk == ConcentrationRisk.HIGH
    assert analysis.projection.optimized_path_value == analysis.projection.current_path_value
    assert isinstance(analysis.recommended_action, HoldAction)


def test_two_region_scenario():
    classifier = make_classifier()
    analysis = analyze_portfolio(
        build_portfolio({1: [("AAA", 500.0), ("BBB", 500.0)]}),
        inflation_table({"A": 8.0, "B": 2.0}),
        classifier=classifier,
    )
    assert len(analysis.rebalancing_opportunities) == 1
    opp = analysis.top_opportunity
    assert (opp.from_region, opp.to_region) == ("A", "B")
    assert opp.inflation_delta == pytest.approx(6.0)
    assert opp.suggested_amount <= 500.0
    assert opp.annual_savings == pytest.approx(opp.suggested_amount * 0.06)
    assert analysis.projection.optimized_path_value > analysis.projection.current_path_value


# =========================
# PROPERTIES
# =========================

@pytest.mark.parametrize("seed", range(8))
def test_bounds_hold_for_random_portfolios(seed):
    rng = np.random.default_rng(seed)
    symbols = ["USDM", "EURM", "PHPM", "KESM", "BRLM", "PAXG", "CUSD", "MYSTERY"]
    chains = {}
    for chain_id in (42220, 42161):
        picks = rng.choice(symbols, size=int(rng.integers(1, 5)), replace=False)
        chains[chain_id] = [(str(s), float(rng.uniform(0, 5_000))) for s in picks]
    rates = {region: float(rng.uniform(-2, 25)) for region in REGION_CATALOG}

    analysis = analyze_portfolio(build_portfolio(chains), inflation_table(rates))

    assert 0 <= analysis.diversification_score <= 100
    assert analysis.weighted_inflation_risk >= 0
    assert all(o.suggested_amount >= 0 for o in analysis.rebalancing_opportunities)
    assert all(o.suggested_amount <= o.source_value for o in analysis.rebalancing_opportunities)


def test_concentration_extreme():
    analysis = analyze_portfolio(build_portfolio({1: [("USDM", 2500.0)]}), inflation_table({"USA": 3.0}))
    assert analysis.diversification_score <= 5
    assert analysis.concentration_risk == ConcentrationRisk.HIGH


def test_even_spread_extreme():
    balances = [(REGION_TOKEN_MAP[region], 100.0) for region in REGION_CATALOG]
    analysis = analyze_portfolio(build_portfolio({1: balances}), inflation_table({r: 3.0 for r in REGION_CATALOG}))
    assert analysis.diversification_score >= 90
    assert analysis.concentration_risk == ConcentrationRisk.LOW
    assert analysis.missing_regions == ()


@pytest.mark.parametrize("raw", [None, {"totalValue": 0, "chains": []}, build_portfolio({1: [("USDM", 0.0)]})])
def test_empty_input(raw):
    analysis = analyze_portfolio(raw, inflation_table({"USA": 3.0}))
    assert analysis.total_value == 0
    assert analysis.diversification_score == 0
    assert analysis.weighted_inflation_risk == 0
    assert analysis.rebalancing_opportunities == ()
    assert analysis.concentration_risk == ConcentrationRisk.LOW
    assert analysis.missing_regions == tuple(REGION_CATALOG)
    assert analysis.projection.current_path_value == 0.0
    assert set(analysis.target_allocations) == {g.value for g in Goal}


def test_ordering_and_single_source(sample_portfolio, sample_inflation):
    extra = copy.deepcopy(sample_portfolio)
    extra["chains"][0]["balances"] += [
        {"symbol": "BRLM", "valueUSD": 300.0},
        {"symbol": "NGNM", "valueUSD": 80.0},
    ]
    analysis = analyze_portfolio(extra, sample_inflation)

    opportunities = analysis.rebalancing_opportunities
    assert len(opportunities) >= 2
    sources = [o.from_token for o in opportunities]
    assert len(sources) == len(set(sources))
    keys = [(o.annual_savings, o.inflation_delta) for o in opportunities]
    assert keys == sorted(keys, reverse=True)


def test_projection_consistency_without_opportunities():
    analysis = analyze_portfolio(
        build_portfolio({1: [("USDM", 500.0), ("EURM", 500.0)]}),
        inflation_table({"USA": 3.0, "Europe": 2.5}),
    )
    assert analysis.rebalancing_opportunities == ()
    assert analysis.projection.optimized_path_value == analysis.projection.current_path_value


def test_idempotent_output(sample_portfolio, sample_inflation):
    first = analyze_portfolio(sample_portfolio, sample_inflation, "inflation_protection", per_chain=True)
    second = analyze_portfolio(sample_portfolio, sample_inflation, "inflation_protection", per_chain=True)
    assert first == second
    assert first.to_json() == second.to_json()


def test_inputs_are_not_mutated(sample_portfolio, sample_inflation):
    before = (copy.deepcopy(sample_portfolio), copy.deepcopy(sample_inflation))
    analyze_portfolio(sample_portfolio, sample_inflation)
    assert (sample_portfolio, sample_inflation) == before


# =========================
# SAMPLE PORTFOLIO
# =========================

def test_sample_multichain_portfolio(sample_portfolio, sample_inflation):
    analysis = analyze_portfolio(sample_portfolio, sample_inflation, per_chain=True)

    assert analysis.total_value == pytest.approx(1050.0)
    assert analysis.token_count == 4
    assert analysis.region_count == 3
    assert analysis.chains == frozenset({42220, 42161})
    assert len(analysis.chain_holdings) == 5
    assert analysis.weighted_inflation_risk == pytest.approx(5800 / 1050)
    assert analysis.concentration_risk == ConcentrationRisk.MEDIUM
    assert analysis.over_exposed_regions == ("USA",)
    assert analysis.missing_regions == ("Europe", "Asia", "LatAm")
    assert analysis.under_exposed_regions == ("Global",)

    assert analysis.total_opportunity_count == 1
    opp = analysis.top_opportunity
    assert (opp.from_token, opp.to_token) == ("CKES", "EURM")
    assert opp.inflation_delta == pytest.approx(10.0)
    assert opp.suggested_amount == pytest.approx(150.0)
    assert opp.annual_savings == pytest.approx(15.0)
    assert opp.priority == Priority.HIGH

    assert analysis.projection.residual_inflation_risk == pytest.approx(4300 / 1050)
    assert isinstance(analysis.recommended_action, SwapAction)
    assert analysis.recommended_action.chain_id == 42220
    assert analysis.goal_scores.rwa == 85


# =========================
# GOAL, CONTEXT, ERRORS
# =========================

def test_goal_is_advisory_only(sample_portfolio, sample_inflation):
    base = analyze_portfolio(sample_portfolio, sample_inflation, "exploring")
    rwa = analyze_portfolio(sample_portfolio, sample_inflation, "rwa_access")

    assert base.diversification_score == rwa.diversification_score
    assert base.rebalancing_opportunities == rwa.rebalancing_opportunities
    assert base.projection == rwa.projection
    assert rwa.goal == Goal.RWA_ACCESS
    assert rwa.goal_analysis.title == "Real-World Assets"


def test_goal_comes_from_context_when_omitted(sample_portfolio, sample_inflation):
    analysis = analyze_portfolio(sample_portfolio, sample_inflation,
                                 context={"userGoal": "inflation_protection", "userRegion": "USA"})
    assert analysis.goal == Goal.INFLATION_PROTECTION
    assert any("home region (USA)" in tip for tip in analysis.diversification_tips)

    explicit = analyze_portfolio(sample_portfolio, sample_inflation, "rwa_access",
                                 context=AnalysisContext(goal="inflation_protection"))
    assert explicit.goal == Goal.RWA_ACCESS


def test_unknown_goal_defaults_to_exploring(sample_portfolio, sample_inflation):
    assert analyze_portfolio(sample_portfolio, sample_inflation, "moon").goal == Goal.EXPLORING


def test_missing_inflation_data_uses_default():
    analysis = analyze_portfolio(build_portfolio({1: [("USDM", 100.0)]}), None)
    assert analysis.weighted_inflation_risk == pytest.approx(3.0)


def test_boundary_type_errors():
    with pytest.raises(PortfolioValidationError):
        analyze_portfolio({"chains": [{"chainId": 1, "balances": [{"symbol": "USDM", "valueUSD": "1"}]}]}, {})
    with pytest.raises(InflationTableError):
        analyze_portfolio(build_portfolio({1: [("USDM", 100.0)]}), ["USA", 3.0])
    with pytest.raises(PortfolioValidationError):
        analyze_portfolio(build_portfolio({1: [("USDM", 100.0)]}), {}, years=0)
    with pytest.raises(PortfolioValidationError):
        analyze_portfolio(None, {}, years=-2)


def test_malformed_holding_does_not_abort(caplog):
    raw = build_portfolio({1: [("USDM", 100.0), ("EURM", float("nan"))]}, total=100.0)
    with caplog.at_level(logging.WARNING):
        analysis = analyze_portfolio(raw, inflation_table({"USA": 3.0, "Europe": 2.0}))
    assert analysis.token_count == 1
    assert "EURM" in caplog.text


def test_create_empty_analysis_defaults():
    analysis = create_empty_analysis()
    assert analysis.goal == Goal.EXPLORING
    assert analysis.projection.years == 3
    assert isinstance(analysis.recommended_action, HoldAction)
