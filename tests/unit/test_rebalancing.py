import pytest

from diversification_engine.analytics.rebalancing import (
    classify_priority,
    generate_rebalancing_opportunities,
    suggested_amount,
)
from diversification_engine.data.aggregator import aggregate_portfolio
from diversification_engine.data.loader import load_inflation_table
from diversification_engine.models.portfolio import AnalysisSettings, Priority
from tests.fixtures.synthetic_data import build_portfolio, inflation_table, make_classifier


def _plan(balances, rates, classifier=None, settings=None):
    classifier = classifier or make_classifier()
    portfolio = aggregate_portfolio(build_portfolio({1: balances}), classifier=classifier)
    table = load_inflation_table(inflation_table(rates))
    return generate_rebalancing_opportunities(portfolio, table, classifier, settings or AnalysisSettings())


# =========================
# SIZING AND PRIORITY
# =========================

def test_suggested_amount_is_half_capped_and_floored(settings):
    assert suggested_amount(500.0, settings) == 250.0
    assert suggested_amount(1.5, settings) == 1.0     # floored at $1
    assert suggested_amount(1.0, settings) == 1.0     # never above the holding
    assert suggested_amount(0.5, settings) == 0.25    # no floor below $1


def test_priority_tiers(settings):
    assert classify_priority(25.0, 2.0, settings) == Priority.HIGH
    assert classify_priority(1.0, 5.0, settings) == Priority.HIGH
    assert classify_priority(5.0, 2.0, settings) == Priority.MEDIUM
    assert classify_priority(4.99, 2.0, settings) == Priority.LOW


# =========================
# SCENARIOS
# =========================

def test_two_region_scenario():
    plan = _plan([("AAA", 500.0), ("BBB", 500.0)], {"A": 8.0, "B": 2.0})

    assert plan.total_count == 1
    opp = plan.top
    assert (opp.from_token, opp.to_token) == ("AAA", "BBB")
    assert (opp.from_region, opp.to_region) == ("A", "B")
    assert opp.inflation_delta == pytest.approx(6.0)
    assert 0 < opp.suggested_amount <= 500.0
    assert opp.annual_savings == pytest.approx(opp.suggested_amount * 0.06)
    assert opp.priority == Priority.HIGH


def test_single_region_has_no_target():
    plan = _plan([("AAA", 1000.0)], {"A": 10.0})
    assert plan.opportunities == ()
    assert plan.total_count == 0


def test_empty_portfolio_has_no_opportunities():
    classifier = make_classifier()
    plan = generate_rebalancing_opportunities(aggregate_portfolio(None), {}, classifier)
    assert plan.opportunities == ()


def test_regions_already_at_minimum_rate():
    plan = _plan([("AAA", 500.0), ("BBB", 500.0)], {"A": 2.0, "B": 2.0})
    assert plan.opportunities == ()


# =========================
# MATERIALITY
# =========================

def test_small_delta_is_not_material():
    plan = _plan([("AAA", 500.0)], {"A": 3.0, "B": 2.0})
    assert plan.opportunities == ()


def test_small_source_is_not_material():
    plan = _plan([("AAA", 4.99), ("BBB", 100.0)], {"A": 10.0, "B": 2.0})
    assert plan.opportunities == ()


def test_custom_thresholds():
    settings = AnalysisSettings(min_inflation_delta=0.5, min_source_value_usd=1.0)
    plan = _plan([("AAA", 4.0)], {"A": 3.0, "B": 2.0}, settings=settings)
    assert plan.total_count == 1
    assert plan.top.suggested_amount == 2.0


def test_target_token_equal_to_source_is_skipped():
    classifier = make_classifier(region_tokens={"A": "AAA", "B": "AAA"})
    plan = _plan([("AAA", 500.0)], {"A": 10.0, "B": 2.0}, classifier=classifier)
    assert plan.opportunities == ()


# =========================
# RANKING
# =========================

def test_each_source_keeps_only_its_best_target():
    plan = _plan(
        [("AAA", 1000.0), ("AA2", 200.0), ("CCC", 500.0), ("BBB", 100.0)],
        {"A": 10.0, "B": 2.0, "C": 6.0},
    )

    sources = [o.from_token for o in plan.opportunities]
    assert sources == ["AAA", "CCC", "AA2"]
    assert len(set(sources)) == len(sources)
    assert all(o.to_token == "BBB" for o in plan.opportunities)

    savings = [o.annual_savings for o in plan.opportunities]
    assert savings == sorted(savings, reverse=True)
    assert plan.opportunities[0].annual_savings == pytest.approx(40.0)
    assert plan.opportunities[1].priority == Priority.MEDIUM


def test_equal_deltas_prefer_catalog_order():
    plan = _plan([("AAA", 100.0)], {"A": 10.0, "C": 2.0, "B": 2.0})
    assert plan.top.to_region == "B"


def test_full_ties_break_on_symbol():
    plan = _plan([("AAA", 100.0), ("AA2", 100.0)], {"A": 10.0, "B": 2.0})
    assert [o.from_token for o in plan.opportunities] == ["AA2", "AAA"]


def test_equal_savings_break_on_larger_source_value():
    # The $100 floor makes both swaps the same size despite different holdings
    settings = AnalysisSettings(suggested_fraction=0.01, min_suggested_amount_usd=100.0)
    plan = _plan([("AA2", 200.0), ("AAA", 300.0)], {"A": 10.0, "B": 2.0}, settings=settings)

    assert [o.annual_savings for o in plan.opportunities] == pytest.approx([8.0, 8.0])
    # value outranks the symbol order
    assert [o.from_token for o in plan.opportunities] == ["AAA", "AA2"]


def test_cap_reports_full_count():
    settings = AnalysisSettings(max_opportunities=2)
    plan = _plan(
        [("AAA", 1000.0), ("AA2", 200.0), ("CCC", 500.0)],
        {"A": 10.0, "B": 2.0, "C": 6.0},
        settings=settings,
    )
    assert len(plan.opportunities) == 2
    assert plan.total_count == 3
    assert plan.hidden_count == 1


def test_generation_is_deterministic():
    args = ([("AAA", 1000.0), ("AA2", 200.0), ("CCC", 500.0)], {"A": 10.0, "B": 2.0, "C": 6.0})
    assert _plan(*args) == _plan(*args)
