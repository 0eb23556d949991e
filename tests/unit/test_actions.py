import pytest

from diversification_engine.data.aggregator import aggregate_portfolio
from diversification_engine.decision.actions import (
    BridgeAction,
    BuyAction,
    HoldAction,
    SellAction,
    SwapAction,
    action_for_opportunity,
    parse_action,
)
from diversification_engine.models.portfolio import Priority, RebalancingOpportunity
from diversification_engine.utils.exceptions import ActionPayloadError
from tests.fixtures.synthetic_data import make_classifier


def _opportunity(from_token="AAA", to_token="BBB"):
    return RebalancingOpportunity(
        from_token=from_token, to_token=to_token, from_region="A", to_region="B",
        from_inflation=8.0, to_inflation=2.0, inflation_delta=6.0,
        suggested_amount=250.0, annual_savings=15.0, priority=Priority.HIGH, source_value=500.0,
    )


# =========================
# PARSING
# =========================

def test_parse_swap_from_loose_payload():
    action = parse_action({
        "action": "swap",
        "fromToken": "cusd",
        "targetToken": "eurm",
        "suggestedAmount": 100,
        "chainId": 42220,
        "confidence": 0.9,          # not a swap field: ignored
        "reasoning": "lower inflation",
    })
    assert isinstance(action, SwapAction)
    assert action.from_token == "CUSD"
    assert action.to_token == "EURM"
    assert action.amount == 100.0
    assert action.chain_id == 42220
    assert action.to_dict()["kind"] == "SWAP"


def test_parse_hold_drops_swap_only_fields():
    action = parse_action({"kind": "HOLD", "targetToken": "EURM", "suggestedAmount": 10})
    assert action == HoldAction()
    assert set(action.to_dict()) == {"kind", "reasoning"}


def test_parse_bridge_buy_and_sell():
    bridge = parse_action({"action": "BRIDGE", "token": "USDC", "toChainId": 42161, "fromChainId": 42220})
    assert isinstance(bridge, BridgeAction)
    assert (bridge.to_token, bridge.to_chain_id, bridge.from_chain_id) == ("USDC", 42161, 42220)

    buy = parse_action({"action": "BUY", "token": "usdm", "amount": 50})
    assert buy == BuyAction(token="USDM", amount=50.0)

    sell = parse_action({"action": "SELL", "token": "KESM"})
    assert isinstance(sell, SellAction)
    assert sell.amount == 0.0


@pytest.mark.parametrize(
    "payload",
    [
        {"action": "REBALANCE_EVERYTHING"},
        {},
        {"action": "SWAP"},                                   # missing target
        {"action": "BRIDGE", "token": "USDC"},                # missing destination chain
        {"action": "BUY"},
        {"action": "SWAP", "toToken": "EURM", "amount": -5},
        {"action": "SWAP", "toToken": "EURM", "chainId": "celo"},
        {"action": "SWAP", "toToken": ""},
    ],
)
def test_invalid_payloads_raise(payload):
    with pytest.raises(ActionPayloadError):
        parse_action(payload)


def test_non_mapping_payload_raises():
    with pytest.raises(ActionPayloadError):
        parse_action("SWAP")


# =========================
# DERIVATION
# =========================

def test_no_opportunity_means_hold():
    portfolio = aggregate_portfolio(None)
    assert isinstance(action_for_opportunity(None, portfolio), HoldAction)


def test_swap_when_target_not_held():
    classifier = make_classifier()
    raw = {"chains": [{"chainId": 1, "balances": [{"symbol": "AAA", "valueUSD": 500.0}]}]}
    portfolio = aggregate_portfolio(raw, classifier=classifier)

    action = action_for_opportunity(_opportunity(), portfolio)
    assert isinstance(action, SwapAction)
    assert action.chain_id == 1
    assert action.amount == 250.0
    assert action.expected_savings == 15.0


def test_swap_when_target_held_on_same_chain():
    classifier = make_classifier()
    raw = {"chains": [{"chainId": 1, "balances": [
        {"symbol": "AAA", "valueUSD": 500.0}, {"symbol": "BBB", "valueUSD": 500.0}]}]}
    portfolio = aggregate_portfolio(raw, classifier=classifier)
    assert isinstance(action_for_opportunity(_opportunity(), portfolio), SwapAction)


def test_bridge_when_target_lives_on_another_chain():
    classifier = make_classifier()
    raw = {"chains": [
        {"chainId": 1, "balances": [{"symbol": "AAA", "valueUSD": 500.0}]},
        {"chainId": 2, "balances": [{"symbol": "BBB", "valueUSD": 500.0}]},
    ]}
    portfolio = aggregate_portfolio(raw, classifier=classifier)

    action = action_for_opportunity(_opportunity(), portfolio)
    assert isinstance(action, BridgeAction)
    assert (action.from_chain_id, action.to_chain_id) == (1, 2)
    assert action.to_dict()["kind"] == "BRIDGE"
