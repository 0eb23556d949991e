"""
Action Variants Module
======================
One frozen dataclass per recommended action kind.

Each variant carries only the fields meaningful for its kind, so a HOLD can
never come with a swap amount and a SWAP can never miss its target token.
Loose payloads (camelCase, extra keys, an 'action' or 'kind' tag) are
turned into the right variant by parse_action().
"""

from dataclasses import asdict, dataclass, fields
from numbers import Integral, Real
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Type, Union

from diversification_engine.models.portfolio import AggregatedPortfolio, RebalancingOpportunity
from diversification_engine.utils.exceptions import ActionPayloadError


# ================================================================================
# VARIANTS
# ================================================================================

@dataclass(frozen=True)
class SwapAction:
    """Same-chain swap from one stablecoin into another."""
    kind: ClassVar[str] = "SWAP"
    required: ClassVar[Tuple[str, ...]] = ("to_token",)

    to_token: str
    from_token: Optional[str] = None
    amount: float = 0.0
    chain_id: Optional[int] = None
    expected_savings: float = 0.0
    reasoning: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True)
class BridgeAction:
    """Move value to the chain where the target token already lives."""
    kind: ClassVar[str] = "BRIDGE"
    required: ClassVar[Tuple[str, ...]] = ("to_token", "to_chain_id")

    to_token: str
    to_chain_id: int
    from_token: Optional[str] = None
    from_chain_id: Optional[int] = None
    amount: float = 0.0
    expected_savings: float = 0.0
    reasoning: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True)
class HoldAction:
    """Keep the current allocation."""
    kind: ClassVar[str] = "HOLD"
    required: ClassVar[Tuple[str, ...]] = ()

    reasoning: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True)
class BuyAction:
    """Fiat on-ramp into a token."""
    kind: ClassVar[str] = "BUY"
    required: ClassVar[Tuple[str, ...]] = ("token",)

    token: str
    amount: float = 0.0
    reasoning: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True)
class SellAction:
    """Off-ramp out of a token."""
    kind: ClassVar[str] = "SELL"
    required: ClassVar[Tuple[str, ...]] = ("token",)

    token: str
    amount: float = 0.0
    reasoning: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, **asdict(self)}


Action = Union[SwapAction, BridgeAction, HoldAction, BuyAction, SellAction]

ACTION_TYPES: Dict[str, Type] = {
    cls.kind: cls for cls in (SwapAction, BridgeAction, HoldAction, BuyAction, SellAction)
}

# camelCase / legacy payload keys -> field names
_FIELD_ALIASES = {
    "toToken": "to_token",
    "targetToken": "to_token",
    "fromToken": "from_token",
    "suggestedAmount": "amount",
    "chainId": "chain_id",
    "fromChainId": "from_chain_id",
    "toChainId": "to_chain_id",
    "targetChainId": "to_chain_id",
    "expectedSavings": "expected_savings",
    "annualSavings": "expected_savings",
}

_INT_FIELDS = {"chain_id", "from_chain_id", "to_chain_id"}
_FLOAT_FIELDS = {"amount", "expected_savings"}
_SYMBOL_FIELDS = {"to_token", "from_token", "token"}


# ================================================================================
# PARSING
# ================================================================================

def _coerce(kind: str, name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in _INT_FIELDS:
        if isinstance(value, bool) or not isinstance(value, Integral):
            raise ActionPayloadError(f"{kind}: {name} must be an integer", field=name, value=value)
        return int(value)
    if name in _FLOAT_FIELDS:
        if isinstance(value, bool) or not isinstance(value, Real) or value < 0:
            raise ActionPayloadError(f"{kind}: {name} must be a non-negative number", field=name, value=value)
        return float(value)
    if name in _SYMBOL_FIELDS:
        if not isinstance(value, str) or not value.strip():
            raise ActionPayloadError(f"{kind}: {name} must be a non-empty symbol", field=name, value=value)
        return value.strip().upper()
    return str(value)


def parse_action(payload: Mapping[str, Any]) -> Action:
    """
    Build the action variant described by a loose payload.

    The kind is read from 'kind' or 'action' (case-insensitive). A BRIDGE
    payload may also carry 'token' for its target. Fields that do not
    belong to the variant are ignored.

    Raises:
        ActionPayloadError: unknown kind, missing required field or a field
            of the wrong type
    """
    if not isinstance(payload, Mapping):
        raise ActionPayloadError("Action payload must be a mapping", field="payload",
                                 value=type(payload).__name__)

    raw_kind = payload.get("kind", payload.get("action"))
    kind = str(raw_kind).strip().upper() if raw_kind is not None else ""
    cls = ACTION_TYPES.get(kind)
    if cls is None:
        raise ActionPayloadError(f"Unknown action kind: {raw_kind!r}", field="kind", value=raw_kind)

    accepted = {f.name for f in fields(cls)}
    normalized: Dict[str, Any] = {}
    for key, value in payload.items():
        name = _FIELD_ALIASES.get(key, key)
        if name == "token" and "token" not in accepted:
            name = "to_token"
        if name in accepted and name not in normalized:
            normalized[name] = value

    missing = [name for name in cls.required if normalized.get(name) is None]
    if missing:
        raise ActionPayloadError(f"{kind} action is missing required field(s): {', '.join(missing)}",
                                 field=missing[0])

    kwargs = {name: _coerce(kind, name, value) for name, value in normalized.items() if value is not None}
    return cls(**kwargs)


# ================================================================================
# DERIVATION FROM ANALYSIS
# ================================================================================

def action_for_opportunity(
    opportunity: Optional[RebalancingOpportunity],
    portfolio: AggregatedPortfolio,
) -> Action:
    """
    Concrete action for the top opportunity.

    SWAP when the target token is not held yet or is held on the source's
    primary chain, BRIDGE when the target is only held on other chains,
    HOLD when there is nothing worth doing.
    """
    if opportunity is None:
        return HoldAction(reasoning="No rebalancing move clears the materiality threshold.")

    reasoning = (f"Move ${opportunity.suggested_amount:,.2f} from {opportunity.from_token} "
                 f"({opportunity.from_region}, {opportunity.from_inflation:.1f}%) to "
                 f"{opportunity.to_token} ({opportunity.to_region}, {opportunity.to_inflation:.1f}%) "
                 f"to save about ${opportunity.annual_savings:,.2f} per year.")

    source = portfolio.find(opportunity.from_token)
    target = portfolio.find(opportunity.to_token)
    source_chain = source.chain_id if source else None

    if target is not None and source_chain is not None and source_chain not in target.chain_ids:
        return BridgeAction(
            to_token=opportunity.to_token,
            to_chain_id=target.chain_id,
            from_token=opportunity.from_token,
            from_chain_id=source_chain,
            amount=opportunity.suggested_amount,
            expected_savings=opportunity.annual_savings,
            reasoning=reasoning,
        )

    return SwapAction(
        to_token=opportunity.to_token,
        from_token=opportunity.from_token,
        amount=opportunity.suggested_amount,
        chain_id=source_chain,
        expected_savings=opportunity.annual_savings,
        reasoning=reasoning,
    )
