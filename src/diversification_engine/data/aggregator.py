"""
Portfolio Aggregator
====================
Flattens per-chain balance lists into one list of holdings with USD value,
symbol and region.

Rules:
- Balances below the dust floor are dropped (they distort share metrics)
- Negative / NaN / infinite / null values are dropped with a warning
- Non-numeric values, symbols or chain ids raise PortfolioValidationError
- Same-symbol balances on different chains merge into one logical holding;
  the per-chain view is kept alongside when requested
- The caller's totalValue is never trusted: the total is recomputed
"""

import math
from numbers import Integral, Real
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from diversification_engine.data.definitions.regions import RegionClassifier, default_classifier
from diversification_engine.models.portfolio import AggregatedPortfolio, AnalysisSettings, TokenHolding
from diversification_engine.utils.exceptions import PortfolioValidationError
from diversification_engine.utils.logger import get_logger

logger = get_logger(__name__)

VALUE_KEYS = ("valueUSD", "value_usd", "value")
CHAIN_KEYS = ("chainId", "chain_id")


def _is_number(value: Any) -> bool:
    return isinstance(value, (Real, np.number)) and not isinstance(value, (bool, np.bool_))


def _extract_value(balance: Mapping[str, Any], path: str) -> float:
    for key in VALUE_KEYS:
        if key in balance:
            raw = balance[key]
            # JSON has no NaN: upstream serializers emit null instead
            if raw is None:
                return float("nan")
            if not _is_number(raw):
                raise PortfolioValidationError("Balance value must be numeric",
                                               field=f"{path}.{key}", value=raw)
            try:
                return float(raw)
            except OverflowError:
                raise PortfolioValidationError("Balance value is out of range",
                                               field=f"{path}.{key}", value=raw) from None
    raise PortfolioValidationError("Balance has no value field (valueUSD)", field=path)


def _extract_chain_id(chain: Mapping[str, Any], path: str) -> int:
    for key in CHAIN_KEYS:
        if key in chain:
            raw = chain[key]
            if isinstance(raw, (bool, np.bool_)) or not isinstance(raw, (Integral, np.integer)):
                raise PortfolioValidationError("Chain id must be an integer",
                                               field=f"{path}.{key}", value=raw)
            return int(raw)
    raise PortfolioValidationError("Chain entry has no chainId", field=path)


def _collect_rows(
    chains: Sequence[Any],
    classifier: RegionClassifier,
    dust_floor: float,
) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []

    for c_idx, chain in enumerate(chains):
        chain_path = f"chains[{c_idx}]"
        if not isinstance(chain, Mapping):
            raise PortfolioValidationError("Chain entry must be a mapping", field=chain_path, value=chain)
        chain_id = _extract_chain_id(chain, chain_path)

        balances = chain.get("balances") or []
        if not isinstance(balances, (list, tuple)):
            raise PortfolioValidationError("balances must be a list",
                                           field=f"{chain_path}.balances", value=type(balances).__name__)

        for b_idx, balance in enumerate(balances):
            path = f"{chain_path}.balances[{b_idx}]"
            if not isinstance(balance, Mapping):
                raise PortfolioValidationError("Balance entry must be a mapping", field=path, value=balance)

            symbol = balance.get("symbol")
            if not isinstance(symbol, str) or not symbol.strip():
                raise PortfolioValidationError("Balance symbol must be a non-empty string",
                                               field=f"{path}.symbol", value=symbol)
            symbol = symbol.strip().upper()

            value = _extract_value(balance, path)
            if not math.isfinite(value) or value < 0:
                logger.warning(f"Excluding malformed holding {symbol} on chain {chain_id}: value={value}")
                continue
            if value < dust_floor:
                logger.debug(f"Ignoring dust {symbol} on chain {chain_id}: ${value:.6f}")
                continue

            rows.append({
                "symbol": symbol,
                "chain_id": chain_id,
                "region": classifier.classify(symbol),
                "value": value,
            })

    return rows


def aggregate_portfolio(
    portfolio: Optional[Mapping[str, Any]],
    classifier: Optional[RegionClassifier] = None,
    settings: Optional[AnalysisSettings] = None,
    per_chain: bool = False,
) -> AggregatedPortfolio:
    """
    Normalize a raw multi-chain snapshot.

    Args:
        portfolio: {"totalValue": float, "chains": [{"chainId": int,
            "balances": [{"symbol": str, "valueUSD": float}]}]}; None means empty
        classifier: symbol -> region lookup (defaults to the packaged tables)
        settings: thresholds (dust floor, total mismatch tolerance)
        per_chain: also expose one holding per (symbol, chain)

    Returns:
        AggregatedPortfolio; empty input gives total_value 0 and no holdings.

    Raises:
        PortfolioValidationError: on non-numeric / wrongly typed fields
    """
    classifier = classifier or default_classifier()
    settings = settings or AnalysisSettings()

    if portfolio is None:
        return AggregatedPortfolio(total_value=0.0)
    if not isinstance(portfolio, Mapping):
        raise PortfolioValidationError("Portfolio must be a mapping",
                                       field="portfolio", value=type(portfolio).__name__)

    chains = portfolio.get("chains") or []
    if not isinstance(chains, (list, tuple)):
        raise PortfolioValidationError("chains must be a list", field="chains", value=type(chains).__name__)

    supplied_total = portfolio.get("totalValue", portfolio.get("total_value"))
    if supplied_total is not None:
        if not _is_number(supplied_total):
            raise PortfolioValidationError("totalValue must be numeric", field="totalValue", value=supplied_total)
        try:
            supplied_total = float(supplied_total)
        except OverflowError:
            raise PortfolioValidationError("totalValue is out of range",
                                           field="totalValue", value=supplied_total) from None

    rows = _collect_rows(chains, classifier, settings.dust_floor_usd)
    if not rows:
        return AggregatedPortfolio(total_value=0.0)

    df = pd.DataFrame(rows, columns=["symbol", "chain_id", "region", "value"])
    by_chain = df.groupby(["symbol", "chain_id"], sort=False, as_index=False)["value"].sum()

    holdings: List[TokenHolding] = []
    for symbol, group in by_chain.groupby("symbol", sort=False):
        primary_chain = int(group.loc[group["value"].idxmax(), "chain_id"])
        holdings.append(TokenHolding(
            symbol=str(symbol),
            chain_id=primary_chain,
            region=classifier.classify(str(symbol)),
            value_usd=float(group["value"].sum()),
            chain_ids=tuple(int(c) for c in group["chain_id"]),
        ))

    chain_holdings = ()
    if per_chain:
        chain_holdings = tuple(
            TokenHolding(
                symbol=str(row.symbol),
                chain_id=int(row.chain_id),
                region=classifier.classify(str(row.symbol)),
                value_usd=float(row.value),
                chain_ids=(int(row.chain_id),),
            )
            for row in by_chain.itertuples(index=False)
        )

    total_value = float(sum(h.value_usd for h in holdings))

    if supplied_total is not None and math.isfinite(supplied_total):
        if abs(supplied_total - total_value) > settings.total_mismatch_tolerance_usd:
            logger.warning(
                f"Caller totalValue {supplied_total:.2f} differs from holdings sum "
                f"{total_value:.2f}; using recomputed total"
            )

    return AggregatedPortfolio(
        total_value=total_value,
        holdings=tuple(holdings),
        chains=frozenset(df["chain_id"].astype(int).tolist()),
        chain_holdings=chain_holdings,
    )
