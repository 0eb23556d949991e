"""
Synthetic data fixtures for deterministic tests.

Region maps with made-up regions (A, B, C) keep the analytics tests
independent of the packaged token tables; the sample multi-chain portfolio
uses the real tables.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from diversification_engine.data.definitions.regions import RegionClassifier


SYNTHETIC_CATALOG = ["A", "B", "C"]
SYNTHETIC_TOKEN_REGIONS = {"AAA": "A", "AA2": "A", "BBB": "B", "CCC": "C"}
SYNTHETIC_REGION_TOKENS = {"A": "AAA", "B": "BBB", "C": "CCC"}


def make_classifier(
    token_regions: Optional[Dict[str, str]] = None,
    region_tokens: Optional[Dict[str, str]] = None,
    catalog: Optional[List[str]] = None,
) -> RegionClassifier:
    return RegionClassifier(
        token_regions=token_regions or SYNTHETIC_TOKEN_REGIONS,
        region_tokens=region_tokens or SYNTHETIC_REGION_TOKENS,
        catalog=catalog or SYNTHETIC_CATALOG,
    )


def build_portfolio(chains: Dict[int, Iterable[Tuple[str, float]]], total: Optional[float] = None) -> dict:
    """{chain_id: [(symbol, value), ...]} -> raw portfolio payload."""
    payload_chains = []
    computed = 0.0
    for chain_id, balances in chains.items():
        rows = [{"symbol": symbol, "valueUSD": value} for symbol, value in balances]
        computed += sum(value for _, value in balances if isinstance(value, (int, float)) and value > 0)
        payload_chains.append({"chainId": chain_id, "balances": rows})
    return {"totalValue": computed if total is None else total, "chains": payload_chains}


def inflation_table(rates: Dict[str, float], source: str = "live") -> dict:
    """{region: rate} -> raw inflation payload."""
    return {region: {"annualRatePercent": rate, "dataSource": source} for region, rate in rates.items()}


# Real symbols: USA 650 (CUSD 400 + USDC 250 over two chains), Africa 300, Global 100
SAMPLE_MULTICHAIN_PORTFOLIO = {
    "totalValue": 1050.0,
    "chains": [
        {
            "chainId": 42220,
            "balances": [
                {"symbol": "cUSD", "valueUSD": 400.0},
                {"symbol": "cKES", "valueUSD": 300.0},
                {"symbol": "USDC", "valueUSD": 50.0},
            ],
        },
        {
            "chainId": 42161,
            "balances": [
                {"symbol": "USDC", "valueUSD": 200.0},
                {"symbol": "PAXG", "valueUSD": 100.0},
                {"symbol": "DUST", "valueUSD": 0.001},
            ],
        },
    ],
}

SAMPLE_INFLATION_TABLE = {
    "USA": {"annualRatePercent": 3.0, "dataSource": "live"},
    "Europe": {"annualRatePercent": 2.0, "dataSource": "live"},
    "Asia": {"annualRatePercent": 4.0, "dataSource": "cached"},
    "Africa": {"annualRatePercent": 12.0, "dataSource": "live"},
    "LatAm": {"annualRatePercent": 8.0, "dataSource": "estimated"},
    "Global": {"annualRatePercent": 2.5, "dataSource": "estimated"},
}
