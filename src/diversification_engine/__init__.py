"""
Diversification Engine
======================
Diversification and inflation-rebalancing analysis for multi-chain
stablecoin portfolios.

Main Components:
    - core: Analysis orchestration (analyze_portfolio)
    - data: Portfolio aggregation, inflation tables, region definitions
    - analytics: Diversification, inflation risk, rebalancing, projection
    - decision: Action variants and goal-aware advice
    - reporting: Console output and exports
    - config: Default tables, documented thresholds, file loader
    - models: Frozen result types
    - utils: Logging and exceptions

Example:
    >>> from diversification_engine import analyze_portfolio
    >>> portfolio = {"totalValue": 1000, "chains": [
    ...     {"chainId": 42220, "balances": [{"symbol": "KESm", "valueUSD": 1000}]}]}
    >>> analysis = analyze_portfolio(portfolio, {"Africa": {"annualRatePercent": 10}})
    >>> analysis.diversification_score
    0
"""

__version__ = "1.0.0"
__author__ = "Portfolio Analysis Team"

from diversification_engine.core.pipeline import analyze_portfolio, create_empty_analysis
from diversification_engine.data.definitions.regions import RegionClassifier
from diversification_engine.models.portfolio import AnalysisContext, AnalysisSettings, Goal, PortfolioAnalysis
from diversification_engine.utils.exceptions import DiversificationEngineError, PortfolioValidationError
