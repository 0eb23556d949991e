"""
Diversification Scorer
======================
Concentration and dispersion metrics for an aggregated portfolio.

Methodology:
- HHI on holding shares: sum(s_i^2), 1 = everything in one token
- Shannon entropy on region shares, normalized by ln(number of regions
  in the catalog) so an even spread over the catalog gives 1
- Score = round(100 * (1 - HHI) * 0.5 + 100 * entropy_ratio * 0.5), clamped
  to [0, 100]. One token -> 0; one token per catalog region -> ~92 with the
  six-region default catalog, approaching 100 as holdings per region grow
"""

import math
from typing import Dict, Sequence

import numpy as np
from scipy import stats

from diversification_engine.models.portfolio import (
    AggregatedPortfolio,
    AnalysisSettings,
    ConcentrationRisk,
    DiversificationRating,
    DiversificationResult,
)

# Blend weights for the 0-100 score
CONCENTRATION_WEIGHT = 0.5
ENTROPY_WEIGHT = 0.5


# =========================
# CORE METRICS
# =========================

def calculate_hhi(values: Sequence[float]) -> float:
    """
    Herfindahl-Hirschman Index of the given position values.

    Returns 0.0 for an empty or zero-valued input (no data is not
    concentration).
    """
    arr = np.asarray(values, dtype=float)
    total = arr.sum()
    if arr.size == 0 or total <= 0:
        return 0.0
    shares = arr / total
    return float(np.sum(shares ** 2))


def calculate_entropy_ratio(values: Sequence[float], max_categories: int) -> float:
    """
    Shannon entropy of the value distribution divided by ln(max_categories).

    Zero shares contribute nothing (0 * ln 0 is taken as 0). The
    denominator uses the larger of max_categories and the number of
    non-zero categories, so the ratio never exceeds 1.
    """
    arr = np.asarray(values, dtype=float)
    arr = arr[arr > 0]
    if arr.size == 0:
        return 0.0

    n_categories = max(int(max_categories), int(arr.size))
    if n_categories <= 1:
        return 0.0

    entropy = float(stats.entropy(arr))  # natural log, normalizes arr itself
    ratio = entropy / math.log(n_categories)
    return min(1.0, max(0.0, ratio))


def calculate_region_shares(portfolio: AggregatedPortfolio) -> Dict[str, float]:
    """Region -> share of total value (0-1), first-seen order."""
    if portfolio.is_empty:
        return {}
    total = portfolio.total_value
    return {region: value / total for region, value in portfolio.region_values().items()}


def classify_concentration(hhi: float, max_region_share: float, settings: AnalysisSettings) -> ConcentrationRisk:
    if hhi > settings.hhi_high or max_region_share > settings.region_share_high:
        return ConcentrationRisk.HIGH
    if hhi > settings.hhi_medium:
        return ConcentrationRisk.MEDIUM
    return ConcentrationRisk.LOW


def blend_score(hhi: float, entropy_ratio: float) -> int:
    raw = 100 * (1 - hhi) * CONCENTRATION_WEIGHT + 100 * entropy_ratio * ENTROPY_WEIGHT
    return int(min(100, max(0, round(raw))))


# =========================
# SCORER
# =========================

def score_diversification(
    portfolio: AggregatedPortfolio,
    catalog: Sequence[str],
    settings: AnalysisSettings,
) -> DiversificationResult:
    """
    Score how spread out a portfolio is.

    Args:
        portfolio: aggregated holdings
        catalog: ordered list of known regions
        settings: concentration tiers and exposure thresholds

    Returns:
        DiversificationResult. An empty portfolio scores 0 with LOW risk and
        every catalog region reported missing.
    """
    catalog = tuple(catalog)

    if portfolio.is_empty:
        return DiversificationResult(
            diversification_score=0,
            hhi=0.0,
            entropy_ratio=0.0,
            concentration_risk=ConcentrationRisk.LOW,
            rating=DiversificationRating.VERY_POOR,
            missing_regions=catalog,
        )

    hhi = calculate_hhi([h.value_usd for h in portfolio.holdings])
    region_shares = calculate_region_shares(portfolio)
    entropy_ratio = calculate_entropy_ratio(list(region_shares.values()), len(catalog))

    score = blend_score(hhi, entropy_ratio)
    max_share = max(region_shares.values())

    def catalog_order(region: str) -> int:
        return catalog.index(region) if region in catalog else len(catalog)

    over_exposed = sorted(
        (r for r, s in region_shares.items() if s > settings.over_exposed_share),
        key=lambda r: (-region_shares[r], catalog_order(r), r),
    )
    under_exposed = sorted(
        (r for r, s in region_shares.items() if s < settings.under_exposed_share),
        key=lambda r: (region_shares[r], catalog_order(r), r),
    )
    missing = tuple(r for r in catalog if r not in region_shares)

    return DiversificationResult(
        diversification_score=score,
        hhi=hhi,
        entropy_ratio=entropy_ratio,
        concentration_risk=classify_concentration(hhi, max_share, settings),
        rating=DiversificationRating.from_score(score),
        over_exposed_regions=tuple(over_exposed),
        missing_regions=missing,
        under_exposed_regions=tuple(under_exposed),
    )
