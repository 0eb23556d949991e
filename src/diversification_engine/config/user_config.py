"""
Engine Configuration
====================
Default tables and thresholds for the diversification engine.

Single source of truth: analytics modules never read these dicts directly,
they receive an AnalysisSettings / RegionClassifier built from get_config().
Override them with a JSON/YAML file (see config/loader.py) instead of
editing this module.
"""

import copy
from typing import Any, Dict


# =========================
# ANALYSIS THRESHOLDS
# =========================
# Documented with rationale and alternatives in config/thresholds.py.
# Percent-valued keys are in 0-100 units, share-valued keys in 0-1 units.

ANALYSIS_THRESHOLDS = {
    # Aggregation
    'dust_floor_usd': 0.01,                  # Holdings below this are ignored
    'total_mismatch_tolerance_usd': 0.01,    # Caller total vs recomputed total

    # Inflation lookups
    'default_inflation_rate': 3.0,           # % used for regions absent from the table

    # Rebalancing materiality
    'min_inflation_delta': 1.5,              # percentage points
    'min_source_value_usd': 5.0,             # smaller holdings are never a swap source
    'suggested_fraction': 0.5,               # share of a holding proposed per swap
    'min_suggested_amount_usd': 1.0,         # floor for holdings worth >= $1
    'max_opportunities': 10,                 # response cap, full count reported apart

    # Opportunity priority
    'high_priority_savings_usd': 20.0,
    'high_priority_delta': 5.0,
    'medium_priority_savings_usd': 5.0,

    # Concentration tiers
    'hhi_high': 0.50,
    'hhi_medium': 0.25,
    'region_share_high': 0.70,
    'over_exposed_share': 0.50,
    'under_exposed_share': 0.10,

    # Projection
    'projection_years': 3,
}


# =========================
# REGION CATALOG
# =========================
# Order matters: missing regions are reported in this order and ties between
# equally good rebalancing targets are broken by it.

REGION_CATALOG = ["USA", "Europe", "Asia", "Africa", "LatAm", "Global"]

UNKNOWN_REGION = "Unknown"


# =========================
# TOKEN CLASSIFICATION
# =========================
# Symbol (upper case) -> region. Unlisted symbols classify as UNKNOWN_REGION.

TOKEN_REGION_MAP = {
    # USD and dollar-bloc stablecoins
    "USDM": "USA",
    "CUSD": "USA",
    "USDC": "USA",
    "USDT": "USA",
    "CADM": "USA",
    "USDY": "USA",
    # European
    "EURM": "Europe",
    "CEUR": "Europe",
    "EURC": "Europe",
    "GBPM": "Europe",
    "CHFM": "Europe",
    # Latin America
    "BRLM": "LatAm",
    "CREAL": "LatAm",
    "COPM": "LatAm",
    # Africa
    "KESM": "Africa",
    "CKES": "Africa",
    "GHSM": "Africa",
    "ZARM": "Africa",
    "XOFM": "Africa",
    "EXOF": "Africa",
    "NGNM": "Africa",
    # Asia-Pacific
    "PHPM": "Asia",
    "PUSO": "Asia",
    "AUDM": "Asia",
    "JPYM": "Asia",
    # Region-neutral real-world assets
    "PAXG": "Global",
    "SYRUPUSDC": "Global",
}

# Region -> token used as a rebalancing target for that region.
REGION_TOKEN_MAP = {
    "USA": "USDM",
    "Europe": "EURM",
    "Asia": "PHPM",
    "Africa": "KESM",
    "LatAm": "BRLM",
    "Global": "PAXG",
}


# =========================
# FALLBACK INFLATION DATA
# =========================
# Annual rates (%) used when the caller has no live table at all
# (CLI without --inflation). Marked as "estimated".

FALLBACK_INFLATION = {
    "USA": 4.1,
    "Europe": 6.8,
    "Asia": 4.2,
    "Africa": 12.5,
    "LatAm": 8.7,
    "Global": 2.5,
}


# =========================
# YIELD AND RWA TABLES
# =========================

YIELD_APY_MAP = {
    "USDY": 5.0,
    "SYRUPUSDC": 4.5,
    "KESM": 2.0,
    "USDM": 0.1,
}

RWA_SYMBOLS = ["PAXG", "USDY", "SYRUPUSDC"]


# =========================
# GOAL TARGET ALLOCATIONS
# =========================
# Percent per region for each advisory goal. Zero entries are omitted from
# the generated target allocations.

GOAL_ALLOCATIONS = {
    "inflation_protection": {
        "Europe": 35,   # Low inflation anchor
        "USA": 30,      # Reserve currency stability
        "Global": 25,   # Gold hedge
        "Asia": 10,
        "Africa": 0,
        "LatAm": 0,
    },
    "geographic_diversification": {
        "Europe": 25,
        "USA": 20,
        "Asia": 20,
        "Africa": 15,
        "LatAm": 15,
        "Global": 5,
    },
    "rwa_access": {
        "Global": 50,
        "Europe": 20,
        "USA": 20,
        "Asia": 10,
        "Africa": 0,
        "LatAm": 0,
    },
    "exploring": {
        "Europe": 20,
        "USA": 20,
        "Asia": 20,
        "Africa": 20,
        "LatAm": 15,
        "Global": 5,
    },
}


def get_config() -> Dict[str, Any]:
    """
    Return the default engine configuration.

    The result is a deep copy, so callers may mutate it (e.g. merge an
    external config file on top) without touching the module defaults.
    """
    return copy.deepcopy({
        'thresholds': ANALYSIS_THRESHOLDS,
        'region_catalog': REGION_CATALOG,
        'unknown_region': UNKNOWN_REGION,
        'token_regions': TOKEN_REGION_MAP,
        'region_tokens': REGION_TOKEN_MAP,
        'fallback_inflation': FALLBACK_INFLATION,
        'yield_apy': YIELD_APY_MAP,
        'rwa_symbols': RWA_SYMBOLS,
        'goal_allocations': GOAL_ALLOCATIONS,
    })
