"""
Region Taxonomy Module
======================
Classification of stablecoin / RWA symbols into economic regions.

The classifier is an explicit object passed into the aggregator and the
rebalancing generator. Tests build synthetic classifiers with their own
region maps; nothing here is consulted as a hidden global.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from diversification_engine.config.user_config import get_config


class RegionClassifier:
    """
    Symbol -> region lookup plus the region -> target-token table.

    Args:
        token_regions: symbol -> region (symbols are matched case-insensitively)
        region_tokens: region -> token proposed as a rebalancing target
        catalog: ordered list of known regions (drives missing-region order
            and target tie-breaks)
        unknown_region: sentinel region for unclassified symbols
    """

    def __init__(
        self,
        token_regions: Mapping[str, str],
        region_tokens: Optional[Mapping[str, str]] = None,
        catalog: Optional[Iterable[str]] = None,
        unknown_region: str = "Unknown",
    ):
        self._token_regions: Dict[str, str] = {
            str(symbol).upper(): str(region) for symbol, region in token_regions.items()
        }
        self._region_tokens: Dict[str, str] = {
            str(region): str(symbol).upper() for region, symbol in (region_tokens or {}).items()
        }
        if catalog is None:
            # Preserve first-seen order of the regions named in the maps
            seen: List[str] = []
            for region in list(self._token_regions.values()) + list(self._region_tokens):
                if region not in seen:
                    seen.append(region)
            catalog = seen
        self._catalog: Tuple[str, ...] = tuple(dict.fromkeys(str(r) for r in catalog))
        self.unknown_region = unknown_region

    @property
    def catalog(self) -> Tuple[str, ...]:
        return self._catalog

    def classify(self, symbol: str) -> str:
        return self._token_regions.get(str(symbol).upper(), self.unknown_region)

    def token_for_region(self, region: str) -> Optional[str]:
        return self._region_tokens.get(region)

    def catalog_index(self, region: str) -> int:
        """Position in the catalog; regions outside it sort last."""
        try:
            return self._catalog.index(region)
        except ValueError:
            return len(self._catalog)

    def __repr__(self) -> str:
        return (f"RegionClassifier(catalog={list(self._catalog)}, "
                f"tokens={len(self._token_regions)}, targets={len(self._region_tokens)})")


def classifier_from_config(config: Dict) -> RegionClassifier:
    return RegionClassifier(
        token_regions=config["token_regions"],
        region_tokens=config["region_tokens"],
        catalog=config["region_catalog"],
        unknown_region=config.get("unknown_region", "Unknown"),
    )


def default_classifier() -> RegionClassifier:
    """Classifier built from the packaged default tables."""
    return classifier_from_config(get_config())
