"""
Runtime Config Loader
=====================
Load engine configuration from JSON/YAML files and merge it over the
defaults from user_config.get_config().
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from diversification_engine.config.user_config import get_config
from diversification_engine.utils.exceptions import ConfigurationError


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError("YAML config must be a mapping at top level.")
    return data


def load_config_file(path: str) -> Dict[str, Any]:
    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    suffix = file_path.suffix.lower()
    if suffix in {".yml", ".yaml"}:
        return _load_yaml(file_path)
    if suffix == ".json":
        with file_path.open("r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError("JSON config must be an object at top level.")
        return data

    raise ConfigurationError(f"Unsupported config format: {suffix}. Use .json or .yaml/.yml.")


def _section(raw: Dict[str, Any], name: str) -> Optional[Dict[str, Any]]:
    # Accept "thresholds" or "THRESHOLDS"
    value = raw.get(name) or raw.get(name.upper())
    return value if isinstance(value, dict) else None


def _merge_dict(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    merged.update(override)
    return merged


def build_runtime_config(raw: Dict[str, Any], base: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Normalize an external config into the engine's runtime format.

    Recognised sections: thresholds, regions (catalog, unknown_region,
    token_regions, region_tokens), fallback_inflation, yields, rwa_symbols,
    goal_allocations. Unknown keys are ignored.
    """
    config: Dict[str, Any] = dict(base or get_config())

    thresholds = _section(raw, "thresholds")
    if thresholds:
        known = {k: v for k, v in thresholds.items() if k in config["thresholds"]}
        config["thresholds"] = _merge_dict(config["thresholds"], known)

    regions = _section(raw, "regions")
    if regions:
        catalog = regions.get("catalog")
        if isinstance(catalog, list) and catalog:
            config["region_catalog"] = [str(r) for r in catalog]
        if isinstance(regions.get("unknown_region"), str):
            config["unknown_region"] = regions["unknown_region"]
        if isinstance(regions.get("token_regions"), dict):
            config["token_regions"] = _merge_dict(
                config["token_regions"],
                {str(k).upper(): str(v) for k, v in regions["token_regions"].items()},
            )
        if isinstance(regions.get("region_tokens"), dict):
            config["region_tokens"] = _merge_dict(config["region_tokens"], regions["region_tokens"])

    fallback = _section(raw, "fallback_inflation")
    if fallback:
        config["fallback_inflation"] = _merge_dict(config["fallback_inflation"], fallback)

    yields = _section(raw, "yields")
    if yields:
        config["yield_apy"] = _merge_dict(
            config["yield_apy"], {str(k).upper(): v for k, v in yields.items()}
        )

    goals = _section(raw, "goal_allocations")
    if goals:
        config["goal_allocations"] = _merge_dict(config["goal_allocations"], goals)

    rwa = raw.get("rwa_symbols")
    if isinstance(rwa, list):
        config["rwa_symbols"] = [str(s).upper() for s in rwa]

    return config
