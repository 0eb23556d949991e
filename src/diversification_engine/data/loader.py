"""
Data Module
===========
Normalization of the caller-supplied inflation table.

Include:
- load_inflation_table: region -> RegionalInflationRecord from loose payloads
- inflation_rate: lookup with default fallback (never raises)
- fallback_inflation_table: estimated table from config defaults

The table is fetched by the orchestration layer before the engine runs;
this module only reshapes what it is given.
"""

import math
from numbers import Real
from typing import Any, Dict, Mapping, Optional

import numpy as np

from diversification_engine.config.user_config import get_config
from diversification_engine.models.portfolio import DataSource, RegionalInflationRecord
from diversification_engine.utils.exceptions import InflationTableError
from diversification_engine.utils.logger import get_logger

logger = get_logger(__name__)


InflationTable = Dict[str, RegionalInflationRecord]


def _parse_rate(region: str, raw_rate: Any) -> float:
    """Coerce a rate to float; anything unusable becomes NaN."""
    if isinstance(raw_rate, bool) or raw_rate is None:
        return float("nan")
    if isinstance(raw_rate, (Real, np.number)):
        return float(raw_rate)
    try:
        return float(str(raw_rate).strip().rstrip("%"))
    except ValueError:
        logger.warning(f"Unparseable inflation rate for {region}: {raw_rate!r}; default will apply")
        return float("nan")


def load_inflation_table(raw: Optional[Mapping[str, Any]]) -> InflationTable:
    """
    Normalize a loose inflation payload.

    Per region accepts a RegionalInflationRecord, a mapping with
    'annualRatePercent' / 'annual_rate_percent' (or legacy 'avgRate') and an
    optional 'dataSource', or a bare number.

    Raises:
        InflationTableError: if raw is not a mapping
    """
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise InflationTableError("Inflation table must be a mapping of region -> record",
                                  field="inflationTable", value=type(raw).__name__)

    table: InflationTable = {}
    for region, entry in raw.items():
        region = str(region)
        if isinstance(entry, RegionalInflationRecord):
            table[region] = entry
            continue

        if isinstance(entry, Mapping):
            raw_rate = entry.get("annualRatePercent",
                                 entry.get("annual_rate_percent", entry.get("avgRate")))
            source = DataSource.parse(entry.get("dataSource", entry.get("data_source")))
        else:
            raw_rate = entry
            source = DataSource.ESTIMATED

        table[region] = RegionalInflationRecord(
            region=region,
            annual_rate_percent=_parse_rate(region, raw_rate),
            data_source=source,
        )

    return table


def inflation_rate(table: Mapping[str, RegionalInflationRecord], region: str, default: float) -> float:
    """
    Annual inflation (%) for a region.

    Regions absent from the table, or with a NaN/infinite rate, get the
    configured default.
    """
    record = table.get(region)
    if record is None:
        logger.debug(f"No inflation data for {region}; using default {default}%")
        return float(default)
    rate = record.annual_rate_percent
    if not math.isfinite(rate):
        return float(default)
    return float(rate)


def fallback_inflation_table(config: Optional[Dict[str, Any]] = None) -> InflationTable:
    """Estimated table from the config's fallback rates."""
    config = config or get_config()
    return {
        region: RegionalInflationRecord(region, float(rate), DataSource.ESTIMATED)
        for region, rate in config["fallback_inflation"].items()
    }
