"""
Export Module
=============
Write an analysis to disk.

Include:
- analysis_to_frames: holdings / regions / opportunities as DataFrames
- export_to_csv: one CSV per frame
- export_to_json: full to_dict() payload plus export metadata

Only the CLI calls these; the engine itself performs no I/O.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from diversification_engine.models.portfolio import PortfolioAnalysis
from diversification_engine import __version__

HOLDING_COLUMNS = ["symbol", "region", "chain_id", "value", "percentage", "inflation_rate", "yield_rate"]
REGION_COLUMNS = ["region", "value", "percentage", "inflation_rate", "tokens"]
OPPORTUNITY_COLUMNS = [
    "from_token", "to_token", "from_region", "to_region", "from_inflation", "to_inflation",
    "inflation_delta", "suggested_amount", "annual_savings", "priority",
]


def create_output_dir(output_dir: str = "./output") -> Path:
    """Create the output directory if missing."""
    path = Path(output_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_timestamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


# ================================================================================
# DATAFRAME VIEWS
# ================================================================================

def analysis_to_frames(analysis: PortfolioAnalysis) -> Dict[str, pd.DataFrame]:
    """
    Tabular views of an analysis.

    Returns:
        {"holdings", "regions", "opportunities"} -> DataFrame; empty frames
        keep their columns.
    """
    holdings = pd.DataFrame(
        [
            {
                "symbol": a.symbol,
                "region": a.region,
                "chain_id": a.chain_id,
                "value": a.value,
                "percentage": a.percentage,
                "inflation_rate": a.inflation_rate,
                "yield_rate": a.yield_rate,
            }
            for a in analysis.token_allocations
        ],
        columns=HOLDING_COLUMNS,
    )

    regions = pd.DataFrame(
        [
            {
                "region": e.region,
                "value": e.value,
                "percentage": e.percentage,
                "inflation_rate": e.inflation_rate,
                "tokens": ", ".join(e.tokens),
            }
            for e in analysis.regional_exposure
        ],
        columns=REGION_COLUMNS,
    )

    opportunities = pd.DataFrame(
        [
            {
                "from_token": o.from_token,
                "to_token": o.to_token,
                "from_region": o.from_region,
                "to_region": o.to_region,
                "from_inflation": o.from_inflation,
                "to_inflation": o.to_inflation,
                "inflation_delta": o.inflation_delta,
                "suggested_amount": o.suggested_amount,
                "annual_savings": o.annual_savings,
                "priority": o.priority.value,
            }
            for o in analysis.rebalancing_opportunities
        ],
        columns=OPPORTUNITY_COLUMNS,
    )

    return {"holdings": holdings, "regions": regions, "opportunities": opportunities}


# ================================================================================
# CSV EXPORT
# ================================================================================

def export_to_csv(analysis: PortfolioAnalysis, output_dir: Path, timestamp: Optional[str] = None) -> List[Path]:
    """Write one CSV per analysis frame; returns the written paths."""
    output_dir = Path(output_dir)
    timestamp = timestamp or get_timestamp()
    exported_files = []

    for name, frame in analysis_to_frames(analysis).items():
        csv_file = output_dir / f"{name}_{timestamp}.csv"
        frame.to_csv(csv_file, index=False)
        exported_files.append(csv_file)

    return exported_files


# ================================================================================
# JSON EXPORT
# ================================================================================

def export_to_json(analysis: PortfolioAnalysis, output_dir: Path, timestamp: Optional[str] = None) -> Path:
    """Write the full analysis plus export metadata."""
    output_dir = Path(output_dir)
    timestamp = timestamp or get_timestamp()
    json_file = output_dir / f"diversification_analysis_{timestamp}.json"

    export_data = {
        "metadata": {
            "generated_at": timestamp,
            "engine_version": __version__,
        },
        "analysis": analysis.to_dict(),
    }

    with open(json_file, "w", encoding="utf-8") as f:
        json.dump(export_data, f, indent=2, ensure_ascii=False)

    return json_file
