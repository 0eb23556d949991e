#!/usr/bin/env python3
"""
Diversification Analysis CLI Entry Point
========================================
Minimal CLI wrapper around analyze_portfolio().

Usage:
    python scripts/analyze_portfolio.py portfolio.json --inflation inflation.json
    python -m scripts.analyze_portfolio portfolio.json --goal inflation_protection --export ./output
"""

import sys
import os
import argparse
import json
import logging
from pathlib import Path

# Add src to path for development
src_path = Path(__file__).parent.parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from diversification_engine import __version__
from diversification_engine.core.pipeline import analyze_portfolio
from diversification_engine.config.user_config import get_config
from diversification_engine.config.loader import load_config_file, build_runtime_config
from diversification_engine.data.loader import fallback_inflation_table
from diversification_engine.reporting.console import print_analysis_summary
from diversification_engine.reporting.export import create_output_dir, export_to_csv, export_to_json
from diversification_engine.utils.exceptions import DiversificationEngineError
from diversification_engine.utils.logger import set_console_level


def _read_json(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Analyze a multi-chain stablecoin portfolio")
    parser.add_argument("portfolio", help="Path to the portfolio snapshot (JSON)")
    parser.add_argument("--inflation", help="Path to the regional inflation table (JSON)", default=None)
    parser.add_argument("--goal", help="Advisory goal (inflation_protection, geographic_diversification, "
                                       "rwa_access, exploring)", default=None)
    parser.add_argument("--context", help="Path to an analysis context (JSON)", default=None)
    parser.add_argument("--config", help="Path to JSON/YAML config file", default=None)
    parser.add_argument("--years", help="Projection horizon in years", type=int, default=None)
    parser.add_argument("--per-chain", help="Also report per-chain holdings", action="store_true")
    parser.add_argument("--export", help="Directory for JSON/CSV exports", default=None)
    parser.add_argument("--json", help="Print the analysis as JSON instead of the report", action="store_true")
    parser.add_argument("--verbose", "-v", help="Log at INFO level", action="store_true")
    return parser


def main(argv=None) -> int:
    """Run the analysis and print the report."""
    args = build_parser().parse_args(argv)

    if args.verbose:
        set_console_level(logging.INFO)

    base_config = get_config()
    config_path = args.config or os.environ.get("DIVERSIFICATION_CONFIG_PATH")
    try:
        if config_path:
            raw = load_config_file(config_path)
            config = build_runtime_config(raw, base=base_config)
            print(f"Using external config: {config_path}", file=sys.stderr)
        else:
            config = base_config

        portfolio = _read_json(args.portfolio)
        if args.inflation:
            inflation_table = _read_json(args.inflation)
        else:
            print("No inflation table supplied: using estimated fallback rates", file=sys.stderr)
            inflation_table = fallback_inflation_table(config)
        context = _read_json(args.context) if args.context else None

        analysis = analyze_portfolio(
            portfolio,
            inflation_table,
            args.goal,
            context=context,
            config=config,
            per_chain=args.per_chain,
            years=args.years,
        )
    except (OSError, json.JSONDecodeError, DiversificationEngineError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    if args.json:
        print(analysis.to_json())
    else:
        print(f"DIVERSIFICATION ENGINE v{__version__}")
        print_analysis_summary(analysis)

    if args.export:
        output_dir = create_output_dir(args.export)
        json_file = export_to_json(analysis, output_dir)
        csv_files = export_to_csv(analysis, output_dir)
        print(f"\nExported: {json_file}", file=sys.stderr)
        for csv_file in csv_files:
            print(f"Exported: {csv_file}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
