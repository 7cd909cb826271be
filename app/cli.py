"""
Headless runner: cashflow-risk-run params.json [--json] [--quiet]

Reads raw form fields from a JSON file, runs one simulation in-line and
prints the risk report (or the serialized result with --json).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from core.errors import SimulationError
from engine.runner import run_simulation
from inputs.loader import load_parameter_file
from inputs.validators import normalize_parameters
from risk.report import generate_risk_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cashflow-risk-run",
        description="Monte Carlo cash-flow risk simulation with ±10% sensitivity sweep.",
    )
    parser.add_argument("params", help="JSON file with the run inputs")
    parser.add_argument("--json", action="store_true", help="print the full result as JSON")
    parser.add_argument("--quiet", action="store_true", help="no progress output")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    raw = load_parameter_file(args.params)
    params, validation = normalize_parameters(raw)
    if validation.warnings and not args.quiet:
        print(validation.summary(), file=sys.stderr)

    progress = None if args.quiet else (lambda text: print(text, file=sys.stderr))
    try:
        result = run_simulation(params, progress=progress)
    except SimulationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        json.dump(result.to_dict(), sys.stdout)
        sys.stdout.write("\n")
    else:
        report = generate_risk_report(result)
        print(report.to_dataframe().to_string(index=False))
        print()
        print(result.tornado.to_frame().drop(columns=["key"]).to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
