"""fruitstar/scenarios/cli — Run scenario files headlessly.

Usage::

    fruitstar-scenarios scenarios/serpentine_waves.yaml
    fruitstar-scenarios --all --release-order fifo
    fruitstar-scenarios --all -o results/run_001.json --trajectory

Exit status: 0 when every scenario passes, 1 when any fails, 2 on bad usage.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from fruitstar.debug import configure_logging
from fruitstar.scenarios.loader import load_scenarios
from fruitstar.scenarios.output import print_outcome, print_summary, save_results
from fruitstar.scenarios.runner import run_scenario
from fruitstar.scheduler import ReleaseOrder


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fruitstar-scenarios", description="Run Fruitstar scenarios",
    )
    parser.add_argument("scenarios", nargs="*", type=Path, help="Scenario YAML files")
    parser.add_argument(
        "--all", action="store_true", help="Run every *.yaml in --scenario-dir",
    )
    parser.add_argument(
        "--scenario-dir", type=Path, default=Path("scenarios"),
        help="Directory searched by --all (default: scenarios/)",
    )
    parser.add_argument(
        "--release-order", choices=[o.value for o in ReleaseOrder],
        help="Override the release order of every scenario",
    )
    parser.add_argument("--output", "-o", help="Write results JSON here")
    parser.add_argument(
        "--trajectory", action="store_true",
        help="Include the per-tick trajectory in the JSON output",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log at DEBUG level",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.scenarios and not args.all:
        parser.print_usage()
        sys.exit(2)

    configure_logging(debug=True if args.verbose else None)

    scenario_defs = load_scenarios(
        paths=args.scenarios or None, run_all=args.all, base=args.scenario_dir,
    )
    if args.release_order:
        for scenario_def in scenario_defs:
            scenario_def.config = scenario_def.config.with_overrides(
                {"release_order": args.release_order},
            )

    results = []
    for scenario_def in scenario_defs:
        outcome = run_scenario(scenario_def)
        print_outcome(outcome)
        results.append(outcome)
    print_summary(results)

    if args.output:
        save_results(results, args.output, include_trajectory=args.trajectory)

    sys.exit(0 if all(r.success for r in results) else 1)


if __name__ == "__main__":
    main()
