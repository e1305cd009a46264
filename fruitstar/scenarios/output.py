"""fruitstar/scenarios/output — Result lines, summary and JSON files."""

from __future__ import annotations

import json
import sys
from collections import Counter
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fruitstar.scenarios.runner import ScenarioOutcome

_GREEN = "\033[32m"
_RED = "\033[31m"
_RESET = "\033[0m"

# Metrics shown on the console line, with their short labels.
_HEADLINE_METRICS = (
    ("waves_completed", "waves"),
    ("units_completed", "units"),
    ("path_length", "path"),
)


def _paint(text: str, color: str) -> str:
    if getattr(sys.stdout, "isatty", None) and sys.stdout.isatty():
        return f"{color}{text}{_RESET}"
    return text


# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------

def format_outcome(outcome: ScenarioOutcome) -> str:
    """One result line: status, name, ticks, wall time, reason, metrics."""
    status = _paint("PASS", _GREEN) if outcome.success else _paint("FAIL", _RED)
    fields = [
        f"{status}  {outcome.name:<25s}",
        f"{outcome.ticks_elapsed:>6d} ticks",
        f"{outcome.wall_time_ms:>7.1f}ms",
        outcome.reason,
    ]
    for key, label in _HEADLINE_METRICS:
        value = outcome.metrics.get(key)
        if value is not None:
            fields.append(f"{label}={value}")
    return "  ".join(fields)


def print_outcome(outcome: ScenarioOutcome) -> None:
    print(format_outcome(outcome))


def print_summary(results: list[ScenarioOutcome]) -> None:
    """Totals, then the failure reasons if any run failed."""
    passed = sum(r.success for r in results)
    failed = len(results) - passed
    pass_str = _paint(f"{passed} passed", _GREEN) if passed else f"{passed} passed"
    fail_str = _paint(f"{failed} failed", _RED) if failed else f"{failed} failed"
    print(f"\n{len(results)} scenarios: {pass_str}, {fail_str}")

    reasons = Counter(r.reason for r in results if not r.success)
    if reasons:
        print("  " + ", ".join(f"{reason} x{n}" for reason, n in sorted(reasons.items())))


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def outcome_to_dict(outcome: ScenarioOutcome, include_trajectory: bool = False) -> dict:
    data = asdict(outcome)
    if not include_trajectory:
        del data["trajectory"]
    return data


def save_results(
    results: list[ScenarioOutcome],
    path: Path | str,
    include_trajectory: bool = False,
) -> None:
    """Write outcomes as a JSON list, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [outcome_to_dict(r, include_trajectory) for r in results]
    path.write_text(json.dumps(payload, indent=2) + "\n")
