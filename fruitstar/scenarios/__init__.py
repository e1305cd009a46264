"""fruitstar/scenarios — Headless scenario definition, loading, and runner."""

from fruitstar.scenarios.conditions import (
    VALID_SUCCESS_TYPES,
    SuccessCondition,
    check_success,
)
from fruitstar.scenarios.loader import ScenarioDef, load_scenario, load_scenarios
from fruitstar.scenarios.runner import ScenarioOutcome, TickRecord, run_scenario
from fruitstar.scenarios.output import (
    format_outcome,
    print_outcome,
    print_summary,
    save_results,
)

__all__ = [
    "VALID_SUCCESS_TYPES",
    "SuccessCondition",
    "check_success",
    "ScenarioDef",
    "load_scenario",
    "load_scenarios",
    "TickRecord",
    "ScenarioOutcome",
    "run_scenario",
    "format_outcome",
    "print_outcome",
    "print_summary",
    "save_results",
]
