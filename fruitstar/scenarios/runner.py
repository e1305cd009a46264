"""fruitstar/scenarios/runner — Scenario execution engine.

Executes a ScenarioDef to completion, collecting a per-tick trajectory and
metrics. The unit-pool invariant is checked after every tick.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fruitstar.errors import EmptyImageError, LevelLoadError, NoPathToEnd, NoStart
from fruitstar.grid import ImageSource
from fruitstar.grids import GRID_BUILDERS, builtin_level
from fruitstar.invariants import check_unit_pool
from fruitstar.scenarios.conditions import check_success
from fruitstar.scenarios.loader import ScenarioDef
from fruitstar.scheduler import WaveStartedEvent
from fruitstar.simulation import GameState, create_game, game_step


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass
class TickRecord:
    """Per-tick snapshot of scheduler state."""

    tick: int
    phase: str
    wave: int
    pending: int
    queued: int
    active: int
    events: list[str]


@dataclass
class ScenarioOutcome:
    """Result of executing a scenario to completion."""

    name: str
    success: bool
    reason: str
    ticks_elapsed: int
    metrics: dict[str, Any]
    trajectory: list[TickRecord]
    wall_time_ms: float


_LOAD_FAILURE_REASONS: dict[type, str] = {
    NoStart: "no_start",
    NoPathToEnd: "no_path_to_end",
    EmptyImageError: "empty_image",
}


# ---------------------------------------------------------------------------
# Level source
# ---------------------------------------------------------------------------


def resolve_level(scenario_def: ScenarioDef) -> ImageSource:
    """Built-in level name, or an image path relative to the scenario file."""
    if scenario_def.level in GRID_BUILDERS:
        return builtin_level(scenario_def.level)
    path = Path(scenario_def.level)
    if not path.is_absolute() and scenario_def.base_dir is not None:
        path = scenario_def.base_dir / path
    return path


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def _metric_waves_completed(trajectory: list[TickRecord], game: GameState) -> int:
    return game.waves_completed


def _metric_units_completed(trajectory: list[TickRecord], game: GameState) -> int:
    return game.units_completed


def _metric_path_length(trajectory: list[TickRecord], game: GameState) -> int | None:
    return len(game.level.path) if game.level is not None else None


def _metric_first_wave_tick(trajectory: list[TickRecord], game: GameState) -> int | None:
    for record in trajectory:
        if WaveStartedEvent.__name__ in record.events:
            return record.tick
    return None


def _metric_peak_active(trajectory: list[TickRecord], game: GameState) -> int:
    return max((r.active for r in trajectory), default=0)


def _metric_final_phase(trajectory: list[TickRecord], game: GameState) -> str:
    return game.phase.value


_METRIC_DISPATCH: dict[str, Any] = {
    "waves_completed": _metric_waves_completed,
    "units_completed": _metric_units_completed,
    "path_length": _metric_path_length,
    "first_wave_tick": _metric_first_wave_tick,
    "peak_active": _metric_peak_active,
    "final_phase": _metric_final_phase,
}


def compute_metrics(
    requested: list[str], trajectory: list[TickRecord], game: GameState,
) -> dict[str, Any]:
    """Compute the requested metrics from trajectory and game state."""
    result: dict[str, Any] = {}
    for name in requested:
        func = _METRIC_DISPATCH.get(name)
        if func is None:
            raise ValueError(
                f"Unknown metric: {name!r}. "
                f"Valid metrics: {sorted(_METRIC_DISPATCH)}"
            )
        result[name] = func(trajectory, game)
    return result


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def run_scenario(scenario_def: ScenarioDef) -> ScenarioOutcome:
    """Execute a single scenario to completion.

    A level load failure ends the run immediately with the failure kind as
    the reason.
    """
    game = create_game(resolve_level(scenario_def), scenario_def.config)

    trajectory: list[TickRecord] = []
    success = False
    reason = "timed_out"

    start_time = time.perf_counter()

    for tick in range(scenario_def.max_ticks):
        try:
            events = game_step(game, scenario_def.dt)
        except LevelLoadError as exc:
            reason = _LOAD_FAILURE_REASONS.get(type(exc), "load_failed")
            break

        sched = game.scheduler
        trajectory.append(
            TickRecord(
                tick=tick,
                phase=sched.state.value,
                wave=sched.wave,
                pending=len(sched.pending),
                queued=len(sched.release_order),
                active=len(sched.active),
                events=[type(e).__name__ for e in events],
            )
        )

        if game.level is not None and check_unit_pool(sched, game.units, tick):
            reason = "invariant_violation"
            break

        if check_success(scenario_def.success, game):
            success = True
            reason = scenario_def.success.type
            break

    wall_time = (time.perf_counter() - start_time) * 1000
    metrics = compute_metrics(scenario_def.metrics, trajectory, game)

    return ScenarioOutcome(
        name=scenario_def.name,
        success=success,
        reason=reason,
        ticks_elapsed=len(trajectory),
        metrics=metrics,
        trajectory=trajectory,
        wall_time_ms=wall_time,
    )
