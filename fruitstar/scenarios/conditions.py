"""fruitstar/scenarios/conditions — Success condition and its checker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fruitstar.simulation import GameState

VALID_SUCCESS_TYPES: frozenset[str] = frozenset(
    {
        "waves_completed",
        "units_completed",
        "level_loaded",
    }
)


@dataclass
class SuccessCondition:
    type: str
    value: float | None = None


def check_success(cond: SuccessCondition, game: GameState) -> bool:
    """True once *game* satisfies *cond*."""
    if cond.type == "waves_completed":
        return game.waves_completed >= (cond.value or 1)
    if cond.type == "units_completed":
        return game.units_completed >= (cond.value or 1)
    if cond.type == "level_loaded":
        return game.level is not None
    raise ValueError(f"Unknown success condition type: {cond.type!r}")
