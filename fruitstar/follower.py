"""fruitstar/follower.py — Per-unit motion along the level path.

A follower's distance is measured in path segments: distance 2.25 means a
quarter of the way from path[2] to path[3]. Position is interpolated between
cell centres each tick, so motion is frame-rate independent and bounded by
the path's cell count.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from fruitstar.constants import FOLLOWER_SPEED

if TYPE_CHECKING:
    from fruitstar.level import Level, Vec2


@dataclass
class PathFollower:
    """Motion state attached to a released unit by the scheduler."""

    speed: float = FOLLOWER_SPEED
    distance: float = 0.0
    level: int = 0  # generation of the level whose path this follows
    completed: bool = False
    position: Optional[Vec2] = None

    @property
    def segment(self) -> int:
        return math.floor(self.distance)


def _lerp(a: Vec2, b: Vec2, t: float) -> Vec2:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def follower_update(
    follower: PathFollower, dt: float, level: Optional[Level],
) -> Optional[Vec2]:
    """Advance *follower* by *dt* seconds along *level*'s path.

    Returns the follower's world position. A completed follower does not
    move. With no level, or a level other than the one the follower was
    attached under, the tick is skipped.
    """
    if follower.completed:
        return follower.position
    if level is None or level.generation != follower.level:
        return follower.position

    path = level.path
    follower.distance += follower.speed * dt
    segment = follower.segment

    if segment >= len(path) - 1:
        follower.completed = True
        follower.position = level.cell_center(path[-1])
        return follower.position

    a = level.cell_center(path[segment])
    b = level.cell_center(path[segment + 1])
    follower.position = _lerp(a, b, follower.distance - segment)
    return follower.position
