"""fruitstar/invariants.py — Unit-pool invariant checker for the scheduler.

At every tick boundary the pending queue, the release order and the set of
followed units must partition the unit pool: no duplicates, no omissions,
and follower state present exactly on the followed units. Tests call
check_unit_pool() after each step and assert the result is empty.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from fruitstar.follower import PathFollower

if TYPE_CHECKING:
    from fruitstar.scheduler import WaveScheduler
    from fruitstar.units import Unit


@dataclass
class Violation:
    """A single unit-pool invariant violation."""

    tick: int
    invariant: str
    details: str


def check_unit_pool(
    scheduler: WaveScheduler, pool: Iterable[Unit], tick: int = 0,
) -> list[Violation]:
    """Check the scheduler's collections against the fixed unit pool."""
    violations: list[Violation] = []
    pool = list(pool)

    owned = Counter(id(u) for u in scheduler.units())
    for key, count in owned.items():
        if count > 1:
            violations.append(Violation(
                tick, "duplicate_unit",
                f"unit held {count} times across pending/release/active",
            ))

    pool_ids = {id(u) for u in pool}
    missing = [u for u in pool if id(u) not in owned]
    for unit in missing:
        violations.append(Violation(tick, "missing_unit", f"{unit!r} is in no collection"))
    extra = set(owned) - pool_ids
    if extra:
        violations.append(Violation(
            tick, "foreign_unit", f"{len(extra)} unit(s) not in the pool",
        ))

    for unit in scheduler.active:
        if not isinstance(unit.follower, PathFollower):
            violations.append(Violation(tick, "active_without_follower", repr(unit)))
        if not unit.visible:
            violations.append(Violation(tick, "active_hidden", repr(unit)))
    for unit in [*scheduler.pending, *scheduler.release_order]:
        if unit.follower is not None:
            violations.append(Violation(tick, "queued_with_follower", repr(unit)))
        if unit.visible:
            violations.append(Violation(tick, "queued_visible", repr(unit)))

    return violations
