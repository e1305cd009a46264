"""fruitstar/scheduler.py — Wave / intermission state machine.

States: SETUP → INTERMISSION → WAVE → INTERMISSION → WAVE → …
Pause is orthogonal: a paused scheduler keeps its timers as they are.

The scheduler owns three disjoint collections of unit handles:

    pending        units waiting for the next wave
    release_order  units queued for release in the current wave
    active         units with a PathFollower attached

Every unit is in exactly one of them between ticks.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional

from fruitstar.constants import FOLLOWER_SPEED, INTERMISSION_DURATION, RELEASE_INTERVAL
from fruitstar.follower import PathFollower, follower_update

if TYPE_CHECKING:
    from fruitstar.level import Level
    from fruitstar.units import Unit

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PlayState(Enum):
    SETUP = "setup"
    INTERMISSION = "intermission"
    WAVE = "wave"


class ReleaseOrder(Enum):
    LIFO = "lifo"  # last unit to return is released first
    FIFO = "fifo"  # pending order is kept


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@dataclass
class WaveStartedEvent:
    wave: int
    size: int


@dataclass
class UnitReleasedEvent:
    unit: Unit


@dataclass
class UnitCompletedEvent:
    unit: Unit


@dataclass
class UnitOrphanedEvent:
    """The unit's follower belonged to a level that is no longer current."""

    unit: Unit


@dataclass
class WaveClearedEvent:
    wave: int


WaveEvent = (
    WaveStartedEvent
    | UnitReleasedEvent
    | UnitCompletedEvent
    | UnitOrphanedEvent
    | WaveClearedEvent
)


# ---------------------------------------------------------------------------
# Timer
# ---------------------------------------------------------------------------

@dataclass
class Timer:
    """One-shot countdown advanced once per tick."""

    duration: float
    elapsed: float = 0.0

    @property
    def finished(self) -> bool:
        return self.elapsed >= self.duration

    @property
    def remaining(self) -> float:
        return max(0.0, self.duration - self.elapsed)

    def tick(self, dt: float) -> bool:
        """Advance by *dt*. True only on the tick the timer finishes."""
        was_finished = self.finished
        self.elapsed = min(self.duration, self.elapsed + dt)
        return self.finished and not was_finished

    def reset(self) -> None:
        self.elapsed = 0.0


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------

class WaveScheduler:
    """Drives the pending queue, wave releases and path completion."""

    def __init__(
        self,
        *,
        intermission: float = INTERMISSION_DURATION,
        release_interval: float = RELEASE_INTERVAL,
        speed: float = FOLLOWER_SPEED,
        release_order: ReleaseOrder = ReleaseOrder.LIFO,
    ):
        if intermission <= 0:
            raise ValueError(f"intermission must be positive, got {intermission}")
        if release_interval <= 0:
            raise ValueError(f"release_interval must be positive, got {release_interval}")
        if speed < 0:
            raise ValueError(f"speed must be >= 0, got {speed}")
        self.state = PlayState.SETUP
        self.paused = False
        self.wave = 0
        self.speed = speed
        self.release_policy = release_order
        self.intermission = Timer(intermission)
        self.release_timer = Timer(release_interval)
        self.pending: list[Unit] = []
        self.release_order: deque[Unit] = deque()
        self.active: list[Unit] = []
        self._level_generation = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def intermission_remaining(self) -> float:
        if self.state != PlayState.INTERMISSION:
            return 0.0
        return self.intermission.remaining

    def units(self) -> list[Unit]:
        """Every unit the scheduler owns, in no particular order."""
        return [*self.pending, *self.release_order, *self.active]

    # ------------------------------------------------------------------
    # External transitions
    # ------------------------------------------------------------------

    def seed(self, units: Iterable[Unit], level: Optional[Level] = None) -> None:
        """Setup → Intermission with *units* as the initial pending queue."""
        self.pending = list(units)
        for unit in self.pending:
            _hide(unit)
        self.release_order.clear()
        self.active.clear()
        if level is not None:
            self._level_generation = level.generation
        self.intermission.reset()
        self.release_timer.reset()
        self.state = PlayState.INTERMISSION
        logger.debug("seeded with %d units; intermission started", len(self.pending))

    def reset(self) -> None:
        """Detach every follower and return to SETUP.

        Used when a new level load begins: followers of the old level are
        dropped before the new level can become current. All units end up
        pending in release → active order.
        """
        for unit in self.active:
            _hide(unit)
        for unit in self.release_order:
            _hide(unit)
        self.pending.extend(self.release_order)
        self.pending.extend(self.active)
        self.release_order.clear()
        self.active.clear()
        self.intermission.reset()
        self.release_timer.reset()
        self.state = PlayState.SETUP

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def update(self, dt: float, level: Optional[Level]) -> list[WaveEvent]:
        """Advance one tick of *dt* seconds.

        During a wave, units still following the path of an older level are
        hidden and sent back to the pending queue before anything moves.
        """
        events: list[WaveEvent] = []
        if self.paused or self.state == PlayState.SETUP:
            return events

        if self.state == PlayState.INTERMISSION:
            if self.intermission.tick(dt):
                events.append(self._start_wave())
            return events

        # --- WAVE ---
        if level is not None and level.generation != self._level_generation:
            events.extend(self._recall_orphans(level))

        for unit in self.active:
            follower_update(unit.follower, dt, level)

        if self.release_timer.tick(dt) and self.release_order:
            unit = self.release_order.popleft()
            self._attach(unit, level)
            events.append(UnitReleasedEvent(unit))
            self.release_timer.reset()
        elif self.release_timer.finished:
            self.release_timer.reset()

        still_active: list[Unit] = []
        for unit in self.active:
            if unit.follower.completed:
                _hide(unit)
                self.pending.append(unit)
                events.append(UnitCompletedEvent(unit))
            else:
                still_active.append(unit)
        self.active = still_active

        if not self.release_order and not self.active:
            events.append(WaveClearedEvent(self.wave))
            logger.debug("wave %d cleared", self.wave)
            self.intermission.reset()
            self.state = PlayState.INTERMISSION

        return events

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _start_wave(self) -> WaveStartedEvent:
        if self.release_policy == ReleaseOrder.LIFO:
            self.release_order = deque(reversed(self.pending))
        else:
            self.release_order = deque(self.pending)
        self.pending = []
        self.release_timer.reset()
        self.wave += 1
        self.state = PlayState.WAVE
        logger.debug("wave %d started with %d units", self.wave, len(self.release_order))
        return WaveStartedEvent(wave=self.wave, size=len(self.release_order))

    def _recall_orphans(self, level: Level) -> list[UnitOrphanedEvent]:
        """Requeue units whose follower was attached under an older level."""
        self._level_generation = level.generation
        events: list[UnitOrphanedEvent] = []
        still_active: list[Unit] = []
        for unit in self.active:
            if unit.follower.level == level.generation:
                still_active.append(unit)
                continue
            _hide(unit)
            self.pending.append(unit)
            events.append(UnitOrphanedEvent(unit))
        self.active = still_active
        if events:
            logger.info("recalled %d unit(s) orphaned by level %d",
                        len(events), level.generation)
        return events

    def _attach(self, unit: Unit, level: Optional[Level]) -> None:
        generation = level.generation if level is not None else self._level_generation
        unit.follower = PathFollower(speed=self.speed, level=generation)
        unit.visible = True
        follower_update(unit.follower, 0.0, level)
        self.active.append(unit)


def _hide(unit: Unit) -> None:
    unit.follower = None
    unit.visible = False
