"""fruitstar/simulation.py — Headless game state and tick loop.

GameState is the explicit context passed to every tick: the level loader,
the wave scheduler, the unit pool and any placed structures. No Pyxel
imports; main.py and the scenario runner both drive game_step().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from fruitstar.config import GameConfig
from fruitstar.grid import ImageSource
from fruitstar.level import Level, LevelLoader, Vec2
from fruitstar.scheduler import (
    PlayState,
    UnitCompletedEvent,
    UnitOrphanedEvent,
    UnitReleasedEvent,
    WaveClearedEvent,
    WaveEvent,
    WaveScheduler,
    WaveStartedEvent,
)
from fruitstar.units import (
    HarvesterType,
    Unit,
    UnitFactory,
    create_units,
    harvest_targets,
    place_building,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@dataclass
class LevelLoadedEvent:
    level: Level


@dataclass
class FruitHarvestedEvent:
    harvester: Unit
    unit: Unit


Event = (
    LevelLoadedEvent
    | WaveStartedEvent
    | UnitReleasedEvent
    | UnitCompletedEvent
    | UnitOrphanedEvent
    | WaveClearedEvent
    | FruitHarvestedEvent
)


# ---------------------------------------------------------------------------
# GameState
# ---------------------------------------------------------------------------

@dataclass
class GameState:
    """Everything one play-through tracks, minus rendering state."""

    config: GameConfig
    loader: LevelLoader
    scheduler: WaveScheduler
    units: list[Unit]
    factory: UnitFactory
    buildings: list[Unit] = field(default_factory=list)
    tick: int = 0
    time: float = 0.0
    waves_completed: int = 0
    units_completed: int = 0
    score: int = 0

    @property
    def level(self) -> Optional[Level]:
        return self.loader.current

    @property
    def phase(self) -> PlayState:
        return self.scheduler.state


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def create_game(source: ImageSource, config: GameConfig | None = None) -> GameState:
    """Create a game in SETUP with a level load requested for *source*.

    The level is assembled on the first game_step().
    """
    config = config or GameConfig()
    loader = LevelLoader(
        tile_size=config.tile_size,
        threshold=config.threshold,
        diagonal=config.diagonal,
        centered=config.centered,
    )
    scheduler = WaveScheduler(
        intermission=config.intermission,
        release_interval=config.release_interval,
        speed=config.unit_speed,
        release_order=config.release_order,
    )
    factory = UnitFactory()
    units = create_units(config.unit_count, config.unit_kind, factory)
    loader.request(source)
    return GameState(
        config=config,
        loader=loader,
        scheduler=scheduler,
        units=units,
        factory=factory,
    )


# ---------------------------------------------------------------------------
# Step
# ---------------------------------------------------------------------------

def game_step(state: GameState, dt: float) -> list[Event]:
    """Advance the game by one tick of *dt* seconds.

    In SETUP this polls the pending level load; a load error propagates to
    the caller with the scheduler still in SETUP. Otherwise the scheduler
    runs, fruit grows on every unit, and each harvester picks the ripe
    fruit of units on the path within its range.
    """
    events: list[Event] = []

    if state.scheduler.state == PlayState.SETUP:
        level = state.loader.poll()
        if level is not None:
            state.scheduler.seed(state.units, level)
            events.append(LevelLoadedEvent(level))
    else:
        wave_events: list[WaveEvent] = state.scheduler.update(dt, state.loader.current)
        for evt in wave_events:
            if isinstance(evt, WaveClearedEvent):
                state.waves_completed += 1
            elif isinstance(evt, UnitCompletedEvent):
                state.units_completed += 1
        events.extend(wave_events)
        if not state.scheduler.paused:
            _grow_fruit(state, dt)
            events.extend(_harvest(state))

    if not state.scheduler.paused:
        state.time += dt
    state.tick += 1
    return events


def _grow_fruit(state: GameState, dt: float) -> None:
    for unit in state.units:
        for branch in unit.branches:
            branch.grow(dt)


def _harvest(state: GameState) -> list[FruitHarvestedEvent]:
    events: list[FruitHarvestedEvent] = []
    for harvester in state.buildings:
        for unit in harvest_targets(harvester, state.scheduler.active):
            for branch in unit.branches:
                if branch.harvest():
                    state.score += 1
                    events.append(FruitHarvestedEvent(harvester, unit))
                    logger.debug("harvester %d picked fruit from unit %d; score %d",
                                 harvester.uid, unit.uid, state.score)
    return events


def reload_level(state: GameState, source: ImageSource) -> None:
    """Begin loading a new level, orphaning every follower of the old one."""
    state.scheduler.reset()
    state.buildings.clear()
    state.loader.request(source)
    logger.info("level reload requested")


def place_harvester(state: GameState, pos: Vec2) -> Optional[Unit]:
    """Place a harvester at *pos* on the current level, if there is one."""
    if state.level is None:
        return None
    unit = place_building(state.level, HarvesterType.KEY, pos, state.factory)
    if unit is not None:
        state.buildings.append(unit)
    return unit
