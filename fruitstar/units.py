"""fruitstar/units.py — Unit handles and the building-type registry.

Unit and structure kinds are a registry of small classes keyed by a stable
string, each supplying a display name, a sprite path, a footprint and a
construct() step that fills in a Unit. Wave units are "debug_plant"s;
harvesters are placed by the player and never walk the path.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional

from fruitstar.constants import FRUIT_REGROW_TIME, HARVESTER_RANGE

if TYPE_CHECKING:
    from fruitstar.follower import PathFollower
    from fruitstar.level import Level, Vec2


# ---------------------------------------------------------------------------
# Unit handle
# ---------------------------------------------------------------------------

class FruitGrowth(Enum):
    EMPTY = "empty"
    FRUITED = "fruited"


@dataclass(eq=False)
class FruitBranch:
    """A branch that regrows one fruit after each harvest."""

    species: int = 0
    state: FruitGrowth = FruitGrowth.EMPTY
    regrow_remaining: float = FRUIT_REGROW_TIME

    @property
    def fruited(self) -> bool:
        return self.state == FruitGrowth.FRUITED

    def grow(self, dt: float) -> bool:
        """Count down by *dt*. True on the tick the branch fruits."""
        if self.fruited:
            return False
        self.regrow_remaining -= dt
        if self.regrow_remaining <= 0:
            self.state = FruitGrowth.FRUITED
            self.regrow_remaining = 0.0
            return True
        return False

    def harvest(self) -> bool:
        """Take the fruit and restart the countdown. False if there was none."""
        if not self.fruited:
            return False
        self.state = FruitGrowth.EMPTY
        self.regrow_remaining = FRUIT_REGROW_TIME
        return True


@dataclass(eq=False)
class Unit:
    """An independent unit or structure. Compared by identity.

    A unit that is not on the path has ``visible=False`` and no position;
    there is no off-stage coordinate.
    """

    uid: int
    kind: str = ""
    name: str = ""
    sprite_path: str = ""
    footprint: tuple[int, int] = (1, 1)
    tower_range: Optional[int] = None
    branches: list[FruitBranch] = field(default_factory=list)
    visible: bool = False
    anchor: Optional[Vec2] = None  # fixed position for placed structures
    follower: Optional[PathFollower] = None

    @property
    def position(self) -> Optional[Vec2]:
        if self.follower is not None:
            return self.follower.position
        return self.anchor

    def __repr__(self) -> str:
        return f"Unit({self.uid}, {self.kind!r})"


# ---------------------------------------------------------------------------
# Building types
# ---------------------------------------------------------------------------

class DebugPlantType:
    KEY = "debug_plant"
    NAME = "Debug Roots"
    SPRITE_PATH = "plant_base_test.png"
    TILE_SIZE = (1, 1)

    def construct(self, unit: Unit) -> Unit:
        unit.kind = self.KEY
        unit.name = self.NAME
        unit.sprite_path = self.SPRITE_PATH
        unit.footprint = self.TILE_SIZE
        unit.branches.append(FruitBranch(species=0))
        return unit


class HarvesterType:
    KEY = "harvester"
    NAME = "Harvester"
    SPRITE_PATH = "harvester_test.png"
    TILE_SIZE = (1, 1)

    def __init__(self, tower_range: int = HARVESTER_RANGE):
        self.tower_range = tower_range

    def construct(self, unit: Unit) -> Unit:
        unit.kind = self.KEY
        unit.name = self.NAME
        unit.sprite_path = self.SPRITE_PATH
        unit.footprint = self.TILE_SIZE
        unit.tower_range = self.tower_range
        return unit


BUILDING_REGISTRY: dict[str, type] = {
    DebugPlantType.KEY: DebugPlantType,
    HarvesterType.KEY: HarvesterType,
}


def resolve_building(key: str, params: dict | None = None):
    """Look up a building type by key and instantiate it.

    Raises:
        KeyError: If key is not in the registry.
    """
    if key not in BUILDING_REGISTRY:
        raise KeyError(
            f"Unknown building type: {key!r}. Available: {sorted(BUILDING_REGISTRY)}"
        )
    return BUILDING_REGISTRY[key](**(params or {}))


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class UnitFactory:
    """Hands out units with increasing ids."""

    def __init__(self, first_uid: int = 0):
        self._next_uid = first_uid

    def create(self, kind: str) -> Unit:
        unit = Unit(uid=self._next_uid)
        self._next_uid += 1
        return resolve_building(kind).construct(unit)


def create_units(count: int, kind: str = DebugPlantType.KEY,
                 factory: UnitFactory | None = None) -> list[Unit]:
    """Build *count* hidden units of *kind* for the initial pending pool."""
    factory = factory or UnitFactory()
    return [factory.create(kind) for _ in range(count)]


def place_building(
    level: Level, kind: str, pos: Vec2, factory: UnitFactory | None = None,
) -> Optional[Unit]:
    """Place a visible structure on the tile under *pos*.

    Returns None when *pos* is off the map.
    """
    center = level.snap_to_tile_center(pos)
    if center is None:
        return None
    unit = (factory or UnitFactory()).create(kind)
    unit.anchor = center
    unit.visible = True
    return unit


def harvest_targets(harvester: Unit, units: Iterable[Unit]) -> list[Unit]:
    """Visible units within the harvester's range, nearest first."""
    if harvester.tower_range is None or harvester.position is None:
        return []
    hx, hy = harvester.position
    found: list[tuple[float, Unit]] = []
    for unit in units:
        if unit is harvester or not unit.visible:
            continue
        pos = unit.position
        if pos is None:
            continue
        dist = math.hypot(pos[0] - hx, pos[1] - hy)
        if dist <= harvester.tower_range:
            found.append((dist, unit))
    found.sort(key=lambda pair: pair[0])
    return [u for _, u in found]
