"""fruitstar/level.py — Level assembly and the load cycle.

A Level bundles the grid, every tile, the path and the placement transform.
assemble_level either returns a complete Level or raises; nothing partial is
ever published. LevelLoader holds the "current" level and the loading marker
for a pending request.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from fruitstar.constants import LUMINANCE_THRESHOLD, TILE_SIZE
from fruitstar.errors import LevelLoadError
from fruitstar.grid import Cell, Grid, ImageSource, Tile, build_grid, to_luminance
from fruitstar.pathfinder import Path, find_path

logger = logging.getLogger(__name__)

Vec2 = tuple[float, float]


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Placement:
    """Cell → world mapping: fixed tile size plus a world-space origin."""

    tile_size: float = TILE_SIZE
    origin: Vec2 = (0.0, 0.0)

    @classmethod
    def centered(cls, width: int, height: int, tile_size: float = TILE_SIZE) -> Placement:
        """Placement that puts the centre of a width × height map at (0, 0)."""
        return cls(tile_size=tile_size,
                   origin=(-width * tile_size / 2, -height * tile_size / 2))

    def local_center(self, cell: Cell) -> Vec2:
        """Cell centre relative to the map origin."""
        x, y = cell
        return ((x + 0.5) * self.tile_size, (y + 0.5) * self.tile_size)

    def center_in_world(self, cell: Cell) -> Vec2:
        lx, ly = self.local_center(cell)
        return (self.origin[0] + lx, self.origin[1] + ly)

    def world_to_cell(self, pos: Vec2) -> Cell:
        """Cell containing *pos* (unbounded; callers check the map size)."""
        return (
            math.floor((pos[0] - self.origin[0]) / self.tile_size),
            math.floor((pos[1] - self.origin[1]) / self.tile_size),
        )

    def tile_center_to_corner(self) -> Vec2:
        """Offset from a tile centre to its top-left corner."""
        half = self.tile_size / 2
        return (-half, -half)


# ---------------------------------------------------------------------------
# Level
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Level:
    """The current play-through's grid, tiles, path and placement."""

    generation: int
    grid: Grid
    tiles: tuple[Tile, ...] = field(repr=False)
    path: Path
    placement: Placement

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    @property
    def start(self) -> Cell:
        return self.path[0]

    @property
    def end(self) -> Cell:
        return self.path[-1]

    def tile_at(self, x: int, y: int) -> Optional[Tile]:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        return self.tiles[y * self.width + x]

    def is_passable(self, cell: Cell) -> bool:
        return self.grid.has_vertex(cell)

    def cell_center(self, cell: Cell) -> Vec2:
        return self.placement.center_in_world(cell)

    def path_centers(self) -> list[Vec2]:
        """World centres of every path cell, in path order."""
        return [self.cell_center(c) for c in self.path]

    def world_to_cell(self, pos: Vec2) -> Optional[Cell]:
        cell = self.placement.world_to_cell(pos)
        return cell if self.grid.in_bounds(cell) else None

    def snap_to_tile_center(self, pos: Vec2) -> Optional[Vec2]:
        """World centre of the tile under *pos*, or None off the map."""
        cell = self.world_to_cell(pos)
        if cell is None:
            return None
        return self.cell_center(cell)


def assemble_level(
    source: ImageSource,
    *,
    generation: int = 0,
    tile_size: float = TILE_SIZE,
    threshold: int = LUMINANCE_THRESHOLD,
    diagonal: bool = False,
    centered: bool = False,
) -> Level:
    """Build a complete Level from an image source.

    Raises:
        EmptyImageError: The image has no pixels.
        NoStart: No walkable cell on the rightmost column.
        NoPathToEnd: The start cannot reach the x == 0 edge.
    """
    luma = to_luminance(source)
    built = build_grid(luma, threshold, level=generation, diagonal=diagonal)
    path = find_path(built.grid)

    if centered:
        placement = Placement.centered(built.grid.width, built.grid.height, tile_size)
    else:
        placement = Placement(tile_size=tile_size)

    return Level(
        generation=generation,
        grid=built.grid,
        tiles=built.tiles,
        path=path,
        placement=placement,
    )


# ---------------------------------------------------------------------------
# Load cycle
# ---------------------------------------------------------------------------

@dataclass
class LoadingLevel:
    """Marker for a requested but not yet assembled level."""

    source: ImageSource


class LevelLoader:
    """Owns the current Level and the pending load request.

    At most one level is current. request() installs a loading marker;
    poll() assembles and publishes it in one step, or clears the marker and
    re-raises the load error.
    """

    def __init__(
        self,
        *,
        tile_size: float = TILE_SIZE,
        threshold: int = LUMINANCE_THRESHOLD,
        diagonal: bool = False,
        centered: bool = False,
    ):
        self.tile_size = tile_size
        self.threshold = threshold
        self.diagonal = diagonal
        self.centered = centered
        self.current: Optional[Level] = None
        self.loading: Optional[LoadingLevel] = None
        self._generation = 0

    @property
    def is_loading(self) -> bool:
        return self.loading is not None

    def request(self, source: ImageSource) -> LoadingLevel:
        """Start a new load; replaces any request still pending."""
        self.loading = LoadingLevel(source)
        logger.debug("level load requested: %r", _describe(source))
        return self.loading

    def poll(self) -> Optional[Level]:
        """Assemble the pending level, if any, and make it current."""
        if self.loading is None:
            return None
        return self._publish(self.loading)

    def load(self, source: ImageSource) -> Level:
        """request() and publish in one call."""
        return self._publish(self.request(source))

    def _publish(self, loading: LoadingLevel) -> Level:
        source = loading.source
        generation = self._generation + 1
        try:
            level = assemble_level(
                source,
                generation=generation,
                tile_size=self.tile_size,
                threshold=self.threshold,
                diagonal=self.diagonal,
                centered=self.centered,
            )
        except LevelLoadError as exc:
            self.loading = None
            logger.error("level load failed for %r: %s", _describe(source), exc)
            raise

        self._generation = generation
        self.current = level
        self.loading = None
        logger.info(
            "level %d loaded: %dx%d, path of %d cells from %s to %s",
            level.generation, level.width, level.height, len(level.path),
            level.start, level.end,
        )
        return level


def _describe(source: ImageSource) -> str:
    shape = getattr(source, "shape", None)
    if shape is not None:
        return f"array{tuple(shape)}"
    size = getattr(source, "size", None)
    if isinstance(size, tuple):
        return f"image{size}"
    return str(source)
