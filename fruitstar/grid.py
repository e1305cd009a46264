"""fruitstar/grid.py — Image → walkability grid and tile records.

Converts a luminance buffer into a Grid (set of walkable cells) and one Tile
per cell. Blocked tiles are kept: the renderer and building placement need
them even though the path search ignores them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from fruitstar.constants import LUMINANCE_THRESHOLD, TILE_WATER
from fruitstar.errors import EmptyImageError

# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

Cell = tuple[int, int]
"""Grid coordinate (x, y); x grows right, y grows down."""

ImageSource = Union[np.ndarray, Image.Image, str, Path]

# ITU-R 601-2 luma, the same weights Pillow uses for mode "L".
_LUMA_WEIGHTS = np.array([299, 587, 114], dtype=np.uint32)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Tile:
    """One cell's renderable/passability record. Never mutated."""

    x: int
    y: int
    passable: bool
    level: int = 0  # generation of the owning level
    water: int = 0  # starting water; TILE_WATER on passable tiles

    @property
    def cell(self) -> Cell:
        return (self.x, self.y)


@dataclass(frozen=True)
class Grid:
    """Boolean walkability map over a width × height cell space."""

    width: int
    height: int
    walkable: frozenset[Cell]
    diagonal: bool = False

    def has_vertex(self, cell: Cell) -> bool:
        return cell in self.walkable

    def in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.width and 0 <= y < self.height

    def neighbours(self, cell: Cell) -> list[Cell]:
        """Walkable neighbours of *cell* in a fixed enumeration order.

        Order: left, right, up (y-1), down (y+1). In diagonal mode each
        horizontal neighbour is followed by its up/down diagonals. A cell
        that is not itself walkable has no neighbours.
        """
        if cell not in self.walkable:
            return []
        x, y = cell
        candidates: list[Cell] = []
        if x > 0:
            candidates.append((x - 1, y))
            if self.diagonal:
                if y > 0:
                    candidates.append((x - 1, y - 1))
                if y + 1 < self.height:
                    candidates.append((x - 1, y + 1))
        if x + 1 < self.width:
            candidates.append((x + 1, y))
            if self.diagonal:
                if y > 0:
                    candidates.append((x + 1, y - 1))
                if y + 1 < self.height:
                    candidates.append((x + 1, y + 1))
        if y > 0:
            candidates.append((x, y - 1))
        if y + 1 < self.height:
            candidates.append((x, y + 1))
        return [c for c in candidates if c in self.walkable]


@dataclass(frozen=True)
class GridBuild:
    """Output of build_grid: the grid plus every tile, row-major."""

    grid: Grid
    tiles: tuple[Tile, ...] = field(repr=False)


# ---------------------------------------------------------------------------
# Image input
# ---------------------------------------------------------------------------

def to_luminance(image: ImageSource) -> np.ndarray:
    """Convert an image source to a 2D uint8 luminance array indexed [y, x].

    Accepts a 2D array (used as-is), an RGB/RGBA array, a Pillow image, or a
    file path.

    Raises:
        EmptyImageError: If the image has zero width or height.
    """
    if isinstance(image, (str, Path)):
        with Image.open(image) as img:
            return to_luminance(img.convert("L"))
    if isinstance(image, Image.Image):
        if image.mode != "L":
            image = image.convert("L")
        image = np.asarray(image)

    arr = np.asarray(image)
    if arr.ndim == 3:
        arr = _rgb_to_luma(arr)
    elif arr.ndim != 2:
        raise ValueError(f"Expected a 2D or 3D image array, got shape {arr.shape!r}")

    if arr.size == 0:
        raise EmptyImageError(tuple(arr.shape))
    return np.clip(arr, 0, 255).astype(np.uint8, copy=False)


def load_luminance(path: str | Path) -> np.ndarray:
    """Read an image file from disk as a luminance array."""
    return to_luminance(Path(path))


def _rgb_to_luma(arr: np.ndarray) -> np.ndarray:
    if arr.shape[2] < 3:
        # grey + alpha
        return arr[:, :, 0]
    rgb = arr[:, :, :3].astype(np.uint32)
    return ((rgb @ _LUMA_WEIGHTS + 500) // 1000).astype(np.uint8)


# ---------------------------------------------------------------------------
# Grid construction
# ---------------------------------------------------------------------------

def walkable_mask(luma: np.ndarray, threshold: int = LUMINANCE_THRESHOLD) -> np.ndarray:
    """Boolean [y, x] mask of cells at or above *threshold*."""
    return np.asarray(luma) >= threshold


def build_grid(
    luma: np.ndarray,
    threshold: int = LUMINANCE_THRESHOLD,
    *,
    level: int = 0,
    diagonal: bool = False,
) -> GridBuild:
    """Classify every cell and emit the grid plus one tile per cell.

    Args:
        luma: 2D luminance array indexed [y, x]; must be non-empty.
        threshold: Cells with luminance >= threshold are walkable.
        level: Generation number stamped on each tile.
        diagonal: Whether the grid treats diagonal cells as neighbours.
    """
    luma = to_luminance(luma)
    height, width = luma.shape
    mask = walkable_mask(luma, threshold)

    walkable: set[Cell] = set()
    tiles: list[Tile] = []
    for y in range(height):
        for x in range(width):
            passable = bool(mask[y, x])
            if passable:
                walkable.add((x, y))
            tiles.append(Tile(x=x, y=y, passable=passable, level=level,
                              water=TILE_WATER if passable else 0))

    grid = Grid(width=width, height=height, walkable=frozenset(walkable),
                diagonal=diagonal)
    return GridBuild(grid=grid, tiles=tuple(tiles))
