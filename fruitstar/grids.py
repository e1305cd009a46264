"""Synthetic level images for tests, scenarios and the demo.

Each builder returns a 2D uint8 luminance array indexed [y, x]: WALKABLE
cells are white, BLOCKED cells black. No Pyxel imports. No image files on
disk.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

WALKABLE = 255
BLOCKED = 0


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _blank(width: int, height: int) -> np.ndarray:
    if width < 1 or height < 1:
        raise ValueError(f"Grid must be at least 1x1, got {width}x{height}")
    return np.full((height, width), BLOCKED, dtype=np.uint8)


def from_cells(width: int, height: int, cells) -> np.ndarray:
    """Image whose walkable cells are exactly *cells* ((x, y) pairs)."""
    img = _blank(width, height)
    for x, y in cells:
        img[y, x] = WALKABLE
    return img


def from_rows(rows: list[str]) -> np.ndarray:
    """Image from ASCII rows: '.' or ' ' is blocked, anything else walkable."""
    height = len(rows)
    width = max((len(r) for r in rows), default=0)
    img = _blank(width, height)
    for y, row in enumerate(rows):
        for x, ch in enumerate(row):
            if ch not in ". ":
                img[y, x] = WALKABLE
    return img


# ---------------------------------------------------------------------------
# Public builders
# ---------------------------------------------------------------------------

def build_corridor(width: int, height: int, row: int = 0) -> np.ndarray:
    """A single straight corridor along *row*, spanning the full width."""
    img = _blank(width, height)
    img[row, :] = WALKABLE
    return img


def build_open(width: int, height: int) -> np.ndarray:
    """Every cell walkable."""
    return np.full((height, width), WALKABLE, dtype=np.uint8)


def build_serpentine(width: int, height: int) -> np.ndarray:
    """A winding single-file track from the right edge to the left edge.

    Lanes run along the odd rows and are joined by one-cell connectors that
    alternate between the left and right ends. The first lane touches the
    right edge (the start), the last lane touches the left edge (the goal).
    Needs width >= 4 and height >= 3.
    """
    if width < 4 or height < 3:
        raise ValueError(f"Serpentine needs at least 4x3, got {width}x{height}")
    img = _blank(width, height)
    lanes = list(range(1, height - 1, 2))
    for i, y in enumerate(lanes):
        img[y, 1:width - 1] = WALKABLE
        if i + 1 < len(lanes):
            cx = 1 if i % 2 == 0 else width - 2
            img[y + 1, cx] = WALKABLE
    img[lanes[0], width - 1] = WALKABLE
    img[lanes[-1], 0] = WALKABLE
    return img


def build_no_start(width: int, height: int) -> np.ndarray:
    """Open field except the rightmost column, which is fully blocked."""
    img = build_open(width, height)
    img[:, width - 1] = BLOCKED
    return img


def build_dead_end(width: int, height: int) -> np.ndarray:
    """Open field cut off from the left edge by a blocked wall at x == 1."""
    if width < 3:
        raise ValueError(f"Dead end needs width >= 3, got {width}")
    img = build_open(width, height)
    img[:, 1] = BLOCKED
    return img


GRID_BUILDERS: dict[str, Callable[[], np.ndarray]] = {
    "corridor": lambda: build_corridor(16, 12, row=5),
    "serpentine": lambda: build_serpentine(16, 12),
    "open": lambda: build_open(16, 12),
    "no_start": lambda: build_no_start(16, 12),
    "dead_end": lambda: build_dead_end(16, 12),
}


def builtin_level(name: str) -> np.ndarray:
    """Luminance image for a named built-in level.

    Raises:
        KeyError: If name is not a known builder.
    """
    if name not in GRID_BUILDERS:
        raise KeyError(f"Unknown built-in level: {name!r}. Available: {sorted(GRID_BUILDERS)}")
    return GRID_BUILDERS[name]()
