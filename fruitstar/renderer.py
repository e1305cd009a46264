"""fruitstar/renderer.py — Pyxel drawing for tiles, path, units and HUD.

All visuals are Pyxel primitives; sprite paths on units are not loaded.
Reads level and scheduler state, never mutates it.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Iterable

import pyxel

from fruitstar.constants import HUD_HEIGHT, SCREEN_WIDTH
from fruitstar.scheduler import PlayState

if TYPE_CHECKING:
    from fruitstar.level import Level
    from fruitstar.scheduler import WaveScheduler
    from fruitstar.units import Unit

# ---------------------------------------------------------------------------
# Palette
# ---------------------------------------------------------------------------

_PALETTE = {
    0: 0x101418,   # Background
    1: 0x3B2A1E,   # Blocked soil
    2: 0x5C8A3A,   # Walkable grass
    3: 0x7FB552,   # Walkable highlight
    4: 0xD05050,   # Passability overlay: blocked
    5: 0x50B0D0,   # Passability overlay: walkable
    8: 0xE0A020,   # Path debug line
    9: 0xC03070,   # Wave unit (fruit)
    10: 0x40C040,  # Wave unit (leaves)
    12: 0x8080FF,  # Harvester
    7: 0xFFFFFF,   # UI white
    11: 0xF0D000,  # UI accent
}


class OverlayMode(Enum):
    NORMAL = "normal"
    PASSABILITY = "passability"


def init_palette() -> None:
    """Set palette colors. Call after pyxel.init()."""
    for slot, color in _PALETTE.items():
        pyxel.colors[slot] = color


# ---------------------------------------------------------------------------
# Camera
# ---------------------------------------------------------------------------

def camera_offset(level: Level) -> tuple[int, int]:
    """pyxel.camera() arguments that put the map's corner under the HUD."""
    ox, oy = level.placement.origin
    return int(ox), int(oy) - HUD_HEIGHT


def screen_to_world(level: Level, sx: int, sy: int) -> tuple[float, float]:
    """Inverse of the camera transform, for mouse input."""
    cx, cy = camera_offset(level)
    return float(sx + cx), float(sy + cy)


# ---------------------------------------------------------------------------
# Level
# ---------------------------------------------------------------------------

def draw_tiles(level: Level, overlay: OverlayMode = OverlayMode.NORMAL) -> None:
    """Draw every tile at its placement; blocked tiles included."""
    size = int(level.placement.tile_size)
    ox, oy = level.placement.origin
    for tile in level.tiles:
        wx = int(ox + tile.x * size)
        wy = int(oy + tile.y * size)
        if overlay == OverlayMode.PASSABILITY:
            pyxel.rect(wx, wy, size, size, 5 if tile.passable else 4)
        elif tile.passable:
            pyxel.rect(wx, wy, size, size, 2)
            pyxel.pset(wx + size // 4, wy + size // 4, 3)
        else:
            pyxel.rect(wx, wy, size, size, 1)


def draw_path(level: Level) -> None:
    """Debug line through the centres of the path cells."""
    centers = level.path_centers()
    for (x1, y1), (x2, y2) in zip(centers, centers[1:]):
        pyxel.line(int(x1), int(y1), int(x2), int(y2), 8)
    if centers:
        sx, sy = centers[0]
        ex, ey = centers[-1]
        pyxel.circb(int(sx), int(sy), 3, 11)
        pyxel.circb(int(ex), int(ey), 3, 7)


# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------

def draw_units(units: Iterable[Unit]) -> None:
    """Draw every visible unit with a position."""
    for unit in units:
        if not unit.visible or unit.position is None:
            continue
        x, y = int(unit.position[0]), int(unit.position[1])
        if unit.tower_range is not None:
            _draw_harvester(x, y, unit.tower_range)
        else:
            _draw_plant(x, y, any(b.fruited for b in unit.branches))


def _draw_plant(x: int, y: int, fruited: bool) -> None:
    pyxel.circ(x, y, 4, 10)
    if fruited:
        pyxel.circ(x + 1, y - 1, 2, 9)


def _draw_harvester(x: int, y: int, tower_range: int) -> None:
    pyxel.rect(x - 4, y - 4, 8, 8, 12)
    pyxel.circb(x, y, tower_range, 12)


# ---------------------------------------------------------------------------
# HUD
# ---------------------------------------------------------------------------

def phase_label(scheduler: WaveScheduler) -> str:
    """HUD text for the current phase, e.g. ``NEXT WAVE IN 2.4``."""
    if scheduler.paused:
        return "PAUSED"
    if scheduler.state == PlayState.SETUP:
        return "LOADING"
    if scheduler.state == PlayState.INTERMISSION:
        return f"NEXT WAVE IN {scheduler.intermission_remaining:.1f}"
    return f"WAVE {scheduler.wave}"


def draw_hud(scheduler: WaveScheduler, score: int = 0) -> None:
    """Draw HUD overlay in screen space. Call after pyxel.camera() reset."""
    pyxel.text(4, 4, phase_label(scheduler), 11)
    queued = len(scheduler.pending) + len(scheduler.release_order)
    pyxel.text(SCREEN_WIDTH // 2, 4, f"ACTIVE:{len(scheduler.active)} QUEUED:{queued}", 7)
    pyxel.text(SCREEN_WIDTH - 44, 4, f"SCORE:{score}", 7)


def draw_message(text: str) -> None:
    """Centered one-line message, for load failures."""
    pyxel.text(max(0, SCREEN_WIDTH // 2 - len(text) * 2), 96, text, 4)
