"""fruitstar/config.py — Game tunables and their YAML loader.

Defaults come from constants.py. A YAML file may override any subset::

    intermission: 5.0
    release_interval: 0.5
    unit_count: 20
    release_order: fifo
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from fruitstar.constants import (
    FOLLOWER_SPEED,
    INITIAL_UNIT_COUNT,
    INTERMISSION_DURATION,
    LUMINANCE_THRESHOLD,
    RELEASE_INTERVAL,
    TILE_SIZE,
)
from fruitstar.scheduler import ReleaseOrder
from fruitstar.units import BUILDING_REGISTRY, DebugPlantType


@dataclass(frozen=True)
class GameConfig:
    threshold: int = LUMINANCE_THRESHOLD
    tile_size: float = TILE_SIZE
    diagonal: bool = False
    centered: bool = False
    intermission: float = INTERMISSION_DURATION
    release_interval: float = RELEASE_INTERVAL
    unit_count: int = INITIAL_UNIT_COUNT
    unit_speed: float = FOLLOWER_SPEED
    unit_kind: str = DebugPlantType.KEY
    release_order: ReleaseOrder = ReleaseOrder.LIFO

    def with_overrides(self, data: dict | None) -> GameConfig:
        """Return a copy with the keys of *data* applied and validated."""
        if not data:
            return self
        return replace(self, **_parse(data))


_FIELD_NAMES = {f.name for f in fields(GameConfig)}


def _parse(data: dict) -> dict:
    """Validate a raw config mapping and coerce its values."""
    unknown = set(data) - _FIELD_NAMES
    if unknown:
        raise ValueError(f"Unknown config keys: {sorted(unknown)}")

    out: dict = {}
    for key, value in data.items():
        if key == "release_order":
            try:
                out[key] = ReleaseOrder(str(value).lower())
            except ValueError:
                raise ValueError(
                    f"release_order must be one of {[o.value for o in ReleaseOrder]}, "
                    f"got {value!r}"
                ) from None
        elif key in ("diagonal", "centered"):
            out[key] = bool(value)
        elif key == "unit_kind":
            if value not in BUILDING_REGISTRY:
                raise ValueError(f"Unknown unit_kind: {value!r}")
            out[key] = value
        elif key in ("threshold", "unit_count"):
            out[key] = int(value)
        else:
            out[key] = float(value)

    for key in ("tile_size", "intermission", "release_interval"):
        if key in out and out[key] <= 0:
            raise ValueError(f"{key} must be positive, got {out[key]}")
    if out.get("unit_count", 0) < 0:
        raise ValueError(f"unit_count must be >= 0, got {out['unit_count']}")
    if out.get("unit_speed", 0.0) < 0:
        raise ValueError(f"unit_speed must be >= 0, got {out['unit_speed']}")
    if "threshold" in out and not 0 <= out["threshold"] <= 255:
        raise ValueError(f"threshold must be within 0–255, got {out['threshold']}")
    return out


def load_config(path: Path | str) -> GameConfig:
    """Load a GameConfig from a YAML file; missing keys keep their defaults."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return GameConfig().with_overrides(data)
