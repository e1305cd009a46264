"""fruitstar/scenarios/loader — ScenarioDef and YAML loading functions."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from fruitstar.config import GameConfig
from fruitstar.scenarios.conditions import VALID_SUCCESS_TYPES, SuccessCondition


@dataclass
class ScenarioDef:
    name: str
    description: str
    level: str
    max_ticks: int
    dt: float
    success: SuccessCondition
    config: GameConfig = field(default_factory=GameConfig)
    metrics: list[str] = field(default_factory=list)
    base_dir: Path | None = None  # directory of the YAML file, for level paths


def _parse_success(data: dict) -> SuccessCondition:
    """Parse a success condition dict into a SuccessCondition."""
    ctype = data["type"]
    if ctype not in VALID_SUCCESS_TYPES:
        raise ValueError(f"Unknown success condition type: {ctype!r}")
    return SuccessCondition(type=ctype, value=data.get("value"))


def _parse_scenario(data: dict, base_dir: Path | None = None) -> ScenarioDef:
    """Parse a raw YAML dict into a ScenarioDef."""
    dt = float(data.get("dt", 1.0 / 60))
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")
    return ScenarioDef(
        name=data["name"],
        description=data.get("description", ""),
        level=str(data["level"]),
        max_ticks=int(data["max_ticks"]),
        dt=dt,
        success=_parse_success(data["success"]),
        config=GameConfig().with_overrides(data.get("config")),
        metrics=data.get("metrics", []),
        base_dir=base_dir,
    )


def load_scenario(path: Path) -> ScenarioDef:
    """Load a single scenario from a YAML file."""
    path = Path(path)
    with open(path) as f:
        data = yaml.safe_load(f)
    return _parse_scenario(data, base_dir=path.parent)


def load_scenarios(
    paths: list[Path] | None = None,
    run_all: bool = False,
    base: Path = Path("scenarios"),
) -> list[ScenarioDef]:
    """Load multiple scenarios.

    Args:
        paths: Explicit list of YAML file paths to load.
        run_all: If True, glob all ``*.yaml`` files under *base*.
        base: Directory to search when *run_all* is True.
    """
    if paths is None:
        paths = []
    if run_all:
        paths = sorted(base.glob("*.yaml"))
    return [load_scenario(p) for p in paths]
