"""Tests for fruitstar/level.py — placement, level assembly, load cycle."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from fruitstar.errors import EmptyImageError, LevelLoadError, NoPathToEnd, NoStart
from fruitstar.grids import build_corridor, build_dead_end, build_no_start, build_serpentine
from fruitstar.level import LevelLoader, LoadingLevel, Placement, assemble_level


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

class TestPlacement:
    def test_center_with_default_origin(self):
        p = Placement(tile_size=16)
        assert p.center_in_world((0, 0)) == (8.0, 8.0)
        assert p.center_in_world((3, 2)) == (56.0, 40.0)

    def test_center_with_origin(self):
        p = Placement(tile_size=10, origin=(100.0, -20.0))
        assert p.center_in_world((1, 1)) == (115.0, -5.0)

    def test_centered_puts_map_middle_at_origin(self):
        p = Placement.centered(4, 2, tile_size=16)
        assert p.origin == (-32.0, -16.0)
        assert p.center_in_world((0, 0)) == (-24.0, -8.0)
        assert p.center_in_world((3, 1)) == (24.0, 8.0)

    def test_world_to_cell_round_trips_centres(self):
        p = Placement(tile_size=16, origin=(-40.0, 12.0))
        for cell in [(0, 0), (5, 3), (2, 7)]:
            assert p.world_to_cell(p.center_in_world(cell)) == cell

    def test_world_to_cell_floors_negative(self):
        p = Placement(tile_size=16)
        assert p.world_to_cell((-1.0, 0.0)) == (-1, 0)

    def test_tile_center_to_corner(self):
        assert Placement(tile_size=16).tile_center_to_corner() == (-8.0, -8.0)


# ---------------------------------------------------------------------------
# assemble_level
# ---------------------------------------------------------------------------

class TestAssembleLevel:
    def test_complete_level(self):
        level = assemble_level(build_corridor(6, 4, row=2), generation=3)
        assert level.generation == 3
        assert (level.width, level.height) == (6, 4)
        assert len(level.tiles) == 24
        assert level.start == (5, 2)
        assert level.end == (0, 2)
        assert all(t.level == 3 for t in level.tiles)

    def test_tile_at_matches_coordinates(self):
        level = assemble_level(build_serpentine(8, 5))
        tile = level.tile_at(5, 3)
        assert tile is not None
        assert tile.cell == (5, 3)
        assert tile.passable == level.is_passable((5, 3))

    def test_tile_at_out_of_bounds(self):
        level = assemble_level(build_corridor(4, 3))
        assert level.tile_at(4, 0) is None
        assert level.tile_at(-1, 0) is None

    def test_path_centers_follow_placement(self):
        level = assemble_level(build_corridor(3, 2), tile_size=10)
        assert level.path_centers() == [(25.0, 5.0), (15.0, 5.0), (5.0, 5.0)]

    def test_centered_option(self):
        level = assemble_level(build_corridor(4, 2), tile_size=16, centered=True)
        assert level.placement.origin == (-32.0, -16.0)

    def test_threshold_option(self):
        img = np.full((3, 4), 100, dtype=np.uint8)
        with pytest.raises(NoStart):
            assemble_level(img, threshold=101)

    def test_failures_propagate(self):
        with pytest.raises(NoStart):
            assemble_level(build_no_start(5, 4))
        with pytest.raises(NoPathToEnd):
            assemble_level(build_dead_end(5, 4))
        with pytest.raises(EmptyImageError):
            assemble_level(np.zeros((0, 0), dtype=np.uint8))


# ---------------------------------------------------------------------------
# Coordinates
# ---------------------------------------------------------------------------

class TestLevelCoordinates:
    def test_world_to_cell_inside(self):
        level = assemble_level(build_corridor(4, 3))
        assert level.world_to_cell((20.0, 40.0)) == (1, 2)

    def test_world_to_cell_outside(self):
        level = assemble_level(build_corridor(4, 3))
        assert level.world_to_cell((64.0, 0.0)) is None
        assert level.world_to_cell((-0.5, 0.0)) is None

    def test_snap_to_tile_center(self):
        level = assemble_level(build_corridor(4, 3))
        assert level.snap_to_tile_center((17.0, 30.0)) == (24.0, 24.0)

    def test_snap_off_map(self):
        level = assemble_level(build_corridor(4, 3))
        assert level.snap_to_tile_center((100.0, 100.0)) is None


# ---------------------------------------------------------------------------
# LevelLoader
# ---------------------------------------------------------------------------

class TestLevelLoader:
    def test_starts_empty(self):
        loader = LevelLoader()
        assert loader.current is None
        assert not loader.is_loading
        assert loader.poll() is None

    def test_request_sets_marker_only(self):
        loader = LevelLoader()
        marker = loader.request(build_corridor(4, 3))
        assert isinstance(marker, LoadingLevel)
        assert loader.is_loading
        assert loader.current is None

    def test_poll_publishes(self):
        loader = LevelLoader()
        loader.request(build_corridor(4, 3))
        level = loader.poll()
        assert level is not None
        assert loader.current is level
        assert not loader.is_loading

    def test_generation_increments(self):
        loader = LevelLoader()
        first = loader.load(build_corridor(4, 3))
        second = loader.load(build_corridor(5, 3))
        assert second.generation == first.generation + 1

    def test_load_publishes_and_clears_marker(self):
        loader = LevelLoader()
        level = loader.load(build_corridor(4, 3))
        assert loader.current is level
        assert not loader.is_loading
        assert loader.poll() is None

    def test_load_failure_raises_load_error(self):
        loader = LevelLoader()
        good = loader.load(build_corridor(4, 3))
        with pytest.raises(NoStart):
            loader.load(build_no_start(4, 3))
        assert not loader.is_loading
        assert loader.current is good

    def test_failure_clears_marker_and_keeps_current(self):
        loader = LevelLoader()
        good = loader.load(build_corridor(4, 3))
        loader.request(build_no_start(4, 3))
        with pytest.raises(NoStart):
            loader.poll()
        assert not loader.is_loading
        assert loader.current is good

    def test_failure_does_not_consume_generation(self):
        loader = LevelLoader()
        loader.request(build_dead_end(4, 3))
        with pytest.raises(LevelLoadError):
            loader.poll()
        assert loader.load(build_corridor(4, 3)).generation == 1

    def test_failure_logged(self, caplog):
        loader = LevelLoader()
        loader.request(build_no_start(4, 3))
        with caplog.at_level(logging.ERROR, logger="fruitstar.level"):
            with pytest.raises(NoStart):
                loader.poll()
        assert "level load failed" in caplog.text

    def test_success_logged(self, caplog):
        loader = LevelLoader()
        with caplog.at_level(logging.INFO, logger="fruitstar.level"):
            loader.load(build_corridor(4, 3))
        assert "level 1 loaded" in caplog.text

    def test_request_replaces_pending(self):
        loader = LevelLoader()
        loader.request(build_no_start(4, 3))
        loader.request(build_corridor(7, 3))
        assert loader.poll().width == 7

    def test_loader_options_reach_level(self):
        loader = LevelLoader(tile_size=8, centered=True)
        level = loader.load(build_corridor(4, 2))
        assert level.placement.tile_size == 8
        assert level.placement.origin == (-16.0, -8.0)
