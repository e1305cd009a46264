"""Tests for fruitstar/scheduler.py — timers, wave phases, release order."""

from __future__ import annotations

import pytest

from fruitstar.grids import build_corridor, from_cells
from fruitstar.invariants import check_unit_pool
from fruitstar.level import assemble_level
from fruitstar.scheduler import (
    PlayState,
    ReleaseOrder,
    Timer,
    UnitCompletedEvent,
    UnitOrphanedEvent,
    UnitReleasedEvent,
    WaveClearedEvent,
    WaveScheduler,
    WaveStartedEvent,
)
from fruitstar.units import create_units


def _level(width: int = 16, generation: int = 1):
    return assemble_level(build_corridor(width, 3), generation=generation)


def _seeded(count: int = 3, level=None, **kwargs):
    sched = WaveScheduler(**kwargs)
    units = create_units(count)
    sched.seed(units, level)
    return sched, units


def _released(events):
    return [e.unit for e in events if isinstance(e, UnitReleasedEvent)]


# ---------------------------------------------------------------------------
# Timer
# ---------------------------------------------------------------------------

class TestTimer:
    def test_fires_once(self):
        t = Timer(2.0)
        assert t.tick(1.0) is False
        assert t.tick(1.0) is True
        assert t.tick(1.0) is False
        assert t.finished

    def test_elapsed_clamped(self):
        t = Timer(1.0)
        t.tick(5.0)
        assert t.elapsed == 1.0
        assert t.remaining == 0.0

    def test_reset(self):
        t = Timer(1.0)
        t.tick(1.0)
        t.reset()
        assert not t.finished
        assert t.remaining == 1.0


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    @pytest.mark.parametrize("kwargs, name", [
        ({"intermission": 0.0}, "intermission"),
        ({"intermission": -1.0}, "intermission"),
        ({"release_interval": 0.0}, "release_interval"),
        ({"speed": -0.1}, "speed"),
    ])
    def test_rejects_degenerate_timings(self, kwargs, name):
        with pytest.raises(ValueError, match=name):
            WaveScheduler(**kwargs)

    def test_zero_speed_allowed(self):
        assert WaveScheduler(speed=0.0).speed == 0.0


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------

class TestPhases:
    def test_starts_in_setup(self):
        sched = WaveScheduler()
        assert sched.state == PlayState.SETUP
        assert sched.update(1.0, None) == []

    def test_seed_enters_intermission(self):
        sched, units = _seeded(3)
        assert sched.state == PlayState.INTERMISSION
        assert sched.pending == units
        assert all(not u.visible for u in units)

    def test_intermission_transitions_once(self):
        level = _level()
        sched, _ = _seeded(3, level, intermission=3.0, release_interval=1.0, speed=0.5)
        started = []
        for _ in range(3):
            started += [e for e in sched.update(1.0, level) if isinstance(e, WaveStartedEvent)]
        assert sched.state == PlayState.WAVE
        assert started == [WaveStartedEvent(wave=1, size=3)]

        events = sched.update(1.0, level)
        assert not any(isinstance(e, WaveStartedEvent) for e in events)
        assert sched.state == PlayState.WAVE
        assert sched.wave == 1

    def test_intermission_remaining(self):
        sched, _ = _seeded(1, intermission=3.0)
        sched.update(1.25, None)
        assert sched.intermission_remaining == pytest.approx(1.75)

    def test_wave_end_returns_to_intermission(self):
        level = _level(width=3)
        sched, _ = _seeded(2, level, intermission=1.0, release_interval=1.0, speed=10.0)
        cleared = []
        for _ in range(10):
            cleared += [e for e in sched.update(1.0, level) if isinstance(e, WaveClearedEvent)]
            if cleared:
                break
        assert cleared == [WaveClearedEvent(wave=1)]
        assert sched.state == PlayState.INTERMISSION
        assert sched.intermission.elapsed == 0.0
        assert len(sched.pending) == 2

    def test_second_wave_starts(self):
        level = _level(width=3)
        sched, _ = _seeded(2, level, intermission=1.0, release_interval=1.0, speed=10.0)
        waves = []
        for _ in range(20):
            waves += [e.wave for e in sched.update(1.0, level)
                      if isinstance(e, WaveStartedEvent)]
        assert waves[:2] == [1, 2]


# ---------------------------------------------------------------------------
# Release order
# ---------------------------------------------------------------------------

class TestReleaseOrder:
    def test_lifo_reverses_pending(self):
        level = _level()
        sched, (a, b, c) = _seeded(3, level, intermission=3.0, release_interval=1.0,
                                   speed=0.5)
        for _ in range(3):
            sched.update(1.0, level)
        assert list(sched.release_order) == [c, b, a]

        released = []
        for expected in (c, b, a):
            step = _released(sched.update(1.0, level))
            assert step == [expected]
            released += step
        assert released == [c, b, a]

    def test_fifo_keeps_pending_order(self):
        level = _level()
        sched, (a, b, c) = _seeded(3, level, intermission=3.0, release_interval=1.0,
                                   speed=0.5, release_order=ReleaseOrder.FIFO)
        for _ in range(3):
            sched.update(1.0, level)
        assert list(sched.release_order) == [a, b, c]
        released = []
        for _ in range(3):
            released += _released(sched.update(1.0, level))
        assert released == [a, b, c]

    def test_one_release_per_interval(self):
        level = _level()
        sched, _ = _seeded(3, level, intermission=1.0, release_interval=1.0, speed=0.1)
        sched.update(1.0, level)
        counts = [len(_released(sched.update(0.5, level))) for _ in range(6)]
        assert counts == [0, 1, 0, 1, 0, 1]

    def test_released_unit_visible_with_follower(self):
        level = _level()
        sched, _ = _seeded(1, level, intermission=1.0, release_interval=1.0, speed=0.5)
        sched.update(1.0, level)
        (unit,) = _released(sched.update(1.0, level))
        assert unit.visible
        assert unit.follower is not None
        assert unit.follower.level == level.generation
        assert unit.position == level.cell_center(level.start)


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------

class TestCompletion:
    def test_completed_units_requeued_in_completion_order(self):
        level = assemble_level(build_corridor(5, 3), generation=1)
        sched, (a, b, c) = _seeded(3, level, intermission=3.0, release_interval=1.0,
                                   speed=4.0, release_order=ReleaseOrder.FIFO)
        completed = []
        for _ in range(7):
            completed += [e.unit for e in sched.update(1.0, level)
                          if isinstance(e, UnitCompletedEvent)]
        assert completed == [a, b, c]
        assert sched.pending == [a, b, c]
        assert sched.state == PlayState.INTERMISSION
        for unit in (a, b, c):
            assert not unit.visible
            assert unit.follower is None
            assert unit.position is None

    def test_single_cell_path_completes_on_release_tick(self):
        level = assemble_level(from_cells(1, 2, [(0, 0)]), generation=1)
        sched, (unit,) = _seeded(1, level, intermission=1.0, release_interval=1.0)
        sched.update(1.0, level)
        events = sched.update(1.0, level)
        assert [type(e) for e in events] == [
            UnitReleasedEvent, UnitCompletedEvent, WaveClearedEvent,
        ]
        assert sched.pending == [unit]

    def test_units_on_old_level_recalled(self):
        level = _level()
        sched, (a, b) = _seeded(2, level, intermission=1.0, release_interval=1.0,
                                speed=1.0)
        sched.update(1.0, level)
        assert _released(sched.update(1.0, level)) == [b]

        new_level = _level(width=3, generation=2)
        events = sched.update(1.0, new_level)
        assert UnitOrphanedEvent(b) in events
        assert sched.pending == [b]
        assert not b.visible
        assert b.follower is None
        assert _released(events) == [a]
        assert a.follower.level == 2
        assert check_unit_pool(sched, [a, b]) == []

    def test_wave_ends_after_level_swap(self):
        level = _level()
        sched, units = _seeded(3, level, intermission=1.0, release_interval=1.0,
                               speed=1.0)
        sched.update(1.0, level)
        sched.update(1.0, level)
        sched.update(1.0, level)
        assert len(sched.active) == 2

        new_level = _level(width=3, generation=2)
        cleared = []
        for _ in range(20):
            cleared += [e for e in sched.update(1.0, new_level)
                        if isinstance(e, WaveClearedEvent)]
            if cleared:
                break
        assert cleared == [WaveClearedEvent(wave=1)]
        assert sched.state == PlayState.INTERMISSION
        assert sorted(u.uid for u in sched.pending) == [u.uid for u in units]


# ---------------------------------------------------------------------------
# Pause
# ---------------------------------------------------------------------------

class TestPause:
    def test_pause_freezes_intermission(self):
        sched, _ = _seeded(1, intermission=3.0)
        sched.pause()
        assert sched.update(5.0, None) == []
        assert sched.intermission.elapsed == 0.0
        assert sched.state == PlayState.INTERMISSION

    def test_pause_freezes_followers(self):
        level = _level()
        sched, _ = _seeded(1, level, intermission=1.0, release_interval=1.0, speed=1.0)
        sched.update(1.0, level)
        (unit,) = _released(sched.update(1.0, level))
        sched.pause()
        sched.update(1.0, level)
        assert unit.follower.distance == 0.0
        sched.resume()
        sched.update(1.0, level)
        assert unit.follower.distance == 1.0


# ---------------------------------------------------------------------------
# Reset
# ---------------------------------------------------------------------------

class TestReset:
    def test_reset_returns_everything_to_pending(self):
        level = _level()
        sched, units = _seeded(3, level, intermission=1.0, release_interval=1.0,
                               speed=0.5)
        sched.update(1.0, level)
        sched.update(1.0, level)
        assert len(sched.active) == 1
        sched.reset()
        assert sched.state == PlayState.SETUP
        assert not sched.active
        assert not sched.release_order
        assert sorted(u.uid for u in sched.pending) == sorted(u.uid for u in units)
        assert all(not u.visible and u.follower is None for u in units)
        assert check_unit_pool(sched, units) == []

    def test_reset_order_release_then_active(self):
        level = _level()
        sched, (a, b, c) = _seeded(3, level, intermission=1.0, release_interval=1.0,
                                   speed=0.5)
        sched.update(1.0, level)
        sched.update(1.0, level)  # releases c
        sched.reset()
        assert sched.pending == [b, a, c]


# ---------------------------------------------------------------------------
# Unit pool
# ---------------------------------------------------------------------------

class TestUnitPool:
    @pytest.mark.parametrize("order", list(ReleaseOrder))
    def test_pool_partitioned_every_tick(self, order):
        level = _level(width=6)
        sched, units = _seeded(5, level, intermission=0.5, release_interval=0.25,
                               speed=3.0, release_order=order)
        for tick in range(400):
            sched.update(0.1, level)
            assert check_unit_pool(sched, units, tick) == []
        assert sched.wave >= 2
