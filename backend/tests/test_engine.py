"""
Tests for the simulation engine.

Tests cover:
- Tick ordering (supervisor, then kinematics)
- Fail-safe stops on brain faults
- Frame delta capping
- World regeneration and pause
- The asyncio loop
"""

import asyncio

import pytest

from mowbot.core.engine import SimulationEngine, get_engine
from mowbot.core.supervisor import ExecutionState
from mowbot.core.world import GeneratedWorld


DRIVE = """
def step(api, dt):
    api.robot.set_speed(2.0)
"""

CRASH = """
def step(api, dt):
    api.robot.set_speed(5.0)
    raise RuntimeError("boom")
"""


@pytest.fixture
def engine(flat_world):
    """Engine on a flat, obstacle-free world."""
    return SimulationEngine(world=flat_world)


class TestTick:
    """Single ticks driven directly."""

    def test_tick_without_brain(self, engine):
        result = engine.tick()
        assert result.ran is False
        assert engine.tick_count == 1
        assert engine.sim_time == pytest.approx(1 / 60)
        assert engine.robot.z == 0.0

    def test_brain_drives_robot(self, engine):
        engine.supervisor.deploy(DRIVE)
        for _ in range(10):
            engine.tick(0.1)
        assert engine.robot.z == pytest.approx(2.0)
        assert engine.supervisor.metrics.distance_travelled == pytest.approx(2.0)

    def test_fault_stops_robot(self, engine):
        engine.supervisor.deploy(CRASH)
        result = engine.tick(0.1)

        assert result.fault is not None
        assert engine.robot.z == 0.0
        assert engine.supervisor.state == ExecutionState.ERROR

    def test_physics_ticks_continue_after_fault(self, engine):
        engine.supervisor.deploy(CRASH)
        for _ in range(5):
            engine.tick(0.1)
        assert engine.tick_count == 5
        assert engine.sim_time == pytest.approx(0.5)

    def test_dt_is_capped(self, engine):
        engine.tick(5.0)
        assert engine.sim_time == pytest.approx(0.1)

    def test_frame_time_seen_by_brain(self, engine):
        engine.supervisor.deploy("""
def step(api, dt):
    api.telemetry.watch("time", api.world.time())
    api.telemetry.watch("dt", dt)
""")
        engine.tick(0.1)
        engine.tick(0.1)
        assert engine.telemetry.watches["time"] == pytest.approx(0.1)
        assert engine.telemetry.watches["dt"] == pytest.approx(0.1)


class TestWorldControl:
    def test_regenerate_world(self):
        engine = SimulationEngine(world=GeneratedWorld(seed=1, hazards=[]))
        engine.supervisor.deploy(DRIVE)
        for _ in range(5):
            engine.tick(0.1)

        engine.regenerate_world(seed=99, hazards=["rocks"])

        assert engine.world.seed == 99
        assert engine.robot.z == 0.0
        assert engine.sim_time == 0.0
        assert engine.supervisor.state == ExecutionState.RUNNING

    def test_mowing_cuts_grass(self):
        engine = SimulationEngine(world=GeneratedWorld(seed=1, hazards=[]))
        engine.supervisor.deploy(DRIVE)
        for _ in range(20):
            engine.tick(0.1)
        assert engine.world.coverage_fraction() > 0.0

    def test_snapshot(self):
        engine = SimulationEngine(world=GeneratedWorld(seed=1, hazards=[]))
        snapshot = engine.get_state_snapshot()
        assert snapshot["tick"] == 0
        assert snapshot["ground_type"] == "GROUND"
        assert snapshot["brain"]["state"] == "IDLE"
        assert snapshot["coverage"] == 0.0

    def test_set_playing(self, engine):
        engine.set_playing(False)
        assert engine.playing is False


class TestLoop:
    """Fixed-rate asyncio loop."""

    @pytest.mark.asyncio
    async def test_loop_ticks(self, engine):
        await engine.start_loop()
        await asyncio.sleep(0.2)
        await engine.stop_loop()

        assert engine.tick_count > 0

    @pytest.mark.asyncio
    async def test_paused_loop_does_not_tick(self, engine):
        engine.set_playing(False)
        await engine.start_loop()
        await asyncio.sleep(0.1)
        await engine.stop_loop()

        assert engine.tick_count == 0

    @pytest.mark.asyncio
    async def test_start_twice_is_harmless(self, engine):
        await engine.start_loop()
        await engine.start_loop()
        await engine.stop_loop()
        assert engine._task is None


class TestGlobalEngine:
    def test_get_engine_returns_singleton(self):
        assert get_engine() is get_engine()
