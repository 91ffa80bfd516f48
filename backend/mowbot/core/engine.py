"""
Simulation engine for MowBot.

Owns the world, the robot, the brain supervisor, telemetry and the revision
ledger, and advances them at a fixed tick rate. Every tick runs the
supervisor first and then always applies the resulting intent to the
kinematics, whatever happened inside the brain.
"""

import asyncio
import logging
import time
from typing import Dict, Iterable, Optional

from mowbot.brain_runtime.capabilities import Frame
from mowbot.config import get_settings
from mowbot.core.kinematics import RobotKinematics, RobotState, create_robot_at_position
from mowbot.core.revisions import RevisionLedger
from mowbot.core.supervisor import ExecutionSupervisor, TickResult
from mowbot.core.telemetry import TelemetryHub
from mowbot.core.world import GeneratedWorld, WorldOracle

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Fixed-rate simulation loop around one robot and its brain.

    The loop runs as an asyncio task; tick() can also be driven directly.
    """

    def __init__(
        self,
        world: Optional[WorldOracle] = None,
        supervisor: Optional[ExecutionSupervisor] = None,
    ):
        """
        Initialize the engine.

        Args:
            world: World oracle (default GeneratedWorld with the configured seed)
            supervisor: Brain supervisor (default one with a fresh ledger and hub)
        """
        self.settings = get_settings()
        self.tick_rate = self.settings.simulation.TICK_RATE
        self.tick_interval = 1.0 / self.tick_rate

        self.world = world or GeneratedWorld()
        if supervisor is None:
            supervisor = ExecutionSupervisor(RevisionLedger(), TelemetryHub())
        self.supervisor = supervisor
        self.kinematics = RobotKinematics()

        self.robot: RobotState = create_robot_at_position(0.0, 0.0)
        self.sim_time = 0.0
        self.tick_count = 0
        self.playing = True
        self.last_result: Optional[TickResult] = None

        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def ledger(self) -> RevisionLedger:
        return self.supervisor.ledger

    @property
    def telemetry(self) -> TelemetryHub:
        return self.supervisor.telemetry

    @property
    def is_running(self) -> bool:
        """True while the background loop task is active."""
        return self._running

    async def start_loop(self) -> None:
        """Start the simulation loop."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._simulation_loop())
        logger.info(f"Simulation loop started at {self.tick_rate}Hz")

    async def stop_loop(self) -> None:
        """Stop the simulation loop."""
        self._running = False
        if self._task:
            await self._task
            self._task = None
        logger.info("Simulation loop stopped")

    async def _simulation_loop(self) -> None:
        """Main loop - runs at fixed tick rate."""
        last_tick_time = time.perf_counter()

        while self._running:
            current_time = time.perf_counter()
            elapsed = current_time - last_tick_time

            if elapsed < self.tick_interval:
                await asyncio.sleep(self.tick_interval - elapsed)
                continue

            last_tick_time = current_time

            if self.playing:
                self.tick(elapsed)

    def tick(self, dt: Optional[float] = None) -> TickResult:
        """
        Advance the simulation by one tick.

        Args:
            dt: Time delta in seconds (default one tick interval, capped at MAX_DT)

        Returns:
            The supervisor's result for this tick
        """
        dt = self.tick_interval if dt is None else min(dt, self.settings.simulation.MAX_DT)

        frame = Frame(robot=self.robot, time=self.sim_time, dt=dt, world=self.world)
        result = self.supervisor.tick(frame)

        previous = self.robot
        self.robot = self.kinematics.step(previous, result.intent, self.world, dt)

        if self.supervisor.is_active:
            self.supervisor.metrics.distance_travelled += (
                self.robot.distance_travelled - previous.distance_travelled
            )

        if hasattr(self.world, "cut_grass"):
            self.world.cut_grass(self.robot.x, self.robot.z)

        self.sim_time += dt
        self.tick_count += 1
        self.last_result = result
        return result

    def set_playing(self, playing: bool) -> None:
        """Pause or resume simulated time."""
        self.playing = playing
        logger.info("Simulation resumed" if playing else "Simulation paused")

    def reset_robot(self) -> None:
        """Put the robot back at the origin, stationary."""
        self.robot = create_robot_at_position(0.0, 0.0)

    def regenerate_world(self, seed: Optional[int] = None, hazards: Optional[Iterable[str]] = None) -> None:
        """
        Replace the world with a freshly generated one and reset the robot.

        The deployed brain and its state are kept.
        """
        self.world = GeneratedWorld(seed=seed, hazards=hazards)
        self.reset_robot()
        self.sim_time = 0.0
        self.tick_count = 0
        logger.info(f"World regenerated (seed={self.world.seed})")

    def get_state_snapshot(self) -> Dict:
        """Get current simulation state for the HTTP API."""
        coverage = self.world.coverage_fraction() if hasattr(self.world, "coverage_fraction") else None
        ground = self.world.get_hazard_type(self.robot.x, self.robot.z)
        return {
            "tick": self.tick_count,
            "time": self.sim_time,
            "playing": self.playing,
            "robot": self.robot.to_dict(),
            "ground_type": ground.value,
            "coverage": coverage,
            "brain": self.supervisor.status(),
        }


# Global engine instance, created on first use
_engine: Optional[SimulationEngine] = None


def get_engine() -> SimulationEngine:
    """Get global simulation engine instance."""
    global _engine
    if _engine is None:
        _engine = SimulationEngine()
    return _engine
