"""
Capability API handed to brain scripts.

A fresh BrainAPI is built every tick from a frozen Frame. Reads go through
the frame's snapshot and the world oracle; writes only stage values into
that tick's ActuatorIntent or forward to the telemetry hub. Nothing here
touches the kinematics directly.

Brain-facing surface:

    api.robot.pose() / velocity() / set_speed(v) / set_steer(rad) / stop()
    api.world.time() / dt() / boundary()
    api.sensors.front_distance() / ground_type() / gps() / grass_height()
    api.nav.distance_to(x, z) / heading_to(x, z) / get_mowing_zone()
    api.nav.plan_coverage(polygon, tool_width)
    api.telemetry.log(key, value) / watch(key, value)
    api.console.log(msg)
    api.debug.text(pos, msg) / path(points)

Internal state lives in underscore attributes, which RestrictedPython's
attribute guard keeps out of reach of scripts.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Any, List, Optional

from mowbot.brain_runtime.types import ActuatorIntent, Bounds, Point, Pose, Velocity, clamp, require_number
from mowbot.config import get_settings
from mowbot.core.coverage import as_point, plan_coverage
from mowbot.core.kinematics import RobotState
from mowbot.core.telemetry import TelemetryHub
from mowbot.core.world import WorldOracle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Frame:
    """Read-only snapshot of one simulation tick."""
    robot: RobotState
    time: float  # Elapsed simulation time (s)
    dt: float  # Tick delta (s)
    world: WorldOracle


class RobotCapability:
    """Pose readings and actuator intents."""

    def __init__(self, frame: Frame, intent: ActuatorIntent):
        self._frame = frame
        self._intent = intent
        self._limits = get_settings().robot

    def pose(self) -> Pose:
        return self._frame.robot.pose()

    def velocity(self) -> Velocity:
        """Currently staged speed and steer for this tick."""
        return Velocity(speed=self._intent.speed, steer=self._intent.steer)

    def set_speed(self, v) -> None:
        """Stage forward speed in m/s (clamped)."""
        v = require_number(v, "set_speed")
        self._intent.speed = clamp(v, self._limits.MIN_SPEED, self._limits.MAX_SPEED)

    def set_steer(self, rad) -> None:
        """Stage steering angle in radians (clamped)."""
        rad = require_number(rad, "set_steer")
        self._intent.steer = clamp(rad, -self._limits.MAX_STEER, self._limits.MAX_STEER)

    def stop(self) -> None:
        """Hard stop (speed = 0)."""
        self._intent.speed = 0.0


class WorldCapability:
    """Simulation clock and field dimensions."""

    def __init__(self, frame: Frame):
        self._frame = frame

    def time(self) -> float:
        return self._frame.time

    def dt(self) -> float:
        return self._frame.dt

    def boundary(self) -> Bounds:
        bounds = self._frame.world.bounds
        return Bounds(width=bounds * 2, depth=bounds * 2)


class SensorCapability:
    """Pure reads against the world at the frame's pose."""

    def __init__(self, frame: Frame, rng: random.Random):
        self._frame = frame
        self._rng = rng
        self._config = get_settings().robot

    def front_distance(self) -> float:
        """
        Distance to the nearest obstacle in the forward cone.

        Returns FRONT_SENSOR_RANGE when nothing is in view.
        """
        robot = self._frame.robot
        fx, fz = robot.forward()
        sensor_range = self._config.FRONT_SENSOR_RANGE
        nearest = sensor_range

        for obstacle in self._frame.world.obstacles:
            dx = obstacle.x - robot.x
            dz = obstacle.z - robot.z
            distance = math.hypot(dx, dz)
            if distance == 0 or distance >= sensor_range:
                continue
            if (fx * dx + fz * dz) / distance > self._config.FRONT_SENSOR_CONE:
                nearest = min(nearest, distance - self._config.FRONT_SENSOR_MARGIN)

        return max(0.0, nearest)

    def ground_type(self) -> str:
        """"GROUND", "WATER" or "OBSTACLE" under the robot."""
        robot = self._frame.robot
        return self._frame.world.get_hazard_type(robot.x, robot.z).value

    def gps(self) -> Point:
        """Ground position, perturbed by GPS noise when configured."""
        robot = self._frame.robot
        sigma = self._config.GPS_NOISE_STDDEV
        if sigma > 0:
            return Point(robot.x + self._rng.gauss(0.0, sigma), robot.z + self._rng.gauss(0.0, sigma))
        return Point(robot.x, robot.z)

    def grass_height(self) -> float:
        robot = self._frame.robot
        return self._frame.world.get_grass_height(robot.x, robot.z)


class NavCapability:
    """Navigation helpers, including the coverage planner."""

    def __init__(self, frame: Frame):
        self._frame = frame

    def distance_to(self, x, z) -> float:
        robot = self._frame.robot
        return math.hypot(x - robot.x, z - robot.z)

    def heading_to(self, x, z) -> float:
        """Absolute heading (radians) from the robot toward (x, z)."""
        robot = self._frame.robot
        return math.atan2(x - robot.x, z - robot.z)

    def get_mowing_zone(self) -> List[Point]:
        return self._frame.world.get_mowing_zone()

    def plan_coverage(self, polygon, tool_width) -> List[Point]:
        return plan_coverage(polygon, tool_width)


class TelemetryCapability:
    """Numeric log and named watches. Never raises into the brain."""

    def __init__(self, frame: Frame, hub: TelemetryHub):
        self._frame = frame
        self._hub = hub

    def log(self, key, value) -> None:
        try:
            self._hub.record_sample(self._frame.time, str(key), value)
        except Exception as e:
            logger.debug(f"telemetry.log ignored: {e}")

    def watch(self, key, value) -> None:
        try:
            self._hub.set_watch(str(key), value)
        except Exception as e:
            logger.debug(f"telemetry.watch ignored: {e}")


class ConsoleCapability:
    """Text console. Never raises into the brain."""

    def __init__(self, hub: TelemetryHub):
        self._hub = hub

    def log(self, msg) -> None:
        try:
            self._hub.write_console(str(msg))
        except Exception as e:
            logger.debug(f"console.log ignored: {e}")


def _coordinate(pos: Any, name: str) -> float:
    if isinstance(pos, dict):
        return float(pos[name])
    return float(getattr(pos, name))


class DebugCapability:
    """World-space debug drawing. Never raises into the brain."""

    def __init__(self, hub: TelemetryHub):
        self._hub = hub

    def text(self, pos, msg) -> None:
        try:
            self._hub.draw_text(
                _coordinate(pos, "x"), _coordinate(pos, "y"), _coordinate(pos, "z"), str(msg)
            )
        except Exception as e:
            logger.debug(f"debug.text ignored: {e}")

    def path(self, points) -> None:
        try:
            self._hub.draw_path([as_point(p) for p in points])
        except Exception as e:
            logger.debug(f"debug.path ignored: {e}")


class BrainAPI:
    """The capability object passed to init(api) and step(api, dt)."""

    def __init__(
        self,
        robot: RobotCapability,
        world: WorldCapability,
        sensors: SensorCapability,
        nav: NavCapability,
        telemetry: TelemetryCapability,
        console: ConsoleCapability,
        debug: DebugCapability,
    ):
        self.robot = robot
        self.world = world
        self.sensors = sensors
        self.nav = nav
        self.telemetry = telemetry
        self.console = console
        self.debug = debug


def build_capabilities(
    frame: Frame,
    intent: ActuatorIntent,
    hub: TelemetryHub,
    rng: Optional[random.Random] = None,
) -> BrainAPI:
    """
    Build the capability object for one tick.

    Args:
        frame: Frozen snapshot of the tick
        intent: Output buffer that actuator calls write into
        hub: Telemetry sink for log/watch/console/debug calls
        rng: Noise source for the GPS sensor

    Returns:
        BrainAPI bound to this tick only
    """
    return BrainAPI(
        robot=RobotCapability(frame, intent),
        world=WorldCapability(frame),
        sensors=SensorCapability(frame, rng or random.Random()),
        nav=NavCapability(frame),
        telemetry=TelemetryCapability(frame, hub),
        console=ConsoleCapability(hub),
        debug=DebugCapability(hub),
    )
