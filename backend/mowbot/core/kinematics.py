"""
Robot kinematics for MowBot.

A kinematic bicycle model driven by the actuator intent the supervisor
hands over each tick. Traction from the world slows the robot in mud and
water; the robot is clamped to the field bounds and follows the terrain
height smoothly.
"""

import math
from dataclasses import dataclass, replace

from mowbot.brain_runtime.types import ActuatorIntent, Pose, Velocity, clamp
from mowbot.config import get_settings
from mowbot.core.world import WorldOracle


@dataclass(frozen=True)
class RobotState:
    """
    Physical state of the robot.

    Attributes:
        x, y, z: Position (y is height)
        heading: Radians, 0 = +z, increasing toward +x
        speed: Commanded forward speed (m/s)
        steer: Commanded steering angle (radians)
        distance_travelled: Odometer (units)
    """
    x: float
    y: float
    z: float
    heading: float = 0.0
    speed: float = 0.0
    steer: float = 0.0
    distance_travelled: float = 0.0

    def pose(self) -> Pose:
        return Pose(x=self.x, y=self.y, z=self.z, heading=self.heading)

    def velocity(self) -> Velocity:
        return Velocity(speed=self.speed, steer=self.steer)

    def forward(self) -> tuple:
        """Unit vector (x, z) the robot is facing."""
        return (math.sin(self.heading), math.cos(self.heading))

    def to_dict(self) -> dict:
        return {
            "position": {"x": self.x, "y": self.y, "z": self.z},
            "heading": self.heading,
            "speed": self.speed,
            "steer": self.steer,
            "distance_travelled": self.distance_travelled,
        }


def create_robot_at_position(x: float, z: float, heading: float = 0.0) -> RobotState:
    """Create a stationary robot at a ground position."""
    return RobotState(x=x, y=get_settings().robot.START_HEIGHT, z=z, heading=heading)


class RobotKinematics:
    """Integrates robot motion from actuator intents."""

    def __init__(self):
        self.settings = get_settings()
        self.robot = self.settings.robot

    def effective_speed(self, speed: float, traction: float) -> float:
        """Speed after terrain losses (mud/water)."""
        if traction < self.robot.MUD_TRACTION_THRESHOLD:
            return speed * self.robot.MUD_SPEED_FACTOR
        return speed

    def is_blocked(self, x: float, z: float, world: WorldOracle) -> bool:
        """Check whether a ground point lies inside any obstacle footprint."""
        return any(obstacle.contains(x, z) for obstacle in world.obstacles)

    def step(self, state: RobotState, intent: ActuatorIntent, world: WorldOracle, dt: float) -> RobotState:
        """
        Advance the robot by one tick.

        Args:
            state: Current robot state
            intent: Intent to apply (already resolved by the supervisor)
            world: World oracle for traction, height, bounds and obstacles
            dt: Time delta in seconds

        Returns:
            New robot state
        """
        speed = clamp(intent.speed, self.robot.MIN_SPEED, self.robot.MAX_SPEED)
        steer = clamp(intent.steer, -self.robot.MAX_STEER, self.robot.MAX_STEER)

        traction = world.get_traction(state.x, state.z)
        effective = self.effective_speed(speed, traction)

        heading = state.heading + (effective * math.tan(steer) / self.robot.WHEELBASE) * dt
        heading = (heading + math.pi) % (2 * math.pi) - math.pi

        bounds = world.bounds
        x = clamp(state.x + math.sin(heading) * effective * dt, -bounds, bounds)
        z = clamp(state.z + math.cos(heading) * effective * dt, -bounds, bounds)

        # Moving into an obstacle is refused; the robot may still turn in place
        if self.is_blocked(x, z, world) and not self.is_blocked(state.x, state.z, world):
            x, z = state.x, state.z

        ground = world.get_height(x, z)
        y = state.y + (ground - state.y) * min(1.0, dt * self.robot.HEIGHT_FOLLOW_RATE)

        travelled = math.hypot(x - state.x, z - state.z)

        return replace(
            state,
            x=x,
            y=y,
            z=z,
            heading=heading,
            speed=speed,
            steer=steer,
            distance_travelled=state.distance_travelled + travelled,
        )
