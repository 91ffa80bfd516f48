"""
Brain API type definitions for MowBot.

This module defines the data structures that brains interact with:
- Pose, Velocity, Bounds: robot and world readings
- Point: ground-plane coordinate used for zones and paths
- ActuatorIntent: staged speed/steer commands for one tick

Readings handed to brains are immutable (frozen dataclasses) so a brain
cannot modify simulation state through them.
"""

import math
from dataclasses import dataclass

from mowbot.core.coverage import Point


@dataclass(frozen=True)
class Pose:
    """Robot pose in world coordinates."""
    x: float
    y: float  # Height above datum
    z: float
    heading: float  # Radians, 0 = +z, increasing toward +x


@dataclass(frozen=True)
class Velocity:
    """Currently commanded motion."""
    speed: float  # m/s
    steer: float  # Steering angle (radians)


@dataclass(frozen=True)
class Bounds:
    """Drivable field dimensions."""
    width: float
    depth: float


@dataclass
class ActuatorIntent:
    """
    Speed and steering staged by a brain during one tick.

    The supervisor decides whether these values reach the kinematics;
    a faulted tick is always replaced by the neutral intent.
    """
    speed: float = 0.0
    steer: float = 0.0

    def copy(self) -> 'ActuatorIntent':
        """Return an independent copy of this intent."""
        return ActuatorIntent(speed=self.speed, steer=self.steer)

    def is_neutral(self) -> bool:
        """Check whether this intent commands no motion."""
        return self.speed == 0.0 and self.steer == 0.0

    def to_dict(self) -> dict:
        """Convert intent to dictionary format."""
        return {"speed": self.speed, "steer": self.steer}

    @classmethod
    def neutral(cls) -> 'ActuatorIntent':
        """Fail-safe intent: stopped, wheels straight."""
        return cls()


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a value to [low, high]."""
    return max(low, min(high, value))


def require_number(value, name: str) -> float:
    """
    Validate an actuator argument.

    Raises:
        TypeError: If value is not a finite real number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{name} expects a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise TypeError(f"{name} expects a finite number, got {value!r}")
    return float(value)


__all__ = [
    "Pose",
    "Velocity",
    "Bounds",
    "Point",
    "ActuatorIntent",
    "clamp",
    "require_number",
]
