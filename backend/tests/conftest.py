"""
Shared fixtures for MowBot tests.
"""

import pytest

from mowbot.brain_runtime.capabilities import Frame
from mowbot.core.coverage import Point
from mowbot.core.kinematics import RobotState
from mowbot.core.world import GroundType


SQUARE_ZONE = [Point(0.0, 0.0), Point(10.0, 0.0), Point(10.0, 10.0), Point(0.0, 10.0)]


class FlatWorld:
    """Flat, fully drivable world with configurable hazards."""

    def __init__(self, obstacles=None, hazard=GroundType.GROUND, traction=1.0, zone=None, bounds=32.0):
        self.obstacles = list(obstacles or [])
        self.bounds = bounds
        self.hazard = hazard
        self.traction = traction
        self.zone = list(zone or SQUARE_ZONE)
        self.grass = 0.5

    def get_height(self, x, z):
        return 0.0

    def get_traction(self, x, z):
        return self.traction

    def get_hazard_type(self, x, z):
        return self.hazard

    def get_grass_height(self, x, z):
        return self.grass

    def get_mowing_zone(self):
        return list(self.zone)


class FakeClock:
    """Monotonic clock that advances by a fixed step on every read."""

    def __init__(self, step_seconds=0.001):
        self.now = 0.0
        self.step_seconds = step_seconds

    def __call__(self):
        value = self.now
        self.now += self.step_seconds
        return value


@pytest.fixture
def flat_world():
    """A flat world with no obstacles."""
    return FlatWorld()


@pytest.fixture
def make_frame(flat_world):
    """Factory for tick frames on the flat world."""
    def _make(robot=None, time=0.0, dt=1 / 60, world=None):
        return Frame(
            robot=robot or RobotState(x=0.0, y=0.0, z=0.0),
            time=time,
            dt=dt,
            world=world or flat_world,
        )
    return _make


@pytest.fixture
def make_world():
    """Factory for flat worlds with obstacles or hazards."""
    return FlatWorld


@pytest.fixture
def make_clock():
    """Factory for fake clocks (seconds advanced per read)."""
    return FakeClock
