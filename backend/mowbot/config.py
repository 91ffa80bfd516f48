"""
MowBot Server Configuration

This file contains all server-side configurable settings.
Modify these values to tune the simulation and the brain sandbox.
"""

from dataclasses import dataclass


@dataclass
class ServerConfig:
    """Server networking configuration."""
    HOST: str = "0.0.0.0"
    PORT: int = 8000


@dataclass
class SimulationConfig:
    """Simulation loop and world settings."""
    TICK_RATE: int = 60  # Simulation ticks per second
    MAX_DT: float = 0.1  # Frame delta cap (seconds)
    BOUNDS: float = 32.0  # Robot is clamped to [-BOUNDS, BOUNDS] on x and z
    WORLD_SIZE: float = 80.0  # Terrain edge length (units)
    DEFAULT_SEED: int = 1337

    # Hazards generated by default (regeneration may override)
    HAZARDS: tuple = ("water", "walls", "poles", "ridges", "rocks")
    ROCK_COUNT: int = 12
    POLE_COUNT: int = 6
    WALL_COUNT: int = 2

    # Grass
    GRASS_START_HEIGHT: float = 0.8
    GRASS_CELL_SIZE: float = 1.0


@dataclass
class BrainConfig:
    """Brain sandbox and supervisor configuration."""
    STEP_BUDGET_MS: float = 5.0  # Wall-clock budget per step() call
    SAFE_AFTER_SECONDS: float = 3.0  # Fault-free running time before SAFE
    DIAGNOSTIC_PERIOD_SECONDS: float = 30.0  # Periodic diagnostic cadence
    MAX_REVISIONS: int = 20
    MAX_CODE_SIZE_KB: int = 100

    # Allowed imports
    ALLOWED_IMPORTS: tuple = ("math",)

    # Telemetry buffers
    TELEMETRY_HISTORY: int = 600  # Numeric sample frames kept
    CONSOLE_HISTORY: int = 200
    WATCH_LIMIT: int = 64  # Distinct watch keys; new keys beyond this are dropped
    DIAGNOSTIC_HISTORY: int = 100


@dataclass
class RobotConfig:
    """Robot kinematics and sensor parameters."""
    # Actuator clamps
    MIN_SPEED: float = -2.0  # m/s (reverse)
    MAX_SPEED: float = 5.0  # m/s
    MAX_STEER: float = 1.5  # radians, symmetric

    # Kinematics
    WHEELBASE: float = 1.5
    MUD_TRACTION_THRESHOLD: float = 0.5
    MUD_SPEED_FACTOR: float = 0.6
    HEIGHT_FOLLOW_RATE: float = 10.0
    START_HEIGHT: float = 1.0

    # Sensors
    FRONT_SENSOR_RANGE: float = 10.0
    FRONT_SENSOR_CONE: float = 0.8  # Minimum dot(forward, to_obstacle)
    FRONT_SENSOR_MARGIN: float = 1.0
    GPS_NOISE_STDDEV: float = 0.0

    # Mower deck
    MOWER_RADIUS: float = 0.5
    CUT_HEIGHT: float = 0.1


@dataclass
class DatabaseConfig:
    """Database configuration."""
    DATABASE_URL: str = "sqlite://"  # In-memory; history does not outlive the process
    ECHO_SQL: bool = False  # Log SQL queries


@dataclass
class Settings:
    """Main settings container."""
    server: ServerConfig = None
    simulation: SimulationConfig = None
    brain: BrainConfig = None
    robot: RobotConfig = None
    database: DatabaseConfig = None

    # Application info
    APP_NAME: str = "MowBot"
    VERSION: str = "0.1.0"
    DEBUG: bool = True

    def __post_init__(self):
        self.server = self.server or ServerConfig()
        self.simulation = self.simulation or SimulationConfig()
        self.brain = self.brain or BrainConfig()
        self.robot = self.robot or RobotConfig()
        self.database = self.database or DatabaseConfig()


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
