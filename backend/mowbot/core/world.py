"""
World oracle for MowBot.

The simulation core only queries the world: heights, traction, hazard
classification, grass height, obstacles and the mowing zone. WorldOracle
describes that surface; GeneratedWorld is a seeded procedural stand-in
(gentle slope and relief, an optional pond, ridge, walls, poles and rocks).
"""

import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from mowbot.config import get_settings
from mowbot.core.coverage import Point

WATER_LEVEL = -0.5
WALL_HEIGHT = 2.0
POLE_HEIGHT = 2.5


class GroundType(Enum):
    """Ground classification reported by the ground sensor."""
    GROUND = "GROUND"
    WATER = "WATER"
    OBSTACLE = "OBSTACLE"


class ObstacleType(Enum):
    """Kinds of static obstacle."""
    ROCK = "ROCK"
    POLE = "POLE"
    WALL = "WALL"


@dataclass(frozen=True)
class Obstacle:
    """
    A static obstacle.

    Attributes:
        type: Obstacle kind
        x, z: Centre on the ground plane
        size_x, size_z: Footprint (walls are boxes, others treated as discs)
        height: Vertical extent
    """
    type: ObstacleType
    x: float
    z: float
    size_x: float
    size_z: float
    height: float

    @property
    def radius(self) -> float:
        return max(self.size_x, self.size_z) * 0.5

    def contains(self, x: float, z: float) -> bool:
        """Check whether a ground point lies inside the footprint."""
        if self.type == ObstacleType.WALL:
            return abs(x - self.x) < self.size_x / 2 and abs(z - self.z) < self.size_z / 2
        return math.hypot(x - self.x, z - self.z) < self.radius

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "position": {"x": self.x, "z": self.z},
            "size": {"x": self.size_x, "y": self.height, "z": self.size_z},
        }


class WorldOracle(Protocol):
    """Query-only view of the world used by the simulation core."""

    obstacles: Sequence[Obstacle]
    bounds: float  # Drivable area is [-bounds, bounds] on x and z

    def get_height(self, x: float, z: float) -> float: ...

    def get_traction(self, x: float, z: float) -> float: ...

    def get_hazard_type(self, x: float, z: float) -> GroundType: ...

    def get_grass_height(self, x: float, z: float) -> float: ...

    def get_mowing_zone(self) -> List[Point]: ...


class GrassField:
    """Grass height on a regular grid covering the world."""

    def __init__(self, world_size: float, cell_size: float, start_height: float):
        self.world_size = world_size
        self.cell_size = cell_size
        self.cells_per_side = int(math.ceil(world_size / cell_size))
        self.start_height = start_height
        self.heights = [[start_height] * self.cells_per_side for _ in range(self.cells_per_side)]

    def _cell(self, x: float, z: float) -> Optional[Tuple[int, int]]:
        half = self.world_size / 2
        i = int((x + half) // self.cell_size)
        j = int((z + half) // self.cell_size)
        if 0 <= i < self.cells_per_side and 0 <= j < self.cells_per_side:
            return i, j
        return None

    def cell_centre(self, i: int, j: int) -> Tuple[float, float]:
        half = self.world_size / 2
        return (-half + (i + 0.5) * self.cell_size, -half + (j + 0.5) * self.cell_size)

    def height_at(self, x: float, z: float) -> float:
        cell = self._cell(x, z)
        if cell is None:
            return 0.0
        i, j = cell
        return self.heights[i][j]

    def clear(self, x: float, z: float) -> None:
        """Remove grass from the cell containing (x, z)."""
        cell = self._cell(x, z)
        if cell is not None:
            i, j = cell
            self.heights[i][j] = 0.0

    def cut(self, x: float, z: float, radius: float, cut_height: float) -> int:
        """
        Cut grass around (x, z) down to cut_height.

        Returns:
            Number of cells that were shortened
        """
        cut = 0
        reach = int(math.ceil(radius / self.cell_size))
        centre = self._cell(x, z)
        if centre is None:
            return 0
        ci, cj = centre
        for i in range(ci - reach, ci + reach + 1):
            for j in range(cj - reach, cj + reach + 1):
                if not (0 <= i < self.cells_per_side and 0 <= j < self.cells_per_side):
                    continue
                cx, cz = self.cell_centre(i, j)
                if math.hypot(cx - x, cz - z) > radius + self.cell_size / 2:
                    continue
                if self.heights[i][j] > cut_height:
                    self.heights[i][j] = cut_height
                    cut += 1
        return cut

    def cut_fraction(self, cells: Iterable[Tuple[int, int]]) -> float:
        """Fraction of the given cells already cut."""
        total = 0
        done = 0
        for i, j in cells:
            total += 1
            if self.heights[i][j] < self.start_height:
                done += 1
        return done / total if total else 0.0


class GeneratedWorld:
    """
    Seeded procedural world.

    The same seed and hazard set always produce the same terrain,
    obstacles and mowing zone.
    """

    def __init__(self, seed: Optional[int] = None, hazards: Optional[Iterable[str]] = None):
        """
        Generate a world.

        Args:
            seed: Random seed (default from config)
            hazards: Enabled hazards, any of "water", "walls", "poles",
                "ridges", "rocks" (default from config)
        """
        self.settings = get_settings()
        sim = self.settings.simulation

        self.seed = sim.DEFAULT_SEED if seed is None else seed
        self.hazards = frozenset(sim.HAZARDS if hazards is None else hazards)
        self.world_size = sim.WORLD_SIZE
        self.bounds = sim.BOUNDS

        rng = random.Random(self.seed)

        self.slope_x = rng.uniform(-0.02, 0.02)
        self.slope_z = rng.uniform(-0.02, 0.02)
        self.phases = [rng.uniform(0, 2 * math.pi) for _ in range(4)]

        self.pond_centre = (rng.uniform(-20, 20), rng.uniform(-20, 20))
        self.pond_radius = rng.uniform(8, 15)

        ridge_start = (rng.uniform(-30, 30), rng.uniform(-30, 30))
        self.ridge = (
            ridge_start,
            (ridge_start[0] + rng.uniform(-20, 20), ridge_start[1] + rng.uniform(-20, 20)),
        )

        self.obstacles: List[Obstacle] = self._place_obstacles(rng)
        self.mowing_zone: List[Point] = self._generate_zone(rng)

        self.grass = GrassField(self.world_size, sim.GRASS_CELL_SIZE, sim.GRASS_START_HEIGHT)
        self._clear_unmowable_grass()
        self._zone_cells = self._cells_inside_zone()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def _near_pond(self, x: float, z: float, margin: float) -> bool:
        if "water" not in self.hazards:
            return False
        return math.hypot(x - self.pond_centre[0], z - self.pond_centre[1]) < self.pond_radius + margin

    def _place_obstacles(self, rng: random.Random) -> List[Obstacle]:
        sim = self.settings.simulation
        obstacles = []

        if "walls" in self.hazards:
            for _ in range(sim.WALL_COUNT):
                x, z = rng.uniform(-30, 30), rng.uniform(-30, 30)
                if self._near_pond(x, z, 5.0):
                    continue
                obstacles.append(Obstacle(
                    type=ObstacleType.WALL, x=x, z=z,
                    size_x=rng.uniform(3, 6), size_z=rng.uniform(3, 6),
                    height=WALL_HEIGHT,
                ))

        if "poles" in self.hazards:
            for _ in range(sim.POLE_COUNT):
                x, z = rng.uniform(-30, 30), rng.uniform(-30, 30)
                if self._near_pond(x, z, 0.0):
                    continue
                obstacles.append(Obstacle(
                    type=ObstacleType.POLE, x=x, z=z,
                    size_x=0.2, size_z=0.2, height=POLE_HEIGHT,
                ))

        if "rocks" in self.hazards:
            for _ in range(sim.ROCK_COUNT):
                x, z = rng.uniform(-30, 30), rng.uniform(-30, 30)
                if self._near_pond(x, z, 0.0):
                    continue
                obstacles.append(Obstacle(
                    type=ObstacleType.ROCK, x=x, z=z,
                    size_x=1.0, size_z=1.0, height=1.0,
                ))

        return obstacles

    def _generate_zone(self, rng: random.Random) -> List[Point]:
        """Irregular convex-ish polygon around the origin, inside the bounds."""
        vertex_count = rng.randint(5, 8)
        max_radius = self.bounds * 0.85
        zone = []
        for k in range(vertex_count):
            angle = 2 * math.pi * k / vertex_count
            radius = rng.uniform(max_radius * 0.6, max_radius)
            zone.append(Point(radius * math.cos(angle), radius * math.sin(angle)))
        return zone

    def _clear_unmowable_grass(self) -> None:
        """No grass grows under water or inside walls."""
        n = self.grass.cells_per_side
        walls = [o for o in self.obstacles if o.type == ObstacleType.WALL]
        for i in range(n):
            for j in range(n):
                x, z = self.grass.cell_centre(i, j)
                if self.get_height(x, z) < WATER_LEVEL or any(w.contains(x, z) for w in walls):
                    self.grass.clear(x, z)

    def _cells_inside_zone(self) -> List[Tuple[int, int]]:
        n = self.grass.cells_per_side
        cells = []
        for i in range(n):
            for j in range(n):
                x, z = self.grass.cell_centre(i, j)
                if point_in_polygon(x, z, self.mowing_zone) and self.grass.heights[i][j] > 0:
                    cells.append((i, j))
        return cells

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_height(self, x: float, z: float) -> float:
        y = x * self.slope_x + z * self.slope_z
        y += math.sin(x * 0.1 + self.phases[0]) * math.cos(z * 0.1 + self.phases[1]) * 1.5
        y += math.sin(x * 0.3 + self.phases[2]) * math.cos(z * 0.3 + self.phases[3]) * 0.5

        if "ridges" in self.hazards:
            (sx, sz), (ex, ez) = self.ridge
            l2 = (ex - sx) ** 2 + (ez - sz) ** 2
            if l2 > 0:
                t = max(0.0, min(1.0, ((x - sx) * (ex - sx) + (z - sz) * (ez - sz)) / l2))
                dist = math.hypot(x - (sx + t * (ex - sx)), z - (sz + t * (ez - sz)))
                if dist < 3.0:
                    y += math.cos(dist * 0.5) * 0.8

        if "water" in self.hazards:
            d_pond = math.hypot(x - self.pond_centre[0], z - self.pond_centre[1])
            outer = self.pond_radius + 5
            if d_pond < outer:
                y -= max(0.0, (outer - d_pond) / outer) * 3.5

        return y

    def get_traction(self, x: float, z: float) -> float:
        """Traction in [0, 1]: 1 on grass, 0.3 on muddy banks, 0.1 underwater."""
        if "water" not in self.hazards:
            return 1.0
        y = self.get_height(x, z)
        if y < WATER_LEVEL:
            return 0.1
        if y < WATER_LEVEL + 0.5:
            return 0.3
        return 1.0

    def get_hazard_type(self, x: float, z: float) -> GroundType:
        if any(o.contains(x, z) for o in self.obstacles):
            return GroundType.OBSTACLE
        if "water" in self.hazards and self.get_height(x, z) < WATER_LEVEL:
            return GroundType.WATER
        return GroundType.GROUND

    def get_grass_height(self, x: float, z: float) -> float:
        return self.grass.height_at(x, z)

    def get_mowing_zone(self) -> List[Point]:
        return list(self.mowing_zone)

    def cut_grass(self, x: float, z: float) -> int:
        """Mow around the robot; returns number of cells shortened."""
        robot = self.settings.robot
        return self.grass.cut(x, z, robot.MOWER_RADIUS, robot.CUT_HEIGHT)

    def coverage_fraction(self) -> float:
        """Fraction of the mowing zone's grass already cut."""
        return self.grass.cut_fraction(self._zone_cells)

    def to_dict(self) -> dict:
        return {
            "seed": self.seed,
            "hazards": sorted(self.hazards),
            "world_size": self.world_size,
            "bounds": self.bounds,
            "obstacles": [o.to_dict() for o in self.obstacles],
            "mowing_zone": [{"x": p.x, "z": p.z} for p in self.mowing_zone],
            "coverage": self.coverage_fraction(),
        }


def point_in_polygon(x: float, z: float, polygon: Sequence[Point]) -> bool:
    """Even-odd rule point-in-polygon test."""
    inside = False
    count = len(polygon)
    for i in range(count):
        a = polygon[i]
        b = polygon[(i + 1) % count]
        if (a.z > z) != (b.z > z):
            x_cross = a.x + (z - a.z) * (b.x - a.x) / (b.z - a.z)
            if x < x_cross:
                inside = not inside
    return inside
