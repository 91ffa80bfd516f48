"""
Tests for the seeded procedural world.
"""

import pytest

from mowbot.core.coverage import Point
from mowbot.core.world import (
    GeneratedWorld,
    GroundType,
    ObstacleType,
    WATER_LEVEL,
    point_in_polygon,
)


class TestGeneration:
    """Determinism and hazard selection."""

    def test_same_seed_same_world(self):
        a = GeneratedWorld(seed=42)
        b = GeneratedWorld(seed=42)
        assert a.obstacles == b.obstacles
        assert a.get_mowing_zone() == b.get_mowing_zone()
        assert a.get_height(3.0, -7.0) == b.get_height(3.0, -7.0)

    def test_different_seed_different_world(self):
        assert GeneratedWorld(seed=1).get_mowing_zone() != GeneratedWorld(seed=2).get_mowing_zone()

    def test_zone_is_polygon_inside_bounds(self):
        world = GeneratedWorld(seed=7)
        zone = world.get_mowing_zone()
        assert 5 <= len(zone) <= 8
        assert all(isinstance(p, Point) for p in zone)
        assert all(abs(p.x) <= world.bounds and abs(p.z) <= world.bounds for p in zone)

    def test_zone_is_a_copy(self):
        world = GeneratedWorld(seed=7)
        world.get_mowing_zone().clear()
        assert len(world.get_mowing_zone()) >= 5

    def test_no_hazards(self):
        world = GeneratedWorld(seed=3, hazards=[])
        assert world.obstacles == []
        assert world.get_traction(0.0, 0.0) == 1.0

    def test_only_rocks(self):
        world = GeneratedWorld(seed=3, hazards=["rocks"])
        assert world.obstacles
        assert {o.type for o in world.obstacles} == {ObstacleType.ROCK}


class TestQueries:
    """World oracle queries."""

    def test_obstacle_hazard(self):
        world = GeneratedWorld(seed=3, hazards=["rocks"])
        rock = world.obstacles[0]
        assert world.get_hazard_type(rock.x, rock.z) == GroundType.OBSTACLE

    def test_water_hazard_and_traction(self):
        world = GeneratedWorld(seed=11, hazards=["water"])
        cx, cz = world.pond_centre
        assert world.get_height(cx, cz) < WATER_LEVEL
        assert world.get_hazard_type(cx, cz) == GroundType.WATER
        assert world.get_traction(cx, cz) == pytest.approx(0.1)

    def test_no_grass_under_water(self):
        world = GeneratedWorld(seed=11, hazards=["water"])
        flooded = 0
        n = world.grass.cells_per_side
        for i in range(n):
            for j in range(n):
                x, z = world.grass.cell_centre(i, j)
                if world.get_height(x, z) < WATER_LEVEL:
                    flooded += 1
                    assert world.grass.heights[i][j] == 0.0
        assert flooded > 0

    def test_grass_outside_world_is_zero(self):
        world = GeneratedWorld(seed=3, hazards=[])
        assert world.get_grass_height(500.0, 500.0) == 0.0


class TestMowing:
    """Grass cutting and coverage."""

    def test_cut_grass(self):
        world = GeneratedWorld(seed=3, hazards=[])
        assert world.get_grass_height(0.2, 0.2) == pytest.approx(0.8)

        cut = world.cut_grass(0.2, 0.2)

        assert cut > 0
        assert world.get_grass_height(0.2, 0.2) == pytest.approx(0.1)
        assert world.cut_grass(0.2, 0.2) == 0

    def test_coverage_fraction_grows(self):
        world = GeneratedWorld(seed=3, hazards=[])
        assert world.coverage_fraction() == 0.0
        world.cut_grass(0.0, 0.0)
        assert 0.0 < world.coverage_fraction() < 1.0

    def test_to_dict(self):
        data = GeneratedWorld(seed=3, hazards=["poles"]).to_dict()
        assert data["seed"] == 3
        assert data["hazards"] == ["poles"]
        assert all(o["type"] == "POLE" for o in data["obstacles"])
        assert data["coverage"] == 0.0


class TestPointInPolygon:
    def test_square(self):
        square = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
        assert point_in_polygon(5, 5, square)
        assert not point_in_polygon(15, 5, square)
        assert not point_in_polygon(5, -1, square)
