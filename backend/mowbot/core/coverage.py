"""
Coverage path planning for MowBot.

Implements a boustrophedon (lawnmower serpentine) scan over a simple polygon:
horizontal scan lines spaced one tool width apart, starting half a tool width
inside the polygon's bounding box, with the travel direction alternating on
every line.
"""

from typing import Any, Iterable, List, NamedTuple, Sequence


class Point(NamedTuple):
    """A point on the ground plane (x, z)."""
    x: float
    z: float


def as_point(value: Any) -> Point:
    """
    Coerce a vertex-like value into a Point.

    Accepts Point, objects exposing .x/.z, mappings with "x"/"z" keys,
    and (x, z) pairs.
    """
    if isinstance(value, Point):
        return value
    if hasattr(value, "x") and hasattr(value, "z"):
        return Point(float(value.x), float(value.z))
    if isinstance(value, dict):
        return Point(float(value["x"]), float(value["z"]))
    x, z = value
    return Point(float(x), float(z))


def _scanline_intersections(vertices: Sequence[Point], z: float) -> List[float]:
    """
    Intersect the horizontal line at z with every polygon edge.

    Edges parallel to the scan line never intersect. Each edge covers the
    half-open range [min_z, max_z) so a vertex shared by two edges is
    counted once.
    """
    xs = []
    count = len(vertices)
    for i in range(count):
        a = vertices[i]
        b = vertices[(i + 1) % count]

        if a.z == b.z:
            continue

        low, high = (a, b) if a.z < b.z else (b, a)
        if low.z <= z < high.z:
            t = (z - a.z) / (b.z - a.z)
            xs.append(a.x + t * (b.x - a.x))

    xs.sort()
    return xs


def plan_coverage(polygon: Iterable[Any], tool_width: float) -> List[Point]:
    """
    Plan a boustrophedon coverage path over a polygon.

    Args:
        polygon: Ordered vertices (closing edge implied), at least 3
        tool_width: Spacing between scan lines; must be positive

    Returns:
        Ordered waypoints. Every span contributes its two endpoints; even
        scan lines run toward +x, odd scan lines toward -x. Empty if the
        polygon has fewer than 3 vertices.

    Raises:
        ValueError: If tool_width is not positive
    """
    vertices = [as_point(v) for v in polygon]
    if len(vertices) < 3:
        return []

    if not tool_width > 0:
        raise ValueError(f"tool_width must be positive, got {tool_width!r}")

    z_min = min(v.z for v in vertices)
    z_max = max(v.z for v in vertices)

    waypoints: List[Point] = []
    line = 0
    z = z_min + tool_width / 2

    while z < z_max:
        xs = _scanline_intersections(vertices, z)

        # Unpaired trailing intersection (edge touching) is dropped
        if len(xs) % 2:
            xs = xs[:-1]

        line_points = [Point(x, z) for x in xs]
        if line % 2:
            line_points.reverse()
        waypoints.extend(line_points)

        line += 1
        z = z_min + tool_width / 2 + line * tool_width

    return waypoints
