"""Project GPS positions onto a route polyline."""

from collections.abc import Sequence

from shapely.geometry import LineString, Point

from route_eta.core.errors import InvalidArgument
from route_eta.core.geo_math import distance_to_segment
from route_eta.core.models import Coordinate


def distance_to_path(p: Coordinate, path: Sequence[Coordinate]) -> int:
    """Shortest distance in whole meters from p to any segment of the path."""
    if len(path) < 2:
        raise InvalidArgument(f"Path needs at least 2 points, got {len(path)}")

    closest = float("inf")
    for i in range(len(path) - 1):
        d = distance_to_segment(p, path[i], path[i + 1])
        if d < closest:
            closest = d
    return int(closest)


def progress_along_path(p: Coordinate, path: Sequence[Coordinate]) -> float:
    """Fraction (0.0–1.0) of the path travelled at the projection of p.

    Planar linear referencing in degrees, good enough for a progress bar.
    """
    if len(path) < 2:
        raise InvalidArgument(f"Path needs at least 2 points, got {len(path)}")

    # Shapely uses (x, y) = (lon, lat)
    line = LineString([(c.lon, c.lat) for c in path])
    if line.length == 0:
        return 0.0
    return line.project(Point(p.lon, p.lat), normalized=True)
