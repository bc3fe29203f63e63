"""Decide whether a vehicle has left its planned route."""

from collections.abc import Sequence

from route_eta.core.models import Coordinate, DeviationResult, Route
from route_eta.core.path_projector import distance_to_path


def check_deviation(
    position: Coordinate, path: Sequence[Coordinate], threshold_m: float,
) -> DeviationResult:
    """Deviated when the distance to the path is strictly above the threshold."""
    dist_m = distance_to_path(position, path)
    return DeviationResult(distance_from_path=dist_m, deviated=dist_m > threshold_m)


class DeviationDetector:
    """Deviation check against a route with a fixed threshold in meters."""

    def __init__(self, threshold_m: float) -> None:
        self.threshold_m = threshold_m

    def check(self, position: Coordinate, route: Route) -> DeviationResult:
        return check_deviation(position, route.path, self.threshold_m)
