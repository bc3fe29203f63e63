"""Estimate remaining time/distance by interpolating between route checkpoints.

Each checkpoint carries the time and distance left to the destination at that
point. The vehicle is placed between two checkpoints (the bracket) found from
its nearest checkpoint, and the remaining figures are interpolated by how far
it still is from the next checkpoint of the bracket.
"""

import logging
from collections.abc import Sequence

from route_eta.core.errors import DivisionUndefined, InvalidArgument
from route_eta.core.geo_math import distance, distance_to_segment
from route_eta.core.models import Coordinate, EtaEstimate, Route, RouteCheckpoint

logger = logging.getLogger(__name__)


class RouteProgressEstimator:
    """Piecewise-linear ETA along an ordered checkpoint list."""

    def estimate(
        self,
        checkpoints: Sequence[RouteCheckpoint],
        position: Coordinate,
        trip_id: int | None = None,
    ) -> EtaEstimate:
        if not checkpoints:
            raise InvalidArgument("Route has no checkpoints")

        if len(checkpoints) == 1:
            # Nothing to interpolate against
            only = checkpoints[0]
            return EtaEstimate(
                remaining_time=only.remaining_time,
                remaining_distance=only.remaining_distance,
                trip_id=trip_id,
            )

        prev_idx, next_idx = self.select_bracket(checkpoints, position)
        previous = checkpoints[prev_idx]
        nxt = checkpoints[next_idx]

        span = distance(previous.coordinate, nxt.coordinate)
        if span == 0:
            raise DivisionUndefined(
                f"Checkpoints {prev_idx} and {next_idx} share coordinate "
                f"({nxt.coordinate.lat}, {nxt.coordinate.lon})"
            )

        # 0.0 at the next checkpoint, 1.0 at the previous one; may exceed 1
        fraction = distance(position, nxt.coordinate) / span

        remaining_distance = nxt.remaining_distance + (
            previous.remaining_distance - nxt.remaining_distance
        ) * fraction
        remaining_time = nxt.remaining_time + (
            previous.remaining_time - nxt.remaining_time
        ) * fraction

        logger.debug(
            "Bracket %d->%d fraction=%.3f remaining=%.0fm/%ds",
            prev_idx, next_idx, fraction, remaining_distance, int(remaining_time),
        )
        return EtaEstimate(
            remaining_time=int(remaining_time),
            remaining_distance=remaining_distance,
            trip_id=trip_id,
        )

    @classmethod
    def select_bracket(
        cls, checkpoints: Sequence[RouteCheckpoint], position: Coordinate,
    ) -> tuple[int, int]:
        """Return (previous, next) checkpoint indices around the position.

        Nearest checkpoint first, then:
          * first checkpoint nearest  -> (first, last)
          * last checkpoint nearest   -> (last - 1, last)
          * interior checkpoint k     -> (k - 1, k) if the position is closer
            to the k-1..k segment than to the k+1..k segment, else (k, k + 1)
        """
        if len(checkpoints) < 2:
            raise InvalidArgument("Bracket needs at least 2 checkpoints")

        closest_idx = cls._find_nearest_checkpoint(checkpoints, position)
        last_idx = len(checkpoints) - 1

        prev_idx = closest_idx
        if closest_idx == 0:
            next_idx = last_idx
        elif closest_idx == last_idx:
            prev_idx = closest_idx - 1
            next_idx = closest_idx
        else:
            before = checkpoints[closest_idx - 1].coordinate
            curr = checkpoints[closest_idx].coordinate
            next_idx = closest_idx + 1
            after = checkpoints[next_idx].coordinate

            pc_distance = distance_to_segment(position, before, curr)
            cn_distance = distance_to_segment(position, after, curr)

            if pc_distance < cn_distance:
                prev_idx = closest_idx - 1
                next_idx = closest_idx
            else:
                prev_idx = closest_idx

        return prev_idx, next_idx

    @staticmethod
    def _find_nearest_checkpoint(
        checkpoints: Sequence[RouteCheckpoint], position: Coordinate,
    ) -> int:
        best_idx = 0
        best_dist = float("inf")
        for i, cp in enumerate(checkpoints):
            d = distance(position, cp.coordinate)
            if d < best_dist:
                best_dist = d
                best_idx = i
        return best_idx


_estimator = RouteProgressEstimator()


def estimate_eta(route: Route, position: Coordinate, trip_id: int | None = None) -> EtaEstimate:
    """ETA of a position along a cached route."""
    return _estimator.estimate(route.checkpoints, position, trip_id=trip_id)
