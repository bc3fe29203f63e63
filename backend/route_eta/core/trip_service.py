"""Trip orchestration: route caching, deviation-triggered rerouting and ETA."""

import logging
from typing import Protocol

from route_eta.core.deviation_detector import DeviationDetector
from route_eta.core.errors import RouteUnavailable, TripNotFound
from route_eta.core.eta_estimator import estimate_eta
from route_eta.core.geo_math import coordinates_equal
from route_eta.core.models import Coordinate, Route
from route_eta.core.path_projector import progress_along_path
from route_eta.core.trip_store import TripStore
from route_eta.schemas.eta import EtaResponse

logger = logging.getLogger(__name__)


class RoutingProvider(Protocol):
    async def compute_route(self, origin: Coordinate, destination: Coordinate) -> Route | None:
        ...


class TripService:
    """Keeps one cached route per trip and answers ETA queries against it."""

    def __init__(
        self,
        store: TripStore,
        router: RoutingProvider,
        deviation_threshold_m: float,
    ) -> None:
        self.store = store
        self.router = router
        self.detector = DeviationDetector(deviation_threshold_m)

    async def create_trip(
        self, trip_id: int, origin: Coordinate, destination: Coordinate,
    ) -> EtaResponse:
        """Start a trip, reusing the cached route when the endpoints are unchanged."""
        cached = await self.store.get(trip_id)
        if cached is not None:
            if (
                cached.checkpoints
                and coordinates_equal(origin, cached.origin)
                and coordinates_equal(destination, cached.destination)
            ):
                logger.debug("Trip %d: reusing cached route", trip_id)
                return self._initial_eta(trip_id, cached)
            logger.info("Trip %d: endpoints changed, replacing cached route", trip_id)
            await self.store.remove(trip_id)

        return await self._new_route(trip_id, origin, destination)

    async def get_eta(self, trip_id: int, position: Coordinate) -> EtaResponse:
        cached = await self.store.get(trip_id)
        if cached is None:
            raise TripNotFound(trip_id)

        deviation = self.detector.check(position, cached)
        if deviation.deviated:
            logger.warning(
                "Trip %d: %dm off route (threshold %.0fm), recalculating",
                trip_id, deviation.distance_from_path, self.detector.threshold_m,
            )
            return await self._new_route(trip_id, position, cached.destination, rerouted=True)

        eta = estimate_eta(cached, position, trip_id=trip_id)
        return EtaResponse(
            trip_id=trip_id,
            remaining_time=eta.remaining_time,
            remaining_distance=eta.remaining_distance,
            progress=progress_along_path(position, cached.path),
        )

    async def remove_trip(self, trip_id: int) -> bool:
        removed = await self.store.remove(trip_id)
        if removed:
            logger.info("Trip %d removed", trip_id)
        return removed

    # ------------------------------------------------------------------

    async def _new_route(
        self,
        trip_id: int,
        origin: Coordinate,
        destination: Coordinate,
        rerouted: bool = False,
    ) -> EtaResponse:
        route = await self.router.compute_route(origin, destination)
        if route is None or not route.checkpoints:
            raise RouteUnavailable(
                f"Unable to calculate route from ({origin.lat}, {origin.lon}) "
                f"to ({destination.lat}, {destination.lon})"
            )

        await self.store.put(trip_id, route)
        logger.info(
            "Trip %d: cached route with %d checkpoints", trip_id, len(route.checkpoints),
        )
        return self._initial_eta(trip_id, route, rerouted=rerouted)

    @staticmethod
    def _initial_eta(trip_id: int, route: Route, rerouted: bool = False) -> EtaResponse:
        first = route.checkpoints[0]
        return EtaResponse(
            trip_id=trip_id,
            remaining_time=first.remaining_time,
            remaining_distance=first.remaining_distance,
            progress=0.0,
            rerouted=rerouted,
        )
