"""Tests for TripService orchestration and the HTTP layer on top of it."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from route_eta.core.errors import RouteUnavailable, TripNotFound
from route_eta.core.models import Coordinate, Route, RouteCheckpoint
from route_eta.core.trip_service import TripService
from route_eta.core.trip_store import InMemoryTripStore
from route_eta.main import create_app


class FakeRouter:
    """Straight east-bound route along the equator, 1° per checkpoint."""

    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.calls: list[tuple[Coordinate, Coordinate]] = []

    async def compute_route(self, origin: Coordinate, destination: Coordinate) -> Route | None:
        self.calls.append((origin, destination))
        if not self.available:
            return None
        steps = int(round(destination.lon - origin.lon))
        checkpoints = [
            RouteCheckpoint(
                Coordinate(origin.lat, origin.lon + i),
                remaining_time=(steps - i) * 300,
                remaining_distance=(steps - i) * 5_000.0,
            )
            for i in range(steps + 1)
        ]
        return Route(
            origin=origin,
            destination=destination,
            path=[c.coordinate for c in checkpoints],
            checkpoints=checkpoints,
        )


def make_service(router: FakeRouter | None = None, threshold_m: float = 1_000) -> TripService:
    return TripService(InMemoryTripStore(), router or FakeRouter(), threshold_m)


def test_create_trip_returns_first_checkpoint():
    service = make_service()
    eta = asyncio.run(service.create_trip(1, Coordinate(0, 0), Coordinate(0, 2)))
    assert eta.trip_id == 1
    assert eta.remaining_time == 600
    assert eta.remaining_distance == 10_000
    assert eta.rerouted is False


def test_create_trip_reuses_cached_route():
    router = FakeRouter()
    service = make_service(router)

    async def scenario():
        await service.create_trip(1, Coordinate(0, 0), Coordinate(0, 2))
        await service.create_trip(1, Coordinate(0, 0), Coordinate(0, 2))

    asyncio.run(scenario())
    assert len(router.calls) == 1


def test_create_trip_replaces_changed_trip():
    router = FakeRouter()
    service = make_service(router)

    async def scenario():
        await service.create_trip(1, Coordinate(0, 0), Coordinate(0, 2))
        eta = await service.create_trip(1, Coordinate(0, 0), Coordinate(0, 3))
        assert eta.remaining_time == 900
        route = await service.store.get(1)
        assert route.destination == Coordinate(0, 3)

    asyncio.run(scenario())
    assert len(router.calls) == 2


def test_create_trip_route_unavailable():
    service = make_service(FakeRouter(available=False))
    with pytest.raises(RouteUnavailable):
        asyncio.run(service.create_trip(1, Coordinate(0, 0), Coordinate(0, 2)))


def test_get_eta_on_route():
    service = make_service()

    async def scenario():
        await service.create_trip(1, Coordinate(0, 0), Coordinate(0, 2))
        return await service.get_eta(1, Coordinate(0, 1))

    eta = asyncio.run(scenario())
    assert eta.remaining_time == 300
    assert eta.remaining_distance == pytest.approx(5_000)
    assert eta.progress == pytest.approx(0.5)
    assert eta.rerouted is False


def test_get_eta_unknown_trip():
    with pytest.raises(TripNotFound):
        asyncio.run(make_service().get_eta(99, Coordinate(0, 0)))


def test_get_eta_reroutes_on_deviation():
    router = FakeRouter()
    service = make_service(router, threshold_m=500)

    async def scenario():
        await service.create_trip(1, Coordinate(0, 0), Coordinate(0, 2))
        # ~1.1 km north of the route
        eta = await service.get_eta(1, Coordinate(0.01, 0.5))
        route = await service.store.get(1)
        return eta, route

    eta, route = asyncio.run(scenario())
    assert eta.rerouted is True
    assert router.calls[-1] == (Coordinate(0.01, 0.5), Coordinate(0, 2))
    assert route.origin == Coordinate(0.01, 0.5)
    assert route.destination == Coordinate(0, 2)


def test_remove_trip():
    service = make_service()

    async def scenario():
        await service.create_trip(1, Coordinate(0, 0), Coordinate(0, 2))
        return await service.remove_trip(1), await service.remove_trip(1)

    assert asyncio.run(scenario()) == (True, False)


# --- HTTP ------------------------------------------------------------------


def make_client(router: FakeRouter | None = None) -> TestClient:
    app = create_app()
    app.state.trip_service = make_service(router)
    # Not used as a context manager: lifespan (OSRM, scheduler) stays off
    return TestClient(app)


def test_api_trip_lifecycle():
    client = make_client()

    resp = client.get("/api/route-eta/create-trip/5/0/0/0/2")
    assert resp.status_code == 200
    assert resp.json()["remaining_time"] == 600

    resp = client.get("/api/route-eta/eta/5/0/1")
    assert resp.status_code == 200
    body = resp.json()
    assert body["trip_id"] == 5
    assert body["remaining_time"] == 300
    assert body["rerouted"] is False

    assert client.get("/api/route-eta/remove-trip/5").json() is True
    assert client.get("/api/route-eta/remove-trip/5").json() is False


def test_api_unknown_trip_404():
    resp = make_client().get("/api/route-eta/eta/123/0/1")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "No trip with this ID exists."


def test_api_route_unavailable_404():
    resp = make_client(FakeRouter(available=False)).get("/api/route-eta/create-trip/5/0/0/0/2")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Unable to calculate route."


def test_api_rejects_out_of_range_coordinates():
    resp = make_client().get("/api/route-eta/eta/5/91/0")
    assert resp.status_code == 422


def test_health():
    assert make_client().get("/api/health").json() == {"status": "ok"}
