"""Trip ETA REST API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Request

from route_eta.core.errors import RouteEngineError, RouteUnavailable, TripNotFound
from route_eta.core.models import Coordinate
from route_eta.core.trip_service import TripService
from route_eta.schemas.eta import EtaResponse

router = APIRouter(prefix="/api/route-eta", tags=["route-eta"])

Lat = Annotated[float, Path(ge=-90, le=90)]
Lon = Annotated[float, Path(ge=-180, le=180)]


def get_trip_service(request: Request) -> TripService:
    """TripService wired up in main.py."""
    return request.app.state.trip_service


@router.get(
    "/create-trip/{trip_id}/{origin_lat}/{origin_lon}/{destination_lat}/{destination_lon}",
    response_model=EtaResponse,
)
async def create_trip(
    trip_id: int,
    origin_lat: Lat,
    origin_lon: Lon,
    destination_lat: Lat,
    destination_lon: Lon,
    service: TripService = Depends(get_trip_service),
):
    """Create a trip (or reuse the cached one) and return its starting ETA."""
    try:
        return await service.create_trip(
            trip_id,
            Coordinate(origin_lat, origin_lon),
            Coordinate(destination_lat, destination_lon),
        )
    except RouteUnavailable:
        raise HTTPException(status_code=404, detail="Unable to calculate route.")


@router.get("/eta/{trip_id}/{current_lat}/{current_lon}", response_model=EtaResponse)
async def get_eta(
    trip_id: int,
    current_lat: Lat,
    current_lon: Lon,
    service: TripService = Depends(get_trip_service),
):
    """ETA for the current position; reroutes if the vehicle left the route."""
    try:
        return await service.get_eta(trip_id, Coordinate(current_lat, current_lon))
    except TripNotFound:
        raise HTTPException(status_code=404, detail="No trip with this ID exists.")
    except RouteUnavailable:
        raise HTTPException(status_code=404, detail="Unable to calculate route.")
    except RouteEngineError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/remove-trip/{trip_id}", response_model=bool)
async def remove_trip(trip_id: int, service: TripService = Depends(get_trip_service)):
    """Remove a trip from the cache. True if it existed."""
    return await service.remove_trip(trip_id)
