"""Route, checkpoint and result types shared by the estimation engine."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float

    def as_list(self) -> list[float]:
        return [self.lat, self.lon]

    @classmethod
    def from_list(cls, raw: list[float]) -> "Coordinate":
        """Build from [lat, lon]."""
        return cls(lat=float(raw[0]), lon=float(raw[1]))


@dataclass
class RouteCheckpoint:
    coordinate: Coordinate
    remaining_time: int  # seconds to destination
    remaining_distance: float  # meters to destination


@dataclass
class Route:
    origin: Coordinate
    destination: Coordinate
    path: list[Coordinate] = field(default_factory=list)  # dense polyline
    checkpoints: list[RouteCheckpoint] = field(default_factory=list)  # instruction points


@dataclass
class EtaEstimate:
    remaining_time: int
    remaining_distance: float
    trip_id: int | None = None


@dataclass
class DeviationResult:
    distance_from_path: int  # meters
    deviated: bool


def route_to_dict(route: Route) -> dict:
    """Plain-dict form of a route: coordinates as [lat, lon] lists."""
    return {
        "origin": route.origin.as_list(),
        "destination": route.destination.as_list(),
        "path": [c.as_list() for c in route.path],
        "checkpoints": [
            {
                "coordinate": cp.coordinate.as_list(),
                "remaining_time": cp.remaining_time,
                "remaining_distance": cp.remaining_distance,
            }
            for cp in route.checkpoints
        ],
    }


def route_from_dict(data: dict) -> Route:
    return Route(
        origin=Coordinate.from_list(data["origin"]),
        destination=Coordinate.from_list(data["destination"]),
        path=[Coordinate.from_list(c) for c in data.get("path", [])],
        checkpoints=[
            RouteCheckpoint(
                coordinate=Coordinate.from_list(cp["coordinate"]),
                remaining_time=int(cp["remaining_time"]),
                remaining_distance=float(cp["remaining_distance"]),
            )
            for cp in data.get("checkpoints", [])
        ],
    )
