"""Errors raised by the route-progress engine and the trip service."""


class RouteEngineError(Exception):
    """Base class for deterministic engine failures caused by input shape."""


class InvalidArgument(RouteEngineError, ValueError):
    """Malformed geometry: a path with < 2 points or no checkpoints."""


class DivisionUndefined(RouteEngineError, ZeroDivisionError):
    """Interpolation bracket has zero length."""


class TripNotFound(LookupError):
    def __init__(self, trip_id: int) -> None:
        super().__init__(f"No trip with ID {trip_id}")
        self.trip_id = trip_id


class RouteUnavailable(RuntimeError):
    """The routing provider could not produce a route."""
