"""Trip route storage: in-process dict or Redis."""

import logging
import time
from abc import ABC, abstractmethod

import orjson
import redis.asyncio as aioredis

from route_eta.core.models import Route, route_from_dict, route_to_dict

logger = logging.getLogger(__name__)

KEY_PREFIX = "route_eta:trip:"


class TripStore(ABC):
    """Cached routes keyed by trip ID."""

    @abstractmethod
    async def get(self, trip_id: int) -> Route | None:
        ...

    @abstractmethod
    async def put(self, trip_id: int, route: Route) -> None:
        ...

    @abstractmethod
    async def remove(self, trip_id: int) -> bool:
        """Drop a trip. True if it existed."""

    async def close(self) -> None:
        pass


class InMemoryTripStore(TripStore):
    """Dict-backed store for a single process. ttl_seconds=0 keeps trips forever."""

    def __init__(self, ttl_seconds: int = 0, clock=time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # trip_id -> (route, stored_at)
        self._trips: dict[int, tuple[Route, float]] = {}

    def __len__(self) -> int:
        return len(self._trips)

    async def get(self, trip_id: int) -> Route | None:
        entry = self._trips.get(trip_id)
        if entry is None:
            return None
        route, stored_at = entry
        if self._expired(stored_at):
            del self._trips[trip_id]
            return None
        return route

    async def put(self, trip_id: int, route: Route) -> None:
        self._trips[trip_id] = (route, self._clock())

    async def remove(self, trip_id: int) -> bool:
        return self._trips.pop(trip_id, None) is not None

    def purge_expired(self) -> int:
        """Remove all expired trips, returning how many were dropped."""
        stale = [tid for tid, (_, ts) in self._trips.items() if self._expired(ts)]
        for tid in stale:
            del self._trips[tid]
        if stale:
            logger.info("Purged %d expired trips", len(stale))
        return len(stale)

    def _expired(self, stored_at: float) -> bool:
        return self.ttl_seconds > 0 and self._clock() - stored_at > self.ttl_seconds


class RedisTripStore(TripStore):
    """Shared store for multi-worker deployments; Redis handles expiry."""

    def __init__(self, redis: aioredis.Redis, ttl_seconds: int = 0) -> None:
        self._redis = redis
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int = 0) -> "RedisTripStore":
        return cls(aioredis.from_url(url, decode_responses=False), ttl_seconds)

    async def get(self, trip_id: int) -> Route | None:
        payload = await self._redis.get(self._key(trip_id))
        if payload is None:
            return None
        return route_from_dict(orjson.loads(payload))

    async def put(self, trip_id: int, route: Route) -> None:
        payload = orjson.dumps(route_to_dict(route))
        await self._redis.set(self._key(trip_id), payload, ex=self.ttl_seconds or None)

    async def remove(self, trip_id: int) -> bool:
        return bool(await self._redis.delete(self._key(trip_id)))

    async def close(self) -> None:
        await self._redis.aclose()

    @staticmethod
    def _key(trip_id: int) -> str:
        return f"{KEY_PREFIX}{trip_id}"
