"""Async OSRM client that turns an origin/destination pair into a cached Route."""

import asyncio
import logging

import httpx

from route_eta.config import settings
from route_eta.core.models import Coordinate, Route, RouteCheckpoint

logger = logging.getLogger(__name__)

# Seconds between retries; one retry per entry
RETRY_BACKOFF = (2, 4, 8)


class OsrmRouter:
    """Fetches driving routes with maneuver steps from an OSRM server."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        profile: str | None = None,
        retry_backoff: tuple[float, ...] = RETRY_BACKOFF,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=settings.osrm_base_url,
            timeout=settings.routing_timeout_seconds,
            headers={"Accept": "application/json"},
        )
        self.profile = profile or settings.osrm_profile
        self.retry_backoff = retry_backoff

    async def close(self) -> None:
        await self._client.aclose()

    async def compute_route(self, origin: Coordinate, destination: Coordinate) -> Route | None:
        """Fastest route between two points, or None if OSRM can't provide one."""
        # OSRM wants lon,lat
        coords = f"{origin.lon:.6f},{origin.lat:.6f};{destination.lon:.6f},{destination.lat:.6f}"
        resp = await self._get_with_retry(
            f"/route/v1/{self.profile}/{coords}",
            params={"overview": "full", "geometries": "geojson", "steps": "true"},
        )
        if resp is None:
            return None

        try:
            data = resp.json()
        except ValueError:
            logger.exception("Failed to parse OSRM response")
            return None

        if data.get("code") != "Ok" or not data.get("routes"):
            logger.warning("OSRM returned no route: %s", data.get("code"))
            return None

        try:
            route = self.parse_route(data["routes"][0], origin, destination)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning("Malformed OSRM route: %s", e)
            return None

        if route is not None:
            logger.info(
                "OSRM route: %d path points, %d checkpoints, %.0fm / %ds",
                len(route.path), len(route.checkpoints),
                route.checkpoints[0].remaining_distance,
                route.checkpoints[0].remaining_time,
            )
        return route

    @staticmethod
    def parse_route(raw: dict, origin: Coordinate, destination: Coordinate) -> Route | None:
        """Build a Route from one OSRM route object.

        Step figures are converted from "since start" to "left to destination"
        using the offset of the final (arrive) step.
        """
        # Convert [lon, lat] -> Coordinate(lat, lon)
        path = [Coordinate(lat=c[1], lon=c[0]) for c in raw["geometry"]["coordinates"]]
        steps = [step for leg in raw["legs"] for step in leg["steps"]]
        if len(path) < 2 or not steps:
            return None

        time_offsets = []
        dist_offsets = []
        cum_time = 0.0
        cum_dist = 0.0
        for step in steps:
            time_offsets.append(cum_time)
            dist_offsets.append(cum_dist)
            cum_time += float(step["duration"])
            cum_dist += float(step["distance"])

        last_time = time_offsets[-1]
        last_dist = dist_offsets[-1]
        checkpoints = []
        for step, t, d in zip(steps, time_offsets, dist_offsets):
            lon, lat = step["maneuver"]["location"]
            checkpoints.append(RouteCheckpoint(
                coordinate=Coordinate(lat=lat, lon=lon),
                remaining_time=int(last_time - t),
                remaining_distance=last_dist - d,
            ))

        return Route(origin=origin, destination=destination, path=path, checkpoints=checkpoints)

    async def _get_with_retry(self, path: str, params: dict) -> httpx.Response | None:
        """GET request with retry and backoff on timeouts and 5xx."""
        attempts = len(self.retry_backoff) + 1
        for attempt in range(attempts):
            try:
                resp = await self._client.get(path, params=params)
                resp.raise_for_status()
                return resp
            except (httpx.ReadTimeout, httpx.ConnectTimeout, httpx.ConnectError) as e:
                if attempt < attempts - 1:
                    wait = self.retry_backoff[attempt]
                    logger.warning(
                        "OSRM attempt %d/%d failed (%s), retrying in %ss",
                        attempt + 1, attempts, type(e).__name__, wait,
                    )
                    await asyncio.sleep(wait)
                else:
                    logger.error("OSRM failed after %d attempts: %s", attempts, e)
                    return None
            except httpx.HTTPStatusError as e:
                if e.response.status_code >= 500 and attempt < attempts - 1:
                    wait = self.retry_backoff[attempt]
                    logger.warning(
                        "OSRM attempt %d/%d got HTTP %d, retrying in %ss",
                        attempt + 1, attempts, e.response.status_code, wait,
                    )
                    await asyncio.sleep(wait)
                elif e.response.status_code == 400:
                    # OSRM answers NoRoute/InvalidQuery with 400 and a JSON body
                    return e.response
                else:
                    logger.error("OSRM request failed: %s", e)
                    return None
            except httpx.HTTPError:
                logger.exception("OSRM request failed")
                return None
        return None
