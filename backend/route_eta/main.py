"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from route_eta.api import trips
from route_eta.config import settings
from route_eta.core.osrm_client import OsrmRouter
from route_eta.core.scheduler import create_scheduler
from route_eta.core.trip_service import TripService
from route_eta.core.trip_store import InMemoryTripStore, RedisTripStore, TripStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_store() -> TripStore:
    if settings.trip_store_backend == "redis":
        return RedisTripStore.from_url(settings.redis_url, settings.trip_ttl_seconds)
    if settings.trip_store_backend != "memory":
        raise ValueError(f"Unknown trip store backend: {settings.trip_store_backend!r}")
    return InMemoryTripStore(settings.trip_ttl_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    store = create_store()
    router = OsrmRouter()
    app.state.trip_service = TripService(store, router, settings.deviation_threshold_m)

    scheduler = create_scheduler(store)
    scheduler.start()
    logger.info(
        "Route ETA started - %s trip store, deviation threshold %.0fm",
        settings.trip_store_backend, settings.deviation_threshold_m,
    )

    yield

    # Shutdown
    scheduler.shutdown(wait=False)
    await router.close()
    await store.close()
    logger.info("Route ETA shut down")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Route ETA Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(trips.router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
