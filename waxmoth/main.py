from __future__ import annotations

import contextlib
import logging
from pathlib import Path
import time

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles

from waxmoth.api import api_router
from waxmoth.config import settings
from waxmoth.services import AggregationEngine, AircraftRegistry, FeedService

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("waxmoth")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the aggregator and run the feed connectors for the app's lifetime."""

    registry = AircraftRegistry(
        dedup_window=settings.dedup_window,
        location_history_limit=settings.location_history_limit,
    )
    engine = AggregationEngine(registry)
    app.state.registry = registry
    app.state.engine = engine
    app.state.feed_service = None

    if settings.enable_feeds:
        if not settings.stations:
            logger.warning("Feed ingestion enabled but no stations configured; skipping startup")
        else:
            service = FeedService(
                engine,
                stations=settings.stations,
                queue_size=settings.feed_queue_size,
                reconnect=settings.feed_reconnect,
                backoff_initial=settings.feed_backoff_initial,
                backoff_max=settings.feed_backoff_max,
                max_retries=settings.feed_max_retries,
                connect_timeout=settings.feed_connect_timeout,
            )
            service.start()
            app.state.feed_service = service
            logger.info("Feed ingestion started for %s", ", ".join(settings.stations))

    try:
        yield
    finally:
        feed_service: FeedService | None = getattr(app.state, "feed_service", None)
        if feed_service:
            await feed_service.stop()


app = FastAPI(title="Waxmoth Aggregator", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log basic request information for observability."""

    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "HTTP %s %s -> %s (%.2f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.include_router(api_router)

if settings.static_dir:
    if Path(settings.static_dir).is_dir():
        app.mount("/www", StaticFiles(directory=settings.static_dir, html=True), name="www")
    else:
        logger.warning("Static directory %s does not exist; viewer disabled", settings.static_dir)


@app.get("/", summary="Root")
def read_root() -> dict[str, str]:
    """Basic root endpoint for quick verification."""

    return {"message": "Waxmoth aggregator is running"}
