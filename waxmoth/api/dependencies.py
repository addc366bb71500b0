"""FastAPI dependencies exposing the aggregator state held on the app."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from waxmoth.services.feed_service import FeedService
from waxmoth.services.registry import AircraftRegistry


def get_registry(request: Request) -> AircraftRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Aircraft registry is not initialised",
        )
    return registry


def get_feed_service(request: Request) -> FeedService | None:
    return getattr(request.app.state, "feed_service", None)
