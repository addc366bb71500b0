"""Feed station status endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from waxmoth.api.dependencies import get_feed_service
from waxmoth.models import StationStatus
from waxmoth.services.feed_service import FeedService

router = APIRouter(prefix="/api/v1", tags=["stations"])


@router.get(
    "/stations",
    response_model=list[StationStatus],
    summary="List feed stations",
)
def list_stations(
    feed_service: FeedService | None = Depends(get_feed_service),
) -> list[StationStatus]:
    """Connection state and counters for every configured feed station."""

    if feed_service is None:
        return []
    return feed_service.statuses()
