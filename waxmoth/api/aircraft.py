"""Read-only aircraft endpoints for display clients."""

from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from waxmoth.api.dependencies import get_registry
from waxmoth.models import AircraftSnapshot
from waxmoth.services.registry import AircraftRegistry

router = APIRouter(prefix="/api/v1", tags=["aircraft"])

logger = logging.getLogger("waxmoth.api")

_ICAO_RE = re.compile(r"[0-9A-Fa-f]{1,8}")


@router.get(
    "/aircraft",
    response_model=list[AircraftSnapshot],
    summary="List aggregated aircraft",
)
def list_aircraft(
    station: Optional[str] = Query(
        default=None, description="Only aircraft reported by this station"
    ),
    registry: AircraftRegistry = Depends(get_registry),
) -> list[AircraftSnapshot]:
    """Return the latest aggregated state of every known aircraft, sorted by ICAO."""

    return registry.snapshot(station=station)


@router.get(
    "/aircraft/{icao}",
    response_model=AircraftSnapshot,
    summary="Get one aircraft",
)
def get_aircraft(
    icao: str, registry: AircraftRegistry = Depends(get_registry)
) -> AircraftSnapshot:
    if not _ICAO_RE.fullmatch(icao):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="icao must be a hexadecimal address",
        )

    snapshot = registry.snapshot_aircraft(int(icao, 16))
    if snapshot is None:
        logger.debug("Aircraft %s requested but not known", icao)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Aircraft not found")
    return snapshot
