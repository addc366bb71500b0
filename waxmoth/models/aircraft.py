"""Read-only aircraft snapshot models served to display clients."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    """A reported latitude/longitude pair."""

    latitude: float = Field(..., description="Latitude in decimal degrees")
    longitude: float = Field(..., description="Longitude in decimal degrees")


class AircraftSnapshot(BaseModel):
    """Aggregated state of one aircraft across every feed station."""

    icao: str = Field(..., description="ICAO address as upper-case hex")
    stations: list[str] = Field(
        default_factory=list, description="Stations that have reported this aircraft"
    )
    last_seen: Optional[datetime] = Field(
        default=None, description="Latest station-logged time of an accepted report"
    )
    call_sign: Optional[str] = Field(default=None, description="Broadcast call sign")
    altitude: Optional[int] = Field(default=None, description="Altitude in feet")
    ground_speed: Optional[float] = Field(
        default=None, description="Ground speed in knots"
    )
    track: Optional[float] = Field(default=None, description="Track over ground in degrees")
    vertical_rate: Optional[int] = Field(
        default=None, description="Vertical rate in feet per minute"
    )
    squawk: Optional[str] = Field(default=None, description="Mode A squawk code")
    squawk_alert: Optional[bool] = Field(default=None, description="Squawk changed")
    emergency: Optional[bool] = Field(default=None, description="Emergency declared")
    ident_active: Optional[bool] = Field(
        default=None, description="Special position identification active"
    )
    on_ground: Optional[bool] = Field(default=None, description="Reporting on ground")
    position: Optional[Position] = Field(
        default=None, description="Most recent reported position"
    )
    location_history: list[Position] = Field(
        default_factory=list, description="Retained positions, oldest first"
    )
    message_count: int = Field(0, description="Accepted reports")
    duplicate_count: int = Field(0, description="Reports dropped as cross-station duplicates")

    model_config = ConfigDict(extra="ignore")


__all__ = ["AircraftSnapshot", "Position"]
