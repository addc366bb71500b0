"""Feed station status models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class StationStatus(BaseModel):
    """Connection state and counters for one feed connector."""

    station: str = Field(..., description="Station address (host:port)")
    connected: bool = Field(False, description="Whether the stream is currently open")
    running: bool = Field(False, description="Whether the connector task is still alive")
    connect_attempts: int = Field(0, description="Connection attempts made")
    lines_read: int = Field(0, description="Non-empty lines read from the stream")
    messages_parsed: int = Field(0, description="Lines parsed into messages")
    parse_errors: int = Field(0, description="Lines rejected by the parser")
    last_error: Optional[str] = Field(
        default=None, description="Most recent connection or read error"
    )
    last_message_at: Optional[datetime] = Field(
        default=None, description="Wall-clock time the last message was parsed (UTC)"
    )
    aircraft_count: int = Field(0, description="Aircraft this station has reported")


__all__ = ["StationStatus"]
