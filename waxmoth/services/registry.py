"""In-memory registry of aggregated aircraft state."""

from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime
import logging
import threading
from typing import Optional

from waxmoth.ingestors.sbs1 import Message, ns_to_datetime
from waxmoth.models.aircraft import AircraftSnapshot, Position

logger = logging.getLogger("waxmoth.registry")


@dataclass
class Aircraft:
    """Aggregate state for one ICAO address."""

    icao: int
    stations: set[str] = field(default_factory=set)
    last_seen_ns: Optional[int] = None
    call_sign: Optional[str] = None
    altitude: Optional[int] = None
    ground_speed: Optional[float] = None
    track: Optional[float] = None
    vertical_rate: Optional[int] = None
    squawk: Optional[int] = None
    squawk_alert: Optional[bool] = None
    emergency: Optional[bool] = None
    ident_active: Optional[bool] = None
    on_ground: Optional[bool] = None
    location_history: deque[tuple[float, float]] = field(default_factory=deque)
    message_history: deque[Message] = field(default_factory=deque)
    message_count: int = 0
    duplicate_count: int = 0

    @classmethod
    def create(
        cls,
        icao: int,
        *,
        dedup_window: int | None = None,
        location_history_limit: int | None = None,
    ) -> "Aircraft":
        return cls(
            icao=icao,
            location_history=deque(maxlen=location_history_limit),
            message_history=deque(maxlen=dedup_window),
        )

    @property
    def last_seen(self) -> datetime | None:
        if self.last_seen_ns is None:
            return None
        return ns_to_datetime(self.last_seen_ns)

    @property
    def position(self) -> tuple[float, float] | None:
        return self.location_history[-1] if self.location_history else None


def format_icao(icao: int) -> str:
    return f"{icao:06X}"


def snapshot_aircraft(aircraft: Aircraft) -> AircraftSnapshot:
    """Copy an Aircraft into a detached, serialisable snapshot."""

    position = aircraft.position
    return AircraftSnapshot(
        icao=format_icao(aircraft.icao),
        stations=sorted(aircraft.stations),
        last_seen=aircraft.last_seen,
        call_sign=aircraft.call_sign.rstrip() if aircraft.call_sign else None,
        altitude=aircraft.altitude,
        ground_speed=aircraft.ground_speed,
        track=aircraft.track,
        vertical_rate=aircraft.vertical_rate,
        squawk=f"{aircraft.squawk:04d}" if aircraft.squawk is not None else None,
        squawk_alert=aircraft.squawk_alert,
        emergency=aircraft.emergency,
        ident_active=aircraft.ident_active,
        on_ground=aircraft.on_ground,
        position=Position(latitude=position[0], longitude=position[1]) if position else None,
        location_history=[
            Position(latitude=lat, longitude=lon) for lat, lon in aircraft.location_history
        ],
        message_count=aircraft.message_count,
        duplicate_count=aircraft.duplicate_count,
    )


class AircraftRegistry:
    """Thread-safe mapping of ICAO address to :class:`Aircraft`.

    Only the aggregation engine mutates entries, and it does so while holding
    ``lock``. Readers get snapshots built under the same lock.
    """

    def __init__(
        self,
        *,
        dedup_window: int | None = None,
        location_history_limit: int | None = None,
    ) -> None:
        self.dedup_window = dedup_window
        self.location_history_limit = location_history_limit
        self.lock = threading.RLock()
        self._aircraft: dict[int, Aircraft] = {}

    def __len__(self) -> int:
        with self.lock:
            return len(self._aircraft)

    def __contains__(self, icao: object) -> bool:
        with self.lock:
            return icao in self._aircraft

    def get(self, icao: int) -> Aircraft | None:
        with self.lock:
            return self._aircraft.get(icao)

    def get_or_create(self, icao: int) -> tuple[Aircraft, bool]:
        """Return the aircraft for ``icao`` and whether it was just created."""

        with self.lock:
            aircraft = self._aircraft.get(icao)
            if aircraft is not None:
                return aircraft, False
            aircraft = Aircraft.create(
                icao,
                dedup_window=self.dedup_window,
                location_history_limit=self.location_history_limit,
            )
            self._aircraft[icao] = aircraft
            logger.debug("Created registry entry for %s", format_icao(icao))
            return aircraft, True

    def icaos(self) -> list[int]:
        with self.lock:
            return sorted(self._aircraft)

    def snapshot(self, station: str | None = None) -> list[AircraftSnapshot]:
        with self.lock:
            return [
                snapshot_aircraft(self._aircraft[icao])
                for icao in sorted(self._aircraft)
                if station is None or station in self._aircraft[icao].stations
            ]

    def snapshot_aircraft(self, icao: int) -> AircraftSnapshot | None:
        with self.lock:
            aircraft = self._aircraft.get(icao)
            return snapshot_aircraft(aircraft) if aircraft is not None else None

    def station_counts(self) -> dict[str, int]:
        """Number of aircraft each station has reported."""

        counts: Counter[str] = Counter()
        with self.lock:
            for aircraft in self._aircraft.values():
                counts.update(aircraft.stations)
        return dict(counts)


__all__ = ["Aircraft", "AircraftRegistry", "format_icao", "snapshot_aircraft"]
