"""Fold parsed SBS-1 messages into per-aircraft state, dropping cross-station duplicates."""

from __future__ import annotations

import logging

from waxmoth.domain import MessageType
from waxmoth.ingestors.sbs1 import Message
from waxmoth.services.registry import Aircraft, AircraftRegistry, format_icao

logger = logging.getLogger("waxmoth.aggregator")

# Aircraft fields overwritten by each transmission subtype. Positions are
# handled separately because they append rather than overwrite.
_SUBTYPE_UPDATES: dict[int, tuple[str, ...]] = {
    1: ("call_sign",),
    2: ("altitude", "ground_speed", "track", "on_ground"),
    3: ("altitude", "squawk_alert", "emergency", "ident_active", "on_ground"),
    4: ("ground_speed", "track", "vertical_rate"),
    5: ("altitude", "squawk_alert", "ident_active", "on_ground"),
    6: ("altitude", "squawk", "squawk_alert", "emergency", "ident_active", "on_ground"),
    7: ("altitude", "on_ground"),
    8: ("on_ground",),
}

# Subtypes where a same-time report with different content is a distinct
# event: a mismatch ends the scan.
_EXACT_RULES: dict[int, tuple[str, ...]] = {
    2: ("altitude", "ground_speed", "track", "latitude", "longitude", "on_ground"),
    3: ("latitude", "longitude"),
    4: ("ground_speed", "track", "vertical_rate"),
}

# Subtypes where only a match is conclusive.
_MATCH_RULES: dict[int, tuple[str, ...]] = {
    1: ("call_sign",),
    5: ("altitude",),
    6: ("squawk",),
    7: ("altitude",),
    8: ("on_ground",),
}


def _fields_equal(a: Message, b: Message, names: tuple[str, ...]) -> bool:
    return all(getattr(a, name) == getattr(b, name) for name in names)


def _compare(message: Message, previous: Message) -> bool | None:
    """Return True for a duplicate, False for a distinct event, None if undecided."""

    exact = _EXACT_RULES.get(message.subtype)
    if exact is not None:
        return _fields_equal(message, previous, exact)

    match = _MATCH_RULES.get(message.subtype)
    if match is not None and _fields_equal(message, previous, match):
        return True
    return None


def is_duplicate(aircraft: Aircraft, message: Message) -> bool:
    """Check ``message`` against the aircraft's recent history from other stations.

    History is scanned newest first. Reports are expected roughly in
    generation order, so the scan stops at the first entry generated
    strictly before ``message``.
    """

    for previous in reversed(aircraft.message_history):
        if previous.station == message.station:
            continue
        if previous.generated_ns < message.generated_ns:
            return False
        if (
            previous.generated_ns != message.generated_ns
            or previous.type is not message.type
            or previous.subtype != message.subtype
        ):
            continue

        verdict = _compare(message, previous)
        if verdict is not None:
            return verdict

        logger.warning(
            "Possible duplicate for %s: %r from %s vs %r from %s",
            format_icao(aircraft.icao),
            message.raw,
            message.station,
            previous.raw,
            previous.station,
        )
    return False


def _carries(value: object) -> bool:
    # A blank call sign counts as absent.
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None


def apply_message(aircraft: Aircraft, message: Message) -> None:
    """Overwrite the fields ``message`` carries and record its position."""

    if aircraft.last_seen_ns is None or message.logged_ns > aircraft.last_seen_ns:
        aircraft.last_seen_ns = message.logged_ns

    if message.type is MessageType.ID_CHANGE and _carries(message.call_sign):
        aircraft.call_sign = message.call_sign

    for name in _SUBTYPE_UPDATES.get(message.subtype, ()):
        value = getattr(message, name)
        if _carries(value):
            setattr(aircraft, name, value)

    location = message.location
    if location is not None:
        aircraft.location_history.append(location)


class AggregationEngine:
    """Single writer for the aircraft registry.

    ``accept`` holds the registry lock for its whole duration so the
    duplicate scan never races with another append to the same history.
    """

    def __init__(self, registry: AircraftRegistry) -> None:
        self.registry = registry
        self.accepted = 0
        self.duplicates = 0

    def accept(self, message: Message) -> bool:
        """Apply ``message``; return False if it was dropped as a duplicate."""

        with self.registry.lock:
            aircraft, created = self.registry.get_or_create(message.icao)
            if created:
                logger.info(
                    "New aircraft %s reported by %s", format_icao(message.icao), message.station
                )

            aircraft.stations.add(message.station)

            if is_duplicate(aircraft, message):
                aircraft.duplicate_count += 1
                self.duplicates += 1
                logger.debug(
                    "Discarded duplicate for %s from %s: %r",
                    format_icao(message.icao),
                    message.station,
                    message.raw,
                )
                return False

            apply_message(aircraft, message)
            aircraft.message_history.append(message)
            aircraft.message_count += 1
            self.accepted += 1
            return True


__all__ = ["AggregationEngine", "apply_message", "is_duplicate"]
