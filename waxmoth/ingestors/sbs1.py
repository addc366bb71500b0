"""Parser for SBS-1 BaseStation report lines."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
import re
from typing import Callable, Optional

from waxmoth.domain import CALL_SIGN_TYPES, WIRE_CODES, MessageType

FIELD_COUNT = 22
MAX_FRACTION_DIGITS = 9

# Field positions within a report. Positions 2, 3 and 5 (session, aircraft and
# flight ids) are not used.
_TYPE = 0
_SUBTYPE = 1
_ICAO = 4
_GENERATED_DATE = 6
_GENERATED_TIME = 7
_LOGGED_DATE = 8
_LOGGED_TIME = 9
_CALL_SIGN = 10
_ALTITUDE = 11
_GROUND_SPEED = 12
_TRACK = 13
_LATITUDE = 14
_LONGITUDE = 15
_VERTICAL_RATE = 16
_SQUAWK = 17
_SQUAWK_ALERT = 18
_EMERGENCY = 19
_IDENT_ACTIVE = 20
_ON_GROUND = 21

_EPOCH = datetime(1970, 1, 1)
_NANOS_PER_MICRO = 1000

_TIMESTAMP_RE = re.compile(
    r"(?P<year>[0-9]{4})/(?P<month>[0-9]{2})/(?P<day>[0-9]{2}) "
    r"(?P<hour>[0-9]{2}):(?P<minute>[0-9]{2}):(?P<second>[0-9]{2})"
    r"(?:\.(?P<fraction>[0-9]+))?"
)
_HEX_RE = re.compile(r"[0-9A-Fa-f]+")
_UNSIGNED_RE = re.compile(r"[0-9]+")
_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_TRUE_FLAGS = frozenset({"1", "-1"})


class SbsParseError(ValueError):
    """Base class for SBS-1 report parse failures."""


class FieldCountError(SbsParseError):
    def __init__(self, count: int) -> None:
        super().__init__(f"expected {FIELD_COUNT} fields, got {count}")
        self.count = count


class SubtypeError(SbsParseError):
    def __init__(self, value: str) -> None:
        super().__init__(f"invalid transmission subtype: {value!r}")
        self.value = value


class IcaoError(SbsParseError):
    def __init__(self, value: str) -> None:
        super().__init__(f"invalid ICAO address: {value!r}")
        self.value = value


class TimestampError(SbsParseError):
    def __init__(self, field_name: str, value: str) -> None:
        super().__init__(f"invalid {field_name} timestamp: {value!r}")
        self.field = field_name
        self.value = value


class FieldParseError(SbsParseError):
    """A subtype-specific field could not be parsed as its numeric type."""

    def __init__(self, subtype: int, field_name: str, value: str) -> None:
        super().__init__(
            f"unable to parse {field_name} for transmission subtype {subtype}: {value!r}"
        )
        self.subtype = subtype
        self.field = field_name
        self.value = value


@dataclass
class Message:
    """One parsed SBS-1 report.

    Timestamps are kept as integer nanoseconds since the epoch so the full
    precision of the feed survives; ``generated_at``/``logged_at`` give the
    same instants as (microsecond) datetimes. Optional fields stay ``None``
    unless the report carried them.
    """

    station: str
    type: MessageType
    icao: int
    generated_ns: int
    logged_ns: int
    subtype: Optional[int] = None
    call_sign: Optional[str] = None
    altitude: Optional[int] = None
    ground_speed: Optional[float] = None
    track: Optional[float] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    vertical_rate: Optional[int] = None
    squawk: Optional[int] = None
    squawk_alert: Optional[bool] = None
    emergency: Optional[bool] = None
    ident_active: Optional[bool] = None
    on_ground: Optional[bool] = None
    raw: Optional[str] = field(default=None, compare=False, repr=False)

    @property
    def generated_at(self) -> datetime:
        return ns_to_datetime(self.generated_ns)

    @property
    def logged_at(self) -> datetime:
        return ns_to_datetime(self.logged_ns)

    @property
    def location(self) -> tuple[float, float] | None:
        if self.latitude is None or self.longitude is None:
            return None
        return (self.latitude, self.longitude)


def ns_to_datetime(value_ns: int) -> datetime:
    """Convert epoch nanoseconds to a naive datetime (sub-microsecond digits dropped)."""

    return _EPOCH + timedelta(microseconds=value_ns // _NANOS_PER_MICRO)


def parse_timestamp(date_text: str, time_text: str, field_name: str = "generated") -> int:
    """Combine an SBS date and time field into epoch nanoseconds.

    Stations sometimes send more fractional digits than nanosecond precision;
    anything past the ninth digit is dropped rather than rejected.
    """

    combined = f"{date_text} {time_text}"
    match = _TIMESTAMP_RE.fullmatch(combined)
    if not match:
        raise TimestampError(field_name, combined)

    fraction = (match.group("fraction") or "")[:MAX_FRACTION_DIGITS]
    try:
        moment = datetime(
            int(match.group("year")),
            int(match.group("month")),
            int(match.group("day")),
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second")),
        )
    except ValueError as exc:
        raise TimestampError(field_name, combined) from exc

    micros = (moment - _EPOCH) // timedelta(microseconds=1)
    return micros * _NANOS_PER_MICRO + int(fraction.ljust(MAX_FRACTION_DIGITS, "0"))


def _parse_int(raw: str) -> int:
    if not _INT_RE.fullmatch(raw):
        raise ValueError(raw)
    return int(raw)


def _parse_float(raw: str) -> float:
    if not _FLOAT_RE.fullmatch(raw):
        raise ValueError(raw)
    return float(raw)


def _parse_squawk(raw: str) -> int:
    if not _UNSIGNED_RE.fullmatch(raw) or int(raw) > 0xFFFF:
        raise ValueError(raw)
    return int(raw)


_NUMERIC_FIELDS: dict[str, tuple[int, Callable[[str], int | float]]] = {
    "altitude": (_ALTITUDE, _parse_int),
    "ground_speed": (_GROUND_SPEED, _parse_float),
    "track": (_TRACK, _parse_float),
    "latitude": (_LATITUDE, _parse_float),
    "longitude": (_LONGITUDE, _parse_float),
    "vertical_rate": (_VERTICAL_RATE, _parse_int),
    "squawk": (_SQUAWK, _parse_squawk),
}

_FLAG_FIELDS: dict[str, int] = {
    "squawk_alert": _SQUAWK_ALERT,
    "emergency": _EMERGENCY,
    "ident_active": _IDENT_ACTIVE,
    "on_ground": _ON_GROUND,
}


@dataclass(frozen=True)
class _SubtypeLayout:
    required: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()
    flags: tuple[str, ...] = ()
    call_sign: bool = False


_LAYOUTS: dict[int, _SubtypeLayout] = {
    1: _SubtypeLayout(call_sign=True),
    2: _SubtypeLayout(
        required=("altitude", "ground_speed", "track", "latitude", "longitude"),
        flags=("on_ground",),
    ),
    3: _SubtypeLayout(
        required=("altitude", "latitude", "longitude"),
        flags=("squawk_alert", "emergency", "ident_active", "on_ground"),
    ),
    4: _SubtypeLayout(optional=("ground_speed", "track", "vertical_rate")),
    5: _SubtypeLayout(
        required=("altitude",),
        flags=("squawk_alert", "ident_active", "on_ground"),
    ),
    6: _SubtypeLayout(
        required=("squawk",),
        optional=("altitude",),
        flags=("squawk_alert", "emergency", "ident_active", "on_ground"),
    ),
    7: _SubtypeLayout(required=("altitude",), flags=("on_ground",)),
    8: _SubtypeLayout(flags=("on_ground",)),
}


def _parse_subtype(raw: str) -> int:
    if not _UNSIGNED_RE.fullmatch(raw):
        raise SubtypeError(raw)
    value = int(raw)
    if value not in _LAYOUTS:
        raise SubtypeError(raw)
    return value


def _parse_icao(raw: str) -> int:
    if not _HEX_RE.fullmatch(raw):
        raise IcaoError(raw)
    value = int(raw, 16)
    if value > 0xFFFFFFFF:
        raise IcaoError(raw)
    return value


def _apply_layout(message: Message, parts: list[str]) -> None:
    subtype = message.subtype
    layout = _LAYOUTS[subtype]

    if layout.call_sign:
        message.call_sign = parts[_CALL_SIGN]

    for name in layout.required + layout.optional:
        index, converter = _NUMERIC_FIELDS[name]
        raw = parts[index]
        if not raw and name in layout.optional:
            continue
        try:
            setattr(message, name, converter(raw))
        except ValueError:
            raise FieldParseError(subtype, name, raw) from None

    for name in layout.flags:
        setattr(message, name, parts[_FLAG_FIELDS[name]] in _TRUE_FLAGS)


def parse_sbs_message(station: str, record: bytes | str) -> Message:
    """Parse a single SBS-1 report line into a Message.

    Raises a subclass of :class:`SbsParseError` when the line is malformed.
    Non-transmission reports parse successfully with only the header fields
    (plus the call sign for selection/id changes) populated.
    """

    text = record.decode("utf-8", errors="replace") if isinstance(record, bytes) else record
    parts = text.split(",")
    if len(parts) != FIELD_COUNT:
        raise FieldCountError(len(parts))

    message_type = WIRE_CODES.get(parts[_TYPE], MessageType.INVALID)
    subtype = None
    if message_type is MessageType.TRANSMISSION:
        subtype = _parse_subtype(parts[_SUBTYPE])

    message = Message(
        station=station,
        type=message_type,
        subtype=subtype,
        icao=_parse_icao(parts[_ICAO]),
        generated_ns=parse_timestamp(
            parts[_GENERATED_DATE], parts[_GENERATED_TIME], "generated"
        ),
        logged_ns=parse_timestamp(parts[_LOGGED_DATE], parts[_LOGGED_TIME], "logged"),
        raw=text,
    )

    if message_type in CALL_SIGN_TYPES:
        message.call_sign = parts[_CALL_SIGN]
        return message

    if message_type is not MessageType.TRANSMISSION:
        return message

    _apply_layout(message, parts)
    return message


__all__ = [
    "FIELD_COUNT",
    "FieldCountError",
    "FieldParseError",
    "IcaoError",
    "Message",
    "SbsParseError",
    "SubtypeError",
    "TimestampError",
    "ns_to_datetime",
    "parse_sbs_message",
    "parse_timestamp",
]
