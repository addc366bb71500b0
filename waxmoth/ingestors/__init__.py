"""Feed ingestion for Waxmoth."""

from .feed import FeedConnector, parse_address
from .sbs1 import (
    FieldCountError,
    FieldParseError,
    IcaoError,
    Message,
    SbsParseError,
    SubtypeError,
    TimestampError,
    parse_sbs_message,
)

__all__ = [
    "FeedConnector",
    "FieldCountError",
    "FieldParseError",
    "IcaoError",
    "Message",
    "SbsParseError",
    "SubtypeError",
    "TimestampError",
    "parse_address",
    "parse_sbs_message",
]
