"""Service-layer components for Waxmoth."""

from .aggregator import AggregationEngine, apply_message, is_duplicate
from .feed_service import FeedService
from .registry import Aircraft, AircraftRegistry, format_icao, snapshot_aircraft

__all__ = [
    "Aircraft",
    "AircraftRegistry",
    "AggregationEngine",
    "FeedService",
    "apply_message",
    "format_icao",
    "is_duplicate",
    "snapshot_aircraft",
]
