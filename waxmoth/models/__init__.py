"""Pydantic models for the Waxmoth API."""

from .aircraft import AircraftSnapshot, Position
from .stations import StationStatus

__all__ = ["AircraftSnapshot", "Position", "StationStatus"]
