"""SBS-1 BaseStation message type definitions."""

from __future__ import annotations

from enum import Enum


class MessageType(str, Enum):
    """Message types carried in field 0 of an SBS-1 report."""

    INVALID = "INVALID"
    SELECTION_CHANGE = "SEL"
    ID_CHANGE = "ID"
    NEW_AIRCRAFT = "AIR"
    STATUS_CHANGE = "STA"
    CLICK = "CLK"
    TRANSMISSION = "MSG"


# INVALID is a classification, never a wire code.
WIRE_CODES: dict[str, MessageType] = {
    member.value: member for member in MessageType if member is not MessageType.INVALID
}

CALL_SIGN_TYPES = frozenset({MessageType.SELECTION_CHANGE, MessageType.ID_CHANGE})

__all__ = ["CALL_SIGN_TYPES", "MessageType", "WIRE_CODES"]
