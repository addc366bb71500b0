from .message_types import CALL_SIGN_TYPES, WIRE_CODES, MessageType

__all__ = ["CALL_SIGN_TYPES", "MessageType", "WIRE_CODES"]
