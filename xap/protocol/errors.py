from __future__ import annotations

from enum import IntEnum
from typing import Optional, Tuple


class StatusCode(IntEnum):
    """HTTP-like status classes used to group protocol failures."""

    BAD_REQUEST = 400
    CONFLICT = 409
    UNPROCESSABLE = 422
    SERVICE_UNAVAILABLE = 503


class ErrorCode(IntEnum):
    """Domain specific error codes."""

    EMPTY_NAME = 1001
    DUPLICATE_KEY = 1002
    MISSING_FIELD = 1003
    INVALID_FIELD = 1004
    INCOMPLETE_MESSAGE = 1005
    NOT_CONNECTED = 1006
    TRANSPORT_FAILURE = 1007
    PARSE_FAILURE = 1008


class ProtocolError(Exception):
    """Structured protocol exception carrying status + code + message."""

    def __init__(self, status: StatusCode, code: Optional[ErrorCode] = None, message: str = "") -> None:
        self.status = status
        self.code = code
        self.message = message
        super().__init__(f"{status.name} ({int(status)}): {message} (code={code.name if code else 'n/a'})")


class EmptyName(ProtocolError):
    def __init__(self, message: str = "Block name must not be empty") -> None:
        super().__init__(StatusCode.BAD_REQUEST, ErrorCode.EMPTY_NAME, message)


class DuplicateKey(ProtocolError):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(StatusCode.CONFLICT, ErrorCode.DUPLICATE_KEY, f"Duplicate block item {key!r}")


class MissingRequiredField(ProtocolError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(StatusCode.UNPROCESSABLE, ErrorCode.MISSING_FIELD, f"Missing required item {field!r}")


class InvalidFieldValue(ProtocolError):
    def __init__(self, field: str, detail: str = "") -> None:
        self.field = field
        message = f"Invalid value for {field!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(StatusCode.UNPROCESSABLE, ErrorCode.INVALID_FIELD, message)


class IncompleteMessage(ProtocolError):
    def __init__(self, message: str = "A message needs a header and at least one body block") -> None:
        super().__init__(StatusCode.BAD_REQUEST, ErrorCode.INCOMPLETE_MESSAGE, message)


class NotConnected(ProtocolError):
    def __init__(self, message: str = "Connection is not open") -> None:
        super().__init__(StatusCode.SERVICE_UNAVAILABLE, ErrorCode.NOT_CONNECTED, message)


class TransportError(ProtocolError):
    """Socket level failure surfaced to higher layers."""

    def __init__(self, message: str) -> None:
        super().__init__(StatusCode.SERVICE_UNAVAILABLE, ErrorCode.TRANSPORT_FAILURE, message)


class ParseFailure(ProtocolError):
    """Received bytes that could not be classified as a heartbeat or message."""

    def __init__(self, data: bytes, sender: Optional[Tuple[str, int]] = None, reason: str = "") -> None:
        self.data = data
        self.sender: Optional[Tuple[str, int]] = sender
        super().__init__(StatusCode.BAD_REQUEST, ErrorCode.PARSE_FAILURE, reason or "Unparseable datagram")

    def to_payload(self) -> dict:
        """Summary suitable for log records."""
        return {
            "status": int(self.status),
            "error_code": int(self.code) if self.code is not None else None,
            "error_message": self.message,
            "size": len(self.data),
        }


__all__ = [
    "StatusCode",
    "ErrorCode",
    "ProtocolError",
    "EmptyName",
    "DuplicateKey",
    "MissingRequiredField",
    "InvalidFieldValue",
    "IncompleteMessage",
    "NotConnected",
    "TransportError",
    "ParseFailure",
]
