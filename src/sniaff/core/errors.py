"""Error types for the sniaff core.

Every failure surfaced by the store or the registry is a CoreError carrying
one of the ErrorCode kinds below. Call sites build the error from the
specific exception they caught; nothing downstream inspects raw exceptions.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Closed set of error kinds reported to callers."""

    # Session errors
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_ALREADY_EXISTS = "SESSION_ALREADY_EXISTS"
    SESSION_INVALID_STATE = "SESSION_INVALID_STATE"

    # State file errors
    STATE_READ_FAILED = "STATE_READ_FAILED"
    STATE_WRITE_FAILED = "STATE_WRITE_FAILED"

    # Filesystem errors
    DIRECTORY_CREATE_FAILED = "DIRECTORY_CREATE_FAILED"
    DIRECTORY_DELETE_FAILED = "DIRECTORY_DELETE_FAILED"

    # Validation errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class CoreError(Exception):
    """Raised by the state store and session registry.

    Attributes:
        code: The error kind.
        message: Human-readable description.
        details: Optional structured context (session id, paths, ...).
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the error shape used in command envelopes."""
        result: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details:
            result["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"CoreError({self.code.value}, {self.message!r})"
