"""Session data model for sniaff.

The on-disk record (state.json) is a plain JSON object with camelCase keys;
it is the integration contract with the worker processes, so the store and
registry pass it around as a dict. SessionInfo is the summary projection
returned by create/list.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sniaff.core.errors import CoreError, ErrorCode

VALID_TYPES = {"reversing", "testing", "analysis"}
VALID_STATUSES = {"active", "stopping", "stopped"}
COMPONENT_STATUSES = {"pending", "starting", "ready", "stopped", "error"}

# Sub-records owned by the worker processes
COMPONENTS = ("android", "mitm", "revdocker")

DEFAULT_TYPE = "reversing"

_REQUIRED_KEYS = ("sessionId", "type", "status", "createdAt")


def utc_now() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp written by utc_now (or any ISO-8601 string).

    Raises:
        ValueError: If the value is not a valid ISO-8601 timestamp.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class SessionInfo:
    """Summary of a session.

    Attributes:
        session_id: e.g. "sniaff-a1b2c3d4"
        type: One of "reversing", "testing", "analysis"
        status: One of "active", "stopping", "stopped"
        created_at: ISO-8601 creation timestamp
        session_path: Absolute path of the session directory
    """

    session_id: str
    type: str
    status: str
    created_at: str
    session_path: str

    def __post_init__(self) -> None:
        """Validate session type and status."""
        if self.type not in VALID_TYPES:
            raise ValueError(
                f"Invalid type: {self.type}. Must be one of {VALID_TYPES}"
            )
        if self.status not in VALID_STATUSES:
            raise ValueError(
                f"Invalid status: {self.status}. Must be one of {VALID_STATUSES}"
            )

    @classmethod
    def from_record(cls, record: dict[str, Any], session_path: Path) -> "SessionInfo":
        """Project a state record to its summary.

        Raises:
            CoreError: STATE_READ_FAILED if the record lacks required fields
                or holds values outside the data model.
        """
        missing = [key for key in _REQUIRED_KEYS if not isinstance(record.get(key), str)]
        if missing:
            raise CoreError(
                ErrorCode.STATE_READ_FAILED,
                f"Session state is missing fields: {', '.join(missing)}",
                {"sessionPath": str(session_path)},
            )
        try:
            parse_timestamp(record["createdAt"])
            return cls(
                session_id=record["sessionId"],
                type=record["type"],
                status=record["status"],
                created_at=record["createdAt"],
                session_path=str(session_path),
            )
        except ValueError as e:
            raise CoreError(
                ErrorCode.STATE_READ_FAILED,
                f"Invalid session state: {e}",
                {"sessionPath": str(session_path)},
            ) from e

    def to_dict(self) -> dict[str, str]:
        """Serialize with the camelCase keys used on the wire."""
        return {
            "sessionId": self.session_id,
            "type": self.type,
            "status": self.status,
            "createdAt": self.created_at,
            "sessionPath": self.session_path,
        }
