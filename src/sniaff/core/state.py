"""State management for sniaff sessions.

Each session lives in {sessions_dir}/{id}/:
- state.json: The session record (pretty-printed JSON)
- android/: Reserved for the android worker
- mitm/: Reserved for the proxy worker
- core/: Reserved for the session registry

Worker processes read and write state.json directly through their own
StateStore. There is no locking: every write replaces the whole record and
the last writer wins. Writes go through a temporary file and a rename so a
reader never sees a half-written record.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

import orjson

from sniaff.core.errors import CoreError, ErrorCode
from sniaff.core.ids import is_session_id
from sniaff.core.session import COMPONENTS

logger = logging.getLogger(__name__)

STATE_FILE = "state.json"
COMPONENT_DIRS = ("android", "mitm", "core")


class StateStore:
    """Reads and writes session records under a sessions root directory."""

    def __init__(self, sessions_dir: Path) -> None:
        self.sessions_dir = Path(sessions_dir)

    def session_path(self, session_id: str) -> Path:
        """Get the absolute path of a session directory.

        Raises:
            CoreError: INVALID_ARGUMENT if the ID could escape the sessions root.
        """
        if (
            not session_id
            or session_id in {".", ".."}
            or "/" in session_id
            or "\\" in session_id
        ):
            raise CoreError(
                ErrorCode.INVALID_ARGUMENT,
                f"Invalid session ID: {session_id!r}",
                {"sessionId": session_id},
            )
        return self.sessions_dir.absolute() / session_id

    def _state_path(self, session_id: str) -> Path:
        return self.session_path(session_id) / STATE_FILE

    def create_session_dir(self, session_id: str) -> Path:
        """Create the session directory and its component subdirectories.

        Idempotent if the directories already exist.

        Returns:
            Path to the session directory.

        Raises:
            CoreError: DIRECTORY_CREATE_FAILED on any filesystem error.
        """
        session_dir = self.session_path(session_id)
        try:
            session_dir.mkdir(parents=True, exist_ok=True)
            for name in COMPONENT_DIRS:
                (session_dir / name).mkdir(exist_ok=True)
        except OSError as e:
            raise CoreError(
                ErrorCode.DIRECTORY_CREATE_FAILED,
                f"Failed to create session directory: {e}",
                {"sessionId": session_id, "sessionDir": str(session_dir)},
            ) from e
        logger.info("Created session directory %s for %s", session_dir, session_id)
        return session_dir

    def write(self, session_id: str, record: dict[str, Any]) -> None:
        """Write the full session record, replacing any existing one.

        Args:
            session_id: The session to write.
            record: The complete record.

        Raises:
            CoreError: STATE_WRITE_FAILED if the record cannot be serialized
                or written.
        """
        state_path = self._state_path(session_id)
        tmp_path: Path | None = None
        try:
            content = orjson.dumps(record, option=orjson.OPT_INDENT_2)
            # Unique per writer, in the same directory so the rename is atomic
            with tempfile.NamedTemporaryFile(
                dir=state_path.parent,
                prefix=f".{STATE_FILE}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(content)
            os.replace(tmp_path, state_path)
        except (OSError, orjson.JSONEncodeError) as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise CoreError(
                ErrorCode.STATE_WRITE_FAILED,
                f"Failed to write session state: {e}",
                {"sessionId": session_id, "statePath": str(state_path)},
            ) from e
        logger.debug("Wrote state for %s (status=%s)", session_id, record.get("status"))

    def read(self, session_id: str) -> dict[str, Any]:
        """Read a session record.

        Raises:
            CoreError: SESSION_NOT_FOUND if there is no state file,
                STATE_READ_FAILED if it cannot be read or parsed.
        """
        state_path = self._state_path(session_id)
        try:
            content = state_path.read_bytes()
        except FileNotFoundError as e:
            raise CoreError(
                ErrorCode.SESSION_NOT_FOUND,
                f"Session not found: {session_id}",
                {"sessionId": session_id},
            ) from e
        except OSError as e:
            raise CoreError(
                ErrorCode.STATE_READ_FAILED,
                f"Failed to read session state: {e}",
                {"sessionId": session_id, "statePath": str(state_path)},
            ) from e

        try:
            record = orjson.loads(content)
        except orjson.JSONDecodeError as e:
            raise CoreError(
                ErrorCode.STATE_READ_FAILED,
                f"Failed to parse session state: {e}",
                {"sessionId": session_id, "statePath": str(state_path)},
            ) from e

        if not isinstance(record, dict):
            raise CoreError(
                ErrorCode.STATE_READ_FAILED,
                "Session state is not a JSON object",
                {"sessionId": session_id, "statePath": str(state_path)},
            )
        return record

    def update(self, session_id: str, partial: dict[str, Any]) -> dict[str, Any]:
        """Merge top-level fields into the stored record.

        Fields in partial replace the stored ones; everything else is kept.

        Returns:
            The merged record as written.
        """
        current = self.read(session_id)
        updated = {**current, **partial}
        self.write(session_id, updated)
        return updated

    def update_component(
        self, session_id: str, component: str, partial: dict[str, Any]
    ) -> dict[str, Any]:
        """Merge fields into one component sub-record.

        The sub-record is created if absent. Sibling sub-records and top-level
        fields are left untouched, so a worker can report its own status
        without clobbering the others.

        Args:
            session_id: The session to update.
            component: One of "android", "mitm", "revdocker".
            partial: Fields to merge into the sub-record.

        Returns:
            The merged record as written.

        Raises:
            CoreError: INVALID_ARGUMENT for an unknown component.
        """
        if component not in COMPONENTS:
            raise CoreError(
                ErrorCode.INVALID_ARGUMENT,
                f"Unknown component: {component}. Must be one of {', '.join(COMPONENTS)}",
                {"sessionId": session_id, "component": component},
            )
        current = self.read(session_id)
        existing = current.get(component)
        if not isinstance(existing, dict):
            existing = {}
        updated = {**current, component: {**existing, **partial}}
        self.write(session_id, updated)
        return updated

    def update_android(self, session_id: str, partial: dict[str, Any]) -> dict[str, Any]:
        """Merge fields into the android sub-record."""
        return self.update_component(session_id, "android", partial)

    def update_mitm(self, session_id: str, partial: dict[str, Any]) -> dict[str, Any]:
        """Merge fields into the mitm sub-record."""
        return self.update_component(session_id, "mitm", partial)

    def exists(self, session_id: str) -> bool:
        """Check whether a session has a state file."""
        return self._state_path(session_id).is_file()

    def list_session_ids(self) -> list[str]:
        """List the IDs of all sessions on disk.

        Only directories named like a session ID and holding a state file
        count; anything else in the sessions root is ignored.

        Returns:
            Session IDs sorted by name. Empty if the sessions root is missing.

        Raises:
            CoreError: STATE_READ_FAILED if the sessions root cannot be listed.
        """
        try:
            entries = sorted(self.sessions_dir.iterdir())
        except FileNotFoundError:
            return []
        except OSError as e:
            raise CoreError(
                ErrorCode.STATE_READ_FAILED,
                f"Failed to list sessions: {e}",
                {"sessionsDir": str(self.sessions_dir)},
            ) from e

        return [
            entry.name
            for entry in entries
            if is_session_id(entry.name)
            and entry.is_dir()
            and (entry / STATE_FILE).is_file()
        ]

    def delete_session(self, session_id: str) -> None:
        """Delete a session directory and everything in it.

        A missing or partially deleted directory is not an error.

        Raises:
            CoreError: DIRECTORY_DELETE_FAILED on any other filesystem error.
        """
        session_dir = self.session_path(session_id)
        if not session_dir.exists():
            return
        try:
            shutil.rmtree(session_dir)
        except FileNotFoundError:
            pass  # Removed concurrently
        except OSError as e:
            raise CoreError(
                ErrorCode.DIRECTORY_DELETE_FAILED,
                f"Failed to delete session directory: {e}",
                {"sessionId": session_id, "sessionDir": str(session_dir)},
            ) from e
        logger.info("Deleted session directory for %s", session_id)
