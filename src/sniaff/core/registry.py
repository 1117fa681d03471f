"""Session lifecycle for sniaff.

The registry creates, stops, lists and cleans up sessions on top of the
StateStore. Session status only moves forward:

    active --stop_session--> stopping --teardown--> stopped

"stopping" is persisted before teardown starts; the worker processes watch
for it to shut down their own processes. Teardown removes the session's
sandbox container and then deletes the session directory.
"""

import logging
from typing import Any

from sniaff.core.config import Config
from sniaff.core.docker import (
    ContainerError,
    ContainerRemover,
    DockerContainerRemover,
    NullContainerRemover,
    container_name,
)
from sniaff.core.errors import CoreError, ErrorCode
from sniaff.core.ids import generate_session_id
from sniaff.core.session import (
    DEFAULT_TYPE,
    VALID_STATUSES,
    VALID_TYPES,
    SessionInfo,
    parse_timestamp,
    utc_now,
)
from sniaff.core.state import StateStore

logger = logging.getLogger(__name__)

STATUS_FILTERS = VALID_STATUSES | {"all"}


class SessionRegistry:
    """Lifecycle policy for sessions stored in a StateStore."""

    def __init__(
        self,
        store: StateStore,
        container_remover: ContainerRemover | None = None,
        container_prefix: str = "sniaff",
    ) -> None:
        self.store = store
        self.container_remover = container_remover or NullContainerRemover()
        self.container_prefix = container_prefix

    @classmethod
    def from_config(cls, config: Config) -> "SessionRegistry":
        """Build a registry with the store and container runtime from config."""
        remover: ContainerRemover
        if config.container_runtime == "none":
            remover = NullContainerRemover()
        else:
            remover = DockerContainerRemover(docker_bin=config.docker_bin)
        return cls(
            StateStore(config.sessions_dir),
            container_remover=remover,
            container_prefix=config.container_prefix,
        )

    def create_session(self, session_type: str = DEFAULT_TYPE) -> SessionInfo:
        """Create a new active session.

        Args:
            session_type: One of "reversing", "testing", "analysis".

        Returns:
            Summary of the new session.

        Raises:
            CoreError: INVALID_ARGUMENT for an unknown type, or the store's
                error if the directory or initial record cannot be created.
        """
        if session_type not in VALID_TYPES:
            raise CoreError(
                ErrorCode.INVALID_ARGUMENT,
                f"Invalid session type: {session_type}. "
                f"Must be one of {', '.join(sorted(VALID_TYPES))}",
                {"type": session_type},
            )

        session_id = generate_session_id()
        logger.info("Creating session %s (type=%s)", session_id, session_type)

        session_path = self.store.create_session_dir(session_id)
        record = {
            "sessionId": session_id,
            "type": session_type,
            "status": "active",
            "createdAt": utc_now(),
        }
        self.store.write(session_id, record)

        logger.info("Session %s created at %s", session_id, session_path)
        return SessionInfo.from_record(record, session_path)

    def get_session(self, session_id: str) -> dict[str, Any]:
        """Get the full record of a session, including worker sub-records."""
        return self.store.read(session_id)

    def stop_session(self, session_id: str, cleanup: bool = True) -> dict[str, Any]:
        """Stop a session.

        Marks the session "stopping" (keeping an earlier stoppedAt, if any).
        With cleanup, the sandbox container is removed and the session
        directory deleted; container failures are logged, not raised.

        Args:
            session_id: The session to stop.
            cleanup: Tear down the container and directory.

        Returns:
            The session record. Its status is "stopped" after cleanup, and
            "stopping" (as persisted) without it.

        Raises:
            CoreError: SESSION_INVALID_STATE if the session is already stopped,
                or the store's error.
        """
        record = self.store.read(session_id)
        status = record.get("status")

        if status == "stopped":
            raise CoreError(
                ErrorCode.SESSION_INVALID_STATE,
                f"Session is already stopped: {session_id}",
                {"sessionId": session_id, "currentStatus": status},
            )

        logger.info("Stopping session %s (cleanup=%s)", session_id, cleanup)

        changes: dict[str, Any] = {"status": "stopping"}
        if not record.get("stoppedAt"):
            changes["stoppedAt"] = utc_now()
        updated = self.store.update(session_id, changes)
        logger.info("Session %s marked as stopping", session_id)

        if not cleanup:
            return updated

        self._teardown(session_id)
        return {**updated, "status": "stopped"}

    def list_sessions(self, status: str = "all") -> list[SessionInfo]:
        """List sessions, newest first.

        Records that cannot be read are skipped with a warning.

        Args:
            status: "active", "stopping", "stopped", or "all".

        Raises:
            CoreError: INVALID_ARGUMENT for an unknown status filter.
        """
        if status not in STATUS_FILTERS:
            raise CoreError(
                ErrorCode.INVALID_ARGUMENT,
                f"Invalid status filter: {status}. "
                f"Must be one of {', '.join(sorted(STATUS_FILTERS))}",
                {"status": status},
            )

        sessions = []
        for session_id in self.store.list_session_ids():
            try:
                record = self.store.read(session_id)
                info = SessionInfo.from_record(
                    record, self.store.session_path(session_id)
                )
            except CoreError as e:
                logger.warning("Skipping invalid session %s: %s", session_id, e)
                continue

            if status != "all" and info.status != status:
                continue
            sessions.append(info)

        return sorted(
            sessions, key=lambda s: parse_timestamp(s.created_at), reverse=True
        )

    def session_exists(self, session_id: str) -> bool:
        """Check whether a session has a state record."""
        return self.store.exists(session_id)

    def cleanup_all_sessions(self) -> list[str]:
        """Tear down every active session.

        Failures are logged per session and do not stop the others. Meant
        to run once when the process shuts down.

        Returns:
            IDs of the sessions that were torn down.

        Raises:
            CoreError: STATE_READ_FAILED if the sessions root cannot be listed;
                nothing is torn down in that case.
        """
        logger.info("Cleaning up all active sessions")

        try:
            sessions = self.list_sessions("active")
        except CoreError as e:
            logger.error("Cannot list sessions for cleanup: %s", e)
            raise

        cleaned = []
        for session in sessions:
            try:
                self._teardown(session.session_id)
            except CoreError as e:
                logger.error("Failed to clean up session %s: %s", session.session_id, e)
                continue
            cleaned.append(session.session_id)
            logger.info("Cleaned up session %s", session.session_id)

        logger.info("Cleaned up %d session(s)", len(cleaned))
        return cleaned

    def _teardown(self, session_id: str) -> None:
        """Remove the session's container, then its directory.

        The container mounts a subdirectory of the session, so it goes first.
        """
        name = container_name(self.container_prefix, session_id)
        try:
            if self.container_remover.remove(name):
                logger.info("Removed container %s", name)
            else:
                logger.debug("No container %s to remove", name)
        except ContainerError as e:
            logger.warning("Failed to remove container %s: %s", name, e)

        self.store.delete_session(session_id)
        logger.info("Session directory deleted for %s", session_id)
