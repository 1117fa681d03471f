"""Command dispatch for sniaff.

Maps command names to registry operations and wraps every outcome in a
tagged envelope:

    {"ok": true, ...payload}
    {"ok": false, "error": {"code": ..., "message": ..., "details": ...}}

dispatch() never raises; unexpected exceptions are logged and reported as
INTERNAL_ERROR.
"""

import logging
from collections.abc import Callable
from typing import Any

from sniaff.core.errors import CoreError, ErrorCode
from sniaff.core.registry import STATUS_FILTERS, SessionRegistry
from sniaff.core.session import DEFAULT_TYPE, VALID_TYPES

logger = logging.getLogger(__name__)

Handler = Callable[[SessionRegistry, dict[str, Any]], dict[str, Any]]


def _invalid(message: str, **details: Any) -> CoreError:
    return CoreError(ErrorCode.INVALID_ARGUMENT, message, details or None)


def _check_arguments(arguments: dict[str, Any], allowed: set[str]) -> None:
    unknown = sorted(set(arguments) - allowed)
    if unknown:
        raise _invalid(f"Unknown argument(s): {', '.join(unknown)}", arguments=unknown)


def _session_id_arg(arguments: dict[str, Any]) -> str:
    session_id = arguments.get("sessionId")
    if not isinstance(session_id, str) or not session_id:
        raise _invalid("sessionId must be a non-empty string")
    return session_id


def _choice_arg(
    arguments: dict[str, Any], name: str, choices: set[str], default: str
) -> str:
    value = arguments.get(name, default)
    if value is None:
        return default
    if not isinstance(value, str) or value not in choices:
        raise _invalid(
            f"{name} must be one of {', '.join(sorted(choices))}",
            **{name: value},
        )
    return value


def start_session(registry: SessionRegistry, arguments: dict[str, Any]) -> dict[str, Any]:
    _check_arguments(arguments, {"type"})
    session_type = _choice_arg(arguments, "type", VALID_TYPES, DEFAULT_TYPE)
    info = registry.create_session(session_type)
    return {
        "sessionId": info.session_id,
        "sessionPath": info.session_path,
        "type": info.type,
        "createdAt": info.created_at,
        "message": (
            "Session created. Pass this sessionId to the android, mitm and "
            "revdocker workers to attach them."
        ),
    }


def stop_session(registry: SessionRegistry, arguments: dict[str, Any]) -> dict[str, Any]:
    _check_arguments(arguments, {"sessionId", "cleanup"})
    session_id = _session_id_arg(arguments)
    cleanup = arguments.get("cleanup", True)
    if cleanup is None:
        cleanup = True
    if not isinstance(cleanup, bool):
        raise _invalid("cleanup must be a boolean", cleanup=cleanup)

    record = registry.stop_session(session_id, cleanup)
    return {
        "sessionId": record.get("sessionId", session_id),
        "status": record.get("status"),
        "stoppedAt": record.get("stoppedAt"),
        "cleanup": cleanup,
        "message": (
            "Session stopped and directory deleted."
            if cleanup
            else "Session marked as stopping. Workers will detect this and stop."
        ),
    }


def get_session(registry: SessionRegistry, arguments: dict[str, Any]) -> dict[str, Any]:
    _check_arguments(arguments, {"sessionId"})
    return {"session": registry.get_session(_session_id_arg(arguments))}


def list_sessions(registry: SessionRegistry, arguments: dict[str, Any]) -> dict[str, Any]:
    _check_arguments(arguments, {"status"})
    status = _choice_arg(arguments, "status", STATUS_FILTERS, "active")
    sessions = registry.list_sessions(status)
    return {
        "count": len(sessions),
        "sessions": [session.to_dict() for session in sessions],
    }


COMMANDS: dict[str, Handler] = {
    "start_session": start_session,
    "stop_session": stop_session,
    "get_session": get_session,
    "list_sessions": list_sessions,
}


def error_envelope(error: CoreError) -> dict[str, Any]:
    """Wrap an error in a failure envelope."""
    return {"ok": False, "error": error.to_dict()}


def dispatch(
    registry: SessionRegistry, command: str, arguments: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Run a command and return its envelope.

    Args:
        registry: The registry to run against.
        command: One of COMMANDS.
        arguments: Command arguments (JSON-style, camelCase keys).

    Returns:
        Success or failure envelope.
    """
    handler = COMMANDS.get(command)
    if handler is None:
        return error_envelope(
            _invalid(f"Unknown command: {command}", command=command)
        )
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        return error_envelope(_invalid("arguments must be an object"))

    try:
        payload = handler(registry, arguments)
    except CoreError as e:
        logger.info("Command %s failed: %s %s", command, e.code.value, e.message)
        return error_envelope(e)
    except Exception as e:
        logger.exception("Unexpected error in command %s", command)
        return error_envelope(CoreError(ErrorCode.INTERNAL_ERROR, str(e) or repr(e)))

    return {"ok": True, **payload}
