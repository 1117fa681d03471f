"""Wait command for sniaff.

Blocks until a session leaves "active". Workers run this to learn when
they should shut down.
"""

import time
from pathlib import Path

import click
from watchfiles import watch

from sniaff.commands.common import echo_envelope, echo_json, get_registry
from sniaff.core.errors import CoreError, ErrorCode
from sniaff.core.registry import SessionRegistry
from sniaff.dispatch import error_envelope

# Status reported when the session directory has been deleted
GONE_STATUS = "stopped"


def current_status(registry: SessionRegistry, session_id: str) -> str | None:
    """Get the session's status, or None if it is still active.

    A deleted session counts as stopped. A record that is being rewritten
    or is unreadable counts as still active.
    """
    try:
        record = registry.get_session(session_id)
    except CoreError as e:
        if e.code == ErrorCode.SESSION_NOT_FOUND:
            return GONE_STATUS
        return None
    status = record.get("status")
    if status == "active":
        return None
    return status


@click.command()
@click.argument("session_id")
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Give up after this many seconds (exit code 2)",
)
@click.pass_context
def wait(ctx: click.Context, session_id: str, timeout: float | None) -> None:
    """Wait for a session to stop.

    Blocks until the session is marked stopping or stopped, or its
    directory is deleted, then prints its status as JSON.
    Exit code: 0 = stopped, 1 = not found or invalid ID, 2 = timed out.

    SESSION_ID is the ID of the session to wait for.

    Examples:

        sniaff wait sniaff-a1b2c3d4

        sniaff wait sniaff-a1b2c3d4 --timeout 60
    """
    registry = get_registry(ctx)

    try:
        exists = registry.session_exists(session_id)
    except CoreError as e:
        echo_envelope(error_envelope(e))
        return
    if not exists:
        click.echo(f"Session {session_id} not found", err=True)
        raise SystemExit(1)

    status = current_status(registry, session_id)
    if status is not None:
        echo_json({"sessionId": session_id, "status": status})
        return

    deadline = time.monotonic() + timeout if timeout is not None else None
    sessions_dir: Path = registry.store.sessions_dir

    # Watch the sessions root so deletion of the session directory is seen too
    for changes in watch(
        sessions_dir, rust_timeout=500, yield_on_timeout=True, raise_interrupt=False
    ):
        if any(session_id in Path(path).parts for _, path in changes) or not changes:
            status = current_status(registry, session_id)
            if status is not None:
                echo_json({"sessionId": session_id, "status": status})
                return

        if deadline is not None and time.monotonic() >= deadline:
            click.echo(f"Timed out waiting for session {session_id}", err=True)
            raise SystemExit(2)

    # Only reached if the watch was interrupted
    raise SystemExit(2)
