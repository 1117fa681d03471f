"""Serve command for sniaff.

Runs the command dispatcher over stdin/stdout. Each input line is a JSON
request:

    {"id": 1, "command": "start_session", "arguments": {"type": "testing"}}

and each output line is the command's envelope, with "id" echoed back when
given. When stdin closes or a termination signal arrives, all active
sessions are cleaned up.
"""

import logging
import signal
import sys
from types import FrameType
from typing import Any

import click
import orjson

from sniaff.commands.common import get_registry
from sniaff.core.errors import CoreError, ErrorCode
from sniaff.core.registry import SessionRegistry
from sniaff.dispatch import dispatch, error_envelope

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = ("SIGTERM", "SIGINT", "SIGHUP")


class ShutdownRequested(BaseException):
    """Raised to leave the request loop on a shutdown signal.

    A BaseException, like KeyboardInterrupt, so command error handling
    never catches it.
    """

    def __init__(self, signum: int) -> None:
        super().__init__(signal.Signals(signum).name)
        self.signum = signum


def handle_line(registry: SessionRegistry, line: str) -> dict[str, Any]:
    """Decode one request line and dispatch it.

    Returns:
        The response envelope, with the request "id" if there was one.
    """
    try:
        request = orjson.loads(line)
    except orjson.JSONDecodeError as e:
        return error_envelope(
            CoreError(ErrorCode.INVALID_ARGUMENT, f"Invalid JSON request: {e}")
        )
    if not isinstance(request, dict) or not isinstance(request.get("command"), str):
        return error_envelope(
            CoreError(
                ErrorCode.INVALID_ARGUMENT,
                'Request must be an object with a "command" string',
            )
        )

    response = dispatch(registry, request["command"], request.get("arguments"))
    if "id" in request:
        response = {"id": request["id"], **response}
    return response


class ShutdownHandler:
    """Signal handler for the request loop.

    While a command runs (busy), a signal only records the request; the
    loop stops once the command's response is written. While the loop is
    waiting for input, the signal raises ShutdownRequested straight away.
    Only the first signal counts.
    """

    def __init__(self) -> None:
        self.signum: int | None = None
        self.busy = False

    def __call__(self, signum: int, frame: FrameType | None) -> None:
        if self.signum is not None:
            return
        self.signum = signum
        if not self.busy:
            raise ShutdownRequested(signum)


def _install_signal_handlers(handler: ShutdownHandler) -> dict[int, Any]:
    previous = {}
    for name in SHUTDOWN_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        try:
            previous[signum] = signal.signal(signum, handler)
        except ValueError:
            # Not in the main thread
            continue
    return previous


def _restore_signal_handlers(previous: dict[int, Any]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def serve_requests(registry: SessionRegistry, shutdown: ShutdownHandler) -> None:
    """Answer request lines from stdin until EOF or a shutdown signal.

    Raises:
        ShutdownRequested: When a shutdown signal arrived.
    """
    for line in sys.stdin:
        line = line.strip()
        if not line:
            continue
        shutdown.busy = True
        try:
            response = handle_line(registry, line)
            click.echo(orjson.dumps(response).decode())
        finally:
            shutdown.busy = False
        if shutdown.signum is not None:
            raise ShutdownRequested(shutdown.signum)


@click.command()
@click.option(
    "--cleanup-on-exit/--no-cleanup-on-exit",
    default=True,
    show_default=True,
    help="Tear down all active sessions when the server exits",
)
@click.pass_context
def serve(ctx: click.Context, cleanup_on_exit: bool) -> None:
    """Serve commands as line-delimited JSON over stdin/stdout.

    Commands: start_session, stop_session, get_session, list_sessions.

    Example request:

        {"id": 1, "command": "list_sessions", "arguments": {"status": "all"}}
    """
    registry = get_registry(ctx)
    shutdown = ShutdownHandler()
    previous = _install_signal_handlers(shutdown)
    logger.info("Serving commands on stdin (sessions in %s)", registry.store.sessions_dir)

    try:
        try:
            serve_requests(registry, shutdown)
            reason = "stdin closed"
        except ShutdownRequested as e:
            reason = f"received {e}"
        # Signals arriving during cleanup must not interrupt it
        shutdown.busy = True

        logger.info("Shutting down: %s", reason)
        if cleanup_on_exit:
            try:
                registry.cleanup_all_sessions()
            except CoreError as e:
                logger.error("Cleanup on exit failed: %s", e)
        logger.info("Shutdown complete")
    finally:
        _restore_signal_handlers(previous)
