"""Stop command for sniaff.

Marks a session as stopping and, by default, tears it down.
"""

import click

from sniaff.commands.common import echo_envelope, get_registry
from sniaff.dispatch import dispatch


@click.command()
@click.argument("session_id")
@click.option(
    "--cleanup/--no-cleanup",
    default=True,
    show_default=True,
    help="Remove the session's container and directory after stopping",
)
@click.pass_context
def stop(ctx: click.Context, session_id: str, cleanup: bool) -> None:
    """Stop a session.

    The session is marked "stopping", which tells the workers to shut down.
    With --cleanup (the default) the sandbox container is removed and the
    session directory deleted.

    SESSION_ID is the ID of the session to stop.

    Examples:

        sniaff stop sniaff-a1b2c3d4

        sniaff stop sniaff-a1b2c3d4 --no-cleanup
    """
    echo_envelope(
        dispatch(
            get_registry(ctx),
            "stop_session",
            {"sessionId": session_id, "cleanup": cleanup},
        )
    )
