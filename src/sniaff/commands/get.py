"""Get command for sniaff."""

import click

from sniaff.commands.common import echo_envelope, get_registry
from sniaff.dispatch import dispatch


@click.command()
@click.argument("session_id")
@click.pass_context
def get(ctx: click.Context, session_id: str) -> None:
    """Show the full state of a session.

    Includes the android, mitm and revdocker status reported by the workers.

    SESSION_ID is the ID of the session to show.
    """
    echo_envelope(dispatch(get_registry(ctx), "get_session", {"sessionId": session_id}))
