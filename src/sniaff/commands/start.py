"""Start command for sniaff.

Creates a new session directory and state record.
"""

import click

from sniaff.commands.common import echo_envelope, get_registry
from sniaff.core.session import DEFAULT_TYPE, VALID_TYPES
from sniaff.dispatch import dispatch


@click.command()
@click.option(
    "--type",
    "session_type",
    type=click.Choice(sorted(VALID_TYPES)),
    default=DEFAULT_TYPE,
    show_default=True,
    help="Kind of work the session is for",
)
@click.pass_context
def start(ctx: click.Context, session_type: str) -> None:
    """Start a new session.

    Prints the new session ID and path as JSON. Pass the session ID to the
    android, mitm and revdocker workers so they attach to it.

    Examples:

        sniaff start

        sniaff start --type testing
    """
    echo_envelope(dispatch(get_registry(ctx), "start_session", {"type": session_type}))
