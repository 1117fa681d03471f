"""List command for sniaff."""

import click

from sniaff.commands.common import echo_envelope, get_registry
from sniaff.core.registry import STATUS_FILTERS
from sniaff.dispatch import dispatch


@click.command("list")
@click.option(
    "--status",
    type=click.Choice(sorted(STATUS_FILTERS)),
    default="active",
    show_default=True,
    help="Only show sessions with this status",
)
@click.pass_context
def list_sessions(ctx: click.Context, status: str) -> None:
    """List sessions, newest first.

    Examples:

        sniaff list

        sniaff list --status all
    """
    echo_envelope(dispatch(get_registry(ctx), "list_sessions", {"status": status}))
