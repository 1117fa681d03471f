"""Cleanup command for sniaff."""

import click

from sniaff.commands.common import echo_envelope, get_registry
from sniaff.core.errors import CoreError
from sniaff.dispatch import error_envelope


@click.command()
@click.pass_context
def cleanup(ctx: click.Context) -> None:
    """Tear down all active sessions.

    Removes each active session's container and directory. A session that
    fails to clean up is logged and skipped. Exits 1 if the sessions
    directory cannot be listed.
    """
    try:
        cleaned = get_registry(ctx).cleanup_all_sessions()
    except CoreError as e:
        echo_envelope(error_envelope(e))
        return
    echo_envelope({"ok": True, "count": len(cleaned), "sessionIds": cleaned})
