"""CLI entry point for sniaff.

Usage:
    sniaff start [--type testing]     # Create a new session
    sniaff stop <id>                  # Stop and tear down a session
    sniaff get <id>                   # Show a session's full state
    sniaff list [--status all]        # List sessions
    sniaff report <id> mitm ready     # Report a worker's status
    sniaff wait <id>                  # Block until a session stops
    sniaff cleanup                    # Tear down all active sessions
    sniaff serve                      # Line-delimited JSON dispatcher
"""

import click

from sniaff.commands.cleanup import cleanup
from sniaff.commands.common import get_config
from sniaff.commands.get import get
from sniaff.commands.list import list_sessions
from sniaff.commands.report import report
from sniaff.commands.serve import serve
from sniaff.commands.start import start
from sniaff.commands.stop import stop
from sniaff.commands.wait import wait
from sniaff.core.logs import setup_logging


@click.group()
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    envvar="SNIAFF_VERBOSE",
    help="Also write logs to stderr",
)
@click.version_option(package_name="sniaff-core")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """sniaff - shared sessions for the android, mitm and revdocker workers.

    A session is a directory with a state.json that every worker reads and
    updates. Sessions live in $SNIAFF_SESSIONS_DIR (default
    ~/.sniaff/sessions).
    """
    config = get_config(ctx)
    setup_logging(config.logs_dir, config.log_level, verbose=verbose)


# Register commands
main.add_command(start)
main.add_command(stop)
main.add_command(get)
main.add_command(list_sessions)
main.add_command(report)
main.add_command(wait)
main.add_command(cleanup)
main.add_command(serve)
