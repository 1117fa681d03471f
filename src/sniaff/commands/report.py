"""Report command for sniaff.

Lets a worker process update its own sub-record of a session's state.
Only the named component's fields are touched, so workers reporting at the
same time do not overwrite each other's sections (apart from the
last-writer-wins race on the file itself).
"""

from typing import Any

import click
import orjson

from sniaff.commands.common import echo_envelope, get_registry
from sniaff.core.errors import CoreError
from sniaff.core.session import COMPONENT_STATUSES, COMPONENTS
from sniaff.dispatch import error_envelope


def parse_field(field: str) -> tuple[str, Any]:
    """Parse a key=value pair, decoding the value as JSON when possible.

    "pid=1234" gives ("pid", 1234); "proxyHost=10.0.2.2" gives
    ("proxyHost", "10.0.2.2").

    Raises:
        click.BadParameter: If there is no "=" or the key is empty.
    """
    key, sep, raw = field.partition("=")
    if not sep or not key:
        raise click.BadParameter(f"expected key=value, got {field!r}")
    try:
        value = orjson.loads(raw)
    except orjson.JSONDecodeError:
        value = raw
    return key, value


@click.command()
@click.argument("session_id")
@click.argument("component", type=click.Choice(COMPONENTS))
@click.argument("status", type=click.Choice(sorted(COMPONENT_STATUSES)))
@click.option(
    "--set",
    "fields",
    multiple=True,
    metavar="KEY=VALUE",
    help="Extra field to store (repeatable). Values are parsed as JSON if possible.",
)
@click.pass_context
def report(
    ctx: click.Context,
    session_id: str,
    component: str,
    status: str,
    fields: tuple[str, ...],
) -> None:
    """Report a worker's status for a session.

    SESSION_ID is the session, COMPONENT the worker's section (android,
    mitm or revdocker) and STATUS its new status.

    Examples:

        sniaff report sniaff-a1b2c3d4 android starting

        sniaff report sniaff-a1b2c3d4 mitm ready --set proxyPort=8080 --set pid=4242

        sniaff report sniaff-a1b2c3d4 revdocker error --set error="image not found"
    """
    partial: dict[str, Any] = dict(parse_field(field) for field in fields)
    partial["status"] = status

    try:
        record = get_registry(ctx).store.update_component(session_id, component, partial)
    except CoreError as e:
        echo_envelope(error_envelope(e))
        return

    echo_envelope({"ok": True, "sessionId": session_id, component: record[component]})
