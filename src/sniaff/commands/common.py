"""Helpers shared by the sniaff commands."""

from typing import Any

import click
import orjson

from sniaff.core.config import Config, load_config
from sniaff.core.registry import SessionRegistry


def get_config(ctx: click.Context) -> Config:
    """Get the config loaded by the CLI group, loading it if needed."""
    ctx.ensure_object(dict)
    if "config" not in ctx.obj:
        ctx.obj["config"] = load_config()
    return ctx.obj["config"]


def get_registry(ctx: click.Context) -> SessionRegistry:
    """Get a session registry for the configured sessions directory."""
    ctx.ensure_object(dict)
    if "registry" not in ctx.obj:
        ctx.obj["registry"] = SessionRegistry.from_config(get_config(ctx))
    return ctx.obj["registry"]


def echo_json(data: dict[str, Any]) -> None:
    """Print data as indented JSON."""
    click.echo(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode())


def echo_envelope(envelope: dict[str, Any]) -> None:
    """Print a command envelope, exiting 1 if it reports a failure."""
    echo_json(envelope)
    if not envelope.get("ok"):
        raise SystemExit(1)
