"""AnonChat CLI: scripted JSON commands and an interactive chat."""

from __future__ import annotations

import logging
from typing import Annotated

import typer

from anonchat.config import get_config

from .chat import chat_cmd
from .connection import run_request
from .messages import messages_app
from .output import json_print
from .rooms import rooms_app

app = typer.Typer(
    name="anonchat",
    help="AnonChat: anonymous group chat client",
    no_args_is_help=True,
)

# Sub-apps (resource groups)
app.add_typer(rooms_app, name="rooms", help="Room operations")
app.add_typer(messages_app, name="messages", help="Message operations")

# Standalone commands
app.command("chat")(chat_cmd)


@app.command("check")
def check(ctx: typer.Context) -> None:
    """Show the backend's diagnostic report."""
    report = run_request(ctx.obj["url"], lambda client: client.check_backend())
    json_print(report)


@app.callback()
def callback(
    ctx: typer.Context,
    url: Annotated[
        str | None,
        typer.Option(envvar="ANONCHAT_BACKEND_URL", help="Chat backend URL"),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(envvar="ANONCHAT_LOG_LEVEL", help="Logging level"),
    ] = None,
) -> None:
    """Global options for the backend connection."""
    level = (log_level or get_config().log_level).upper()
    logging.basicConfig(level=getattr(logging, level, logging.WARNING))
    ctx.ensure_object(dict)
    ctx.obj["url"] = url
