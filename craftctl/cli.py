#!/usr/bin/env python3
"""craftctl CLI - Minecraft server controller for Docker Compose."""
from typing import Optional

import typer
from rich.console import Console
from typer.core import TyperGroup

from craftctl.cli_server_commands import register_server_commands
from craftctl.cli_setup_commands import register_setup_commands
from craftctl.cli_support import exit_with_result, load_cli_config, setup_file_logging
from craftctl.core.config import set_config
from craftctl.core.controller import usage_result
from craftctl.core.errors import UnknownCommand
from craftctl.core.models import CommandRequest

console = Console()


class ControllerGroup(TyperGroup):
    """Root command group that answers unknown commands with usage and exit status 1."""

    def resolve_command(self, ctx, args):
        name = args[0] if args else ""
        if name and not name.startswith("-") and self.get_command(ctx, name) is None:
            try:
                CommandRequest.parse(name)
            except UnknownCommand as e:
                exit_with_result(console, usage_result(e))
        return super().resolve_command(ctx, args)


app = typer.Typer(
    name="craftctl",
    cls=ControllerGroup,
    help="""Minecraft Server Controller

Manage a Docker Compose Minecraft server: dependencies, lifecycle,
players and backups.

Quick start:
  craftctl check          # Is Docker installed?
  craftctl start          # Bring the server up
  craftctl players        # Who is online?
  craftctl backup         # Archive the data directory
""",
    add_completion=False,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Config file (default: ./craftctl.yml or $CRAFTCTL_CONFIG)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging to the log file."),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Write logs to this file."),
) -> None:
    if verbose or log_file:
        setup_file_logging(log_file=log_file, verbose=verbose)

    if ctx.invoked_subcommand is None:
        exit_with_result(console, usage_result(UnknownCommand("No command given")))

    if ctx.invoked_subcommand == "help":
        return

    set_config(load_cli_config(console, config))


register_setup_commands(app, console)
register_server_commands(app, console)

if __name__ == "__main__":
    app()
