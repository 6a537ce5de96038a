"""Host setup CLI commands: install, check, help."""
from __future__ import annotations

import typer
from rich.console import Console

from craftctl.cli_support import exit_with_result, get_controller
from craftctl.core.controller import USAGE
from craftctl.core.models import CommandName, CommandRequest


def register_setup_commands(app: typer.Typer, console: Console) -> None:
    """Attach dependency and help commands to the main CLI."""

    @app.command("install")
    def install_command() -> None:
        """Install Docker and dependencies (requires sudo)."""
        console.print("[dim]Checking dependencies...[/dim]")
        controller = get_controller()
        exit_with_result(console, controller.dispatch(CommandRequest(name=CommandName.INSTALL)))

    @app.command("check")
    def check_command() -> None:
        """Check if dependencies are installed."""
        controller = get_controller()
        exit_with_result(console, controller.dispatch(CommandRequest(name=CommandName.CHECK)))

    @app.command("help")
    def help_command() -> None:
        """Show this help message."""
        console.print(USAGE, markup=False, highlight=False)
