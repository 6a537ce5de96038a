"""Server lifecycle CLI commands: start, stop, restart, status, logs, players, exec, update, backup."""
from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console

from craftctl.cli_support import exit_with_result, get_controller, print_info
from craftctl.core.models import CommandName, CommandRequest


def register_server_commands(app: typer.Typer, console: Console) -> None:
    """Attach server lifecycle commands to the main CLI."""

    def run(name: CommandName, argument: Optional[str] = None) -> None:
        controller = get_controller()
        result = controller.dispatch(CommandRequest(name=name, argument=argument))
        exit_with_result(console, result)

    @app.command("start")
    def start_command() -> None:
        """Start the Minecraft server."""
        console.print("[dim]Starting Minecraft server...[/dim]")
        run(CommandName.START)

    @app.command("stop")
    def stop_command() -> None:
        """Stop the Minecraft server."""
        console.print("[dim]Stopping Minecraft server...[/dim]")
        run(CommandName.STOP)

    @app.command("restart")
    def restart_command() -> None:
        """Restart the Minecraft server."""
        console.print("[dim]Restarting Minecraft server...[/dim]")
        run(CommandName.RESTART)

    @app.command("status")
    def status_command() -> None:
        """Show server status."""
        run(CommandName.STATUS)

    @app.command("logs")
    def logs_command() -> None:
        """View server logs (real-time)."""
        controller = get_controller()
        result = controller.dispatch(CommandRequest(name=CommandName.LOGS))
        if not result.success:
            exit_with_result(console, result)

        print_info(console, result.message)
        lines = result.details["lines"]
        try:
            for line in lines:
                console.print(line, markup=False, highlight=False)
        except KeyboardInterrupt:
            console.print()
        finally:
            lines.close()

    @app.command("players")
    def players_command() -> None:
        """Check number of players online."""
        console.print("[dim]Checking player count...[/dim]")
        controller = get_controller()
        result = controller.dispatch(CommandRequest(name=CommandName.PLAYERS))
        if result.success and result.details.get("players") is not None:
            console.print(result.details["raw"], markup=False, highlight=False)
        exit_with_result(console, result)

    @app.command(
        "exec",
        context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
    )
    def exec_command(
        command: Optional[List[str]] = typer.Argument(
            None,
            help='Console command, e.g. "say Hello everyone!".',
            metavar="COMMAND",
        ),
    ) -> None:
        """Execute a server command via RCON."""
        argument = " ".join(command) if command else None
        if argument:
            console.print("[dim]Executing command:[/dim] ", end="")
            console.print(argument, markup=False, highlight=False)
        run(CommandName.EXEC, argument)

    @app.command("update")
    def update_command() -> None:
        """Update server to latest version (pull image, recreate)."""
        console.print("[dim]Updating Minecraft server...[/dim]")
        run(CommandName.UPDATE)

    @app.command("backup")
    def backup_command() -> None:
        """Create a backup of server data."""
        console.print("[dim]Creating server backup...[/dim]")
        run(CommandName.BACKUP)
