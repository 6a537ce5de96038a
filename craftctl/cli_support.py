"""Shared utilities for craftctl CLI modules."""
from __future__ import annotations

from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from craftctl.core.config import ConfigError, ControllerConfig, get_config, load_config
from craftctl.core.controller import LifecycleController
from craftctl.core.models import CommandResult


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up file logging for CLI commands.

    Args:
        log_file: Path to log file (optional)
        verbose: Enable verbose logging
    """
    from craftctl.core.logger import setup_file_logging as _setup_file_logging
    _setup_file_logging(log_file=log_file, verbose=verbose)


def load_cli_config(console: Console, config_path: Optional[str] = None) -> ControllerConfig:
    """Load the effective config, exiting with a readable error when it is invalid."""
    try:
        return load_config(config_path)
    except ConfigError as e:
        handle_cli_error(e, console)


def get_controller() -> LifecycleController:
    """Return a controller for the active global config."""
    return LifecycleController(get_config())


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> NoReturn:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def render_result(console: Console, result: CommandResult) -> None:
    """Print a command result: status line, optional table/details, hint."""
    if result.success:
        print_success(console, result.message)
    else:
        print_error(console, result.message)

    containers = result.details.get("containers")
    if containers:
        console.print(status_table(containers))

    for dependency in result.details.get("dependencies") or []:
        if dependency.installed:
            print_success(console, f"{dependency.name} is installed ({dependency.version})")
        else:
            print_error(console, f"{dependency.name} is not installed")

    for note in result.details.get("notes") or []:
        print_info(console, note)

    lock = result.details.get("lock")
    if lock:
        print_info(console, f"Lifecycle lock held by {lock.describe()}")

    hint = result.details.get("hint")
    if hint:
        print_info(console, hint)

    usage = result.details.get("usage")
    if usage:
        console.print()
        console.print(usage, markup=False, highlight=False)


def exit_with_result(console: Console, result: CommandResult) -> None:
    """Render the result and translate failure into exit status 1."""
    render_result(console, result)
    if not result.success:
        raise typer.Exit(1)


def status_table(containers) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Ports")
    for row in containers:
        table.add_row(row.name, row.status, row.ports or "-")
    return table


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting.

    Args:
        console: Rich console for output
        message: Success message
        prefix: Prefix symbol (default: ✓)
    """
    console.print(f"[green]{prefix}[/green] ", end="")
    console.print(message, markup=False, highlight=False)


def print_error(console: Console, message: str, prefix: str = "✗") -> None:
    """Print error message with consistent formatting.

    Args:
        console: Rich console for output
        message: Error message
        prefix: Prefix symbol (default: ✗)
    """
    console.print(f"[red]{prefix}[/red] ", end="")
    console.print(message, markup=False, highlight=False)


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    """Print info message with consistent formatting.

    Args:
        console: Rich console for output
        message: Info message
        prefix: Prefix symbol (default: ℹ)
    """
    console.print(f"[cyan]{prefix}[/cyan] ", end="")
    console.print(message, markup=False, highlight=False)
