"""Lifecycle controller: one operator command -> one supervised action.

The controller holds no state between invocations. Whether the server is
running is asked of the supervisor every time it matters, and transitions
are only requested, never recorded locally.

Mutating actions (start, stop, restart, update, backup) run under the
lifecycle lock so two operators cannot interleave a state check with
another invocation's action.
"""
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional

from craftctl.core.config import ControllerConfig
from craftctl.core.errors import (
    ArchiveFailed,
    ConfigurationMissing,
    ControllerError,
    DataMissing,
    ErrorKind,
    MissingArgument,
    NotRunning,
    SupervisorError,
    UnknownCommand,
)
from craftctl.core.lock import LifecycleLock, LockError, check_lock_status
from craftctl.core.logger import get_logger
from craftctl.core.models import CommandName, CommandRequest, CommandResult
from craftctl.core.players import parse_player_count
from craftctl.services.archive import TarArchiver, backup_filename
from craftctl.services.console import RconConsole
from craftctl.services.dependencies import DependencyManager
from craftctl.services.docker_compose import ComposeSupervisor

logger = get_logger(__name__)

USAGE = """\
Minecraft Server Controller

Usage: craftctl [command]

Commands:
  install       Install Docker and dependencies (requires sudo)
  check         Check if dependencies are installed

  start         Start the Minecraft server
  stop          Stop the Minecraft server
  restart       Restart the Minecraft server
  status        Show server status

  logs          View server logs (real-time)
  players       Check number of players online
  exec <cmd>    Execute a server command via RCON

  update        Update server to latest version
  backup        Create a backup of server data

  help          Show this help message

Examples:
  craftctl install
  craftctl start
  craftctl players
  craftctl exec "say Hello everyone!"
  craftctl backup
"""

PLAYER_LIST_COMMAND = "list"


class LifecycleController:
    """Maps command requests onto the supervisor, console and archiver."""

    def __init__(
        self,
        config: ControllerConfig,
        supervisor: Optional[ComposeSupervisor] = None,
        console: Optional[RconConsole] = None,
        archiver: Optional[TarArchiver] = None,
        dependencies: Optional[DependencyManager] = None,
    ):
        self.config = config
        self.supervisor = supervisor or ComposeSupervisor(
            config.compose_path,
            config.container_name,
            timeout=config.supervisor_timeout,
        )
        self.console = console or RconConsole(
            config.container_name,
            client=config.console_command,
            timeout=config.console_timeout,
        )
        self.archiver = archiver or TarArchiver()
        self.dependencies = dependencies or DependencyManager()

    # Dispatch

    def dispatch(self, request: CommandRequest) -> CommandResult:
        """Run exactly one operation for the request.

        Controller errors come back as failed results tagged with their kind.
        """
        handlers: Dict[CommandName, Callable[[], CommandResult]] = {
            CommandName.INSTALL: self.install,
            CommandName.CHECK: self.check,
            CommandName.START: self.start,
            CommandName.STOP: self.stop,
            CommandName.RESTART: self.restart,
            CommandName.STATUS: self.status,
            CommandName.LOGS: self._logs_result,
            CommandName.PLAYERS: self.player_count,
            CommandName.EXEC: lambda: self.exec_command(request.argument),
            CommandName.UPDATE: self.update,
            CommandName.BACKUP: self.backup,
            CommandName.HELP: self.help,
        }

        logger.debug(f"Dispatching {request.name.value}")
        try:
            return handlers[request.name]()
        except ControllerError as e:
            logger.debug(f"{request.name.value} failed: {e.kind.value}: {e.message}")
            return CommandResult.from_error(e)
        except LockError as e:
            return CommandResult(
                success=False,
                message=str(e),
                error=ErrorKind.LOCKED,
                details={"hint": "Set CRAFTCTL_LOCK_TIMEOUT to wait for it instead"},
            )

    # Queries

    def is_running(self) -> bool:
        return self.supervisor.is_running()

    def status(self) -> CommandResult:
        lock = check_lock_status(self.config.lock_path)
        if not self.is_running():
            return CommandResult.ok("Server is STOPPED", running=False, containers=[], lock=lock)

        rows = self.supervisor.list_status()
        return CommandResult.ok(
            f"Server is RUNNING ({self.config.container_name})",
            running=True,
            containers=rows,
            lock=lock,
        )

    # State transitions

    def start(self) -> CommandResult:
        with self._lifecycle_lock(CommandName.START):
            if self.is_running():
                return CommandResult.ok("Server is already running")

            self._require_compose_file()
            self.supervisor.bring_up()

            if not self.is_running():
                raise SupervisorError(
                    "Failed to start server",
                    hint=f"Inspect the container with: docker logs {self.config.container_name}",
                )

        return CommandResult.ok("Server started successfully", hint="View logs with: craftctl logs")

    def stop(self) -> CommandResult:
        # Completion is not verified after the stop request.
        with self._lifecycle_lock(CommandName.STOP):
            if not self.is_running():
                return CommandResult.ok("Server is not running")
            self.supervisor.stop()

        return CommandResult.ok("Server stopped")

    def restart(self) -> CommandResult:
        with self._lifecycle_lock(CommandName.RESTART):
            self.supervisor.restart()
        return CommandResult.ok("Server restarted")

    def update(self) -> CommandResult:
        with self._lifecycle_lock(CommandName.UPDATE):
            self._require_compose_file()
            self.supervisor.pull()
            self.supervisor.bring_up()
        return CommandResult.ok("Server updated")

    def backup(self) -> CommandResult:
        """Stop (if running), archive the data directory, restart if we stopped it.

        If archiving fails the server stays stopped.
        """
        data_path = self.config.data_path
        if not data_path.is_dir():
            raise DataMissing(f"Data directory not found: {data_path}")

        with self._lifecycle_lock(CommandName.BACKUP):
            was_running = self.is_running()
            if was_running:
                logger.info("Stopping server for backup")
                self.supervisor.stop()

            dest = self.config.backup_path / backup_filename()
            try:
                archive_path = self.archiver.archive(data_path, dest)
            except ArchiveFailed as e:
                if was_running:
                    e.hint = "Server was left stopped. Start it with: craftctl start"
                raise

            if was_running:
                logger.info("Restarting server after backup")
                self.supervisor.start()

        return CommandResult.ok(
            f"Backup created: {archive_path}",
            archive=archive_path,
            restarted=was_running,
        )

    # Logs and console

    def tail_logs(self) -> Iterator[str]:
        """Return a lazy, endless iterator over the service's log lines."""
        self._require_running()
        return self.supervisor.stream_logs(self.config.service_name)

    def _logs_result(self) -> CommandResult:
        return CommandResult.ok(
            "Viewing server logs (Ctrl+C to exit)...",
            lines=self.tail_logs(),
        )

    def player_count(self) -> CommandResult:
        self._require_running()
        response = self.console.send(PLAYER_LIST_COMMAND)

        players = parse_player_count(response)
        if players is None:
            return CommandResult.ok(response, raw=response, players=None)

        return CommandResult.ok(
            f"Players online: {players.online} / {players.maximum}",
            raw=response,
            players=players,
        )

    def exec_command(self, argument: Optional[str]) -> CommandResult:
        self._require_running()
        if not argument or not argument.strip():
            raise MissingArgument(
                "No command provided",
                hint='Usage: craftctl exec "<command>"',
            )

        logger.info(f"Executing console command: {argument}")
        response = self.console.send(argument)
        return CommandResult.ok(response or "Command executed (no output)", raw=response)

    # Host dependencies

    def check(self) -> CommandResult:
        statuses = self.dependencies.check_all()
        missing = [s.name for s in statuses if not s.installed]
        if missing:
            return CommandResult(
                success=False,
                message=f"Missing dependencies: {', '.join(missing)}",
                error=ErrorKind.DEPENDENCY_ERROR,
                details={"dependencies": statuses, "hint": "Run: sudo craftctl install"},
            )
        return CommandResult.ok("All dependencies are installed", dependencies=statuses)

    def install(self) -> CommandResult:
        self.dependencies.require_root()
        statuses = self.dependencies.check_all()
        if all(s.installed for s in statuses):
            return CommandResult.ok("All dependencies are already installed", dependencies=statuses)

        notes = self.dependencies.install()
        return CommandResult.ok("All dependencies installed", notes=notes)

    def help(self) -> CommandResult:
        return CommandResult.ok(USAGE)

    # Guards

    def _require_running(self) -> None:
        if not self.is_running():
            raise NotRunning("Server is not running", hint="Start it with: craftctl start")

    def _require_compose_file(self) -> None:
        compose_path = self.config.compose_path
        if not compose_path.is_file():
            raise ConfigurationMissing(f"{compose_path.name} not found in {compose_path.parent}")

    @contextmanager
    def _lifecycle_lock(self, operation: CommandName):
        with LifecycleLock(
            self.config.lock_path,
            operation=operation.value,
            timeout=self.config.lock_timeout,
        ):
            yield


def usage_result(error: UnknownCommand) -> CommandResult:
    """Failed result for an unrecognised command name, carrying the usage text."""
    result = CommandResult.from_error(error)
    result.details["usage"] = USAGE
    return result
