"""Request/result types passed between the CLI and the lifecycle controller."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from craftctl.core.errors import ControllerError, ErrorKind, UnknownCommand


class CommandName(str, Enum):
    INSTALL = "install"
    CHECK = "check"
    START = "start"
    STOP = "stop"
    RESTART = "restart"
    STATUS = "status"
    LOGS = "logs"
    PLAYERS = "players"
    EXEC = "exec"
    UPDATE = "update"
    BACKUP = "backup"
    HELP = "help"


@dataclass(frozen=True)
class CommandRequest:
    """One operator request: a command name plus its optional argument."""

    name: CommandName
    argument: Optional[str] = None

    @classmethod
    def parse(cls, name: str, argument: Optional[str] = None) -> "CommandRequest":
        """Build a request from raw command-line input.

        Raises:
            UnknownCommand: If name is not a supported command
        """
        try:
            command = CommandName(name)
        except ValueError:
            raise UnknownCommand(f"Unknown command: {name or ''}") from None
        return cls(name=command, argument=argument)


@dataclass
class CommandResult:
    """Outcome of one controller action."""

    success: bool
    message: str
    error: Optional[ErrorKind] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, **details: Any) -> "CommandResult":
        return cls(success=True, message=message, details=details)

    @classmethod
    def from_error(cls, error: ControllerError) -> "CommandResult":
        details = {"hint": error.hint} if error.hint else {}
        return cls(success=False, message=error.message, error=error.kind, details=details)


@dataclass
class ContainerStatus:
    """One `docker ps` row for the managed container."""

    name: str
    status: str
    ports: str = ""


@dataclass(frozen=True)
class PlayerCount:
    online: int
    maximum: int


@dataclass
class DependencyStatus:
    """Presence of one host dependency (docker, docker compose)."""

    name: str
    installed: bool
    version: Optional[str] = None
