"""Error taxonomy for lifecycle controller operations."""
from enum import Enum


class ErrorKind(str, Enum):
    """Tag carried by failed command results."""

    CONFIGURATION_MISSING = "configuration_missing"
    NOT_RUNNING = "not_running"
    MISSING_ARGUMENT = "missing_argument"
    CONSOLE_UNAVAILABLE = "console_unavailable"
    DATA_MISSING = "data_missing"
    SUPERVISOR_ERROR = "supervisor_error"
    DEPENDENCY_ERROR = "dependency_error"
    LOCKED = "locked"
    ARCHIVE_FAILED = "archive_failed"
    UNKNOWN_COMMAND = "unknown_command"


class ControllerError(Exception):
    """Base class for failures surfaced to the operator."""

    kind: ErrorKind = ErrorKind.SUPERVISOR_ERROR

    def __init__(self, message: str, hint: str = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class ConfigurationMissing(ControllerError):
    """Compose definition file is absent."""

    kind = ErrorKind.CONFIGURATION_MISSING


class NotRunning(ControllerError):
    """Action requires a running server."""

    kind = ErrorKind.NOT_RUNNING


class MissingArgument(ControllerError):
    """exec was called without a console command."""

    kind = ErrorKind.MISSING_ARGUMENT


class ConsoleUnavailable(ControllerError):
    """Remote console refused the command or timed out."""

    kind = ErrorKind.CONSOLE_UNAVAILABLE


class DataMissing(ControllerError):
    """Backup source directory is absent."""

    kind = ErrorKind.DATA_MISSING


class SupervisorError(ControllerError):
    """Docker or Docker Compose reported a failure."""

    kind = ErrorKind.SUPERVISOR_ERROR


class DependencyError(ControllerError):
    """Docker dependencies are missing or could not be installed."""

    kind = ErrorKind.DEPENDENCY_ERROR


class ArchiveFailed(ControllerError):
    """Backup archive could not be written."""

    kind = ErrorKind.ARCHIVE_FAILED


class UnknownCommand(ControllerError):
    """Command name outside the supported set."""

    kind = ErrorKind.UNKNOWN_COMMAND
