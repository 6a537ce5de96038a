"""Logging for craftctl.

Module loggers are children of the ``craftctl`` package logger and carry no
handlers or levels of their own. The package logger prints warnings to the
terminal through rich. ``--verbose`` or ``--log-file`` attach a file handler
that records INFO, or DEBUG with ``--verbose``, which includes every external
command craftctl runs.
"""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console()

PACKAGE_LOGGER = "craftctl"

LOG_DIR = Path.home() / ".local" / "state" / "craftctl"
LOG_FILE = LOG_DIR / "craftctl.log"
FALLBACK_LOG_FILE = Path("/tmp/craftctl.log")

_file_handler: Optional[logging.FileHandler] = None


def _package_logger() -> logging.Logger:
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler.setLevel(logging.WARNING)
        package_logger.addHandler(handler)
    return package_logger


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> Path:
    """Send craftctl's log records to a file.

    Replaces any file handler installed by an earlier call.

    Returns:
        The file actually written (the state directory falls back to /tmp
        when it cannot be created)
    """
    global _file_handler

    target = Path(log_file) if log_file else LOG_FILE
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        if log_file:
            raise
        target = FALLBACK_LOG_FILE

    close_file_logging()

    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.FileHandler(target)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    package_logger = _package_logger()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    _file_handler = handler

    package_logger.info(f"craftctl logging initialized: {target}")
    return target


def close_file_logging() -> None:
    """Detach the file handler and restore the package logger's level."""
    global _file_handler
    if _file_handler is None:
        return

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.removeHandler(_file_handler)
    _file_handler.close()
    _file_handler = None
    package_logger.setLevel(logging.NOTSET)


def get_logger(name: str) -> logging.Logger:
    """Logger for a craftctl module (pass ``__name__``)."""
    _package_logger()
    return logging.getLogger(name)
