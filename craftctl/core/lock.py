"""Lifecycle lock shared by every craftctl process in a project directory.

Ownership is the flock on ``<project>/.craftctl.lock``, never the file's
existence: the file is created once and kept. While held, it records which
operation holds it, so a blocked caller and ``craftctl status`` can name
the holder. Release blanks the record before dropping the flock.
"""
import fcntl
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from craftctl.core.logger import get_logger

logger = get_logger(__name__)

POLL_INTERVAL = 0.2


@dataclass(frozen=True)
class LockHolder:
    """The operation recorded in a held lock file."""
    operation: str
    pid: str
    since: str

    @classmethod
    def parse(cls, text: str) -> "LockHolder":
        fields = text.split()
        if len(fields) < 4:
            return cls(operation="unknown", pid="unknown", since="unknown")
        # operation pid date time
        return cls(operation=fields[0], pid=fields[1], since=f"{fields[2]} {fields[3]}")

    def describe(self) -> str:
        return f"'{self.operation}' (PID {self.pid}, since {self.since})"


class LockError(Exception):
    """Raised when the lifecycle lock is held by another process."""

    def __init__(self, message: str, holder: Optional[LockHolder] = None):
        super().__init__(message)
        self.holder = holder


class LifecycleLock:
    """Exclusive lock for one mutating operation.

    With ``timeout=0`` a busy lock fails at once; otherwise the lock is
    polled until ``timeout`` seconds have passed.
    """

    def __init__(self, lock_file: Path, operation: str = "lifecycle", timeout: int = 0):
        self.lock_file = Path(lock_file)
        self.operation = operation
        self.timeout = timeout
        self._handle = None

    @property
    def held(self) -> bool:
        return self._handle is not None

    def acquire(self) -> None:
        """Take the lock or raise LockError naming the current holder."""
        self.lock_file.parent.mkdir(parents=True, exist_ok=True)
        deadline = time.monotonic() + self.timeout

        while True:
            handle = open(self.lock_file, "a+")
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError:
                holder = _read_holder(handle)
                handle.close()
                if time.monotonic() >= deadline:
                    raise self._busy_error(holder)
                time.sleep(POLL_INTERVAL)
                continue

            if not _same_file(handle, self.lock_file):
                # Lock file was removed or replaced after we opened it
                handle.close()
                continue

            self._handle = handle
            self._write_holder()
            logger.debug(f"Acquired lifecycle lock for {self.operation}: {self.lock_file}")
            return

    def release(self) -> None:
        if self._handle is None:
            return

        try:
            self._handle.seek(0)
            self._handle.truncate()
            self._handle.flush()
        except OSError as e:
            logger.warning(f"Could not clear lock record {self.lock_file}: {e}")
        finally:
            # Closing the descriptor drops the flock
            self._handle.close()
            self._handle = None
        logger.debug(f"Released lifecycle lock for {self.operation}")

    def _write_holder(self) -> None:
        self._handle.seek(0)
        self._handle.truncate()
        self._handle.write(f"{self.operation} {os.getpid()} {time.strftime('%Y-%m-%d %H:%M:%S')}\n")
        self._handle.flush()

    def _busy_error(self, holder: LockHolder) -> LockError:
        if self.timeout == 0:
            message = f"Another craftctl command is running: {holder.describe()}"
        else:
            message = f"Gave up after waiting {self.timeout}s for {holder.describe()} to finish"
        return LockError(message, holder=holder)

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False


def check_lock_status(lock_file: Path) -> Optional[LockHolder]:
    """Return the holder of the lifecycle lock, or None if it is free.

    A record left behind by a crashed process is reported as free, since
    its flock died with it.
    """
    try:
        handle = open(lock_file)
    except FileNotFoundError:
        return None

    with handle:
        if not handle.read().strip():
            return None
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_SH | fcntl.LOCK_NB)
        except BlockingIOError:
            return _read_holder(handle)
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        return None


def _read_holder(handle) -> LockHolder:
    handle.seek(0)
    return LockHolder.parse(handle.read())


def _same_file(handle, path: Path) -> bool:
    try:
        return os.fstat(handle.fileno()).st_ino == os.stat(path).st_ino
    except FileNotFoundError:
        return False
