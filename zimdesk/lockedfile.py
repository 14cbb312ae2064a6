"""Advisory file locking with read (shared) and write (exclusive) modes."""

from __future__ import annotations

import logging
import os
from enum import IntEnum
from typing import IO, Any

import portalocker

_log = logging.getLogger(__name__)


class LockMode(IntEnum):
    """Kind of lock held on a file."""

    NO_LOCK = 0
    READ_LOCK = 1
    WRITE_LOCK = 2


class LockedFile:
    """A file that can hold an advisory read or write lock.

    Many holders may share a read lock; a write lock is exclusive.
    Locks are advisory: only cooperating users of this class are
    serialised. A lock is released when the file is closed.
    """

    def __init__(self, name: str | os.PathLike[str] | None = None) -> None:
        self.name = os.fspath(name) if name is not None else None
        self._file: IO[Any] | None = None
        self._lock_mode = LockMode.NO_LOCK

    def __enter__(self) -> LockedFile:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"LockedFile({self.name!r}, lock_mode={self._lock_mode.name})"

    @property
    def file(self) -> IO[Any]:
        """The underlying open file object."""
        self._require_open("file")
        assert self._file is not None
        return self._file

    def open(self, mode: str = "r+") -> LockedFile:
        """Open the file; "r+" creates it when missing. Truncating modes are refused."""
        if "w" in mode:
            raise ValueError("truncate mode not allowed; resize after taking a write lock")
        if self.name is None:
            raise ValueError("no file name set")
        if self._file is not None:
            raise ValueError("file is already open")
        if mode.replace("b", "").replace("t", "") == "r+":
            fd = os.open(self.name, os.O_RDWR | os.O_CREAT, 0o666)
            try:
                self._file = os.fdopen(fd, mode)
            except BaseException:
                os.close(fd)
                raise
        else:
            self._file = open(self.name, mode)
        return self

    def close(self) -> None:
        """Release any lock and close the file."""
        if self._file is None:
            return
        try:
            self.unlock()
        finally:
            self._file.close()
            self._file = None
            self._lock_mode = LockMode.NO_LOCK

    def is_open(self) -> bool:
        return self._file is not None

    def lock(self, mode: LockMode, block: bool = True) -> bool:
        """Take a lock of the given mode.

        Returns True when the file is locked in that mode afterwards.
        Without blocking, returns False at once if the lock is taken elsewhere.
        Holding another mode first releases it.
        """
        mode = LockMode(mode)
        self._require_open("lock")
        if mode is LockMode.NO_LOCK:
            return self.unlock()
        if mode is self._lock_mode:
            return True
        if self._lock_mode is not LockMode.NO_LOCK:
            self.unlock()

        flags = (
            portalocker.LockFlags.SHARED
            if mode is LockMode.READ_LOCK
            else portalocker.LockFlags.EXCLUSIVE
        )
        if not block:
            flags |= portalocker.LockFlags.NON_BLOCKING
        try:
            portalocker.lock(self._file, flags)
        except portalocker.exceptions.LockException:
            return False
        self._lock_mode = mode
        return True

    def unlock(self) -> bool:
        """Release the lock; returns True when no lock is held afterwards."""
        self._require_open("unlock")
        if not self.is_locked():
            return True
        try:
            portalocker.unlock(self._file)
        except portalocker.exceptions.LockException as exc:
            _log.warning("unlock failed: %s", exc)
            return False
        self._lock_mode = LockMode.NO_LOCK
        return True

    def is_locked(self) -> bool:
        return self._lock_mode is not LockMode.NO_LOCK

    def lock_mode(self) -> LockMode:
        return self._lock_mode

    def _require_open(self, operation: str) -> None:
        if self._file is None:
            raise ValueError(f"{operation}: file is not opened")