from __future__ import annotations

import fcntl
import logging
import os
from pathlib import Path
from types import TracebackType

import psutil

logger = logging.getLogger(__name__)


class RunLock:
    """Process-wide lock file that fails fast when already held.

    Exclusion comes from an ``flock`` held on the open file for the whole
    run, so the kernel drops it when the owner dies. The file also records
    the owner's pid, used for messages only. Two ``RunLock`` objects in one
    process exclude each other as well.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._fd: int | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def held(self) -> bool:
        return self._fd is not None

    def acquire(self) -> None:
        if self._fd is not None:
            return
        while True:
            fd = self._open()
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError:
                owner = self.read_owner()
                os.close(fd)
                raise SystemExit(f'Cannot lock "{self._path}", {self._describe(owner)}') from None
            except OSError:
                os.close(fd)
                raise
            # the previous holder may have unlinked the file between our
            # open and flock; a lock on an orphaned inode excludes nobody
            if self._same_file(fd):
                break
            os.close(fd)

        previous = self.read_owner()
        if previous is not None and previous != os.getpid():
            logger.warning("Replacing stale lock %s (pid %s)", self._path, previous)
        os.ftruncate(fd, 0)
        os.write(fd, f"{os.getpid()}\n".encode("ascii"))
        self._fd = fd
        logger.debug("Acquired lock %s", self._path)

    def release(self) -> None:
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            # unlink while still locked so a waiting run never locks a dead file
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("Failed to remove lock %s: %s", self._path, exc)
        finally:
            os.close(fd)
        logger.debug("Released lock %s", self._path)

    def read_owner(self) -> int | None:
        try:
            return int(self._path.read_text(encoding="utf-8").strip())
        except (OSError, ValueError):
            return None

    def _open(self) -> int:
        try:
            return os.open(self._path, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as exc:
            raise SystemExit(f'Cannot init lock "{self._path}": {exc}') from exc

    def _same_file(self, fd: int) -> bool:
        try:
            current = os.stat(self._path)
        except FileNotFoundError:
            return False
        opened = os.fstat(fd)
        return (opened.st_dev, opened.st_ino) == (current.st_dev, current.st_ino)

    def _describe(self, owner: int | None) -> str:
        if owner is None:
            return "held by another run"
        try:
            alive = psutil.pid_exists(owner)
        except (psutil.Error, ValueError):
            alive = False
        return f"held by pid {owner}" if alive else f"held by another run (recorded pid {owner})"

    def __enter__(self) -> RunLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
