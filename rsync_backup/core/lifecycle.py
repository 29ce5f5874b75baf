from __future__ import annotations

import logging
import signal
from types import FrameType, TracebackType
from typing import Any

from .run_lock import RunLock

logger = logging.getLogger(__name__)

TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class RunLifecycle:
    """Hold the run lock for the duration of a ``with`` block.

    While inside the block SIGINT and SIGTERM release the lock and exit with
    ``128 + signum``; in-flight jobs are abandoned. Leaving the block by any
    route restores the previous handlers and releases the lock.
    """

    def __init__(self, lock: RunLock, signals: tuple[signal.Signals, ...] = TERMINATION_SIGNALS) -> None:
        self._lock = lock
        self._signals = signals
        self._previous: dict[signal.Signals, Any] = {}

    @property
    def lock(self) -> RunLock:
        return self._lock

    def __enter__(self) -> RunLifecycle:
        self._lock.acquire()
        try:
            for signum in self._signals:
                self._previous[signum] = signal.signal(signum, self._handle_signal)
        except (ValueError, OSError):
            self._restore_handlers()
            self._lock.release()
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._restore_handlers()
        self._lock.release()

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        logger.error("Program killed by %s", signal.Signals(signum).name)
        self._lock.release()
        raise SystemExit(128 + signum)

    def _restore_handlers(self) -> None:
        while self._previous:
            signum, handler = self._previous.popitem()
            signal.signal(signum, handler)
