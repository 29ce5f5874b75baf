from __future__ import annotations

import logging
import queue
import subprocess
import threading
from collections.abc import Sequence
from dataclasses import dataclass

from .command_builder import RsyncCommand
from .protocols import CommandRunnerProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobResult:
    command: RsyncCommand
    worker_id: int
    returncode: int | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class WorkerPool:
    """Run commands on a fixed number of threads sharing one FIFO queue.

    Every command is dequeued exactly once and always produces a
    ``JobResult``; a failing command never stops the others. ``run`` blocks
    until all results are in and returns them in submission order.
    """

    def __init__(self, size: int, runner: CommandRunnerProtocol) -> None:
        if size < 1:
            raise ValueError(f"pool size must be at least 1, got {size}")
        self._size = size
        self._runner = runner

    @property
    def size(self) -> int:
        return self._size

    def run(self, commands: Sequence[RsyncCommand]) -> list[JobResult]:
        jobs: queue.Queue[tuple[int, RsyncCommand]] = queue.Queue()
        for index, command in enumerate(commands):
            jobs.put((index, command))

        results: list[JobResult | None] = [None] * len(commands)
        workers = [
            threading.Thread(
                target=self._work,
                args=(worker_id, jobs, results),
                name=f"worker-{worker_id}",
                daemon=True,
            )
            for worker_id in range(1, self._size + 1)
        ]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()

        return [
            result if result is not None else JobResult(command, 0, None, "no result reported")
            for command, result in zip(commands, results)
        ]

    def _work(
        self,
        worker_id: int,
        jobs: queue.Queue[tuple[int, RsyncCommand]],
        results: list[JobResult | None],
    ) -> None:
        while True:
            try:
                index, command = jobs.get_nowait()
            except queue.Empty:
                return
            results[index] = self._execute(worker_id, command)

    def _execute(self, worker_id: int, command: RsyncCommand) -> JobResult:
        logger.info("Worker ID: %d; execute command: %s", worker_id, command)
        try:
            process = self._runner.run(command)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.error("Worker ID: %d; command fail: %s: %s", worker_id, command, exc)
            return JobResult(command, worker_id, None, str(exc))
        except Exception as exc:
            # a worker must never die holding a job
            logger.exception("Worker ID: %d; command fail: %s", worker_id, command)
            return JobResult(command, worker_id, None, f"{type(exc).__name__}: {exc}")

        if process.returncode != 0:
            detail = (process.stderr or "").strip() or f"exit status {process.returncode}"
            logger.error(
                "Worker ID: %d; command fail: %s: exit status %d: %s",
                worker_id,
                command,
                process.returncode,
                detail,
            )
            return JobResult(command, worker_id, process.returncode, detail)

        logger.info("Worker ID: %d; command successful: %s", worker_id, command)
        return JobResult(command, worker_id, 0)
