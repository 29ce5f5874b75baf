from __future__ import annotations

import subprocess
from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .backup_config import ResolvedPath
    from .command_builder import RsyncCommand
    from .worker_pool import JobResult
    from .retention_sweeper import SweepReport


class ClockProtocol(Protocol):
    def now_iso(self) -> str:
        ...

    def today(self) -> date:
        ...

    def date_stamp(self) -> str:
        ...


class CommandRunnerProtocol(Protocol):
    def run(self, command: RsyncCommand) -> subprocess.CompletedProcess[str]:
        ...


class WorkerPoolProtocol(Protocol):
    def run(self, commands: Sequence[RsyncCommand]) -> list[JobResult]:
        ...


class SweeperProtocol(Protocol):
    def sweep(self, paths: Sequence[ResolvedPath]) -> SweepReport:
        ...

    def expired_snapshots(self, path: ResolvedPath) -> list[Path]:
        ...
