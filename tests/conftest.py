from __future__ import annotations

import subprocess
import threading
from datetime import date

import pytest

from rsync_backup.core.backup_config import ResolvedConfig, ResolvedPath
from rsync_backup.core.command_builder import RsyncCommand


class FixedClock:
    def __init__(self, today: date = date(2026, 2, 16)) -> None:
        self._today = today
        self._iso = "2026-02-16T01:02:03Z"

    def now_iso(self) -> str:
        return self._iso

    def today(self) -> date:
        return self._today

    def date_stamp(self) -> str:
        return self._today.isoformat()


class RunnerStub:
    """Records commands and answers with a return code chosen per host."""

    def __init__(self, failing_hosts: set[str] | None = None) -> None:
        self.failing_hosts = failing_hosts or set()
        self.calls: list[RsyncCommand] = []
        self._lock = threading.Lock()

    def run(self, command: RsyncCommand) -> subprocess.CompletedProcess[str]:
        with self._lock:
            self.calls.append(command)
        source = command.args[-2]
        host = source.split(":", 1)[0].split("@")[-1]
        if host in self.failing_hosts:
            return subprocess.CompletedProcess(command.argv, 23, stdout="", stderr="rsync error\n")
        return subprocess.CompletedProcess(command.argv, 0, stdout="", stderr="")


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def sample_paths() -> list[ResolvedPath]:
    return [
        ResolvedPath("alpha", "/srv/www", 7, 3, bandwidth_limit=500, login_user="backup"),
        ResolvedPath("alpha", "/etc", 14, 3),
        ResolvedPath("beta", "/home", 3, 2),
    ]


@pytest.fixture
def sample_config(tmp_path, sample_paths) -> ResolvedConfig:
    return ResolvedConfig(
        root_dir=str(tmp_path / "backups"),
        concurrency_limit=3,
        retention_days=7,
        paths=sample_paths,
    )
