from __future__ import annotations

import posixpath
import shlex
from dataclasses import dataclass

from .backup_config import ResolvedPath
from .protocols import ClockProtocol
from .settings import (
    CURRENT_DIR_NAME,
    DEFAULT_RSYNC_EXECUTABLE,
    DEFAULT_RSYNC_LOG_PATTERN,
)

RSYNC_FLAGS = ("-avHAX", "--delete", "--backup")


@dataclass(frozen=True)
class RsyncCommand:
    executable: str
    args: tuple[str, ...]

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    def __str__(self) -> str:
        return shlex.join(self.argv)


def backup_base_dir(root_dir: str, path: ResolvedPath) -> str:
    return f"{root_dir}/{path.host}/{posixpath.basename(path.path)}"


def current_dir(root_dir: str, path: ResolvedPath) -> str:
    return f"{backup_base_dir(root_dir, path)}/{CURRENT_DIR_NAME}"


class CommandBuilder:
    def __init__(
        self,
        root_dir: str,
        clock: ClockProtocol,
        *,
        executable: str = DEFAULT_RSYNC_EXECUTABLE,
        log_pattern: str = DEFAULT_RSYNC_LOG_PATTERN,
    ) -> None:
        self._root_dir = root_dir
        self._clock = clock
        self._executable = executable
        self._log_pattern = log_pattern

    def build(self, path: ResolvedPath) -> RsyncCommand:
        base_dir = backup_base_dir(self._root_dir, path)
        args = [
            *RSYNC_FLAGS,
            f"--backup-dir={base_dir}/{self._clock.date_stamp()}",
            f"--log-file={self._log_pattern}.{path.host}.log",
        ]
        if path.bandwidth_limit is not None:
            args.append(f"--bwlimit={path.bandwidth_limit}")
        args.append(self._source(path))
        args.append(f"{current_dir(self._root_dir, path)}/")
        return RsyncCommand(self._executable, tuple(args))

    def build_all(self, paths: list[ResolvedPath]) -> list[RsyncCommand]:
        return [self.build(path) for path in paths]

    def _source(self, path: ResolvedPath) -> str:
        if path.login_user is not None:
            return f"{path.login_user}@{path.host}:{path.path}/"
        return f"{path.host}:{path.path}/"
