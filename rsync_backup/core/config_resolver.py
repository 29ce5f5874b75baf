from __future__ import annotations

import logging
import posixpath

from .backup_config import HostConfig, RawConfig, ResolvedConfig, ResolvedPath
from .settings import DEFAULT_CONCURRENT_RSYNC, DEFAULT_RETENTION_DAYS

logger = logging.getLogger(__name__)

_INVALID_PATHS = frozenset({"", ".", ".."})


def normalize_path(value: str) -> str:
    """Strip trailing slashes so paths can be joined with a plain ``/``."""
    return value.rstrip("/")


def inherit(*values: int | None, default: int) -> int:
    """Return the first value that is set, walking from the narrowest scope."""
    for value in values:
        if value is not None:
            return value
    return default


class ConfigResolver:
    def resolve(self, raw: RawConfig) -> ResolvedConfig:
        if not raw.root_dir:
            raise SystemExit("Cannot find root_dir key in config root level")

        concurrency_limit = inherit(raw.concurrent_rsync, default=DEFAULT_CONCURRENT_RSYNC)
        retention_days = inherit(raw.retention_days, default=DEFAULT_RETENTION_DAYS)
        self._check_limit(concurrency_limit, "concurrent_rsync")
        self._check_retention(retention_days, "retention_days")

        paths: list[ResolvedPath] = []
        for host in raw.hosts:
            paths.extend(self._resolve_host(host, concurrency_limit, retention_days))
        self._warn_shared_backup_dirs(paths)

        return ResolvedConfig(
            root_dir=normalize_path(raw.root_dir),
            concurrency_limit=concurrency_limit,
            retention_days=retention_days,
            paths=paths,
        )

    def _resolve_host(
        self,
        host: HostConfig,
        global_limit: int,
        global_retention: int,
    ) -> list[ResolvedPath]:
        if host.limit_concurrent_rsync is not None:
            self._check_limit(host.limit_concurrent_rsync, f"{host.name}.limit_concurrent_rsync")
            concurrency_limit = min(host.limit_concurrent_rsync, global_limit)
        else:
            concurrency_limit = global_limit

        resolved: list[ResolvedPath] = []
        for directory in host.dirs:
            path = normalize_path(directory.path)
            if path in _INVALID_PATHS:
                logger.warning(
                    "Skipping invalid path %r for host %s", directory.path, host.name
                )
                continue

            retention_days = inherit(
                directory.retention_days,
                host.retention_days,
                default=global_retention,
            )
            self._check_retention(retention_days, f"{host.name}:{path} retention_days")

            resolved.append(
                ResolvedPath(
                    host=host.name,
                    path=path,
                    retention_days=retention_days,
                    concurrency_limit=concurrency_limit,
                    bandwidth_limit=directory.bandwidth_limit,
                    login_user=host.login_user,
                )
            )
        return resolved

    def _warn_shared_backup_dirs(self, paths: list[ResolvedPath]) -> None:
        # snapshots live under <host>/<basename>, so two paths with the same
        # basename on one host write into the same directory
        seen: dict[tuple[str, str], str] = {}
        for path in paths:
            key = (path.host, posixpath.basename(path.path))
            other = seen.setdefault(key, path.path)
            if other != path.path:
                logger.warning(
                    "Paths %s and %s on host %s share backup directory %s",
                    other, path.path, path.host, key[1],
                )

    def _check_limit(self, value: int, name: str) -> None:
        if value < 1:
            raise SystemExit(f"Invalid {name}: {value} (must be at least 1)")

    def _check_retention(self, value: int, name: str) -> None:
        if value < 0:
            raise SystemExit(f"Invalid {name}: {value} (must not be negative)")
