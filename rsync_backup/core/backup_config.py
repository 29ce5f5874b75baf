from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class DirectoryConfig:
    path: str
    retention_days: int | None = None
    bandwidth_limit: int | None = None


@dataclass
class HostConfig:
    name: str
    limit_concurrent_rsync: int | None = None
    retention_days: int | None = None
    login_user: str | None = None
    dirs: list[DirectoryConfig] = field(default_factory=list)


@dataclass
class RawConfig:
    """Configuration tree as loaded from the YAML document.

    ``None`` means the key was absent at that scope; an explicit ``0`` is a
    value and takes part in inheritance like any other.
    """

    root_dir: str | None = None
    concurrent_rsync: int | None = None
    retention_days: int | None = None
    hosts: list[HostConfig] = field(default_factory=list)


@dataclass(frozen=True)
class ResolvedPath:
    host: str
    path: str
    retention_days: int
    concurrency_limit: int
    bandwidth_limit: int | None = None
    login_user: str | None = None


@dataclass(frozen=True)
class ResolvedConfig:
    root_dir: str
    concurrency_limit: int
    retention_days: int
    paths: list[ResolvedPath]
