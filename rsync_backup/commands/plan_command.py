from __future__ import annotations

import logging
from pathlib import Path

from ..core.backup_config import ResolvedConfig
from ..core.command_builder import CommandBuilder
from ..core.path_orderer import PathOrderer
from ..core.protocols import SweeperProtocol
from .base import Command

logger = logging.getLogger(__name__)


class PlanCommand(Command):
    """Print what a run would execute and delete, without doing either."""

    def __init__(
        self,
        config: ResolvedConfig,
        builder: CommandBuilder,
        sweeper: SweeperProtocol,
        orderer: PathOrderer | None = None,
    ) -> None:
        self._config = config
        self._builder = builder
        self._sweeper = sweeper
        self._orderer = orderer or PathOrderer()

    def run(self) -> int:
        paths = self._orderer.order(self._config.paths)
        print(f"Concurrent jobs: {self._config.concurrency_limit}")
        print("Commands")
        if paths:
            for command in self._builder.build_all(paths):
                print(f"  {command}")
        else:
            print("  (none)")

        print("Expired snapshots")
        expired: list[Path] = []
        for path in paths:
            try:
                expired.extend(self._sweeper.expired_snapshots(path))
            except OSError as exc:
                logger.error("Cannot list backups of %s:%s: %s", path.host, path.path, exc)
        if expired:
            for snapshot in expired:
                print(f"  {snapshot}")
        else:
            print("  (none)")
        return 0
