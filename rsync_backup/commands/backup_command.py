from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from ..core.backup_config import ResolvedConfig, ResolvedPath
from ..core.command_builder import CommandBuilder, current_dir
from ..core.path_orderer import PathOrderer
from ..core.protocols import ClockProtocol, SweeperProtocol, WorkerPoolProtocol
from .base import Command

logger = logging.getLogger(__name__)


class BackupCommand(Command):
    def __init__(
        self,
        config: ResolvedConfig,
        builder: CommandBuilder,
        pool_factory: Callable[[int], WorkerPoolProtocol],
        sweeper: SweeperProtocol,
        clock: ClockProtocol,
        orderer: PathOrderer | None = None,
    ) -> None:
        self._config = config
        self._builder = builder
        self._pool_factory = pool_factory
        self._sweeper = sweeper
        self._clock = clock
        self._orderer = orderer or PathOrderer()

    def run(self) -> int:
        logger.info("Starting backup at %s", self._clock.now_iso())
        paths = self._orderer.order(self._config.paths)
        commands = self._builder.build_all(paths)

        self._create_target_dirs(paths)

        pool = self._pool_factory(self._config.concurrency_limit)
        results = pool.run(commands)
        failed = [result for result in results if not result.ok]
        logger.info(
            "Transfers finished: %d succeeded, %d failed",
            len(results) - len(failed),
            len(failed),
        )
        for result in failed:
            logger.warning("Failed job: %s (%s)", result.command, result.error)

        report = self._sweeper.sweep(paths)
        logger.info(
            "Retention sweep finished: %d deleted, %d failed",
            len(report.deleted),
            len(report.failed),
        )
        logger.info("Backup completed at %s", self._clock.now_iso())
        return 0

    def _create_target_dirs(self, paths: list[ResolvedPath]) -> None:
        for path in paths:
            target = Path(current_dir(self._config.root_dir, path))
            if target.is_dir():
                continue
            logger.info("Create directory %s", target)
            try:
                target.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                logger.error("Cannot create directory %s: %s", target, exc)
