from __future__ import annotations

import logging

from ..core.backup_config import ResolvedConfig
from ..core.protocols import ClockProtocol, SweeperProtocol
from .base import Command

logger = logging.getLogger(__name__)


class SweepCommand(Command):
    def __init__(
        self,
        config: ResolvedConfig,
        sweeper: SweeperProtocol,
        clock: ClockProtocol,
    ) -> None:
        self._config = config
        self._sweeper = sweeper
        self._clock = clock

    def run(self) -> int:
        logger.info("Running retention sweep at %s", self._clock.now_iso())
        report = self._sweeper.sweep(self._config.paths)
        logger.info(
            "Retention sweep completed: %d deleted, %d failed",
            len(report.deleted),
            len(report.failed),
        )
        return 0
