from __future__ import annotations

from collections.abc import Callable

from ..core.backup_config import ResolvedConfig
from ..core.clock import Clock
from ..core.command_builder import CommandBuilder
from ..core.command_runner import CommandRunner
from ..core.config_loader import ConfigLoader
from ..core.config_resolver import ConfigResolver
from ..core.protocols import ClockProtocol, CommandRunnerProtocol, SweeperProtocol, WorkerPoolProtocol
from ..core.retention_sweeper import RetentionSweeper
from ..core.settings import RuntimeSettings
from ..core.worker_pool import WorkerPool
from .backup_command import BackupCommand
from .base import Command
from .plan_command import PlanCommand
from .sweep_command import SweepCommand

ACTIONS = ("run", "sweep", "plan")


class CommandFactory:
    def __init__(
        self,
        settings: RuntimeSettings,
        *,
        config_loader: ConfigLoader | None = None,
        resolver: ConfigResolver | None = None,
        clock: ClockProtocol | None = None,
        runner: CommandRunnerProtocol | None = None,
        sweeper_factory: Callable[[str, ClockProtocol], SweeperProtocol] | None = None,
    ) -> None:
        self._settings = settings
        self._config_loader = config_loader or ConfigLoader(settings.config_file)
        self._resolver = resolver or ConfigResolver()
        self._clock = clock or Clock()
        self._runner = runner or CommandRunner()
        self._sweeper_factory = sweeper_factory or RetentionSweeper

    def load_config(self, config_file: str | None) -> ResolvedConfig:
        raw = self._config_loader.load(config_file)
        return self._resolver.resolve(raw)

    def create(self, action: str, config_file: str | None) -> Command:
        if action not in ACTIONS:
            raise SystemExit(f"Unsupported action: {action}")

        config = self.load_config(config_file)
        sweeper = self._sweeper_factory(config.root_dir, self._clock)

        if action == "sweep":
            return SweepCommand(config, sweeper, self._clock)

        builder = CommandBuilder(
            config.root_dir,
            self._clock,
            executable=self._settings.rsync_executable,
            log_pattern=self._settings.rsync_log_pattern,
        )
        if action == "plan":
            return PlanCommand(config, builder, sweeper)
        return BackupCommand(config, builder, self._make_pool, sweeper, self._clock)

    def _make_pool(self, size: int) -> WorkerPoolProtocol:
        return WorkerPool(size, self._runner)
