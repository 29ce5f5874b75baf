#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from pathlib import Path

from .commands.factory import ACTIONS, CommandFactory
from .core.lifecycle import RunLifecycle
from .core.logging_setup import configure_logging, shutdown_logging
from .core.run_lock import RunLock
from .core.settings import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_LOCK_FILE,
    DEFAULT_LOG_FILE,
    DEFAULT_RSYNC_EXECUTABLE,
    DEFAULT_RSYNC_LOG_PATTERN,
    RuntimeSettings,
)

logger = logging.getLogger(__name__)


class CliApplication:
    def __init__(
        self,
        factory_builder: Callable[[RuntimeSettings], CommandFactory] = CommandFactory,
    ) -> None:
        self._factory_builder = factory_builder

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="rsync-backup",
            description="Scheduled rsync backups with dated rotation and retention",
        )
        parser.add_argument("action", choices=ACTIONS)
        parser.add_argument(
            "config_file",
            nargs="?",
            default=None,
            help=f"Path to YAML config (default: {DEFAULT_CONFIG_FILE})",
        )
        parser.add_argument(
            "--log-file",
            default=str(DEFAULT_LOG_FILE),
            help=f"Log file to append to, '-' for console only (default: {DEFAULT_LOG_FILE})",
        )
        parser.add_argument(
            "--lock-file",
            default=str(DEFAULT_LOCK_FILE),
            help=f"Run lock file (default: {DEFAULT_LOCK_FILE})",
        )
        parser.add_argument(
            "--rsync",
            default=DEFAULT_RSYNC_EXECUTABLE,
            help="rsync executable to invoke",
        )
        parser.add_argument(
            "--rsync-log-pattern",
            default=DEFAULT_RSYNC_LOG_PATTERN,
            help="Prefix of per-host rsync log files",
        )
        parser.add_argument("-v", "--verbose", action="store_true")
        return parser

    def settings_from_args(self, args: argparse.Namespace) -> RuntimeSettings:
        return RuntimeSettings(
            config_file=Path(args.config_file) if args.config_file else DEFAULT_CONFIG_FILE,
            log_file=None if args.log_file == "-" else Path(args.log_file),
            lock_file=Path(args.lock_file),
            rsync_executable=args.rsync,
            rsync_log_pattern=args.rsync_log_pattern,
        )

    def run(self, argv: list[str] | None = None) -> int:
        args = self.build_parser().parse_args(argv)
        settings = self.settings_from_args(args)
        configure_logging(settings.log_file, logging.DEBUG if args.verbose else logging.INFO)
        try:
            with RunLifecycle(RunLock(settings.lock_file)):
                factory = self._factory_builder(settings)
                command = factory.create(args.action, args.config_file)
                return command.run()
        except SystemExit as exc:
            if isinstance(exc.code, str):
                logger.error(exc.code)
                raise SystemExit(1) from exc
            raise
        finally:
            shutdown_logging()


def main() -> int:
    return CliApplication().run()


if __name__ == "__main__":
    raise SystemExit(main())
