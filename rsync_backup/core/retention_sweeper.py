from __future__ import annotations

import logging
import re
import shutil
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

from .backup_config import ResolvedPath
from .command_builder import backup_base_dir
from .protocols import ClockProtocol
from .settings import DATE_LAYOUT

logger = logging.getLogger(__name__)

_SNAPSHOT_NAME = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass
class SweepReport:
    deleted: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)


def parse_snapshot_date(name: str) -> date | None:
    if not _SNAPSHOT_NAME.match(name):
        return None
    try:
        return datetime.strptime(name, DATE_LAYOUT).date()
    except ValueError:
        return None


class RetentionSweeper:
    def __init__(
        self,
        root_dir: str,
        clock: ClockProtocol,
        remove_tree: Callable[[Path], None] = shutil.rmtree,
    ) -> None:
        self._root_dir = root_dir
        self._clock = clock
        self._remove_tree = remove_tree

    def expired_snapshots(self, path: ResolvedPath) -> list[Path]:
        """Dated snapshot directories of ``path`` older than its retention.

        The age is counted in whole days; a snapshot exactly
        ``retention_days`` old is kept.
        """
        base_dir = Path(backup_base_dir(self._root_dir, path))
        if not base_dir.is_dir():
            return []

        today = self._clock.today()
        expired: list[Path] = []
        for entry in sorted(base_dir.iterdir()):
            if not entry.is_dir():
                continue
            snapshot_date = parse_snapshot_date(entry.name)
            if snapshot_date is None:
                continue
            if (today - snapshot_date).days > path.retention_days:
                expired.append(entry)
        return expired

    def sweep(self, paths: Sequence[ResolvedPath]) -> SweepReport:
        report = SweepReport()
        for path in paths:
            try:
                expired = self.expired_snapshots(path)
            except OSError as exc:
                logger.error("Cannot list backups of %s:%s: %s", path.host, path.path, exc)
                continue
            for snapshot in expired:
                logger.info("Expired backup, deleting directory %s", snapshot)
                try:
                    self._remove_tree(snapshot)
                except OSError as exc:
                    logger.error("Deleting directory %s failed: %s", snapshot, exc)
                    report.failed.append(snapshot)
                else:
                    report.deleted.append(snapshot)
        return report
