from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CONFIG_FILE = Path("/etc/backup-rsync.yml")
DEFAULT_LOG_FILE = Path("/var/log/backup-rsync.log")
DEFAULT_LOCK_FILE = Path(tempfile.gettempdir()) / "backup-rsync.lock"
DEFAULT_RSYNC_LOG_PATTERN = "/var/log/backup-rsync"
DEFAULT_RSYNC_EXECUTABLE = "rsync"

DEFAULT_CONCURRENT_RSYNC = 3
DEFAULT_RETENTION_DAYS = 7

DATE_LAYOUT = "%Y-%m-%d"
CURRENT_DIR_NAME = "current"


@dataclass
class RuntimeSettings:
    config_file: Path = DEFAULT_CONFIG_FILE
    log_file: Path | None = DEFAULT_LOG_FILE
    lock_file: Path = DEFAULT_LOCK_FILE
    rsync_executable: str = DEFAULT_RSYNC_EXECUTABLE
    rsync_log_pattern: str = DEFAULT_RSYNC_LOG_PATTERN
