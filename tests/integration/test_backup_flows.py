from __future__ import annotations

import shutil
from datetime import date, timedelta
from pathlib import Path

import pytest

from rsync_backup.cli import CliApplication


pytestmark = pytest.mark.integration


CONFIG = """
root_dir: {root}
concurrent_rsync: 2
retention_days: 5
hosts:
  - name: alpha
    retention_days: 2
    dirs:
      - path: /srv/www/
      - path: /etc
        retention_days: 30
  - name: beta
    login_user: backup
    dirs:
      - path: /home
        bandwidth_limit: 1000
      - path: ..
""".lstrip()


def _executable(name: str) -> str:
    path = shutil.which(name)
    if path is None:
        pytest.skip(f"{name} is not available")
    return path


def _setup(tmp_path: Path) -> tuple[Path, Path, dict[str, Path]]:
    root = tmp_path / "backups"
    config_file = tmp_path / "backup.yml"
    config_file.write_text(CONFIG.format(root=root), encoding="utf-8")

    old = (date.today() - timedelta(days=10)).isoformat()
    snapshots = {
        "www": root / "alpha" / "www" / old,
        "etc": root / "alpha" / "etc" / old,
        "home": root / "beta" / "home" / old,
    }
    for snapshot in snapshots.values():
        snapshot.mkdir(parents=True)
    return root, config_file, snapshots


def _argv(tmp_path: Path, executable: str, action: str, config_file: Path) -> list[str]:
    return [
        "--log-file",
        str(tmp_path / "backup.log"),
        "--lock-file",
        str(tmp_path / "run.lock"),
        "--rsync",
        executable,
        "--rsync-log-pattern",
        str(tmp_path / "rsync"),
        action,
        str(config_file),
    ]


def test_full_run_creates_targets_and_expires_old_snapshots(tmp_path: Path) -> None:
    root, config_file, snapshots = _setup(tmp_path)

    result = CliApplication().run(_argv(tmp_path, _executable("true"), "run", config_file))

    assert result == 0
    assert (root / "alpha" / "www" / "current").is_dir()
    assert (root / "alpha" / "etc" / "current").is_dir()
    assert (root / "beta" / "home" / "current").is_dir()
    assert not snapshots["www"].exists()
    assert snapshots["etc"].exists()
    assert not snapshots["home"].exists()
    assert not (tmp_path / "run.lock").exists()

    log_text = (tmp_path / "backup.log").read_text(encoding="utf-8")
    assert "Skipping invalid path" in log_text
    assert "3 succeeded, 0 failed" in log_text
    assert "--bwlimit=1000 backup@beta:/home/" in log_text


def test_failing_transfers_still_complete_the_run(tmp_path: Path) -> None:
    _, config_file, snapshots = _setup(tmp_path)

    result = CliApplication().run(_argv(tmp_path, _executable("false"), "run", config_file))

    assert result == 0
    assert not snapshots["www"].exists()
    log_text = (tmp_path / "backup.log").read_text(encoding="utf-8")
    assert "0 succeeded, 3 failed" in log_text
    assert "command fail" in log_text


def test_missing_transfer_tool_is_reported_per_job(tmp_path: Path) -> None:
    _, config_file, _ = _setup(tmp_path)

    result = CliApplication().run(
        _argv(tmp_path, str(tmp_path / "no-such-rsync"), "run", config_file)
    )

    assert result == 0
    assert "0 succeeded, 3 failed" in (tmp_path / "backup.log").read_text(encoding="utf-8")


def test_sweep_only_leaves_targets_alone(tmp_path: Path) -> None:
    root, config_file, snapshots = _setup(tmp_path)

    result = CliApplication().run(_argv(tmp_path, _executable("true"), "sweep", config_file))

    assert result == 0
    assert not (root / "alpha" / "www" / "current").exists()
    assert not snapshots["home"].exists()
    assert snapshots["etc"].exists()
