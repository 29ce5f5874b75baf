from __future__ import annotations

from pathlib import Path

import pytest

from rsync_backup.commands.backup_command import BackupCommand
from rsync_backup.commands.factory import CommandFactory
from rsync_backup.commands.plan_command import PlanCommand
from rsync_backup.commands.sweep_command import SweepCommand
from rsync_backup.core.settings import RuntimeSettings
from tests.conftest import FixedClock, RunnerStub


CONFIG = """
root_dir: {root}/
concurrent_rsync: 2
hosts:
  - name: alpha
    dirs:
      - path: /etc
""".lstrip()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "backup.yml"
    path.write_text(CONFIG.format(root=tmp_path / "backups"), encoding="utf-8")
    return path


@pytest.mark.parametrize(
    ("action", "expected_type"),
    [
        ("run", BackupCommand),
        ("sweep", SweepCommand),
        ("plan", PlanCommand),
    ],
)
def test_create_returns_expected_command(
    action: str,
    expected_type: type,
    config_file: Path,
    fixed_clock: FixedClock,
) -> None:
    factory = CommandFactory(RuntimeSettings(), clock=fixed_clock, runner=RunnerStub())

    command = factory.create(action, str(config_file))

    assert isinstance(command, expected_type)


def test_create_uses_settings_config_file_by_default(config_file: Path, tmp_path: Path) -> None:
    factory = CommandFactory(RuntimeSettings(config_file=config_file))

    config = factory.load_config(None)

    assert config.root_dir == str(tmp_path / "backups")
    assert config.concurrency_limit == 2
    assert [path.path for path in config.paths] == ["/etc"]


def test_create_rejects_unknown_action(config_file: Path) -> None:
    with pytest.raises(SystemExit, match="Unsupported action: restore"):
        CommandFactory(RuntimeSettings()).create("restore", str(config_file))


def test_run_command_uses_configured_executable(
    config_file: Path,
    fixed_clock: FixedClock,
) -> None:
    runner = RunnerStub()
    settings = RuntimeSettings(rsync_executable="/opt/rsync", rsync_log_pattern="/tmp/log")
    factory = CommandFactory(settings, clock=fixed_clock, runner=runner)

    factory.create("run", str(config_file)).run()

    [call] = runner.calls
    assert call.executable == "/opt/rsync"
    assert "--log-file=/tmp/log.alpha.log" in call.args


def test_missing_root_dir_is_fatal(tmp_path: Path) -> None:
    config_file = tmp_path / "backup.yml"
    config_file.write_text("hosts: []\n", encoding="utf-8")

    with pytest.raises(SystemExit, match="Cannot find root_dir"):
        CommandFactory(RuntimeSettings()).create("run", str(config_file))
