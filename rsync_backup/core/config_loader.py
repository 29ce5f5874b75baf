from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .backup_config import DirectoryConfig, HostConfig, RawConfig
from .settings import DEFAULT_CONFIG_FILE


class ConfigLoader:
    def __init__(self, default_config_file: Path = DEFAULT_CONFIG_FILE) -> None:
        self._default_config_file = default_config_file

    @property
    def default_config_file(self) -> Path:
        return self._default_config_file

    def load(self, config_path: str | None = None) -> RawConfig:
        config_file = (
            Path(config_path).expanduser() if config_path else self.default_config_file
        )
        if not config_file.is_file():
            raise SystemExit(f"Missing config file: {config_file}")

        try:
            document = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        except OSError as exc:
            raise SystemExit(f"Cannot read config file {config_file}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise SystemExit(f"Could not parse config file {config_file}: {exc}") from exc

        return self.parse(document, source=str(config_file))

    def parse(self, document: Any, source: str = "<config>") -> RawConfig:
        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise SystemExit(f"{source}: config root must be a mapping")

        raw_hosts = document.get("hosts") or []
        if not isinstance(raw_hosts, list):
            raise SystemExit(f"{source}: 'hosts' must be a list")

        return RawConfig(
            root_dir=self._optional_str(document, "root_dir", source),
            concurrent_rsync=self._optional_int(document, "concurrent_rsync", source),
            retention_days=self._optional_int(document, "retention_days", source),
            hosts=[
                self._parse_host(entry, f"{source}: hosts[{index}]")
                for index, entry in enumerate(raw_hosts)
            ],
        )

    def _parse_host(self, entry: Any, where: str) -> HostConfig:
        if not isinstance(entry, dict):
            raise SystemExit(f"{where} must be a mapping")

        name = self._optional_str(entry, "name", where)
        if not name:
            raise SystemExit(f"{where}: missing required key 'name'")

        raw_dirs = entry.get("dirs") or []
        if not isinstance(raw_dirs, list):
            raise SystemExit(f"{where}: 'dirs' must be a list")

        return HostConfig(
            name=name,
            limit_concurrent_rsync=self._optional_int(entry, "limit_concurrent_rsync", where),
            retention_days=self._optional_int(entry, "retention_days", where),
            login_user=self._optional_str(entry, "login_user", where),
            dirs=[
                self._parse_dir(item, f"{where}.dirs[{index}]")
                for index, item in enumerate(raw_dirs)
            ],
        )

    def _parse_dir(self, entry: Any, where: str) -> DirectoryConfig:
        if not isinstance(entry, dict):
            raise SystemExit(f"{where} must be a mapping")
        return DirectoryConfig(
            path=self._optional_str(entry, "path", where) or "",
            retention_days=self._optional_int(entry, "retention_days", where),
            bandwidth_limit=self._optional_int(entry, "bandwidth_limit", where),
        )

    def _optional_int(self, mapping: dict[str, Any], key: str, where: str) -> int | None:
        value = mapping.get(key)
        if value is None:
            return None
        # bool is an int subclass; "yes" in YAML is not a retention value
        if isinstance(value, bool) or not isinstance(value, int):
            raise SystemExit(f"{where}: '{key}' must be an integer, got {value!r}")
        return value

    def _optional_str(self, mapping: dict[str, Any], key: str, where: str) -> str | None:
        value = mapping.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise SystemExit(f"{where}: '{key}' must be a string, got {value!r}")
        return value
