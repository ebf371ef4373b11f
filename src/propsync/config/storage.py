"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "propsync"
DEFAULT_AUDIT_DB_FILENAME: Final[str] = "audit.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    report_dir: Path
    audit_database_filename: str = DEFAULT_AUDIT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def audit_database_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.audit_database_filename

    def audit_database_uri(self) -> str:
        env_uri = os.getenv("PROPSYNC_AUDIT_DATABASE_URI")
        if env_uri:
            return env_uri
        return f"sqlite+pysqlite:///{self.audit_database_path()}"


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("PROPSYNC_DATA_DIR")
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    env_report_dir = os.getenv("PROPSYNC_REPORT_DIR")
    report_dir = Path(env_report_dir) if env_report_dir else Path.cwd()
    return StorageConfig(data_dir=data_dir, report_dir=report_dir)
