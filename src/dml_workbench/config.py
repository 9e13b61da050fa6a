"""Workbench settings, read from ``DMLW_*`` environment variables or ``.env``."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class WorkbenchSettings(BaseSettings):
    """Workbench settings."""

    # CREATE RECORD / CREATE LIST call the platform instead of printing instructions
    live_definitions: bool = False

    # Prefix applied to CREATE RECORD script IDs when the statement names none
    default_script_prefix: str = ""

    # JSON-lines file receiving one entry per DML attempt; unset keeps history in memory
    history_path: Optional[Path] = None

    # SQLite database standing in for the platform
    database: str = ":memory:"

    log_level: str = "WARNING"

    model_config = {
        "env_prefix": "DMLW_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }
