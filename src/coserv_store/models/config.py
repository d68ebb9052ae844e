"""Store configuration model for coserv-store.

Captures coserv.yaml fields with sensible defaults for input decoding,
logging and CI output.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel

CONFIG_FILENAME = "coserv.yaml"


class StoreConfig(BaseModel):
    """Project-level configuration loaded from coserv.yaml."""

    model_config = {"extra": "forbid"}

    input_format: Literal["cbor", "json"] = "cbor"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    ci_mode: bool = False


def find_project_root(start: Path | None = None) -> Path:
    """Walk up from start (default: cwd) looking for coserv.yaml.

    Args:
        start: Starting path (file or directory). Defaults to cwd.

    Returns:
        Path to the directory containing coserv.yaml, or cwd if none is found.
    """
    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    while current != current.parent:
        if (current / CONFIG_FILENAME).exists():
            return current
        current = current.parent
    return Path.cwd()


def load_store_config(project_root: Path | None = None) -> StoreConfig:
    """Load StoreConfig from coserv.yaml. Returns defaults if not found.

    Args:
        project_root: Directory holding coserv.yaml. If None, uses
            find_project_root() to locate it.

    Returns:
        Validated StoreConfig instance.
    """
    if project_root is None:
        project_root = find_project_root()
    config_path = project_root / CONFIG_FILENAME
    if not config_path.exists():
        return StoreConfig()
    import yaml

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if raw is None:
        return StoreConfig()
    return StoreConfig.model_validate(raw)
