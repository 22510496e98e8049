"""
Env-first configuration helpers with optional YAML overrides.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


def get_int_env(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(raw)
        return value if value >= minimum else default
    except ValueError:
        logger.warning("Invalid int value for %s=%s; using default %s", name, raw, default)
        return default


def get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = float(raw)
        return value if value >= 0 else default
    except ValueError:
        logger.warning("Invalid float value for %s=%s; using default %s", name, raw, default)
        return default


def get_str_env(name: str, default: str = "") -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


def load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the YAML file named by ``path`` (or ``CIVICFEED_CONFIG``), expanding ``${ENV}`` values.
    Missing file means no overrides.
    """
    config_path = path or os.getenv("CIVICFEED_CONFIG")
    if not config_path:
        return {}
    resolved = Path(config_path)
    if not resolved.exists():
        logger.warning("Config file not found at %s", resolved)
        return {}
    data = yaml.safe_load(resolved.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        logger.warning("Config file %s does not contain a mapping; ignoring it.", resolved)
        return {}
    return _expand_env(data)


def _expand_env(data: Dict[str, Any]) -> Dict[str, Any]:
    def replace(value: Any) -> Any:
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            return os.getenv(value[2:-1], "")
        if isinstance(value, dict):
            return {k: replace(v) for k, v in value.items()}
        if isinstance(value, list):
            return [replace(item) for item in value]
        return value

    return replace(data)  # type: ignore[return-value]
