"""YAML display config loader and timezone resolution."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

import pytz
import yaml

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_CONFIG_PATH = "config/display.yml"
DEFAULTS = {
    "timezone": "Asia/Taipei",
    "export_dir": "exports",
    "sessions_path": "data/sessions.json",
}


def _resolve(path: str) -> Path:
    """Resolve a path relative to project root."""
    p = Path(path)
    if p.is_absolute():
        return p
    return _PROJECT_ROOT / p


def load_yaml(path: str) -> dict:
    """Load a YAML config file safely."""
    resolved = _resolve(path)
    with open(resolved) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config {resolved} must be a mapping, got {type(data).__name__}")
    return data


@lru_cache(maxsize=None)
def _load_display_config(config_path: str) -> tuple:
    try:
        cfg = load_yaml(config_path)
    except FileNotFoundError:
        logger.warning("Display config not found at %s, using defaults", _resolve(config_path))
        cfg = {}
    merged = dict(DEFAULTS)
    merged.update({k: v for k, v in cfg.items() if v is not None})
    return tuple(sorted(merged.items()))


def get_display_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """Return display settings merged over DEFAULTS (cached per path)."""
    return dict(_load_display_config(config_path))


def get_timezone(config_path: str = DEFAULT_CONFIG_PATH):
    """Return the pytz zone timestamps are rendered in."""
    name = get_display_config(config_path)["timezone"]
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"Unknown timezone '{name}' in {config_path}")


def get_export_dir(config_path: str = DEFAULT_CONFIG_PATH) -> Path:
    return _resolve(get_display_config(config_path)["export_dir"])


def get_sessions_path(config_path: str = DEFAULT_CONFIG_PATH) -> Path:
    return _resolve(get_display_config(config_path)["sessions_path"])
