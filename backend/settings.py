from __future__ import annotations

"""Utility functions for loading and saving user settings.

The settings are stored as a list of dictionaries to preserve order.
Each dictionary contains ``key``, ``value`` and ``type`` entries.
"""

from pathlib import Path
import json
import logging
from typing import Any, List, Dict

from backend import (
    DEFAULT_BODYWEIGHT,
    DEFAULT_DATA_DIR,
    DEFAULT_PREPARATION_TIME,
    DEFAULT_REST_DURATION,
    DEFAULT_TOTAL_WORKOUT_TIME,
    TICK_INTERVAL,
)
from backend.api_client import DEFAULT_API_BASE_URL
from backend.session_timer import TimerConfig
from backend.tick_sources import TICK_SOURCE_KINDS, TICK_SOURCE_THREAD

# Path to the JSON file where settings are persisted.
SETTINGS_PATH = DEFAULT_DATA_DIR / "settings.json"

# Default settings to initialize the file on first run.
DEFAULT_SETTINGS: List[Dict[str, Any]] = [
    {"key": "preparation_time", "value": DEFAULT_PREPARATION_TIME, "type": "int"},
    {"key": "default_rest_time", "value": DEFAULT_REST_DURATION, "type": "int"},
    {"key": "total_workout_time", "value": DEFAULT_TOTAL_WORKOUT_TIME, "type": "int"},
    {"key": "tick_source", "value": TICK_SOURCE_THREAD, "type": "str"},
    {"key": "api_base_url", "value": DEFAULT_API_BASE_URL, "type": "str"},
    {"key": "bodyweight", "value": DEFAULT_BODYWEIGHT, "type": "float"},
]

# Internal cache so settings are only read from disk once.
_settings_cache: List[Dict[str, Any]] | None = None


def load_settings(path: Path | None = None) -> List[Dict[str, Any]]:
    """Load settings from :data:`SETTINGS_PATH` or create defaults."""
    path = path or SETTINGS_PATH
    if path.exists():
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
                if isinstance(data, list):
                    return data
        except (OSError, ValueError):
            logging.exception("Could not read settings from %s", path)
    settings = [dict(item) for item in DEFAULT_SETTINGS]
    save_settings(settings, path)
    return settings


def save_settings(settings: List[Dict[str, Any]], path: Path | None = None) -> None:
    """Persist ``settings`` to :data:`SETTINGS_PATH`."""
    path = path or SETTINGS_PATH
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(settings, fh)
    except OSError:
        logging.exception("Could not save settings to %s", path)


def get_settings() -> List[Dict[str, Any]]:
    """Return the cached settings list, loading from disk if needed."""
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = load_settings()
    return _settings_cache


def clear_cache() -> None:
    global _settings_cache
    _settings_cache = None


def get_value(key: str, default: Any = None) -> Any:
    """Fetch the value associated with ``key``."""
    for item in get_settings():
        if item.get("key") == key:
            return item.get("value")
    for item in DEFAULT_SETTINGS:
        if item["key"] == key:
            return item["value"]
    return default


def set_value(key: str, value: Any) -> None:
    """Update ``key`` with ``value`` and persist the change."""
    settings = get_settings()
    for item in settings:
        if item.get("key") == key:
            item["value"] = value
            break
    else:
        settings.append({"key": key, "value": value, "type": type(value).__name__})
    save_settings(settings)


def _number(key: str, default: float) -> float:
    value = get_value(key, default)
    try:
        number = float(value)
    except (TypeError, ValueError):
        logging.warning("Setting '%s' has invalid value %r", key, value)
        return default
    if number < 0:
        logging.warning("Setting '%s' cannot be negative", key)
        return default
    return number


def load_timer_config() -> TimerConfig:
    """Return a :class:`TimerConfig` built from the stored settings."""

    tick_source = get_value("tick_source", TICK_SOURCE_THREAD)
    if tick_source not in TICK_SOURCE_KINDS:
        logging.warning("Unknown tick source '%s', using thread", tick_source)
        tick_source = TICK_SOURCE_THREAD
    return TimerConfig(
        preparation_ms=_number("preparation_time", DEFAULT_PREPARATION_TIME) * 1000,
        total_workout_ms=_number("total_workout_time", DEFAULT_TOTAL_WORKOUT_TIME)
        * 60
        * 1000,
        rest_ms=_number("default_rest_time", DEFAULT_REST_DURATION) * 1000,
        tick_source=tick_source,
        tick_interval=TICK_INTERVAL,
    )
