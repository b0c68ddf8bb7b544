"""Persistent settings for Jatsi.

Stores preferences in ~/.jatsi_settings.json: the default ruleset preset,
the log level, and the address the web relay listens on. Command-line
flags override them via with_overrides().
"""

import json
import logging
from pathlib import Path

DEFAULTS = {
    "ruleset": "basic",
    "log_level": "WARNING",
    "host": "127.0.0.1",
    "port": 5000,
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _default_path():
    """Return the default path for the settings file."""
    return Path.home() / ".jatsi_settings.json"


def _valid(key, value):
    """Whether a stored value is usable for its key."""
    if key == "port":
        return isinstance(value, int) and not isinstance(value, bool) and 0 < value < 65536
    if key == "log_level":
        return isinstance(value, str) and value.upper() in LOG_LEVELS
    return isinstance(value, str) and value != ""


def load_settings(path=None):
    """Load settings from JSON file. Returns DEFAULTS on missing/corrupt.

    Known keys with usable values override DEFAULTS; unknown keys and
    unusable values are dropped.
    """
    if path is None:
        path = _default_path()
    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return dict(DEFAULTS)
    if not isinstance(data, dict):
        return dict(DEFAULTS)

    result = dict(DEFAULTS)
    for key in DEFAULTS:
        if key in data and _valid(key, data[key]):
            result[key] = data[key]
    result["log_level"] = result["log_level"].upper()
    return result


def save_settings(settings, path=None):
    """Write settings dict to JSON. Silently ignores write errors."""
    if path is None:
        path = _default_path()
    path = Path(path)
    try:
        path.write_text(json.dumps(settings, indent=2))
    except OSError:
        pass


def with_overrides(settings, **overrides):
    """Copy of settings with every override that isn't None applied."""
    result = dict(settings)
    for key, value in overrides.items():
        if value is not None:
            result[key] = value
    return result


def log_level(settings):
    """Numeric logging level for the configured level name."""
    return getattr(logging, str(settings.get("log_level", DEFAULTS["log_level"])).upper(), logging.WARNING)
