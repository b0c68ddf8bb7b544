"""
Settings Test Suite

Tests for persistent settings load/save.

Sections:
    1. Load — missing file, corrupt file, partial, unknown keys, bad values
    2. Save — round-trip, bad path
    3. Overrides and log level
"""
import json
import logging

from settings import DEFAULTS, load_settings, log_level, save_settings, with_overrides

# ── 1. Load ──────────────────────────────────────────────────────────────────


def test_load_missing_file_returns_defaults(tmp_path):
    """Loading from a nonexistent file returns DEFAULTS."""
    path = tmp_path / "no_such_file.json"
    assert load_settings(path=path) == DEFAULTS


def test_load_corrupt_file_returns_defaults(tmp_path):
    """Loading from a corrupt (non-JSON) file returns DEFAULTS."""
    path = tmp_path / "bad.json"
    path.write_text("not json at all {{{")
    assert load_settings(path=path) == DEFAULTS


def test_load_non_object_returns_defaults(tmp_path):
    """A JSON file holding a list instead of an object is ignored."""
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]")
    assert load_settings(path=path) == DEFAULTS


def test_load_partial_file_fills_defaults(tmp_path):
    """Keys missing from the file come from DEFAULTS."""
    path = tmp_path / "partial.json"
    path.write_text(json.dumps({"ruleset": "yatzy"}))
    result = load_settings(path=path)
    assert result["ruleset"] == "yatzy"
    assert result["port"] == DEFAULTS["port"]
    assert result["host"] == DEFAULTS["host"]


def test_load_drops_unknown_keys(tmp_path):
    """Keys the program doesn't know about are not returned."""
    path = tmp_path / "extra.json"
    path.write_text(json.dumps({"sound_enabled": False, "port": 8080}))
    result = load_settings(path=path)
    assert "sound_enabled" not in result
    assert result["port"] == 8080


def test_load_drops_unusable_values(tmp_path):
    """Values of the wrong type or out of range fall back to the default."""
    path = tmp_path / "bad_values.json"
    path.write_text(json.dumps({
        "port": 70000, "log_level": "LOUD", "ruleset": "", "host": 12,
    }))
    assert load_settings(path=path) == DEFAULTS


def test_load_rejects_boolean_port(tmp_path):
    path = tmp_path / "bool.json"
    path.write_text(json.dumps({"port": True}))
    assert load_settings(path=path)["port"] == DEFAULTS["port"]


def test_load_normalizes_log_level(tmp_path):
    path = tmp_path / "level.json"
    path.write_text(json.dumps({"log_level": "debug"}))
    assert load_settings(path=path)["log_level"] == "DEBUG"


def test_load_returns_fresh_dict(tmp_path):
    """Mutating the result doesn't touch DEFAULTS."""
    result = load_settings(path=tmp_path / "none.json")
    result["port"] = 1
    assert DEFAULTS["port"] == 5000


# ── 2. Save ──────────────────────────────────────────────────────────────────


def test_save_load_round_trip(tmp_path):
    """Settings survive a save/load round trip."""
    path = tmp_path / "settings.json"
    settings = {"ruleset": "roleplayers", "log_level": "INFO", "host": "0.0.0.0", "port": 8765}
    save_settings(settings, path=path)
    assert load_settings(path=path) == settings


def test_save_bad_path_is_silent(tmp_path):
    """Saving to an unwritable location doesn't raise."""
    path = tmp_path / "no_such_dir" / "settings.json"
    save_settings(DEFAULTS, path=path)
    assert not path.exists()


# ── 3. Overrides and log level ───────────────────────────────────────────────


def test_overrides_apply():
    result = with_overrides(DEFAULTS, ruleset="mini", port=9000)
    assert result["ruleset"] == "mini"
    assert result["port"] == 9000
    assert DEFAULTS["ruleset"] == "basic"


def test_none_overrides_are_skipped():
    """Unset command-line flags arrive as None and leave the setting alone."""
    result = with_overrides(DEFAULTS, ruleset=None, port=None)
    assert result == DEFAULTS


def test_log_level_names():
    assert log_level(DEFAULTS) == logging.WARNING
    assert log_level({"log_level": "DEBUG"}) == logging.DEBUG
    assert log_level({"log_level": "error"}) == logging.ERROR


def test_log_level_falls_back_to_warning():
    assert log_level({}) == logging.WARNING
    assert log_level({"log_level": "NOPE"}) == logging.WARNING
