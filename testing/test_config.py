"""Settings loading and log level handling."""

import json

from paperpress.config import load_config, resolve_log_level


def test_log_level_names_are_normalized():
    assert resolve_log_level("debug") == "DEBUG"
    assert resolve_log_level("Warning") == "WARNING"
    assert resolve_log_level("warn") == "WARNING"


def test_unknown_log_level_falls_back_to_info():
    assert resolve_log_level("chatty") == "INFO"
    assert resolve_log_level("") == "INFO"
    assert resolve_log_level(None) == "INFO"


def test_config_file_overrides_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"default_location": "Paris", "printer_baudrate": 19200}))

    settings = load_config(str(path))

    assert settings.default_location == "Paris"
    assert settings.printer_baudrate == 19200


def test_broken_config_file_uses_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    settings = load_config(str(path))

    assert settings.port == load_config(str(tmp_path / "missing.json")).port
