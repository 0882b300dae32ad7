"""Shared fixtures: every test runs against its own copy of the default settings."""

import json

import pytest

from symcalc import config_manager


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(config_manager.DEFAULT_SETTINGS), encoding="utf-8")
    monkeypatch.setattr(config_manager, "config_json", config_file)
    return config_file
