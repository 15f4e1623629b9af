import json

import pytest

from flow_builder.config import (
    ENV_LOG_LEVEL,
    ENV_NODE_TYPES,
    ENV_SAVE_DIR,
    ENV_SINK,
    SINK_JSON,
    SINK_LOG,
    load_config,
    load_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in (ENV_SINK, ENV_SAVE_DIR, ENV_LOG_LEVEL, ENV_NODE_TYPES):
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_config(tmp_path):
    settings = load_settings(tmp_path / "config.json")
    assert settings.sink == SINK_LOG
    assert settings.node_offset == (100.0, 50.0)
    assert settings.default_message == "New message"
    assert settings.log_level == "INFO"
    assert settings.save_dir.name == "flows"


def test_config_file_values(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"sink": "json", "save_dir": str(tmp_path / "out"), "node_offset_x": 80,
                                "history_limit": 20}), encoding="utf-8")

    settings = load_settings(path)
    assert settings.sink == SINK_JSON
    assert settings.save_dir == tmp_path / "out"
    assert settings.node_offset == (80.0, 50.0)
    assert settings.history_limit == 20


def test_environment_wins(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"sink": "json", "log_level": "warning"}), encoding="utf-8")
    monkeypatch.setenv(ENV_SINK, "log")
    monkeypatch.setenv(ENV_LOG_LEVEL, "debug")

    settings = load_settings(path)
    assert settings.sink == SINK_LOG
    assert settings.log_level == "DEBUG"


def test_unknown_sink_falls_back(tmp_path, monkeypatch):
    monkeypatch.setenv(ENV_SINK, "carrier-pigeon")
    assert load_settings(tmp_path / "config.json").sink == SINK_LOG


def test_corrupt_config_is_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_config(path) == {}

    path.write_text(json.dumps(["a", "list"]), encoding="utf-8")
    assert load_config(path) == {}


@pytest.mark.parametrize("key,value", [
    ("sink", 1),
    ("log_level", 10),
    ("save_dir", ["a"]),
    ("node_types_path", {"x": 1}),
    ("default_message", 42),
    ("node_offset_x", "wide"),
    ("history_limit", "many"),
])
def test_wrongly_typed_values_fall_back_to_defaults(tmp_path, key, value):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({key: value}), encoding="utf-8")

    settings = load_settings(path)

    assert settings.sink == SINK_LOG
    assert settings.log_level == "INFO"
    assert settings.save_dir.name == "flows"
    assert settings.node_types_path is None
    assert settings.default_message == "New message"
    assert settings.node_offset == (100.0, 50.0)
    assert settings.history_limit == 500


def test_empty_default_message_is_kept(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"default_message": ""}), encoding="utf-8")
    assert load_settings(path).default_message == ""
