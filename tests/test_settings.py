import json

import pytest

from feedsource.exceptions import ConfigError
from feedsource.factory import create_file_system
from feedsource.settings import CONFIG_ENV_VAR, LocalSettings


def test_load_json(tmp_path):
    config = tmp_path / "sleet.json"
    config.write_text(json.dumps({"Sources": [{"name": "feed", "type": "local", "path": "feed"}]}), encoding="utf-8")

    settings = LocalSettings.load(config)

    assert settings.path == config
    assert settings.sources[0]["name"] == "feed"
    backend = create_file_system(settings, "feed")
    assert backend.root == f"{tmp_path}/feed/"


def test_load_yaml(tmp_path):
    config = tmp_path / "sleet.yaml"
    config.write_text("sources:\n  - name: feed\n    type: local\n    path: ''\n", encoding="utf-8")

    settings = LocalSettings.load(config)

    assert settings.sources == [{"name": "feed", "type": "local", "path": ""}]


def test_load_from_environment_variable(monkeypatch, tmp_path):
    config = tmp_path / "custom.json"
    config.write_text('{"sources": []}', encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config))

    assert LocalSettings.load().path == config


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        LocalSettings.load(tmp_path / "nope.json")


def test_invalid_json(tmp_path):
    config = tmp_path / "sleet.json"
    config.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError):
        LocalSettings.load(config)


def test_top_level_must_be_mapping(tmp_path):
    config = tmp_path / "sleet.json"
    config.write_text("[]", encoding="utf-8")

    with pytest.raises(ConfigError):
        LocalSettings.load(config)


def test_sources_must_be_a_list():
    settings = LocalSettings.from_document({"sources": {"name": "feed"}})
    with pytest.raises(ConfigError, match="No sources found"):
        settings.sources


def test_in_memory_settings_have_no_path():
    settings = LocalSettings.from_document({"sources": [{"name": "feed", "type": "local", "path": "relative"}]})

    assert settings.path is None
    with pytest.raises(ConfigError, match="relative path requires a known config location"):
        create_file_system(settings, "feed")
