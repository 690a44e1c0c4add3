import json
import logging

import pytest
import yaml
from pydantic import ValidationError

from midi2sheets.config import load_config, load_song_config, get_ticks_per_beat, DEFAULT_CFG_PATH


def test_packaged_defaults(tmp_path):
    cfg = load_config(user_path=tmp_path / "missing.yaml")
    assert DEFAULT_CFG_PATH.exists()
    assert cfg["ticks_per_beat"] == 480
    assert cfg["split_point"] == 60
    assert cfg["chord_tolerance"] == 10


def test_user_overrides_merge(tmp_path):
    user = tmp_path / "user.yaml"
    user.write_text("split_point: 64\nextra:\n  a: 1\n", encoding="utf-8")
    cfg = load_config(user_path=user)
    assert cfg["split_point"] == 64
    assert cfg["chord_tolerance"] == 10
    assert cfg["extra"] == {"a": 1}


def test_broken_user_file_is_ignored(tmp_path, caplog):
    user = tmp_path / "user.yaml"
    user.write_text("split_point: [unclosed\n", encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="midi2sheets.config"):
        cfg = load_config(user_path=user)
    assert cfg["split_point"] == 60
    assert "ignoring unreadable settings file" in caplog.text


def test_missing_default_file_still_has_minimum(tmp_path):
    cfg = load_config(user_path=tmp_path / "a.yaml", default_path=tmp_path / "b.yaml")
    assert cfg == {"ticks_per_beat": 480, "split_point": 60, "chord_tolerance": 10, "json_indent": 2}


def test_get_ticks_per_beat():
    assert get_ticks_per_beat({"ticks_per_beat": "960"}) == 960
    assert get_ticks_per_beat({"ticks_per_beat": "x"}) == 480
    assert get_ticks_per_beat({}) == 480


def test_load_song_config_yaml(tmp_path, config_data):
    path = tmp_path / "song.yaml"
    path.write_text(yaml.safe_dump(config_data), encoding="utf-8")
    assert load_song_config(path).id == "test-song"


def test_load_song_config_json(tmp_path, config_data):
    path = tmp_path / "song.json"
    path.write_text(json.dumps(config_data), encoding="utf-8")
    assert load_song_config(path).title == "Test Song"


def test_load_song_config_invalid(tmp_path, config_data):
    config_data["genre"] = "polka"
    path = tmp_path / "song.yaml"
    path.write_text(yaml.safe_dump(config_data), encoding="utf-8")
    with pytest.raises(ValidationError):
        load_song_config(path)
