import json

import pytest

from stagesync.adapters.settings_local import SettingsLocal
from stagesync.domain.config import DEFAULT_API_URL, ServiceSettings


def test_settings_round_trip(tmp_path):
    storage = SettingsLocal(root_dir=str(tmp_path), environ={})
    settings = ServiceSettings(api_url="https://timer.example/v1/", room_id="ROOM1", api_key="k1")

    storage.save(settings)

    assert storage.load() == settings
    with (tmp_path / "stagesync_settings.json").open("r", encoding="utf-8") as fh:
        assert json.load(fh) == settings.to_dict()


def test_missing_file_falls_back_to_defaults(tmp_path):
    storage = SettingsLocal(root_dir=str(tmp_path), environ={})

    assert storage.load_raw() is None
    loaded = storage.load()
    assert loaded.api_url == DEFAULT_API_URL
    assert loaded.room_id == ""


def test_env_overrides_file_and_flags_override_env(tmp_path):
    environ = {"STAGESYNC_ROOM_ID": "ENVROOM", "STAGESYNC_API_KEY": "envkey"}
    storage = SettingsLocal(root_dir=str(tmp_path), environ=environ)
    storage.save(ServiceSettings(room_id="FILEROOM", api_key="filekey"))

    loaded = storage.load(api_key="flagkey", room_id=None)

    assert loaded.room_id == "ENVROOM"
    assert loaded.api_key == "flagkey"


def test_unknown_override_rejected(tmp_path):
    storage = SettingsLocal(root_dir=str(tmp_path), environ={})

    with pytest.raises(TypeError):
        storage.load(timezone="UTC")


def test_non_object_file_rejected(tmp_path):
    (tmp_path / "stagesync_settings.json").write_text("[1, 2]", encoding="utf-8")
    storage = SettingsLocal(root_dir=str(tmp_path), environ={})

    with pytest.raises(ValueError):
        storage.load()
