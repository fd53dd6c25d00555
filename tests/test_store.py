import json
from datetime import date, datetime
from pathlib import Path

import pytest
from pytest import MonkeyPatch

from typedsettings.errors import SettingNotFoundError, SettingsFileError
from typedsettings.group import SettingsGroup
from typedsettings.store import ENV_VAR, SettingsStore

GOOD_YAML = """
groups:
  audio:
    settings:
      volume: 75
      muted: false
      device: "Default Output"
  camera:
    settings:
"""

BAD_YAML = """
groups:
  audio:
    settings:
      volume: [1, 2]
"""


def test_group_created_on_demand() -> None:
    store = SettingsStore()
    assert "audio" not in store
    group = store.group("audio")
    assert store.group("audio") is group
    assert store.groups() == ["audio"]
    assert group.is_initialized is False


def test_remove_group() -> None:
    store = SettingsStore({"audio": SettingsGroup({"volume": "1"})})
    store.remove_group("audio")
    assert len(store) == 0
    with pytest.raises(SettingNotFoundError):
        store.remove_group("audio")


def test_to_dict_shape() -> None:
    store = SettingsStore()
    store.group("audio").set("volume", 75)
    store.group("empty")
    assert store.to_dict() == {
        "groups": {"audio": {"settings": {"volume": "75"}}, "empty": {"settings": {}}}
    }


def test_from_dict_rejects_bad_shape() -> None:
    with pytest.raises(SettingsFileError):
        SettingsStore.from_dict({"groups": {"audio": {"settings": {"volume": None}}}})
    with pytest.raises(SettingsFileError):
        SettingsStore.from_dict({"sections": {}})


def test_load_yaml_converts_scalars(tmp_path: Path) -> None:
    cfg_file = tmp_path / "settings.yaml"
    cfg_file.write_text(GOOD_YAML)
    store = SettingsStore.load(cfg_file)
    audio = store.group("audio")
    assert audio.to_dict() == {"volume": "75", "muted": "False", "device": "Default Output"}
    assert audio.get("volume", int) == 75
    assert audio.get("muted", bool) is False
    assert store.group("camera").to_dict() == {}


DATES_YAML = """
groups:
  history:
    settings:
      since: 2024-01-01
      last_run: 2024-01-01 10:30:00
"""


def test_load_yaml_converts_dates(tmp_path: Path) -> None:
    cfg_file = tmp_path / "settings.yaml"
    cfg_file.write_text(DATES_YAML)
    history = SettingsStore.load(cfg_file).group("history")
    assert history.to_dict() == {"since": "2024-01-01", "last_run": "2024-01-01T10:30:00"}
    assert history.get("since", date) == date(2024, 1, 1)
    assert history.get("last_run", datetime) == datetime(2024, 1, 1, 10, 30)


def test_load_invalid_yaml(tmp_path: Path) -> None:
    cfg_file = tmp_path / "bad.yaml"
    cfg_file.write_text(BAD_YAML)
    with pytest.raises(SettingsFileError):
        SettingsStore.load(cfg_file)


def test_load_malformed_json(tmp_path: Path) -> None:
    cfg_file = tmp_path / "settings.json"
    cfg_file.write_text("{not json")
    with pytest.raises(SettingsFileError) as exc_info:
        SettingsStore.load(cfg_file)
    assert exc_info.value.path == cfg_file


def test_empty_file_loads_empty_store(tmp_path: Path) -> None:
    cfg_file = tmp_path / "settings.json"
    cfg_file.write_text("")
    assert len(SettingsStore.load(cfg_file)) == 0


@pytest.mark.parametrize("name", ["settings.json", "settings.yaml", "nested/dir/settings.yml"])
def test_save_load_round_trip(tmp_path: Path, name: str) -> None:
    store = SettingsStore()
    audio = store.group("audio")
    audio.set("volume", 75)
    audio.set("muted", True)
    audio.set("device", "Speakers: 2")
    store.group("camera").set("zoom", 1.5)

    path = tmp_path / name
    store.save(path)
    loaded = SettingsStore.load(path)

    assert sorted(loaded.groups()) == ["audio", "camera"]
    assert loaded.group("audio") == audio
    assert loaded.group("camera").get("zoom", float) == 1.5
    assert list(path.parent.glob("*.tmp")) == []


def test_json_output_is_plain_text_mapping(tmp_path: Path) -> None:
    store = SettingsStore()
    store.group("audio").set("volume", 75)
    path = tmp_path / "settings.json"
    store.save(path)
    assert json.loads(path.read_text()) == {"groups": {"audio": {"settings": {"volume": "75"}}}}


def test_unsupported_suffix(tmp_path: Path) -> None:
    with pytest.raises(SettingsFileError):
        SettingsStore().save(tmp_path / "settings.ini")


def test_resolve_path_from_env(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    cfg_file = tmp_path / "custom.json"
    cfg_file.write_text("{}")
    monkeypatch.setenv(ENV_VAR, str(cfg_file))
    assert SettingsStore.resolve_path() == cfg_file


def test_resolve_path_env_missing(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv(ENV_VAR, str(tmp_path / "missing.json"))
    with pytest.raises(FileNotFoundError):
        SettingsStore.resolve_path()


def test_resolve_path_defaults(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    monkeypatch.delenv(ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(SettingsStore, "DEFAULT_PATHS", [Path("settings.json")])
    with pytest.raises(FileNotFoundError):
        SettingsStore.resolve_path()
    Path("settings.json").write_text("{}")
    assert SettingsStore.resolve_path() == Path("settings.json")
