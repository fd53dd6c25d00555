from pathlib import Path

import pytest

from typedsettings.store import SettingsStore


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.json"
    store = SettingsStore()
    audio = store.group("audio")
    audio.set("volume", 75)
    audio.set("muted", False)
    store.group("video").set("resolution", "1080p")
    store.save(path)
    return path
