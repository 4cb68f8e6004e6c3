from __future__ import annotations

import json
from pathlib import Path

from picture.settings_manager import SettingsManager


def test_defaults_without_file(tmp_path: Path) -> None:
    sm = SettingsManager(str(tmp_path / "missing.json"))

    assert sm.fetch_timeout_s == 30.0
    assert sm.follow_redirects is True
    assert sm.gallery_preview_limit == 5
    assert sm.request_headers["User-Agent"] == SettingsManager.DEFAULTS["user_agent"]
    assert not sm.has("fetch_timeout_s")


def test_set_persists_and_reloads(tmp_path: Path) -> None:
    settings_path = tmp_path / "conf" / "settings.json"
    sm = SettingsManager(str(settings_path))

    sm.set("gallery_preview_limit", 3)
    sm.set("follow_redirects", False)

    reloaded = SettingsManager(str(settings_path))
    assert reloaded.gallery_preview_limit == 3
    assert reloaded.follow_redirects is False
    assert json.loads(settings_path.read_text(encoding="utf-8"))["gallery_preview_limit"] == 3


def test_invalid_values_fall_back_to_defaults(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(
        json.dumps({"fetch_timeout_s": "soon", "gallery_preview_limit": -2}), encoding="utf-8"
    )

    sm = SettingsManager(str(settings_path))

    assert sm.fetch_timeout_s == 30.0
    assert sm.gallery_preview_limit == 0


def test_corrupt_file_is_ignored(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("{not json", encoding="utf-8")

    sm = SettingsManager(str(settings_path))

    assert sm.data == {}
    assert sm.gallery_preview_limit == 5


def test_in_memory_settings_do_not_write(tmp_path: Path) -> None:
    sm = SettingsManager()
    sm.set("user_agent", "custom/1.0")

    assert sm.request_headers["User-Agent"] == "custom/1.0"
    assert list(tmp_path.iterdir()) == []
