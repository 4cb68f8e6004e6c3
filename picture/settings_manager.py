from __future__ import annotations

import json
import os
from typing import Any

from .logger import get_logger

_logger = get_logger("settings")


class SettingsManager:
    def __init__(self, settings_path: str | None = None):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "fetch_timeout_s": 30.0,
        "follow_redirects": True,
        "user_agent": "picture-engine/0.1",
        "accept_header": "image/png,image/jpeg,image/webp,image/gif,*/*;q=0.5",
        "gallery_preview_limit": 5,
    }

    def load(self) -> None:
        try:
            if self.settings_path and os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
        except Exception as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        if not self.settings_path:
            return
        try:
            parent = os.path.dirname(self.settings_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except Exception as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def fetch_timeout_s(self) -> float:
        try:
            value = float(self.get("fetch_timeout_s"))
        except (TypeError, ValueError):
            return float(self.DEFAULTS["fetch_timeout_s"])
        return value if value > 0 else float(self.DEFAULTS["fetch_timeout_s"])

    @property
    def follow_redirects(self) -> bool:
        return bool(self.get("follow_redirects"))

    @property
    def request_headers(self) -> dict[str, str]:
        return {
            "User-Agent": str(self.get("user_agent")),
            "Accept": str(self.get("accept_header")),
        }

    @property
    def gallery_preview_limit(self) -> int:
        try:
            value = int(self.get("gallery_preview_limit"))
        except (TypeError, ValueError):
            return int(self.DEFAULTS["gallery_preview_limit"])
        return max(0, value)
