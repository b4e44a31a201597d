from __future__ import annotations

import json
import os
from typing import Any, Dict, Mapping, Optional

from stagesync.domain.config import ServiceSettings

SETTINGS_FILE = "stagesync_settings.json"
ENV_OVERRIDES = {
    "api_url": "STAGESYNC_API_URL",
    "room_id": "STAGESYNC_ROOM_ID",
    "api_key": "STAGESYNC_API_KEY",
}


class SettingsLocal:
    """Local filesystem storage for service settings (JSON) with env overlay."""

    def __init__(self, root_dir: str = ".", environ: Optional[Mapping[str, str]] = None) -> None:
        self.root = root_dir
        self._environ = os.environ if environ is None else environ

    @property
    def path(self) -> str:
        return os.path.join(self.root, SETTINGS_FILE)

    def save(self, settings: ServiceSettings) -> None:
        os.makedirs(self.root, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, ensure_ascii=False, indent=2)

    def load_raw(self) -> Optional[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path}: expected a JSON object")
        return data

    def load(self, **overrides: Optional[str]) -> ServiceSettings:
        """Merge file values, environment variables, then explicit overrides."""
        merged: Dict[str, Any] = dict(self.load_raw() or {})
        for key, var in ENV_OVERRIDES.items():
            value = self._environ.get(var)
            if value:
                merged[key] = value
        for key, value in overrides.items():
            if key not in ENV_OVERRIDES:
                raise TypeError(f"Unknown setting: {key}")
            if value:
                merged[key] = value
        return ServiceSettings.from_dict(merged)


__all__ = ["SettingsLocal"]
