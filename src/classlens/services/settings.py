"""Settings dataclasses and persistence helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

__all__ = [
    "Settings",
    "SettingsStore",
    "WindowBounds",
    "DEFAULT_WINDOW_WIDTH",
    "DEFAULT_WINDOW_HEIGHT",
]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".classlens"
_DEFAULT_SETTINGS_PATH = _SETTINGS_DIR / "settings.json"
_SETTINGS_VERSION = 1
_ENV_OVERRIDES: Mapping[str, str] = {
    "CLASSLENS_MODULES_ROOT": "modules_root",
}
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "CLASSLENS_DEBUG_LOGGING": "debug_logging",
}
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
DEFAULT_WINDOW_WIDTH = 800
DEFAULT_WINDOW_HEIGHT = 600


@dataclass(slots=True)
class WindowBounds:
    """Frame geometry remembered between sessions."""

    x: int
    y: int
    width: int = DEFAULT_WINDOW_WIDTH
    height: int = DEFAULT_WINDOW_HEIGHT
    maximized: bool = False

    @classmethod
    def default_for(cls, screen_width: int, screen_height: int) -> "WindowBounds":
        """Centre a default-sized frame on a ``screen_width`` x ``screen_height`` screen."""

        return cls(
            x=(screen_width - DEFAULT_WINDOW_WIDTH) // 2,
            y=(screen_height - DEFAULT_WINDOW_HEIGHT) // 2,
        )

    def sanitize(self, screen_width: int, screen_height: int) -> "WindowBounds":
        """Move the frame back on screen and clip it to the screen size."""

        x, y = self.x, self.y
        x -= min(0, x)
        y -= min(0, y)
        x -= max(0, x + self.width - screen_width)
        y -= max(0, y + self.height - screen_height)
        left, top = max(x, 0), max(y, 0)
        right = min(x + self.width, screen_width)
        bottom = min(y + self.height, screen_height)
        return replace(
            self,
            x=left,
            y=top,
            width=max(0, right - left),
            height=max(0, bottom - top),
        )


@dataclass(slots=True)
class Settings:
    """User preferences persisted between sessions."""

    workspace_chooser_path: str = ""
    classes_chooser_path: str = ""
    jre_chooser_path: str = ""
    modules_root: str | None = None
    recent_workspaces: list[str] = field(default_factory=list)
    last_workspace: str | None = None
    window_bounds: WindowBounds | None = None
    debug_logging: bool = False


class SettingsStore:
    """Persistence adapter for :class:`Settings`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH

    @property
    def path(self) -> Path:
        """Return the resolved path backing this store."""

        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Load settings from disk, applying CLI/environment overrides when present."""

        payload = self._read_payload()
        settings = Settings()
        if payload:
            data = _filter_fields(payload)
            bounds_payload = data.get("window_bounds")
            if isinstance(bounds_payload, Mapping):
                try:
                    data["window_bounds"] = WindowBounds(**bounds_payload)
                except TypeError:
                    data["window_bounds"] = None
            elif bounds_payload is not None:
                data["window_bounds"] = None
            recent = data.get("recent_workspaces")
            if not isinstance(recent, list):
                data["recent_workspaces"] = []
            else:
                data["recent_workspaces"] = [str(item) for item in recent if item]
            try:
                settings = Settings(**data)
            except TypeError as exc:
                LOGGER.warning("Settings payload contained unexpected data: %s", exc)
                settings = Settings()

        if payload and payload.get("version") != _SETTINGS_VERSION:
            try:
                self.save(settings)
            except OSError as exc:  # pragma: no cover
                LOGGER.warning("Failed to migrate settings payload: %s", exc)

        if overrides:
            settings = self._apply_overrides(settings, overrides, source="CLI")

        return self._apply_env_overrides(settings)

    def save(self, settings: Settings) -> Path:
        """Persist settings to disk with atomic file writes."""

        payload = asdict(settings)
        payload["version"] = _SETTINGS_VERSION
        body = json.dumps(payload, indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug(
            "Settings saved to %s: %d recent workspaces",
            self._path,
            len(settings.recent_workspaces),
        )
        return self._path

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
            data = json.loads(text)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            LOGGER.warning("Settings file %s does not contain an object", self._path)
            return {}
        return data

    def _apply_overrides(
        self,
        settings: Settings,
        overrides: Mapping[str, Any],
        *,
        source: str = "runtime",
    ) -> Settings:
        allowed = {field.name for field in fields(Settings)}
        filtered: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in allowed or value is None:
                continue
            filtered[key] = value
        if filtered:
            LOGGER.debug("Applying %s settings overrides: %s", source, sorted(filtered))
            settings = replace(settings, **filtered)
        return settings

    def _apply_env_overrides(self, settings: Settings) -> Settings:
        overrides: Dict[str, Any] = {}
        for env_name, field_name in _ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value
        for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value.strip().lower() in _TRUE_VALUES
        if overrides:
            settings = self._apply_overrides(settings, overrides, source="environment")
        return settings


def _filter_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    allowed = {field.name for field in fields(Settings)}
    return {key: value for key, value in payload.items() if key in allowed}
