"""Hierarchical editor settings with JSON persistence.

Precedence: runtime overrides > project settings > global settings.
Global settings live in ``$MDEDIT_CONFIG_DIR/settings.json`` (``~/.mdedit``
by default); project settings in ``<cwd>/.mdedit/settings.json``.
"""

from __future__ import annotations

import json
import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any

from mdedit.dispatcher import EditorFeatures
from mdedit.keybindings import EditorKeybindingsManager

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".mdedit"
CONFIG_DIR_ENV = "MDEDIT_CONFIG_DIR"

# Feature switch settings key -> EditorFeatures field
FEATURE_KEYS: dict[str, str] = {
    "autoPairs": "auto_pairs",
    "unixKeybindings": "unix_keybindings",
    "markdownFormatting": "markdown_formatting",
    "listContinuation": "list_continuation",
}


# --- Deep merge ---


def deep_merge_settings(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into base settings.

    For nested dicts, merge recursively. For primitives and arrays,
    override value wins completely.
    """
    result = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge_settings(result[key], value)
        else:
            result[key] = value
    return result


# --- SettingsManager ---


class SettingsManager:
    """Manages editor settings with JSON file persistence.

    Use factory methods (create, in_memory) instead of calling constructor directly.
    """

    def __init__(
        self,
        *,
        settings_path: str | None,
        project_settings_path: str | None,
        initial_settings: dict[str, Any],
        persist: bool = True,
        load_error: Exception | None = None,
    ) -> None:
        self._settings_path = settings_path
        self._project_settings_path = project_settings_path
        self._global_settings = dict(initial_settings)
        self._persist = persist
        self._load_error = load_error
        self._overrides: dict[str, Any] = {}
        self._modified_fields: set[str] = set()

        self._remerge()

    # --- Factory methods ---

    @classmethod
    def create(cls, cwd: str, config_dir: str | None = None) -> SettingsManager:
        """Create a settings manager with file persistence."""
        cdir = config_dir or default_config_dir()
        settings_path = os.path.join(cdir, "settings.json")
        project_settings_path = os.path.join(cwd, CONFIG_DIR_NAME, "settings.json")

        settings, error = _load_from_file(settings_path)
        return cls(
            settings_path=settings_path,
            project_settings_path=project_settings_path,
            initial_settings=settings,
            persist=True,
            load_error=error,
        )

    @classmethod
    def in_memory(cls, settings: dict[str, Any] | None = None) -> SettingsManager:
        """Create an in-memory settings manager for testing."""
        return cls(
            settings_path=None,
            project_settings_path=None,
            initial_settings=settings or {},
            persist=False,
        )

    # --- Core operations ---

    def reload(self) -> None:
        """Reload all settings from disk."""
        if self._settings_path:
            self._global_settings, self._load_error = _load_from_file(self._settings_path)
        self._modified_fields.clear()
        self._remerge()

    def apply_overrides(self, overrides: dict[str, Any]) -> None:
        """Apply runtime overrides on top of merged settings."""
        self._overrides = deep_merge_settings(self._overrides, overrides)
        self._remerge()

    def get_global_settings(self) -> dict[str, Any]:
        """Get a deep copy of the raw global settings."""
        return deepcopy(self._global_settings)

    @property
    def settings(self) -> dict[str, Any]:
        """Current merged settings (read-only view)."""
        return self._settings

    @property
    def load_error(self) -> Exception | None:
        return self._load_error

    def _remerge(self) -> None:
        project = self._load_project_settings() if self._project_settings_path else {}
        merged = deep_merge_settings(self._global_settings, project)
        self._settings = deep_merge_settings(merged, self._overrides)

    # --- Persistence ---

    def _save(self) -> None:
        """Write only modified fields to global settings file, preserving external changes."""
        # Don't overwrite corrupted files; the change still applies in memory
        if self._persist and self._settings_path and self._load_error:
            logger.warning(
                "Not saving settings: %s could not be read earlier", self._settings_path
            )
        elif self._persist and self._settings_path:
            # Re-read to capture external changes
            current_file, _ = _load_from_file(self._settings_path)
            merged: dict[str, Any] = dict(current_file)
            for field_name in self._modified_fields:
                merged[field_name] = self._global_settings.get(field_name)

            # Remove None values at top level
            merged = {k: v for k, v in merged.items() if v is not None}

            try:
                os.makedirs(os.path.dirname(self._settings_path), exist_ok=True)
                Path(self._settings_path).write_text(
                    json.dumps(merged, indent=2, ensure_ascii=False) + "\n",
                    encoding="utf-8",
                )
            except OSError:
                logger.exception("Failed to save settings to %s", self._settings_path)
                raise

        self._remerge()

    def _load_project_settings(self) -> dict[str, Any]:
        """Load project-level settings from disk."""
        if not self._project_settings_path:
            return {}
        settings, _ = _load_from_file(self._project_settings_path)
        return settings

    # --- Getters: Features ---

    def is_feature_enabled(self, key: str) -> bool:
        if key not in FEATURE_KEYS:
            raise KeyError(f"Unknown feature setting: {key}")
        value = self._settings.get(key)
        return value if isinstance(value, bool) else True

    def get_features(self) -> EditorFeatures:
        return EditorFeatures(
            **{field: self.is_feature_enabled(key) for key, field in FEATURE_KEYS.items()}
        )

    # --- Setters: Features ---

    def set_feature_enabled(self, key: str, enabled: bool) -> None:
        if key not in FEATURE_KEYS:
            raise KeyError(f"Unknown feature setting: {key}")
        self._global_settings[key] = enabled
        self._modified_fields.add(key)
        self._save()

    # --- Keybindings ---

    def get_keybinding_overrides(self) -> dict[str, Any]:
        bindings = self._settings.get("keybindings")
        if bindings is None:
            return {}
        if not isinstance(bindings, dict):
            logger.warning("Ignoring keybindings setting: expected an object")
            return {}
        return dict(bindings)

    def get_keybindings(self) -> EditorKeybindingsManager:
        return EditorKeybindingsManager(self.get_keybinding_overrides())

    def set_keybinding(self, action: str, keys: str | list[str]) -> None:
        bindings = self._global_settings.get("keybindings")
        if not isinstance(bindings, dict):
            bindings = {}
        bindings[action] = keys
        self._global_settings["keybindings"] = bindings
        self._modified_fields.add("keybindings")
        self._save()


# --- File I/O helpers ---


def _load_from_file(path: str) -> tuple[dict[str, Any], Exception | None]:
    """Load settings from a JSON file. Returns (settings, error)."""
    if not os.path.exists(path):
        return {}, None
    try:
        content = Path(path).read_text(encoding="utf-8")
        settings = json.loads(content)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read settings from %s: %s", path, e)
        return {}, e
    if not isinstance(settings, dict):
        error = ValueError(f"{path}: expected a JSON object")
        logger.warning("Could not read settings from %s: %s", path, error)
        return {}, error
    return settings, None


def default_config_dir() -> str:
    """Global config directory (``$MDEDIT_CONFIG_DIR`` or ``~/.mdedit``)."""
    env = os.environ.get(CONFIG_DIR_ENV)
    if env:
        return env
    return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME)
