"""Editor keybindings manager."""

from __future__ import annotations

import logging
from typing import Literal, Mapping, get_args

from mdedit.keys import KeyEvent, KeyId, matches_key, parse_key_id

logger = logging.getLogger(__name__)

EditorAction = Literal[
    # Cursor movement
    "cursorLeft",
    "cursorRight",
    "cursorLineStart",
    "cursorLineEnd",
    # Selection
    "selectLeft",
    "selectRight",
    "selectLineStart",
    "selectLineEnd",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    "killCharBackward",
    "killCharForward",
    # Formatting
    "toggleBold",
    "toggleItalic",
    # Text input
    "newLine",
    # Host chords
    "passthrough",
    "blocked",
]

EDITOR_ACTIONS: tuple[str, ...] = get_args(EditorAction)

EditorKeybindingsConfig = Mapping[str, KeyId | list[KeyId]]

DEFAULT_EDITOR_KEYBINDINGS: dict[EditorAction, KeyId | list[KeyId]] = {
    # Cursor movement
    "cursorLeft": "ctrl+b",
    "cursorRight": "ctrl+f",
    "cursorLineStart": "ctrl+a",
    "cursorLineEnd": "ctrl+e",
    # Selection
    "selectLeft": "ctrl+shift+b",
    "selectRight": "ctrl+shift+f",
    "selectLineStart": "ctrl+shift+a",
    "selectLineEnd": "ctrl+shift+e",
    # Deletion
    "deleteCharBackward": "backspace",
    "deleteCharForward": "delete",
    "killCharBackward": ["ctrl+h", "meta+h"],
    "killCharForward": "ctrl+d",
    # Formatting
    "toggleBold": ["meta+b", "meta+shift+b"],
    "toggleItalic": ["meta+i", "meta+shift+i"],
    # Text input
    "newLine": "enter",
    # Host chords: passthrough keeps the platform default (e.g. kana
    # conversion on Ctrl-K), blocked swallows the chord entirely.
    "passthrough": ["ctrl+k", "meta+k"],
    "blocked": "meta+l",
}


class EditorKeybindingsManager:
    """Manages keybindings for the editor."""

    def __init__(
        self, config: EditorKeybindingsConfig | None = None
    ) -> None:
        self._action_to_keys: dict[str, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: EditorKeybindingsConfig) -> None:
        self._action_to_keys.clear()

        # Start with defaults
        for action, keys in DEFAULT_EDITOR_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        # Override with user config
        for action, keys in config.items():
            if action not in EDITOR_ACTIONS:
                logger.warning("Ignoring keybinding for unknown action %r", action)
                continue
            key_array = keys if isinstance(keys, list) else [keys]
            valid: list[KeyId] = []
            for key in key_array:
                if isinstance(key, str) and parse_key_id(key) is not None:
                    valid.append(key)
                else:
                    logger.warning("Ignoring malformed key %r for action %r", key, action)
            self._action_to_keys[action] = valid

    def matches(self, event: KeyEvent, action: EditorAction) -> bool:
        """Check if a key event matches a specific action."""
        keys = self._action_to_keys.get(action)
        if not keys:
            return False
        for key in keys:
            if matches_key(event, key):
                return True
        return False

    def action_for(self, event: KeyEvent) -> EditorAction | None:
        """Return the first action bound to ``event``, in declaration order."""
        for action in EDITOR_ACTIONS:
            if self.matches(event, action):  # type: ignore[arg-type]
                return action  # type: ignore[return-value]
        return None

    def get_keys(self, action: EditorAction) -> list[KeyId]:
        """Get keys bound to an action."""
        return self._action_to_keys.get(action, [])

    def set_config(self, config: EditorKeybindingsConfig) -> None:
        """Update configuration."""
        self._build_maps(config)


_global_editor_keybindings: EditorKeybindingsManager | None = None


def get_editor_keybindings() -> EditorKeybindingsManager:
    global _global_editor_keybindings
    if _global_editor_keybindings is None:
        _global_editor_keybindings = EditorKeybindingsManager()
    return _global_editor_keybindings


def set_editor_keybindings(manager: EditorKeybindingsManager) -> None:
    global _global_editor_keybindings
    _global_editor_keybindings = manager
