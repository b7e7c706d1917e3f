"""Tests for mdedit.keybindings: EditorKeybindingsManager and the global instance."""

from __future__ import annotations

import logging

from mdedit.keybindings import (
    DEFAULT_EDITOR_KEYBINDINGS,
    EDITOR_ACTIONS,
    EditorKeybindingsManager,
    get_editor_keybindings,
    set_editor_keybindings,
)
from mdedit.keys import KeyEvent

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    """Default bindings cover every action."""

    def test_every_action_has_default(self):
        assert set(DEFAULT_EDITOR_KEYBINDINGS) == set(EDITOR_ACTIONS)

    def test_single_key(self):
        kb = EditorKeybindingsManager()
        assert kb.get_keys("cursorLeft") == ["ctrl+b"]
        assert kb.get_keys("deleteCharBackward") == ["backspace"]

    def test_multiple_keys(self):
        kb = EditorKeybindingsManager()
        assert kb.get_keys("killCharBackward") == ["ctrl+h", "meta+h"]
        assert kb.get_keys("passthrough") == ["ctrl+k", "meta+k"]

    def test_formatting_ignores_shift(self):
        kb = EditorKeybindingsManager()
        assert kb.action_for(KeyEvent("B", meta=True, shift=True)) == "toggleBold"
        assert kb.action_for(KeyEvent("I", meta=True, shift=True)) == "toggleItalic"

    def test_get_keys_returns_list(self):
        kb = EditorKeybindingsManager()
        assert isinstance(kb.get_keys("toggleBold"), list)


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


class TestMatching:
    def test_matches(self):
        kb = EditorKeybindingsManager()
        assert kb.matches(KeyEvent("b", ctrl=True), "cursorLeft")
        assert not kb.matches(KeyEvent("b", ctrl=True), "cursorRight")
        assert not kb.matches(KeyEvent("b"), "cursorLeft")

    def test_action_for(self):
        kb = EditorKeybindingsManager()
        assert kb.action_for(KeyEvent("Backspace")) == "deleteCharBackward"
        assert kb.action_for(KeyEvent("h", ctrl=True)) == "killCharBackward"
        assert kb.action_for(KeyEvent("B", ctrl=True, shift=True)) == "selectLeft"
        assert kb.action_for(KeyEvent("k", meta=True)) == "passthrough"
        assert kb.action_for(KeyEvent("l", meta=True)) == "blocked"

    def test_unbound_key(self):
        kb = EditorKeybindingsManager()
        assert kb.action_for(KeyEvent("x")) is None
        assert kb.action_for(KeyEvent("(")) is None


# ---------------------------------------------------------------------------
# User overrides
# ---------------------------------------------------------------------------


class TestOverrides:
    """User config replaces the keys of the actions it names."""

    def test_override_single(self):
        kb = EditorKeybindingsManager({"cursorLeft": "alt+b"})
        assert kb.get_keys("cursorLeft") == ["alt+b"]
        assert kb.action_for(KeyEvent("b", alt=True)) == "cursorLeft"
        assert kb.action_for(KeyEvent("b", ctrl=True)) is None

    def test_override_list(self):
        kb = EditorKeybindingsManager({"toggleBold": ["meta+b", "ctrl+shift+x"]})
        assert kb.matches(KeyEvent("X", ctrl=True, shift=True), "toggleBold")

    def test_other_defaults_kept(self):
        kb = EditorKeybindingsManager({"cursorLeft": "alt+b"})
        assert kb.get_keys("cursorRight") == ["ctrl+f"]

    def test_empty_list_unbinds(self):
        kb = EditorKeybindingsManager({"blocked": []})
        assert kb.action_for(KeyEvent("l", meta=True)) is None

    def test_unknown_action_ignored(self, caplog):
        with caplog.at_level(logging.WARNING, logger="mdedit.keybindings"):
            kb = EditorKeybindingsManager({"launchRockets": "ctrl+r"})
        assert "launchRockets" in caplog.text
        assert kb.action_for(KeyEvent("r", ctrl=True)) is None

    def test_malformed_key_dropped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="mdedit.keybindings"):
            kb = EditorKeybindingsManager({"cursorLeft": ["hyper+b", "alt+b"]})
        assert kb.get_keys("cursorLeft") == ["alt+b"]
        assert "hyper+b" in caplog.text

    def test_set_config_replaces_previous(self):
        kb = EditorKeybindingsManager({"cursorLeft": "alt+b"})
        kb.set_config({"cursorRight": "alt+f"})
        assert kb.get_keys("cursorLeft") == ["ctrl+b"]
        assert kb.get_keys("cursorRight") == ["alt+f"]


# ---------------------------------------------------------------------------
# Global singleton
# ---------------------------------------------------------------------------


class TestGlobalKeybindings:
    """get_editor_keybindings / set_editor_keybindings manage a global instance."""

    def teardown_method(self):
        # Reset global to ensure test isolation
        import mdedit.keybindings as kb_module

        kb_module._global_editor_keybindings = None

    def test_get_creates_default(self):
        kb = get_editor_keybindings()
        assert isinstance(kb, EditorKeybindingsManager)
        assert kb.get_keys("cursorLeft") == ["ctrl+b"]

    def test_get_returns_same_instance(self):
        assert get_editor_keybindings() is get_editor_keybindings()

    def test_set_replaces_instance(self):
        custom = EditorKeybindingsManager({"cursorLeft": "alt+b"})
        set_editor_keybindings(custom)
        assert get_editor_keybindings() is custom
