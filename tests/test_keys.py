"""Tests for mdedit.keys: key events, key ids and terminal input parsing."""

from __future__ import annotations

import pytest

from mdedit.keys import (
    LEGACY_KEY_SEQUENCES,
    MODIFIERS,
    NAMED_KEYS,
    KeyEvent,
    ParsedKeyId,
    matches_key,
    parse_key_id,
    parse_terminal_input,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------


class TestConstants:
    def test_named_keys(self):
        assert NAMED_KEYS["Backspace"] == "backspace"
        assert NAMED_KEYS["ArrowLeft"] == "left"
        assert NAMED_KEYS[" "] == "space"

    def test_modifier_bits(self):
        assert MODIFIERS == {"shift": 1, "alt": 2, "ctrl": 4, "meta": 8}


# ---------------------------------------------------------------------------
# KeyEvent
# ---------------------------------------------------------------------------


class TestKeyEvent:
    """KeyEvent mirrors a browser keydown event."""

    def test_from_dict(self):
        event = KeyEvent.from_dict({"key": "b", "ctrlKey": True, "shiftKey": True})
        assert event == KeyEvent("b", ctrl=True, shift=True)

    def test_from_dict_missing_fields(self):
        assert KeyEvent.from_dict({}) == KeyEvent("")

    def test_text(self):
        assert KeyEvent("(").text == "("
        assert KeyEvent(" ").text == " "
        assert KeyEvent("Enter").text is None
        assert KeyEvent("").text is None

    def test_has_command_modifier(self):
        assert KeyEvent("b", ctrl=True).has_command_modifier
        assert KeyEvent("b", meta=True).has_command_modifier
        assert KeyEvent("b", alt=True).has_command_modifier
        assert not KeyEvent("B", shift=True).has_command_modifier

    @pytest.mark.parametrize(
        "event,key_id",
        [
            (KeyEvent("b", ctrl=True), "ctrl+b"),
            (KeyEvent("B", ctrl=True, shift=True), "ctrl+shift+b"),
            (KeyEvent("Backspace"), "backspace"),
            (KeyEvent("ArrowLeft", alt=True), "alt+left"),
            (KeyEvent("PageUp"), "pageUp"),
            (KeyEvent("l", meta=True), "meta+l"),
        ],
    )
    def test_key_id(self, event, key_id):
        assert event.key_id == key_id


# ---------------------------------------------------------------------------
# parse_key_id / matches_key
# ---------------------------------------------------------------------------


class TestParseKeyId:
    def test_plain(self):
        assert parse_key_id("backspace") == ParsedKeyId("backspace")

    def test_modifiers_any_order(self):
        expected = ParsedKeyId("b", ctrl=True, shift=True)
        assert parse_key_id("ctrl+shift+b") == expected
        assert parse_key_id("shift+ctrl+B") == expected

    def test_meta_aliases(self):
        assert parse_key_id("cmd+k") == ParsedKeyId("k", meta=True)
        assert parse_key_id("super+k") == ParsedKeyId("k", meta=True)

    def test_plus_key(self):
        assert parse_key_id("+") == ParsedKeyId("+")
        assert parse_key_id("ctrl++") == ParsedKeyId("+", ctrl=True)

    def test_named_key_case_kept(self):
        assert parse_key_id("pageUp") == ParsedKeyId("pageUp")

    @pytest.mark.parametrize("key_id", ["", "ctrl+", "hyper+x"])
    def test_invalid(self, key_id):
        assert parse_key_id(key_id) is None


class TestMatchesKey:
    def test_exact_modifiers(self):
        assert matches_key(KeyEvent("b", ctrl=True), "ctrl+b")
        assert not matches_key(KeyEvent("b", ctrl=True), "ctrl+shift+b")
        assert not matches_key(KeyEvent("b", ctrl=True, alt=True), "ctrl+b")

    def test_case_insensitive_letter(self):
        assert matches_key(KeyEvent("B", shift=True), "shift+b")

    def test_named_key(self):
        assert matches_key(KeyEvent("PageUp"), "pageUp")
        assert matches_key(KeyEvent("Backspace"), "backspace")

    def test_malformed_key_id(self):
        assert not matches_key(KeyEvent("b"), "hyper+b")


# ---------------------------------------------------------------------------
# parse_terminal_input
# ---------------------------------------------------------------------------


class TestParseTerminalInput:
    """Raw terminal bytes become KeyEvents."""

    def test_empty(self):
        assert parse_terminal_input("") is None

    def test_printable(self):
        assert parse_terminal_input("(") == KeyEvent("(")

    def test_ctrl_letters(self):
        assert parse_terminal_input("\x02") == KeyEvent("b", ctrl=True)
        assert parse_terminal_input("\x08") == KeyEvent("h", ctrl=True)
        assert parse_terminal_input("\x04") == KeyEvent("d", ctrl=True)

    def test_simple_keys(self):
        assert parse_terminal_input("\x7f") == KeyEvent("Backspace")
        assert parse_terminal_input("\r") == KeyEvent("Enter")
        assert parse_terminal_input("\t") == KeyEvent("Tab")
        assert parse_terminal_input("\x1b") == KeyEvent("Escape")
        assert parse_terminal_input("\x1b[Z") == KeyEvent("Tab", shift=True)

    def test_alt_prefix(self):
        assert parse_terminal_input("\x1bb") == KeyEvent("b", alt=True)
        assert parse_terminal_input("\x1b\x7f") == KeyEvent("Backspace", alt=True)

    @pytest.mark.parametrize("sequence,name", list(LEGACY_KEY_SEQUENCES.items()))
    def test_legacy_sequences(self, sequence, name):
        assert parse_terminal_input(sequence) == KeyEvent(name)

    def test_functional_keys(self):
        assert parse_terminal_input("\x1b[3~") == KeyEvent("Delete")
        assert parse_terminal_input("\x1b[3;5~") == KeyEvent("Delete", ctrl=True)
        assert parse_terminal_input("\x1b[99~") is None

    def test_cursor_with_modifier(self):
        assert parse_terminal_input("\x1b[1;5D") == KeyEvent("ArrowLeft", ctrl=True)
        assert parse_terminal_input("\x1b[1;2C") == KeyEvent("ArrowRight", shift=True)

    def test_kitty_ctrl_letter(self):
        assert parse_terminal_input("\x1b[98;5u") == KeyEvent("b", ctrl=True)

    def test_kitty_shifted_letter(self):
        assert parse_terminal_input("\x1b[98;6u") == KeyEvent("B", ctrl=True, shift=True)
        assert parse_terminal_input("\x1b[98:66;6u") == KeyEvent("B", ctrl=True, shift=True)

    def test_kitty_lock_bits_ignored(self):
        # Caps Lock (64) + Num Lock (128) on top of Ctrl
        assert parse_terminal_input("\x1b[98;197u") == KeyEvent("b", ctrl=True)

    def test_kitty_named_keys(self):
        assert parse_terminal_input("\x1b[127u") == KeyEvent("Backspace")
        assert parse_terminal_input("\x1b[13u") == KeyEvent("Enter")

    def test_kitty_release_ignored(self):
        assert parse_terminal_input("\x1b[98;5:3u") is None
