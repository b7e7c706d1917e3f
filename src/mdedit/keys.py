"""Key events and key identifiers.

A :class:`KeyEvent` mirrors what a browser hands a ``keydown`` listener
(``key`` plus modifier flags). Key identifiers are the compact strings used
by the keybindings manager, e.g. ``"ctrl+b"``, ``"meta+shift+e"`` or
``"backspace"``. :func:`parse_terminal_input` builds events from raw terminal
input (legacy control bytes, ESC-prefixed Alt, CSI sequences and the kitty
keyboard protocol) so the same engine can sit behind a terminal editor.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

KeyId = str

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Browser ``KeyboardEvent.key`` names -> key id names
NAMED_KEYS: dict[str, str] = {
    "Backspace": "backspace",
    "Delete": "delete",
    "Enter": "enter",
    "Tab": "tab",
    "Escape": "escape",
    "Insert": "insert",
    "Home": "home",
    "End": "end",
    "PageUp": "pageUp",
    "PageDown": "pageDown",
    "ArrowUp": "up",
    "ArrowDown": "down",
    "ArrowLeft": "left",
    "ArrowRight": "right",
    " ": "space",
}

_ID_TO_NAMED_KEY: dict[str, str] = {v: k for k, v in NAMED_KEYS.items()}

MODIFIER_NAMES: tuple[str, ...] = ("ctrl", "shift", "alt", "meta")

# kitty keyboard protocol modifier bits (value sent is bits + 1)
MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
    "meta": 8,
}

LOCK_MASK = 64 + 128

# ---------------------------------------------------------------------------
# KeyEvent
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyEvent:
    """A single key press as reported by the host."""

    key: str
    ctrl: bool = False
    meta: bool = False
    alt: bool = False
    shift: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> KeyEvent:
        """Build an event from a browser-style dict (``ctrlKey``, ``metaKey`` ...)."""
        return cls(
            key=str(payload.get("key", "")),
            ctrl=bool(payload.get("ctrlKey", False)),
            meta=bool(payload.get("metaKey", False)),
            alt=bool(payload.get("altKey", False)),
            shift=bool(payload.get("shiftKey", False)),
        )

    @property
    def text(self) -> str | None:
        """The printable character this key inserts, or ``None``."""
        if len(self.key) == 1 and self.key.isprintable():
            return self.key
        return None

    @property
    def has_command_modifier(self) -> bool:
        """Ctrl, Meta or Alt held (Shift alone still types text)."""
        return self.ctrl or self.meta or self.alt

    @property
    def key_id(self) -> KeyId:
        name = NAMED_KEYS.get(self.key, self.key.lower())
        prefix = ""
        if self.ctrl:
            prefix += "ctrl+"
        if self.shift:
            prefix += "shift+"
        if self.alt:
            prefix += "alt+"
        if self.meta:
            prefix += "meta+"
        return prefix + name


# ---------------------------------------------------------------------------
# Key id parsing and matching
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParsedKeyId:
    key: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    meta: bool = False


def parse_key_id(key_id: KeyId) -> ParsedKeyId | None:
    """Split ``"ctrl+shift+b"`` into its parts. Modifier order is free.

    Returns ``None`` for empty ids or unknown modifiers.
    """
    if not key_id:
        return None

    if key_id == "+" or key_id.endswith("++"):
        key = "+"
        modifier_part = key_id[:-2]
    else:
        modifier_part, _, key = key_id.rpartition("+")
    if not key:
        return None

    mods: set[str] = set()
    if modifier_part:
        for mod in modifier_part.lower().split("+"):
            if mod == "super" or mod == "cmd":
                mod = "meta"
            if mod not in MODIFIER_NAMES:
                return None
            mods.add(mod)

    if key not in _ID_TO_NAMED_KEY:
        key = key.lower()

    return ParsedKeyId(
        key=key,
        ctrl="ctrl" in mods,
        shift="shift" in mods,
        alt="alt" in mods,
        meta="meta" in mods,
    )


def matches_key(event: KeyEvent, key_id: KeyId) -> bool:
    """Check whether ``event`` is the key described by ``key_id``."""
    parsed = parse_key_id(key_id)
    if parsed is None:
        return False
    name = NAMED_KEYS.get(event.key, event.key.lower())
    return (
        name == parsed.key
        and event.ctrl == parsed.ctrl
        and event.shift == parsed.shift
        and event.alt == parsed.alt
        and event.meta == parsed.meta
    )


# ---------------------------------------------------------------------------
# Terminal input
# ---------------------------------------------------------------------------

# CSI u format: \x1b[<codepoint>(:<shifted_key>(:<base_layout_key>))?(;<modifier>(:<event_type>))?u
_KITTY_CSI_U_RE = re.compile(
    r"^\x1b\[(\d+)(?::(\d*)(?::(\d+))?)?(?:;(\d+)(?::(\d+))?)?u$"
)

# Functional keys with modifier: \x1b[<number>;<modifier>(:<event_type>)?~
_FUNCTIONAL_RE = re.compile(r"^\x1b\[(\d+)(?:;(\d+)(?::(\d+))?)?~$")

# Arrows/Home/End with modifier: \x1b[1;<modifier>(:<event_type>)?[ABCDHF]
_CURSOR_RE = re.compile(r"^\x1b\[1;(\d+)(?::(\d+))?([ABCDHF])$")

_FUNCTIONAL_NUMBERS: dict[int, str] = {
    1: "Home",
    2: "Insert",
    3: "Delete",
    4: "End",
    5: "PageUp",
    6: "PageDown",
}

_CURSOR_LETTERS: dict[str, str] = {
    "A": "ArrowUp",
    "B": "ArrowDown",
    "C": "ArrowRight",
    "D": "ArrowLeft",
    "H": "Home",
    "F": "End",
}

_KITTY_CODEPOINTS: dict[int, str] = {
    8: "Backspace",
    9: "Tab",
    13: "Enter",
    27: "Escape",
    127: "Backspace",
    57414: "Enter",
}

LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "ArrowUp",
    "\x1b[B": "ArrowDown",
    "\x1b[C": "ArrowRight",
    "\x1b[D": "ArrowLeft",
    "\x1b[H": "Home",
    "\x1b[F": "End",
    "\x1bOA": "ArrowUp",
    "\x1bOB": "ArrowDown",
    "\x1bOC": "ArrowRight",
    "\x1bOD": "ArrowLeft",
    "\x1bOH": "Home",
    "\x1bOF": "End",
}

_RELEASE = 3


def _modifier_flags(modifier_raw: int) -> dict[str, bool]:
    mod = (modifier_raw - 1) & ~LOCK_MASK
    return {name: bool(mod & bit) for name, bit in MODIFIERS.items()}


def _parse_kitty(data: str) -> KeyEvent | None:
    m = _KITTY_CSI_U_RE.match(data)
    if not m:
        return None
    codepoint = int(m.group(1))
    shifted_key = int(m.group(2)) if m.group(2) else None
    modifier_raw = int(m.group(4)) if m.group(4) else 1
    event_type = int(m.group(5)) if m.group(5) else 1
    if event_type == _RELEASE:
        return None

    flags = _modifier_flags(modifier_raw)
    named = _KITTY_CODEPOINTS.get(codepoint)
    if named is not None:
        return KeyEvent(named, **flags)

    if flags["shift"] and shifted_key is not None:
        codepoint = shifted_key
    try:
        char = chr(codepoint)
    except (ValueError, OverflowError):
        return None
    if not char.isprintable():
        return None
    if flags["shift"] and char.isalpha():
        char = char.upper()
    return KeyEvent(char, **flags)


def parse_terminal_input(data: str) -> KeyEvent | None:  # noqa: C901
    """Translate one chunk of raw terminal input into a :class:`KeyEvent`.

    ``\\x08`` is reported as Ctrl-H and ``\\x7f`` as Backspace, which is what
    terminals send for those keys. Key releases and unknown sequences give
    ``None``.
    """
    if not data:
        return None

    event = _parse_kitty(data)
    if event is not None or _KITTY_CSI_U_RE.match(data):
        return event

    m = _FUNCTIONAL_RE.match(data)
    if m:
        name = _FUNCTIONAL_NUMBERS.get(int(m.group(1)))
        if name is None or (m.group(3) and int(m.group(3)) == _RELEASE):
            return None
        flags = _modifier_flags(int(m.group(2))) if m.group(2) else {}
        return KeyEvent(name, **flags)

    m = _CURSOR_RE.match(data)
    if m:
        if m.group(2) and int(m.group(2)) == _RELEASE:
            return None
        return KeyEvent(_CURSOR_LETTERS[m.group(3)], **_modifier_flags(int(m.group(1))))

    if data in LEGACY_KEY_SEQUENCES:
        return KeyEvent(LEGACY_KEY_SEQUENCES[data])

    # --- Simple single-byte keys ---
    if data == "\x1b":
        return KeyEvent("Escape")
    if data == "\r" or data == "\n":
        return KeyEvent("Enter")
    if data == "\t":
        return KeyEvent("Tab")
    if data == "\x7f":
        return KeyEvent("Backspace")
    if data == "\x1b[Z":
        return KeyEvent("Tab", shift=True)

    # --- Ctrl + letter (0x01 - 0x1a) ---
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return KeyEvent(chr(ord(data) + ord("a") - 1), ctrl=True)

    # --- Alt + key (ESC prefix) ---
    if len(data) == 2 and data[0] == "\x1b":
        ch = data[1]
        if ch == "\x7f" or ch == "\x08":
            return KeyEvent("Backspace", alt=True)
        if ch == "\r" or ch == "\n":
            return KeyEvent("Enter", alt=True)
        if 1 <= ord(ch) <= 26:
            return KeyEvent(chr(ord(ch) + ord("a") - 1), ctrl=True, alt=True)
        if ch.isprintable():
            return KeyEvent(ch, alt=True, shift=ch.isupper())
        return None

    # --- Plain printable character ---
    if len(data) == 1 and data.isprintable():
        return KeyEvent(data)

    return None
