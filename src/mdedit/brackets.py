"""Bracket table and token classification for auto-paired input."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

# ---------------------------------------------------------------------------
# Bracket table
# ---------------------------------------------------------------------------

BRACKET_PAIRS: dict[str, str] = {
    "[": "]",
    "(": ")",
    "{": "}",
    "`": "`",
    '"': '"',
    "'": "'",
}

OPENING_BRACKETS: frozenset[str] = frozenset(BRACKET_PAIRS)
CLOSING_BRACKETS: frozenset[str] = frozenset(BRACKET_PAIRS.values())

# Delimiters whose open and close characters are the same.
SYMMETRIC_DELIMITERS: frozenset[str] = frozenset(
    open_ for open_, close in BRACKET_PAIRS.items() if open_ == close
)

_CLOSE_TO_OPEN: dict[str, str] = {close: open_ for open_, close in BRACKET_PAIRS.items()}

WIKI_OPEN = "[["
WIKI_CLOSE = "]]"

TokenKind = Literal["open", "close", "plain"]


def closing_for(open_: str) -> str | None:
    """Return the close partner of an open token (single char or wiki-link)."""
    if open_ == WIKI_OPEN:
        return WIKI_CLOSE
    return BRACKET_PAIRS.get(open_)


def opening_for(close: str) -> str | None:
    """Return the open partner of a close token (single char or wiki-link)."""
    if close == WIKI_CLOSE:
        return WIKI_OPEN
    return _CLOSE_TO_OPEN.get(close)


def is_delimiter(char: str) -> bool:
    return char in OPENING_BRACKETS or char in CLOSING_BRACKETS


# ---------------------------------------------------------------------------
# Classification of a typed key
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Classification:
    kind: TokenKind
    token: str


def classify(buffer: str, position: int, key: str) -> Classification:
    """Classify ``key`` typed at ``position``.

    A ``[`` typed right after another ``[`` completes the wiki-link open token,
    which wins over the single-character ``[`` entry. A symmetric delimiter
    counts as a close only when the same character already sits at
    ``position`` (so typing it skips over); otherwise it opens a new pair.
    """
    if key == "[" and position > 0 and buffer[position - 1] == "[":
        return Classification("open", WIKI_OPEN)

    if key in SYMMETRIC_DELIMITERS:
        if position < len(buffer) and buffer[position] == key:
            return Classification("close", key)
        return Classification("open", key)

    if key in OPENING_BRACKETS:
        return Classification("open", key)
    if key in CLOSING_BRACKETS:
        return Classification("close", key)
    return Classification("plain", key)


# ---------------------------------------------------------------------------
# Delimiter lookup inside a buffer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Delimiter:
    """A delimiter token found in a buffer."""

    start: int
    token: str
    kind: Literal["open", "close"]

    @property
    def end(self) -> int:
        return self.start + len(self.token)


def delimiter_at(buffer: str, index: int) -> Delimiter | None:
    """Return the delimiter token covering ``buffer[index]``, if any.

    Wiki-link tokens take priority: first one ending at ``index``, then one
    starting at ``index``. Symmetric delimiters are reported as ``"open"``;
    the matching search treats them direction-agnostically.
    """
    if not 0 <= index < len(buffer):
        return None

    char = buffer[index]
    if char in "[]":
        double = char * 2
        kind: Literal["open", "close"] = "open" if char == "[" else "close"
        if index >= 1 and buffer[index - 1 : index + 1] == double:
            return Delimiter(index - 1, double, kind)
        if buffer[index : index + 2] == double:
            return Delimiter(index, double, kind)

    if char in OPENING_BRACKETS:
        return Delimiter(index, char, "open")
    if char in CLOSING_BRACKETS:
        return Delimiter(index, char, "close")
    return None
