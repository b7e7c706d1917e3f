"""Depth-counted search for the partner of a bracket in a flat buffer."""

from __future__ import annotations

from typing import Literal

from mdedit.brackets import (
    SYMMETRIC_DELIMITERS,
    WIKI_CLOSE,
    WIKI_OPEN,
    closing_for,
    opening_for,
)

Direction = Literal["forward", "backward"]


def find_match(
    buffer: str, position: int, bracket: str, direction: Direction
) -> int | None:
    """Find the offset of the partner of the bracket at ``position``.

    ``"forward"`` looks for the close partner of an open bracket,
    ``"backward"`` for the open partner of a close bracket. Same-type
    brackets in between are skipped by depth counting.

    Wiki-link tokens are matched as units. Forward from ``position`` where
    ``buffer[position:position + 2] == "[["`` the result is the start of the
    matching ``"]]"``; backward from ``position`` where
    ``buffer[position - 1:position + 1] == "]]"`` it is the start of the
    matching ``"[["``.

    Returns ``None`` when the buffer runs out first (unbalanced input).
    """
    if bracket in (WIKI_OPEN, WIKI_CLOSE):
        bracket = bracket[0]

    if bracket in SYMMETRIC_DELIMITERS:
        # Cannot nest: the nearest one in the scan direction is the partner.
        if direction == "forward":
            found = buffer.find(bracket, position + 1)
        else:
            found = buffer.rfind(bracket, 0, max(position, 0))
        return found if found != -1 else None

    if direction == "forward":
        if bracket == "[" and buffer[position : position + 2] == WIKI_OPEN:
            return _scan_wiki_forward(buffer, position + 2)
        close = closing_for(bracket)
        if close is None:
            return None
        return _scan_forward(buffer, position + 1, bracket, close)

    if bracket == "]" and position >= 1 and buffer[position - 1 : position + 1] == WIKI_CLOSE:
        return _scan_wiki_backward(buffer, position - 2)
    open_ = opening_for(bracket)
    if open_ is None:
        return None
    return _scan_backward(buffer, position - 1, open_, bracket)


# ---------------------------------------------------------------------------
# Scanners
# ---------------------------------------------------------------------------


def _scan_wiki_forward(buffer: str, i: int) -> int | None:
    depth = 1
    last = len(buffer) - 1
    while i < last:
        pair = buffer[i : i + 2]
        if pair == WIKI_OPEN:
            depth += 1
            i += 2
        elif pair == WIKI_CLOSE:
            depth -= 1
            if depth == 0:
                return i
            i += 2
        else:
            i += 1
    return None


def _scan_wiki_backward(buffer: str, i: int) -> int | None:
    # ``i`` is the offset of the last character of each candidate pair.
    depth = 1
    while i >= 1:
        pair = buffer[i - 1 : i + 1]
        if pair == WIKI_CLOSE:
            depth += 1
            i -= 2
        elif pair == WIKI_OPEN:
            depth -= 1
            if depth == 0:
                return i - 1
            i -= 2
        else:
            i -= 1
    return None


def _scan_forward(buffer: str, i: int, open_: str, close: str) -> int | None:
    square = open_ == "["
    depth = 1
    length = len(buffer)
    while i < length:
        if square:
            pair = buffer[i : i + 2]
            if pair in (WIKI_OPEN, WIKI_CLOSE):
                depth += 1 if pair == WIKI_OPEN else -1
                if depth == 0:
                    return i
                i += 2
                continue
        char = buffer[i]
        if char == open_:
            depth += 1
        elif char == close:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def _scan_backward(buffer: str, i: int, open_: str, close: str) -> int | None:
    square = open_ == "["
    depth = 1
    while i >= 0:
        if square and i >= 1:
            pair = buffer[i - 1 : i + 1]
            if pair in (WIKI_OPEN, WIKI_CLOSE):
                depth += 1 if pair == WIKI_CLOSE else -1
                if depth == 0:
                    return i - 1
                i -= 2
                continue
        char = buffer[i]
        if char == close:
            depth += 1
        elif char == open_:
            depth -= 1
            if depth == 0:
                return i
        i -= 1
    return None
