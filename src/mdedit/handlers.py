"""Edit handlers: one pure function per class of key event.

Every handler takes an :class:`~mdedit.state.EditState` and returns an
:class:`~mdedit.state.EditResult`. Handlers do not call each other; they
share the bracket table, the matching search and the cursor helpers below.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

import grapheme as _grapheme

from mdedit.brackets import (
    SYMMETRIC_DELIMITERS,
    WIKI_CLOSE,
    WIKI_OPEN,
    Delimiter,
    closing_for,
    delimiter_at,
)
from mdedit.matching import Direction, find_match
from mdedit.state import EditResult, EditState

# ---------------------------------------------------------------------------
# Cursor helpers
# ---------------------------------------------------------------------------


def line_start(buffer: str, position: int) -> int:
    """Offset of the first character of the logical line containing ``position``."""
    return buffer.rfind("\n", 0, position) + 1


def line_end(buffer: str, position: int) -> int:
    """Offset of the newline ending the line at ``position`` (or ``len(buffer)``)."""
    end = buffer.find("\n", position)
    return len(buffer) if end == -1 else end


def grapheme_before(buffer: str, position: int) -> int:
    """Length of the grapheme cluster ending at ``position`` (0 at start of buffer)."""
    if position <= 0:
        return 0
    # Clusters never span a newline, so only the current line is segmented.
    before_cursor = buffer[line_start(buffer, position) : position]
    if not before_cursor:
        return 1
    grapheme_list = list(_grapheme.graphemes(before_cursor))
    return len(grapheme_list[-1]) if grapheme_list else 1


def grapheme_after(buffer: str, position: int) -> int:
    """Length of the grapheme cluster starting at ``position`` (0 at end of buffer)."""
    if position >= len(buffer):
        return 0
    after_cursor = buffer[position : line_end(buffer, position)]
    if not after_cursor:
        return 1
    grapheme_list = list(_grapheme.graphemes(after_cursor))
    return len(grapheme_list[0]) if grapheme_list else 1


# ---------------------------------------------------------------------------
# Open bracket typed
# ---------------------------------------------------------------------------


def insert_pair(state: EditState, key: str) -> EditResult:
    """Insert ``key`` with its close partner around the selection.

    A ``[`` typed right after ``[`` completes a wiki-link: the close becomes
    ``]]`` and a single stray ``]`` right after the selection (left over from
    the first ``[``) is consumed so exactly one ``]]`` results.
    """
    buffer = state.buffer
    start, end = state.selection_start, state.selection_end
    selected = state.selected_text

    if key == "[" and start > 0 and buffer[start - 1] == "[":
        tail = end
        if buffer[end : end + 1] == "]" and buffer[end + 1 : end + 2] != "]":
            tail = end + 1
        new_buffer = buffer[:start] + "[" + selected + WIKI_CLOSE + buffer[tail:]
    else:
        close = closing_for(key) or ""
        new_buffer = buffer[:start] + key + selected + close + buffer[end:]

    inner_start = start + 1
    return EditResult(new_buffer, inner_start, inner_start + len(selected), True)


# ---------------------------------------------------------------------------
# Close bracket typed
# ---------------------------------------------------------------------------


def skip_over(state: EditState, key: str) -> EditResult:
    """Step over an existing close bracket instead of inserting a duplicate."""
    caret = state.caret
    if state.has_selection or state.buffer[caret : caret + 1] != key:
        return EditResult.declined(state)
    return EditResult.caret_at(state.buffer, caret + 1)


# ---------------------------------------------------------------------------
# Backspace / Delete / Ctrl-H / Ctrl-D
# ---------------------------------------------------------------------------


def delete_pair(
    state: EditState, direction: Direction, *, force: bool = False
) -> EditResult:
    """Delete backward or forward, removing bracket pairs as one unit.

    Priority: caret between ``[[`` and ``]]``, caret between a single-char
    pair, a delimiter about to be removed whose partner is found, and
    finally a plain one-grapheme deletion.

    The plain deletion (and removal of a selected range) reports
    ``handled=force``: the buffer is what the host's own deletion would
    produce, so a plain Backspace/Delete can be left to the host while
    Ctrl-H/Ctrl-D must be applied here.
    """
    buffer = state.buffer

    if state.has_selection:
        start, end = state.selection_start, state.selection_end
        return EditResult.caret_at(buffer[:start] + buffer[end:], start, handled=force)

    pos = state.caret
    if (direction == "backward" and pos == 0) or (
        direction == "forward" and pos == len(buffer)
    ):
        return EditResult.caret_at(buffer, pos, handled=force)

    if pos >= 2 and buffer[pos - 2 : pos] == WIKI_OPEN and buffer[pos : pos + 2] == WIKI_CLOSE:
        return EditResult.caret_at(buffer[: pos - 2] + buffer[pos + 2 :], pos - 2)

    if 0 < pos < len(buffer) and closing_for(buffer[pos - 1]) == buffer[pos]:
        return EditResult.caret_at(buffer[: pos - 1] + buffer[pos + 1 :], pos - 1)

    delimiter = _delimiter_for_deletion(buffer, pos, direction)
    if delimiter is not None:
        result = _delete_matched(buffer, delimiter)
        if result is not None:
            return result

    if direction == "backward":
        size = grapheme_before(buffer, pos)
        return EditResult.caret_at(buffer[: pos - size] + buffer[pos:], pos - size, handled=force)
    size = grapheme_after(buffer, pos)
    return EditResult.caret_at(buffer[:pos] + buffer[pos + size :], pos, handled=force)


def _delimiter_for_deletion(
    buffer: str, pos: int, direction: Direction
) -> Delimiter | None:
    index = pos - 1 if direction == "backward" else pos
    delimiter = delimiter_at(buffer, index)
    if delimiter is None:
        return None
    # A caret inside a ``[[``/``]]`` token has no clean pair to remove.
    if direction == "backward" and delimiter.end != pos:
        return None
    if direction == "forward" and delimiter.start != pos:
        return None
    return delimiter


def _delete_matched(buffer: str, delimiter: Delimiter) -> EditResult | None:
    token = delimiter.token
    if token in SYMMETRIC_DELIMITERS:
        # An even number of the same delimiter earlier on the line means this
        # one opens a span, an odd number means it closes one. Partners never
        # cross a line break.
        start = line_start(buffer, delimiter.start)
        line = buffer[start : line_end(buffer, delimiter.start)]
        offset = delimiter.start - start
        search: Direction = "forward" if line.count(token, 0, offset) % 2 == 0 else "backward"
        partner = find_match(line, offset, token, search)
        if partner is not None:
            partner += start
    elif delimiter.kind == "open":
        partner = find_match(buffer, delimiter.start, token, "forward")
    else:
        partner = find_match(buffer, delimiter.end - 1, token, "backward")

    if partner is None:
        return None

    size = len(token)
    if partner < delimiter.start:
        new_buffer = (
            buffer[:partner]
            + buffer[partner + size : delimiter.start]
            + buffer[delimiter.end :]
        )
        return EditResult.caret_at(new_buffer, delimiter.start - size)

    new_buffer = (
        buffer[: delimiter.start]
        + buffer[delimiter.end : partner]
        + buffer[partner + size :]
    )
    return EditResult.caret_at(new_buffer, delimiter.start)


# ---------------------------------------------------------------------------
# Unix-style navigation
# ---------------------------------------------------------------------------


def move_caret(
    state: EditState, direction: Direction, *, extend: bool = False
) -> EditResult:
    """Move one grapheme left (``"backward"``) or right (``"forward"``).

    Without ``extend`` any selection collapses to a caret; with it the
    selection grows at the end it moves towards.
    """
    buffer = state.buffer
    start, end = state.selection_start, state.selection_end

    if direction == "backward":
        new_start = start - grapheme_before(buffer, start)
        if extend:
            return EditResult(buffer, new_start, end, True)
        return EditResult.caret_at(buffer, new_start)

    new_end = end + grapheme_after(buffer, end)
    if extend:
        return EditResult(buffer, start, new_end, True)
    return EditResult.caret_at(buffer, new_end)


def move_to_line_edge(
    state: EditState, edge: Literal["start", "end"], *, extend: bool = False
) -> EditResult:
    """Jump to the start or end of the current logical line."""
    buffer = state.buffer
    start, end = state.selection_start, state.selection_end

    if edge == "start":
        target = line_start(buffer, start)
        if extend:
            return EditResult(buffer, target, end, True)
        return EditResult.caret_at(buffer, target)

    target = line_end(buffer, end)
    if extend:
        return EditResult(buffer, start, target, True)
    return EditResult.caret_at(buffer, target)


# ---------------------------------------------------------------------------
# Markdown emphasis
# ---------------------------------------------------------------------------

BOLD_MARKER = "**"
ITALIC_MARKER = "*"


def toggle_wrap(state: EditState, marker: str) -> EditResult:
    """Wrap the selection in ``marker`` or unwrap it if already wrapped."""
    if not state.has_selection:
        return EditResult.declined(state)

    buffer = state.buffer
    start, end = state.selection_start, state.selection_end
    before, selected, after = buffer[:start], buffer[start:end], buffer[end:]
    size = len(marker)

    if before.endswith(marker) and after.startswith(marker):
        new_buffer = before[:-size] + selected + after[size:]
        return EditResult(new_buffer, start - size, end - size, True)

    new_buffer = f"{before}{marker}{selected}{marker}{after}"
    return EditResult(new_buffer, start + size, end + size, True)


def toggle_bold(state: EditState) -> EditResult:
    return toggle_wrap(state, BOLD_MARKER)


def toggle_italic(state: EditState) -> EditResult:
    return toggle_wrap(state, ITALIC_MARKER)


# ---------------------------------------------------------------------------
# List auto-continuation
# ---------------------------------------------------------------------------

_CHECKBOX_RE = re.compile(r"^(\s*)([-*+])(\s+)\[([ xX])\](\s*)")
_ORDERED_RE = re.compile(r"^(\s*)(\d+)\.(\s+)")
_BULLET_RE = re.compile(r"^(\s*)([-*+])(\s+)")

_EMPTY_CHECKBOX_RE = re.compile(r"^(\s*)([-*+])(\s+)\[([ xX])\](\s*)$")
_EMPTY_ORDERED_RE = re.compile(r"^(\s*)(\d+)\.(\s*)$")
_EMPTY_BULLET_RE = re.compile(r"^(\s*)([-*+])(\s*)$")


@dataclass(frozen=True)
class ListItem:
    """Markdown list marker found at the start of a line."""

    type: Literal["bullet", "ordered", "checkbox"]
    indent: str
    marker: str
    number: int | None = None
    checked: bool = False

    def next_marker(self) -> str:
        if self.type == "ordered":
            return f"{self.indent}{(self.number or 1) + 1}. "
        if self.type == "checkbox":
            return f"{self.indent}{self.marker} [ ] "
        return f"{self.indent}{self.marker} "

    def is_empty(self, line: str) -> bool:
        if self.type == "checkbox":
            return bool(_EMPTY_CHECKBOX_RE.match(line))
        if self.type == "ordered":
            return bool(_EMPTY_ORDERED_RE.match(line))
        return bool(_EMPTY_BULLET_RE.match(line))


def detect_list_item(line: str) -> ListItem | None:
    """Recognize a checkbox, ordered or bullet list marker at the start of ``line``."""
    m = _CHECKBOX_RE.match(line)
    if m:
        return ListItem("checkbox", m.group(1), m.group(2), checked=m.group(4).lower() == "x")
    m = _ORDERED_RE.match(line)
    if m:
        return ListItem("ordered", m.group(1), ".", number=int(m.group(2)))
    m = _BULLET_RE.match(line)
    if m:
        return ListItem("bullet", m.group(1), m.group(2))
    return None


def continue_list(state: EditState) -> EditResult:
    """Handle Enter inside a list item.

    A non-empty item starts the next item on a new line; an empty item has its
    marker removed, leaving the list. Outside lists the key is declined.
    """
    if state.has_selection:
        return EditResult.declined(state)

    buffer = state.buffer
    caret = state.caret
    start_of_line = line_start(buffer, caret)
    current_line = buffer[start_of_line:caret]

    item = detect_list_item(current_line)
    if item is None:
        return EditResult.declined(state)

    if item.is_empty(current_line):
        return EditResult.caret_at(buffer[:start_of_line] + buffer[caret:], start_of_line)

    new_item = item.next_marker()
    new_buffer = f"{buffer[:caret]}\n{new_item}{buffer[caret:]}"
    return EditResult.caret_at(new_buffer, caret + 1 + len(new_item))
