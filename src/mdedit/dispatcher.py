"""Route a key event to exactly one edit handler, or decline it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from mdedit.brackets import CLOSING_BRACKETS, OPENING_BRACKETS, classify
from mdedit.handlers import (
    continue_list,
    delete_pair,
    grapheme_after,
    grapheme_before,
    insert_pair,
    move_caret,
    move_to_line_edge,
    skip_over,
    toggle_bold,
    toggle_italic,
)
from mdedit.keybindings import EditorKeybindingsManager, get_editor_keybindings
from mdedit.keys import KeyEvent
from mdedit.matching import Direction
from mdedit.state import EditResult, EditState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditorFeatures:
    """Feature switches; a disabled feature declines its keys."""

    auto_pairs: bool = True
    unix_keybindings: bool = True
    markdown_formatting: bool = True
    list_continuation: bool = True


DEFAULT_FEATURES = EditorFeatures()


def dispatch(
    event: KeyEvent,
    state: EditState,
    *,
    keybindings: EditorKeybindingsManager | None = None,
    features: EditorFeatures | None = None,
) -> EditResult:
    """Compute the edit for ``event`` applied to ``state``.

    The result is declined (``handled=False``, buffer unchanged) when no
    handler claims the event, so the host runs its default behavior.
    """
    kb = keybindings or get_editor_keybindings()
    features = features or DEFAULT_FEATURES
    action = kb.action_for(event)

    if action is not None:
        logger.debug("Key %s -> %s", event.key_id, action)

    if action == "passthrough":
        return EditResult.declined(state)
    if action == "blocked":
        return EditResult(state.buffer, state.selection_start, state.selection_end, True)

    if action in ("toggleBold", "toggleItalic"):
        if not features.markdown_formatting:
            return EditResult.declined(state)
        return toggle_bold(state) if action == "toggleBold" else toggle_italic(state)

    if action in (
        "cursorLeft",
        "cursorRight",
        "selectLeft",
        "selectRight",
        "cursorLineStart",
        "cursorLineEnd",
        "selectLineStart",
        "selectLineEnd",
        "killCharBackward",
        "killCharForward",
    ):
        if not features.unix_keybindings:
            return EditResult.declined(state)
        return _unix_action(action, state, features)

    if action in ("deleteCharBackward", "deleteCharForward"):
        if not features.auto_pairs:
            return EditResult.declined(state)
        direction: Direction = "backward" if action == "deleteCharBackward" else "forward"
        return delete_pair(state, direction)

    if action == "newLine":
        if not features.list_continuation:
            return EditResult.declined(state)
        return continue_list(state)

    text = event.text
    if text is not None and not event.has_command_modifier and features.auto_pairs:
        return _typed_character(state, text)

    return EditResult.declined(state)


def _unix_action(action: str, state: EditState, features: EditorFeatures) -> EditResult:
    if action == "cursorLeft":
        return move_caret(state, "backward")
    if action == "cursorRight":
        return move_caret(state, "forward")
    if action == "selectLeft":
        return move_caret(state, "backward", extend=True)
    if action == "selectRight":
        return move_caret(state, "forward", extend=True)
    if action == "cursorLineStart":
        return move_to_line_edge(state, "start")
    if action == "cursorLineEnd":
        return move_to_line_edge(state, "end")
    if action == "selectLineStart":
        return move_to_line_edge(state, "start", extend=True)
    if action == "selectLineEnd":
        return move_to_line_edge(state, "end", extend=True)

    direction: Direction = "backward" if action == "killCharBackward" else "forward"
    if not features.auto_pairs:
        # Still a plain deletion: the host's own binding for the chord is not one.
        return _plain_delete(state, direction)
    return delete_pair(state, direction, force=True)


def _plain_delete(state: EditState, direction: Direction) -> EditResult:
    buffer = state.buffer
    start, end = state.selection_start, state.selection_end
    if state.has_selection:
        return EditResult.caret_at(buffer[:start] + buffer[end:], start)
    if direction == "backward":
        size = grapheme_before(buffer, start)
        return EditResult.caret_at(buffer[: start - size] + buffer[start:], start - size)
    size = grapheme_after(buffer, start)
    return EditResult.caret_at(buffer[:start] + buffer[start + size :], start)


def _typed_character(state: EditState, key: str) -> EditResult:
    if key not in OPENING_BRACKETS and key not in CLOSING_BRACKETS:
        return EditResult.declined(state)

    # A typed delimiter with a selection always wraps it.
    if state.has_selection and key in OPENING_BRACKETS:
        return insert_pair(state, key)

    classification = classify(state.buffer, state.caret, key)
    if classification.kind == "open":
        return insert_pair(state, key)
    if classification.kind == "close":
        return skip_over(state, key)
    return EditResult.declined(state)


def handle_payload(
    payload: Mapping[str, Any],
    *,
    keybindings: EditorKeybindingsManager | None = None,
    features: EditorFeatures | None = None,
) -> dict[str, object]:
    """Dispatch a browser-style payload and return the browser-style result.

    Payload keys: ``key``, ``ctrlKey``, ``metaKey``, ``altKey``, ``shiftKey``,
    ``buffer``, ``selectionStart``, ``selectionEnd``.
    """
    buffer = str(payload.get("buffer", ""))
    start = int(payload.get("selectionStart", 0))
    end = int(payload.get("selectionEnd", start))
    state = EditState.clamped(buffer, start, end)
    event = KeyEvent.from_dict(payload)
    return dispatch(event, state, keybindings=keybindings, features=features).to_payload()
