"""Buffer/selection snapshots passed into and returned from the edit handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mdedit.session import EditingSurface


@dataclass(frozen=True)
class EditState:
    """The whole document plus the selection at the moment of a key event.

    ``selection_start == selection_end`` is a caret.
    """

    buffer: str
    selection_start: int
    selection_end: int

    def __post_init__(self) -> None:
        if not 0 <= self.selection_start <= self.selection_end <= len(self.buffer):
            raise ValueError(
                f"invalid selection ({self.selection_start}, {self.selection_end}) "
                f"for buffer of length {len(self.buffer)}"
            )

    @classmethod
    def at(cls, buffer: str, caret: int) -> EditState:
        return cls(buffer, caret, caret)

    @classmethod
    def clamped(cls, buffer: str, start: int, end: int) -> EditState:
        """Build a state from untrusted host offsets, clamping instead of raising."""
        length = len(buffer)
        start = max(0, min(start, length))
        end = max(0, min(end, length))
        if start > end:
            start, end = end, start
        return cls(buffer, start, end)

    @property
    def caret(self) -> int:
        return self.selection_start

    @property
    def has_selection(self) -> bool:
        return self.selection_start != self.selection_end

    @property
    def selected_text(self) -> str:
        return self.buffer[self.selection_start : self.selection_end]


@dataclass(frozen=True)
class Commit:
    """Write-back of an edit result onto the host's visible editing surface.

    Kept separate from the handlers so the host decides when it runs
    (after its own render pass for the event has settled).
    """

    buffer: str
    selection_start: int
    selection_end: int

    def apply(self, surface: EditingSurface) -> None:
        # Text first: most surfaces reset the caret when their value changes.
        if surface.get_text() != self.buffer:
            surface.set_text(self.buffer)
        surface.set_selection(self.selection_start, self.selection_end)


@dataclass(frozen=True)
class EditResult:
    """Output of every handler.

    ``handled`` tells the host to drop its own default reaction to the event.
    """

    buffer: str
    selection_start: int
    selection_end: int
    handled: bool

    @classmethod
    def declined(cls, state: EditState) -> EditResult:
        return cls(state.buffer, state.selection_start, state.selection_end, False)

    @classmethod
    def caret_at(cls, buffer: str, caret: int, handled: bool = True) -> EditResult:
        return cls(buffer, caret, caret, handled)

    @property
    def state(self) -> EditState:
        return EditState(self.buffer, self.selection_start, self.selection_end)

    def commit(self) -> Commit:
        return Commit(self.buffer, self.selection_start, self.selection_end)

    def to_payload(self) -> dict[str, object]:
        """Host-facing dict using the browser's field names."""
        return {
            "buffer": self.buffer,
            "selectionStart": self.selection_start,
            "selectionEnd": self.selection_end,
            "handled": self.handled,
        }
