"""Bind the edit engine to a host editing surface.

The session owns one key subscription for as long as the surface is mounted
and never writes to the surface from inside the key callback: every handled
event leaves a pending :class:`~mdedit.state.Commit` that is applied when the
host flushes, after its own render pass for that event.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Protocol, runtime_checkable

from mdedit.dispatcher import EditorFeatures, dispatch
from mdedit.keybindings import EditorKeybindingsManager
from mdedit.keys import KeyEvent, parse_terminal_input
from mdedit.state import Commit, EditResult, EditState

logger = logging.getLogger(__name__)

KeyListener = Callable[[KeyEvent], bool]
Unsubscribe = Callable[[], None]
Scheduler = Callable[[Callable[[], None]], None]


@runtime_checkable
class EditingSurface(Protocol):
    """The visible text widget (textarea, terminal editor, ...)."""

    def get_text(self) -> str:
        """Get the current text content."""
        ...

    def get_selection(self) -> tuple[int, int]:
        """Get ``(start, end)`` of the current selection."""
        ...

    def set_text(self, text: str) -> None:
        """Replace the text content."""
        ...

    def set_selection(self, start: int, end: int) -> None:
        """Place the caret or selection."""
        ...


@runtime_checkable
class KeySource(Protocol):
    """Delivers key events to listeners before the surface's default handling."""

    def subscribe(self, listener: KeyListener) -> Unsubscribe:
        """Register ``listener``; the returned callable removes it.

        The listener returns ``True`` when the default handling must be
        suppressed.
        """
        ...


class EditorSession:
    """Runs key events from one surface through the dispatcher.

    Args:
        surface: The editing surface whose text and selection are edited.
        keybindings: Keybindings manager; the process-wide one by default.
        features: Feature switches; all enabled by default.
        schedule: Called with a flush callback after each handled event, e.g.
            the host's next-paint or microtask hook. Without it the host
            calls :meth:`flush` itself once its render pass has settled.
    """

    def __init__(
        self,
        surface: EditingSurface,
        *,
        keybindings: EditorKeybindingsManager | None = None,
        features: EditorFeatures | None = None,
        schedule: Scheduler | None = None,
    ) -> None:
        self._surface = surface
        self._keybindings = keybindings
        self._features = features
        self._schedule = schedule
        self._pending: Commit | None = None
        self._unsubscribe: Unsubscribe | None = None
        self._dispatching = False

        self.on_change: Callable[[str], None] | None = None

    # -- Subscription lifecycle ----------------------------------------------

    @property
    def is_attached(self) -> bool:
        return self._unsubscribe is not None

    def attach(self, source: KeySource) -> None:
        """Start listening to ``source`` (call when the surface mounts)."""
        if self._unsubscribe is not None:
            raise RuntimeError("EditorSession is already attached")
        self._unsubscribe = source.subscribe(self.handle_key)
        logger.debug("Editor session attached")

    def detach(self) -> None:
        """Stop listening and drop any unapplied commit (call on unmount)."""
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        self._pending = None
        if unsubscribe is not None:
            unsubscribe()
            logger.debug("Editor session detached")

    @contextmanager
    def attached(self, source: KeySource) -> Iterator[EditorSession]:
        self.attach(source)
        try:
            yield self
        finally:
            self.detach()

    # -- Input ---------------------------------------------------------------

    def handle_key(self, event: KeyEvent) -> bool:
        """Process one key event; return ``True`` if the host must suppress it."""
        if self._dispatching:
            raise RuntimeError("EditorSession.handle_key is not re-entrant")

        state = self.current_state()
        self._dispatching = True
        try:
            result = dispatch(
                event,
                state,
                keybindings=self._keybindings,
                features=self._features,
            )
        finally:
            self._dispatching = False

        if not result.handled:
            # Host default edits apply to the committed text.
            if self._pending is not None:
                self.flush()
            return False

        self._queue(result)
        if result.buffer != state.buffer and self.on_change:
            self.on_change(result.buffer)
        return True

    def handle_input(self, data: str) -> bool:
        """Process raw terminal input."""
        event = parse_terminal_input(data)
        if event is None:
            return False
        return self.handle_key(event)

    def current_state(self) -> EditState:
        """The state the next event applies to, including an unapplied commit."""
        if self._pending is not None:
            pending = self._pending
            return EditState(pending.buffer, pending.selection_start, pending.selection_end)
        start, end = self._surface.get_selection()
        return EditState.clamped(self._surface.get_text(), start, end)

    # -- Write-back ----------------------------------------------------------

    @property
    def pending(self) -> Commit | None:
        return self._pending

    def _queue(self, result: EditResult) -> None:
        self._pending = result.commit()
        if self._schedule is not None:
            self._schedule(self.flush)

    def flush(self) -> bool:
        """Apply the newest pending commit to the surface.

        Returns ``False`` when there was nothing to apply (already flushed).
        """
        commit, self._pending = self._pending, None
        if commit is None:
            return False
        commit.apply(self._surface)
        logger.debug(
            "Committed %d chars, selection (%d, %d)",
            len(commit.buffer),
            commit.selection_start,
            commit.selection_end,
        )
        return True
