"""In-memory editing surface and key source for testing.

``VirtualSurface`` satisfies the ``mdedit.session.EditingSurface`` protocol
and ``VirtualKeySource`` the ``mdedit.session.KeySource`` protocol, without
any UI. Writes are recorded for assertions.
"""

from __future__ import annotations

from mdedit.keys import KeyEvent
from mdedit.session import KeyListener, Unsubscribe


class VirtualSurface:
    """Text widget double that records every write."""

    def __init__(self, text: str = "", selection: tuple[int, int] | None = None) -> None:
        self.text = text
        self.selection = selection if selection is not None else (len(text), len(text))
        self.calls: list[str] = []

    # -- EditingSurface protocol ---------------------------------------------

    def get_text(self) -> str:
        return self.text

    def get_selection(self) -> tuple[int, int]:
        return self.selection

    def set_text(self, text: str) -> None:
        self.calls.append("set_text")
        self.text = text

    def set_selection(self, start: int, end: int) -> None:
        self.calls.append("set_selection")
        self.selection = (start, end)

    # -- Test helpers --------------------------------------------------------

    def type_default(self, char: str) -> None:
        """What the widget itself does with an unhandled printable key."""
        start, end = self.selection
        self.text = self.text[:start] + char + self.text[end:]
        self.selection = (start + len(char), start + len(char))


class VirtualKeySource:
    """Key source double; ``press`` returns whether default handling was suppressed."""

    def __init__(self) -> None:
        self.listeners: list[KeyListener] = []

    def subscribe(self, listener: KeyListener) -> Unsubscribe:
        self.listeners.append(listener)

        def unsubscribe() -> None:
            self.listeners.remove(listener)

        return unsubscribe

    def press(self, key: str, **modifiers: bool) -> bool:
        event = KeyEvent(key, **modifiers)
        suppressed = False
        for listener in list(self.listeners):
            suppressed = listener(event) or suppressed
        return suppressed
