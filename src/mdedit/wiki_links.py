"""Detect an in-progress wiki-link or tag around the caret.

Hosts use this to open an article (or heading) suggestion list while the
user types inside ``[[...]]``, and a tag list while they type ``#tag``.
"""

from __future__ import annotations

from dataclasses import dataclass

from mdedit.brackets import WIKI_CLOSE, WIKI_OPEN


@dataclass(frozen=True)
class WikiLinkContext:
    """What the user has typed so far inside ``[[`` ... ``]]``.

    ``[[query]]`` looks up articles; ``[[slug#query]]`` looks up headings of
    the article ``slug``.
    """

    query: str
    open_offset: int
    target_slug: str = ""

    @property
    def is_heading(self) -> bool:
        return bool(self.target_slug)


def detect_wiki_link(buffer: str, caret: int) -> WikiLinkContext | None:
    """Return the wiki-link being edited at ``caret``, or ``None``.

    Only the last ``[[`` before the caret counts, it must still be open, and
    its ``]]`` must follow the caret immediately (as auto-pairing leaves it).
    """
    before_cursor = buffer[:caret]
    open_offset = before_cursor.rfind(WIKI_OPEN)
    if open_offset == -1:
        return None

    typed = buffer[open_offset + len(WIKI_OPEN) : caret]
    if WIKI_CLOSE in typed:
        return None
    if not buffer.startswith(WIKI_CLOSE, caret):
        return None

    slug, hash_mark, heading_query = typed.partition("#")
    if hash_mark:
        if not slug:
            return None
        return WikiLinkContext(heading_query, open_offset, target_slug=slug)
    return WikiLinkContext(typed, open_offset)


def detect_tag(buffer: str, caret: int) -> str | None:
    """Return the ``#tag`` query typed just before ``caret``, or ``None``.

    The tag starts at the last ``#`` before the caret and ends at any
    whitespace. A bare ``#`` is not a tag, and neither is a ``#`` inside a
    closed ``[[...]]`` that contains the caret (that is a heading link).
    """
    before_cursor = buffer[:caret]
    open_offset = before_cursor.rfind(WIKI_OPEN)
    if open_offset != -1:
        close_offset = buffer.find(WIKI_CLOSE, open_offset)
        if close_offset != -1 and caret <= close_offset + 1:
            return None

    hash_offset = before_cursor.rfind("#")
    if hash_offset == -1:
        return None
    query = buffer[hash_offset + 1 : caret]
    if not query or any(char.isspace() for char in query):
        return None
    return query
