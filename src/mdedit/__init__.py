"""mdedit: bracket-pair aware key handling for markdown editors."""

# Bracket table and classification
from mdedit.brackets import (
    BRACKET_PAIRS,
    WIKI_CLOSE,
    WIKI_OPEN,
    Classification,
    Delimiter,
    classify,
    closing_for,
    delimiter_at,
    opening_for,
)

# Dispatching
from mdedit.dispatcher import EditorFeatures, dispatch, handle_payload

# Handlers
from mdedit.handlers import (
    ListItem,
    continue_list,
    delete_pair,
    detect_list_item,
    insert_pair,
    move_caret,
    move_to_line_edge,
    skip_over,
    toggle_bold,
    toggle_italic,
    toggle_wrap,
)

# Keybindings
from mdedit.keybindings import (
    DEFAULT_EDITOR_KEYBINDINGS,
    EditorAction,
    EditorKeybindingsManager,
    get_editor_keybindings,
    set_editor_keybindings,
)

# Key events
from mdedit.keys import KeyEvent, KeyId, matches_key, parse_key_id, parse_terminal_input

# Matching search
from mdedit.matching import Direction, find_match

# Host binding
from mdedit.session import EditingSurface, EditorSession, KeySource

# Settings
from mdedit.settings import SettingsManager

# Data model
from mdedit.state import Commit, EditResult, EditState

# Wiki-link suggestions
from mdedit.wiki_links import WikiLinkContext, detect_tag, detect_wiki_link

__all__ = [
    # Brackets
    "BRACKET_PAIRS",
    "WIKI_CLOSE",
    "WIKI_OPEN",
    "Classification",
    "Delimiter",
    "classify",
    "closing_for",
    "delimiter_at",
    "opening_for",
    # Dispatcher
    "EditorFeatures",
    "dispatch",
    "handle_payload",
    # Handlers
    "ListItem",
    "continue_list",
    "delete_pair",
    "detect_list_item",
    "insert_pair",
    "move_caret",
    "move_to_line_edge",
    "skip_over",
    "toggle_bold",
    "toggle_italic",
    "toggle_wrap",
    # Keybindings
    "DEFAULT_EDITOR_KEYBINDINGS",
    "EditorAction",
    "EditorKeybindingsManager",
    "get_editor_keybindings",
    "set_editor_keybindings",
    # Keys
    "KeyEvent",
    "KeyId",
    "matches_key",
    "parse_key_id",
    "parse_terminal_input",
    # Matching
    "Direction",
    "find_match",
    # Session
    "EditingSurface",
    "EditorSession",
    "KeySource",
    # Settings
    "SettingsManager",
    # State
    "Commit",
    "EditResult",
    "EditState",
    # Wiki links
    "WikiLinkContext",
    "detect_tag",
    "detect_wiki_link",
]
