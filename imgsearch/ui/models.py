"""
UI state models — pure-Python descriptions of the browser UI surfaces.

No browser calls here; the UISynchronizer applies these to the surfaces.
"""

from dataclasses import dataclass, field
from typing import Optional

from imgsearch.browser.models import TextRef

__all__ = ["MenuItem", "ActionState", "MENU_CONTEXTS", "MENU_PARENT_ID", "MENU_SEPARATOR_ID"]

MENU_CONTEXTS = (
    "audio",
    "editable",
    "frame",
    "image",
    "link",
    "page",
    "selection",
    "video",
)
MENU_PARENT_ID = "par-1"
MENU_SEPARATOR_ID = "sep-1"


@dataclass(frozen=True)
class MenuItem:
    """
    One context-menu entry.

    id            — engine id, "allEngines", or a structural id (par-1, sep-1)
    title         — localisable title (None for separators)
    parent        — id of the parent entry, None for top level
    type          — "normal" | "separator"
    url_patterns  — documents the entry is shown on
    """
    id:           str
    title:        Optional[TextRef] = None
    parent:       Optional[str] = None
    type:         str = "normal"
    contexts:     tuple = MENU_CONTEXTS
    url_patterns: tuple = field(default_factory=tuple)

    def __str__(self) -> str:
        indent = "  " if self.parent else ""
        if self.type == "separator":
            return f"{indent}---"
        return f"{indent}{self.id}: {self.title}"


@dataclass(frozen=True)
class ActionState:
    """
    Toolbar action configuration.

    click_bound  — clicks reach the background (no popup)
    title        — localisable button title
    popup        — popup page, empty when click_bound
    """
    click_bound: bool
    title:       TextRef
    popup:       str = ""

    def __post_init__(self) -> None:
        if self.click_bound == bool(self.popup):
            raise ValueError("action must have either a click handler or a popup")
