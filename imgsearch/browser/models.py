"""Data models exchanged with the browser collaborators."""

from dataclasses import dataclass, field
from typing import Optional

__all__ = ["Tab", "MessageSender", "MenuClick", "TextRef", "TOP_FRAME"]

TOP_FRAME = 0


@dataclass
class Tab:
    """A browser tab as reported by the tabs API."""
    id:     int
    index:  int
    url:    str = ""
    active: bool = False
    opener_tab_id: Optional[int] = None

    def __str__(self) -> str:
        return f"Tab(id={self.id}, index={self.index}, url={self.url!r})"


@dataclass
class MessageSender:
    """Origin of an inbound runtime message."""
    tab:      Optional[Tab] = None
    frame_id: int = TOP_FRAME


@dataclass
class MenuClick:
    """
    Context-menu click details.

    menu_item_id — engine id or "allEngines"
    frame_id     — frame the click happened in (0 = top frame)
    src_url      — src of the clicked element, when it has one
    page_url     — URL of the tab's top document
    frame_url    — URL of the clicked frame's document, when reported
    """
    menu_item_id: str
    frame_id:     int = TOP_FRAME
    src_url:      Optional[str] = None
    page_url:     Optional[str] = None
    frame_url:    Optional[str] = None


@dataclass(frozen=True)
class TextRef:
    """Localisable text: message key plus substitutions, resolved externally."""
    key:  str
    args: tuple = field(default_factory=tuple)

    def __str__(self) -> str:
        if not self.args:
            return self.key
        return f"{self.key}({', '.join(str(a) for a in self.args)})"
