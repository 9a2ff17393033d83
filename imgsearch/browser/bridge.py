"""Abstract browser collaborators used by the background core."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from .models import TOP_FRAME, Tab, TextRef

if TYPE_CHECKING:
    from imgsearch.ui.models import MenuItem

__all__ = ["BrowserBridge", "ContextMenuSurface", "ActionSurface", "Notifier"]


class BrowserBridge(ABC):
    """
    Tabs, script injection, messaging and blob URLs.

    Every coroutine may raise BrowserError when the underlying API call
    fails (closed tab, navigation in progress, …).
    """

    @abstractmethod
    async def create_tab(
        self,
        url: str,
        index: int,
        active: bool = True,
        opener_tab_id: Optional[int] = None,
    ) -> Tab:
        """Open *url* in a new tab at position *index*."""

    @abstractmethod
    async def remove_tab(self, tab_id: int) -> None:
        """Close a tab."""

    @abstractmethod
    async def active_tab(self) -> Tab:
        """Return the active tab of the last focused window."""

    @abstractmethod
    async def execute_code(
        self,
        code: str,
        tab_id: int,
        frame_id: int = TOP_FRAME,
        all_frames: bool = False,
        run_at: Optional[str] = None,
    ) -> list[Any]:
        """Evaluate *code* in the frame(s); return one result per frame."""

    @abstractmethod
    async def execute_file(
        self,
        path: str,
        tab_id: int,
        frame_id: int = TOP_FRAME,
        run_at: Optional[str] = None,
    ) -> list[Any]:
        """Run a packaged script file in the frame."""

    @abstractmethod
    async def insert_css(
        self,
        path: str,
        tab_id: int,
        frame_id: int = TOP_FRAME,
        run_at: Optional[str] = None,
    ) -> None:
        """Insert a packaged stylesheet into the frame."""

    @abstractmethod
    async def scripts_allowed(self, tab_id: int, frame_id: int = TOP_FRAME) -> bool:
        """False for restricted pages where script execution is refused."""

    @abstractmethod
    async def send_message(
        self,
        tab_id: int,
        message: dict,
        frame_id: Optional[int] = None,
    ) -> None:
        """Deliver *message* to the tab (all frames when frame_id is None)."""

    @abstractmethod
    def create_object_url(self, data: bytes, mime_type: str) -> str:
        """Register a local blob and return its object URL."""

    @abstractmethod
    def revoke_object_url(self, url: str) -> None:
        """Release a blob created by create_object_url()."""

    @abstractmethod
    def extension_url(self, path: str) -> str:
        """Absolute URL of a packaged extension page."""


class ContextMenuSurface(ABC):
    """The extension's context-menu entries."""

    @abstractmethod
    async def remove_all(self) -> None: ...

    @abstractmethod
    async def create(self, item: "MenuItem") -> None: ...


class ActionSurface(ABC):
    """The toolbar action button."""

    @abstractmethod
    async def set_title(self, title: TextRef) -> None: ...

    @abstractmethod
    async def set_popup(self, popup: str) -> None:
        """Empty string removes the popup so clicks reach the background."""


class Notifier(ABC):
    """User-visible notifications; text is localised externally."""

    @abstractmethod
    async def show(self, message_key: str, kind: str = "info") -> None: ...
