"""
In-memory recording implementations of the browser collaborators.

Used by the CLI dry-run and by the test-suite: nothing is opened or
injected, every call is recorded for inspection.

Usage::

    browser = InMemoryBrowser(tabs=[Tab(id=1, index=0, url="https://a.example/")])
    browser.page_images[(1, 0)] = [{"data": "https://a.example/cat.png"}]
    ...
    browser.created_tabs     # tabs opened by the core, in order
    browser.calls            # ("execute_file", path, tab_id, frame_id) …
"""

import itertools
import logging
from typing import Any, Optional

from imgsearch.exceptions import BrowserError
from imgsearch.frames.models import PARSE_DOCUMENT_CODE

from .bridge import ActionSurface, BrowserBridge, ContextMenuSurface, Notifier
from .models import TOP_FRAME, Tab, TextRef

__all__ = [
    "InMemoryBrowser",
    "RecordingContextMenu",
    "RecordingAction",
    "RecordingNotifier",
]

logger = logging.getLogger(__name__)

_EXTENSION_ORIGIN = "moz-extension://imgsearch"


class InMemoryBrowser(BrowserBridge):
    """
    Recording BrowserBridge.

    Attributes
    ──────────
    tabs            — open tabs keyed by id
    created_tabs    — tabs opened through create_tab(), in call order
    removed_tabs    — ids passed to remove_tab()
    calls           — every injection call as a tuple
    sent            — (tab_id, frame_id, message) for send_message()
    page_images     — (tab_id, frame_id) → extraction result returned for
                      the parse call (list of image dicts, or None)
    restricted      — tab ids (or (tab_id, frame_id) pairs) refusing scripts
    object_urls     — live object URL → (mime_type, byte length)
    revoked         — object URLs passed to revoke_object_url()
    """

    def __init__(self, tabs: Optional[list[Tab]] = None, active_tab_id: Optional[int] = None) -> None:
        self.tabs: dict[int, Tab] = {t.id: t for t in (tabs or [])}
        self.active_tab_id = active_tab_id if active_tab_id is not None else next(iter(self.tabs), None)
        self.created_tabs: list[Tab] = []
        self.removed_tabs: list[int] = []
        self.calls: list[tuple] = []
        self.sent: list[tuple[int, Optional[int], dict]] = []
        self.page_images: dict[tuple[int, int], Optional[list]] = {}
        self.restricted: set = set()
        self.object_urls: dict[str, tuple[str, int]] = {}
        self.revoked: list[str] = []
        self._tab_ids = itertools.count(max(self.tabs, default=0) + 1)
        self._blob_ids = itertools.count(1)

    # ── Tabs ──────────────────────────────────────────────────────────────

    async def create_tab(self, url, index, active=True, opener_tab_id=None) -> Tab:
        tab = Tab(id=next(self._tab_ids), index=index, url=url,
                  active=active, opener_tab_id=opener_tab_id)
        self.tabs[tab.id] = tab
        self.created_tabs.append(tab)
        if active:
            self.active_tab_id = tab.id
        logger.debug("memory browser: opened %s", tab)
        return tab

    async def remove_tab(self, tab_id: int) -> None:
        if self.tabs.pop(tab_id, None) is None:
            raise BrowserError(f"no tab with id {tab_id}")
        self.removed_tabs.append(tab_id)

    async def active_tab(self) -> Tab:
        if self.active_tab_id not in self.tabs:
            raise BrowserError("no active tab")
        return self.tabs[self.active_tab_id]

    # ── Scripts ───────────────────────────────────────────────────────────

    async def execute_code(self, code, tab_id, frame_id=TOP_FRAME, all_frames=False, run_at=None) -> list[Any]:
        self._check_allowed(tab_id, frame_id)
        self.calls.append(("execute_code", code, tab_id, None if all_frames else frame_id))
        if code == PARSE_DOCUMENT_CODE:
            return [self.page_images.get((tab_id, frame_id))]
        return [None]

    async def execute_file(self, path, tab_id, frame_id=TOP_FRAME, run_at=None) -> list[Any]:
        self._check_allowed(tab_id, frame_id)
        self.calls.append(("execute_file", path, tab_id, frame_id))
        return [None]

    async def insert_css(self, path, tab_id, frame_id=TOP_FRAME, run_at=None) -> None:
        self._check_allowed(tab_id, frame_id)
        self.calls.append(("insert_css", path, tab_id, frame_id))

    async def scripts_allowed(self, tab_id: int, frame_id: int = TOP_FRAME) -> bool:
        return tab_id not in self.restricted and (tab_id, frame_id) not in self.restricted

    def _check_allowed(self, tab_id: int, frame_id: int) -> None:
        if tab_id not in self.tabs:
            raise BrowserError(f"no tab with id {tab_id}")
        if tab_id in self.restricted or (tab_id, frame_id) in self.restricted:
            raise BrowserError(f"scripts are not allowed in tab {tab_id}")

    # ── Messaging ─────────────────────────────────────────────────────────

    async def send_message(self, tab_id, message, frame_id=None) -> None:
        if tab_id not in self.tabs:
            raise BrowserError(f"no tab with id {tab_id}")
        self.sent.append((tab_id, frame_id, message))

    def messages(self, kind: str) -> list[dict]:
        """Sent messages whose ``id`` is *kind*."""
        return [m for _, _, m in self.sent if m.get("id") == kind]

    # ── Blobs / extension pages ───────────────────────────────────────────

    def create_object_url(self, data: bytes, mime_type: str) -> str:
        url = f"blob:{_EXTENSION_ORIGIN}/{next(self._blob_ids)}"
        self.object_urls[url] = (mime_type, len(data))
        return url

    def revoke_object_url(self, url: str) -> None:
        self.object_urls.pop(url, None)
        self.revoked.append(url)

    def extension_url(self, path: str) -> str:
        return f"{_EXTENSION_ORIGIN}{path}"

    def injected(self, kind: str, tab_id: Optional[int] = None) -> list[str]:
        """Paths / code of recorded calls of *kind*, optionally for one tab."""
        return [c[1] for c in self.calls if c[0] == kind and (tab_id is None or c[2] == tab_id)]


class RecordingContextMenu(ContextMenuSurface):
    """Keeps the current menu tree as a list of MenuItem."""

    def __init__(self) -> None:
        self.items: list = []
        self.rebuilds = 0

    async def remove_all(self) -> None:
        self.items.clear()
        self.rebuilds += 1

    async def create(self, item) -> None:
        if any(existing.id == item.id for existing in self.items):
            raise BrowserError(f"duplicate menu item id {item.id!r}")
        self.items.append(item)


class RecordingAction(ActionSurface):
    def __init__(self) -> None:
        self.title: Optional[TextRef] = None
        self.popup: str = ""

    async def set_title(self, title: TextRef) -> None:
        self.title = title

    async def set_popup(self, popup: str) -> None:
        self.popup = popup


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.shown: list[tuple[str, str]] = []

    async def show(self, message_key: str, kind: str = "info") -> None:
        logger.info("notification: %s", message_key)
        self.shown.append((message_key, kind))

    @property
    def keys(self) -> list[str]:
        return [key for key, _ in self.shown]
