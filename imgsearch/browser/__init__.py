"""
browser — collaborator interfaces for the browser APIs the core drives.

Public API
──────────
BrowserBridge          — tabs, script injection, messaging, blob URLs
ContextMenuSurface     — context-menu entries
ActionSurface          — toolbar action title / popup
Notifier               — user-visible notifications
Tab, MessageSender, MenuClick, TextRef — exchanged data
InMemoryBrowser, RecordingContextMenu, RecordingAction, RecordingNotifier
                       — recording implementations (dry-run, tests)
"""

from imgsearch.browser.models import TOP_FRAME, MenuClick, MessageSender, Tab, TextRef
from imgsearch.browser.bridge import ActionSurface, BrowserBridge, ContextMenuSurface, Notifier
from imgsearch.browser.memory import (
    InMemoryBrowser,
    RecordingAction,
    RecordingContextMenu,
    RecordingNotifier,
)

__all__ = [
    "TOP_FRAME",
    "Tab",
    "MessageSender",
    "MenuClick",
    "TextRef",
    "BrowserBridge",
    "ContextMenuSurface",
    "ActionSurface",
    "Notifier",
    "InMemoryBrowser",
    "RecordingContextMenu",
    "RecordingAction",
    "RecordingNotifier",
]
