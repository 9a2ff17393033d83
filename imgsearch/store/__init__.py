"""
store — short-lived in-memory storage for image payloads and upload sessions.

Public API
──────────
ImagePayload      — image data handed to search engines
UploadSession     — receipt counter for a batch upload
EphemeralStore    — put / get / delete with per-entry expiry
AsyncioScheduler  — event-loop timers (production)
ManualScheduler   — virtual-time timers (tests)
"""

from imgsearch.store.models import ImagePayload, UploadSession
from imgsearch.store.ephemeral import DEFAULT_TTL, EphemeralStore
from imgsearch.store.scheduler import AsyncioScheduler, ManualScheduler, Scheduler

__all__ = [
    "ImagePayload",
    "UploadSession",
    "EphemeralStore",
    "DEFAULT_TTL",
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
]
