"""
frames — per-frame injection tracking for optional content-script modules.

Public API
──────────
FrameModule      — parse | confirm | select
InjectionRecord  — installed-module flags of one frame
FrameRegistry    — report / probe / ensure (at-most-once install)
"""

from imgsearch.frames.models import (
    MODULE_ASSETS,
    PARSE_DOCUMENT_CODE,
    FrameModule,
    InjectionRecord,
    ModuleAssets,
)
from imgsearch.frames.registry import FrameRegistry

__all__ = [
    "FrameModule",
    "InjectionRecord",
    "ModuleAssets",
    "MODULE_ASSETS",
    "PARSE_DOCUMENT_CODE",
    "FrameRegistry",
]
