"""
engines — reverse-image-search destinations.

Public API
──────────
EngineConfig         — URL templates + hand-off features of one engine
EngineFeature        — hand-off capability flags
ENGINES              — static catalog, keyed by engine id
ALL_ENGINES          — pseudo engine id meaning "every enabled engine"
IMAGE_MIME_TYPES     — MIME type → file extension
get_engine           — catalog lookup
get_enabled_engines  — enabled ids in display order
"""

from .catalog import ENGINES, IMAGE_MIME_TYPES, get_enabled_engines, get_engine
from .models import ALL_ENGINES, EngineConfig, EngineFeature

__all__ = [
    "EngineConfig",
    "EngineFeature",
    "ENGINES",
    "ALL_ENGINES",
    "IMAGE_MIME_TYPES",
    "get_engine",
    "get_enabled_engines",
]
