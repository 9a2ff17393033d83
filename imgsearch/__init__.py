"""
imgsearch — background orchestration core for reverse image search.

Picks up images from context-menu clicks, the toolbar action, the upload
page and in-page selection, and opens one search tab per engine.

Public API
──────────
Background     — composition root; wire browser events to its on_* methods
RuntimeConfig  — startup configuration
Options        — user options record
"""

from imgsearch.app import Background
from imgsearch.config.models import Options, RuntimeConfig

__all__ = ["Background", "Options", "RuntimeConfig"]

__version__ = "0.1.0"
