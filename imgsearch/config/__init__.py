"""
config — user options and startup configuration.

Public API
──────────
Options             — parsed options record with defaults
RuntimeConfig       — platform / TTL / asset paths fixed at startup
OptionsProvider     — abstract options collaborator
MemoryOptionsStore  — in-memory provider with change notification
load_options_file   — JSON file → MemoryOptionsStore
"""

from imgsearch.config.models import DEFAULT_ENGINES, OPTION_KEYS, Options, RuntimeConfig
from imgsearch.config.provider import MemoryOptionsStore, OptionsProvider, load_options_file

__all__ = [
    "Options",
    "RuntimeConfig",
    "OPTION_KEYS",
    "DEFAULT_ENGINES",
    "OptionsProvider",
    "MemoryOptionsStore",
    "load_options_file",
]
