"""
Data models for the frames module.

Key concepts
────────────
FrameModule      — optional in-page script capability
ModuleAssets     — files injected to install one module
InjectionRecord  — which modules one (tab, frame) already has
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Mapping, Optional

__all__ = [
    "FrameModule",
    "ModuleAssets",
    "InjectionRecord",
    "MODULE_ASSETS",
    "PARSE_DOCUMENT_CODE",
]

# In-page entry point of the parse module; returns a list of image dicts
PARSE_DOCUMENT_CODE = "parseDocument();"


class FrameModule(str, Enum):
    PARSE   = "parse"
    CONFIRM = "confirm"
    SELECT  = "select"


@dataclass(frozen=True)
class ModuleAssets:
    script:     str
    stylesheet: Optional[str] = None
    run_at:     str = "document_start"


MODULE_ASSETS: dict[FrameModule, ModuleAssets] = {
    FrameModule.PARSE:   ModuleAssets(script="/src/content/parse.js"),
    FrameModule.CONFIRM: ModuleAssets(script="/src/content/confirm.js",
                                      stylesheet="/src/confirm/frame.css"),
    FrameModule.SELECT:  ModuleAssets(script="/src/content/select.js",
                                      stylesheet="/src/select/frame.css"),
}


@dataclass
class InjectionRecord:
    """Per-frame module flags; lost on navigation (the page re-handshakes)."""
    parse:   bool = False
    confirm: bool = False
    select:  bool = False

    def has(self, module: FrameModule) -> bool:
        return getattr(self, module.value)

    def set(self, module: FrameModule) -> None:
        setattr(self, module.value, True)

    @classmethod
    def from_mapping(cls, modules: Optional[Mapping[str, bool]]) -> "InjectionRecord":
        modules = modules or {}
        return cls(**{f.name: bool(modules.get(f.name, False)) for f in fields(cls)})

    def __str__(self) -> str:
        installed = [f.name for f in fields(self) if getattr(self, f.name)]
        return f"InjectionRecord({', '.join(installed) or '-'})"
