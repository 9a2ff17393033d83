"""
Data models for the engines module.

Key concepts
────────────
EngineFeature  — content-script hand-off capabilities of one engine
EngineConfig   — URL templates + features of one search engine
"""

from dataclasses import dataclass
from enum import Flag, auto
from typing import Optional

__all__ = ["EngineFeature", "EngineConfig", "ALL_ENGINES"]

ALL_ENGINES = "allEngines"


class EngineFeature(Flag):
    """
    How an engine receives a locally held image.

    NEEDS_CSS
        Inject the shared engine stylesheet before the engine script.
    NEEDS_COMMON_SCRIPT
        Inject the common helper script before the engine script.
    NEEDS_ENGINE_SCRIPT
        Inject ``<engine>.js``, preceded by a ``dataKey`` variable snippet,
        which fetches the image from the store and fills the upload form.
    UPLOAD_KEY
        The upload URL template carries ``{dataKey}`` itself (the upload is
        handled by an extension page, no content script needed).
    """
    NONE                = 0
    NEEDS_CSS           = auto()
    NEEDS_COMMON_SCRIPT = auto()
    NEEDS_ENGINE_SCRIPT = auto()
    UPLOAD_KEY          = auto()


@dataclass(frozen=True)
class EngineConfig:
    """
    One reverse-image-search destination.

    search_url     — template with ``{imgUrl}`` for remote images
    upload_url     — page opened for local blobs; may contain ``{dataKey}``;
                     a leading "/" marks an extension page
    region_suffix  — appended to search URLs unless ``local_option`` is set
    local_option   — Options attribute that disables the region suffix
    """
    id:            str
    search_url:    str
    upload_url:    str
    features:      EngineFeature = EngineFeature.NONE
    region_suffix: str = ""
    local_option:  Optional[str] = None

    def supports(self, feature: EngineFeature) -> bool:
        return bool(self.features & feature)

    @property
    def uses_content_script(self) -> bool:
        return self.supports(EngineFeature.NEEDS_ENGINE_SCRIPT)

    def __str__(self) -> str:
        return f"EngineConfig({self.id})"
