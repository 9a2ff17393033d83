"""Static engine catalog and enabled-engine resolution."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from imgsearch.exceptions import UnknownEngineError

from .models import EngineConfig, EngineFeature

if TYPE_CHECKING:
    from imgsearch.config.models import Options

__all__ = ["ENGINES", "IMAGE_MIME_TYPES", "get_engine", "get_enabled_engines"]

logger = logging.getLogger(__name__)

_SCRIPTED = (
    EngineFeature.NEEDS_COMMON_SCRIPT | EngineFeature.NEEDS_ENGINE_SCRIPT
)

ENGINES: dict[str, EngineConfig] = {
    "google": EngineConfig(
        id="google",
        search_url="https://www.google.com/searchbyimage?site=search&sa=X&image_url={imgUrl}",
        upload_url="/src/upload/index.html?engine=google&dataKey={dataKey}",
        features=EngineFeature.UPLOAD_KEY,
        region_suffix="&gws_rd=cr",
        local_option="local_google",
    ),
    "bing": EngineConfig(
        id="bing",
        search_url="https://www.bing.com/images/search?q=imgurl:{imgUrl}&view=detailv2&iss=sbi",
        upload_url="https://www.bing.com/images/search?view=detailv2&iss=sbiupload",
        features=_SCRIPTED | EngineFeature.NEEDS_CSS,
    ),
    "yandex": EngineConfig(
        id="yandex",
        search_url="https://yandex.com/images/search?rpt=imageview&url={imgUrl}",
        upload_url="https://yandex.com/images/",
        features=_SCRIPTED,
    ),
    "baidu": EngineConfig(
        id="baidu",
        search_url="https://image.baidu.com/n/pc_search?queryImageUrl={imgUrl}",
        upload_url="https://image.baidu.com/",
        features=_SCRIPTED,
    ),
    "tineye": EngineConfig(
        id="tineye",
        search_url="https://www.tineye.com/search?url={imgUrl}",
        upload_url="/src/upload/index.html?engine=tineye&dataKey={dataKey}",
        features=EngineFeature.UPLOAD_KEY,
    ),
    "sogou": EngineConfig(
        id="sogou",
        search_url="https://pic.sogou.com/ris?query={imgUrl}&flag=1",
        upload_url="https://pic.sogou.com/",
        features=_SCRIPTED,
    ),
}

# MIME type → file extension used for synthesised upload file names
IMAGE_MIME_TYPES = {
    "image/bmp":                "bmp",
    "image/gif":                "gif",
    "image/jpeg":               "jpg",
    "image/pjpeg":              "jpg",
    "image/png":                "png",
    "image/svg+xml":            "svg",
    "image/tiff":               "tif",
    "image/webp":               "webp",
    "image/x-icon":             "ico",
    "image/vnd.microsoft.icon": "ico",
}


def get_engine(engine_id: str) -> EngineConfig:
    """
    Return the catalog entry for *engine_id*.

    Raises:
        UnknownEngineError: the id is not in the catalog.
    """
    try:
        return ENGINES[engine_id]
    except KeyError:
        raise UnknownEngineError(f"unknown search engine: {engine_id!r}") from None


def get_enabled_engines(options: "Options") -> list[str]:
    """
    Enabled engine ids in configured display order.

    Disabled ids and ids missing from the catalog are dropped; duplicates
    keep their first position.
    """
    disabled = set(options.disabled_engines)
    enabled: list[str] = []
    for engine in options.engines:
        if engine in disabled or engine in enabled:
            continue
        if engine not in ENGINES:
            logger.warning("Ignoring unknown engine in options: %r", engine)
            continue
        enabled.append(engine)
    return enabled
