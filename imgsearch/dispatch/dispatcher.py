"""
SearchDispatcher — opens one search tab per engine for an image.

Pipeline (search_image)
───────────────────────
  1. resolve engines   "allEngines" → enabled engines in display order
  2. prepare payload   remote URL, or local blob registered in the store
  3. open tabs         source_tab_index + 1, + 2, … strictly in engine order;
                       only the first tab is focused (none in background mode)
  4. hand off blob     stylesheet → common script → dataKey snippet →
                       engine script, for engines that fill upload forms

Blob ownership
──────────────
A stored blob is released by whichever teardown happens last: its own
payload entry expiring, or — for images of an upload batch — the
UploadSession being completed / expiring (release_session_blobs()).
"""

from __future__ import annotations

import json
import logging
import random
from typing import TYPE_CHECKING, Optional, Union
from urllib.parse import quote

from imgsearch.browser.models import TOP_FRAME, Tab
from imgsearch.engines.catalog import get_enabled_engines, get_engine
from imgsearch.engines.models import ALL_ENGINES, EngineConfig, EngineFeature
from imgsearch.exceptions import ExtractionError, NoEnginesEnabledError
from imgsearch.store.models import ImagePayload, UploadSession

from .payload import ImageCandidate, decode_data_uri, random_filename

if TYPE_CHECKING:
    from imgsearch.browser.bridge import BrowserBridge
    from imgsearch.config.models import Options, RuntimeConfig
    from imgsearch.config.provider import OptionsProvider
    from imgsearch.store.ephemeral import EphemeralStore

__all__ = ["SearchDispatcher", "build_tab_url"]

logger = logging.getLogger(__name__)

# encodeURIComponent leaves these unescaped
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_tab_url(
    payload: ImagePayload,
    engine: EngineConfig,
    options: "Options",
) -> str:
    """
    Destination URL of *engine* for *payload*.

    Blobs go to the upload page; only UPLOAD_KEY engines receive the store
    key in the URL. Remote images go to the search URL with the image URL
    percent-encoded, plus the engine's region suffix unless its
    local-variant option is set. Extension-relative URLs ("/…") are left
    for the caller to resolve.
    """
    if payload.is_blob:
        url = engine.upload_url
        if engine.supports(EngineFeature.UPLOAD_KEY):
            url = url.replace("{dataKey}", payload.data_key or "")
        return url

    url = engine.search_url.replace("{imgUrl}", quote(payload.url, safe=_URI_COMPONENT_SAFE))
    if engine.region_suffix:
        local = bool(getattr(options, engine.local_option, False)) if engine.local_option else False
        if not local:
            url += engine.region_suffix
    return url


class SearchDispatcher:
    """
    Turns one image into search tabs.

    Usage::

        dispatcher = SearchDispatcher(bridge, store, options, config)
        tabs = await dispatcher.search_image(
            ImageCandidate(data="https://a.example/cat.png"), "allEngines", 4
        )
    """

    def __init__(
        self,
        bridge: "BrowserBridge",
        store: "EphemeralStore",
        options: "OptionsProvider",
        config: "RuntimeConfig",
        rng: Optional[random.Random] = None,
    ) -> None:
        self._bridge = bridge
        self._store = store
        self._options = options
        self._config = config
        self._rng = rng or random.Random()

    # ── Public API ────────────────────────────────────────────────────────

    async def search_image(
        self,
        image: Union[ImageCandidate, str],
        engine: str,
        source_tab_index: int,
        receipt_key: Optional[str] = None,
    ) -> list[Tab]:
        """
        Open search tabs for *image*.

        Args:
            image:            candidate, or a bare remote image URL
            engine:           engine id or "allEngines"
            source_tab_index: index of the tab the search started from
            receipt_key:      UploadSession key when part of an upload batch

        Returns:
            The opened tabs, in engine order.

        Raises:
            NoEnginesEnabledError: nothing to search with; no tab is opened.
            UnknownEngineError:    *engine* is not in the catalog.
            ExtractionError:       a data: URI payload cannot be decoded.
        """
        if isinstance(image, str):
            image = ImageCandidate(data=image)
        options = await self._options.options()
        engines = self.resolve_engines(engine, options)

        payload = self.prepare_payload(image, receipt_key)

        tabs: list[Tab] = []
        index = source_tab_index + 1
        active = not options.tab_in_background
        for config in engines:
            tabs.append(await self._search_engine(payload, config, options, index, active))
            index += 1
            active = False
        return tabs

    def resolve_engines(self, engine: str, options: "Options") -> list[EngineConfig]:
        """Engine configs to search, in tab order."""
        if engine == ALL_ENGINES:
            ids = get_enabled_engines(options)
            if not ids:
                raise NoEnginesEnabledError("all search engines are disabled")
            return [get_engine(e) for e in ids]
        return [get_engine(engine)]

    def prepare_payload(
        self,
        image: ImageCandidate,
        receipt_key: Optional[str] = None,
    ) -> ImagePayload:
        """
        Build the payload for *image*; blobs are registered in the store.

        The returned payload carries ``data_key`` for blobs.
        """
        if not image.is_blob:
            return ImagePayload(is_blob=False, url=image.data)

        filename = image.filename or random_filename(image.data, self._rng)
        object_url = image.object_url
        if object_url is None:
            try:
                mime, body = decode_data_uri(image.data)
            except ValueError as exc:
                raise ExtractionError(f"cannot decode image data: {exc}") from exc
            object_url = self._bridge.create_object_url(body, mime)

        payload = ImagePayload(
            is_blob=True,
            object_url=object_url,
            filename=filename,
            receipt_key=receipt_key,
        )
        data_key = self._store.put(payload, on_expire=self._on_payload_expired)
        payload.data_key = data_key
        self._store.get(data_key).data_key = data_key

        if receipt_key:
            session = self._store.get(receipt_key)
            if isinstance(session, UploadSession):
                session.blobs[data_key] = object_url
        logger.debug("stored blob %s as %s", filename, data_key)
        return payload

    def release_session_blobs(self, session: UploadSession) -> int:
        """
        Release the blobs of a torn-down session whose payload entries are
        already gone. Returns the number released.
        """
        released = 0
        for data_key, object_url in session.blobs.items():
            if data_key not in self._store:
                self._bridge.revoke_object_url(object_url)
                released += 1
        return released

    # ── Internal helpers ──────────────────────────────────────────────────

    def _on_payload_expired(self, payload: ImagePayload) -> None:
        if payload.receipt_key and payload.receipt_key in self._store:
            logger.debug("blob %s kept for session %s", payload.data_key, payload.receipt_key)
            return
        self._bridge.revoke_object_url(payload.object_url)

    async def _search_engine(
        self,
        payload: ImagePayload,
        engine: EngineConfig,
        options: "Options",
        index: int,
        active: bool,
    ) -> Tab:
        url = build_tab_url(payload, engine, options)
        if url.startswith("/"):
            url = self._bridge.extension_url(url)
        tab = await self._bridge.create_tab(url, index, active)
        logger.info("Opened %s search in tab %s (index %d)", engine.id, tab.id, index)

        if payload.data_key and engine.uses_content_script:
            await self._hand_off(payload.data_key, engine, tab)
        return tab

    async def _hand_off(self, data_key: str, engine: EngineConfig, tab: Tab) -> None:
        cfg = self._config
        if engine.supports(EngineFeature.NEEDS_CSS):
            await self._bridge.insert_css(cfg.engine_style, tab.id, TOP_FRAME, run_at="document_start")
        if engine.supports(EngineFeature.NEEDS_COMMON_SCRIPT):
            await self._bridge.execute_file(cfg.common_script, tab.id, TOP_FRAME, run_at="document_idle")
        await self._bridge.execute_code(f"var dataKey = {json.dumps(data_key)};", tab.id)
        await self._bridge.execute_file(
            cfg.engine_scripts.format(engine=engine.id), tab.id, TOP_FRAME, run_at="document_idle"
        )
