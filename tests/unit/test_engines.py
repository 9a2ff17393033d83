"""
Unit tests for imgsearch/engines/

Coverage plan
─────────────
catalog.py  → get_engine lookup + error, enabled-engine order, filtering
models.py   → feature flags and uses_content_script
"""

import pytest

from imgsearch.config.models import Options
from imgsearch.engines.catalog import ENGINES, IMAGE_MIME_TYPES, get_enabled_engines, get_engine
from imgsearch.engines.models import EngineFeature
from imgsearch.exceptions import PreconditionError, UnknownEngineError


class TestGetEngine:

    def test_known_engine(self):
        assert get_engine("bing").id == "bing"

    def test_unknown_engine_raises(self):
        with pytest.raises(UnknownEngineError) as exc_info:
            get_engine("altavista")
        assert exc_info.value.message_key == "error_engineNotFound"
        assert isinstance(exc_info.value, PreconditionError)

    def test_every_search_url_has_image_placeholder(self):
        for engine in ENGINES.values():
            assert "{imgUrl}" in engine.search_url, engine.id


class TestFeatures:

    def test_bing_needs_stylesheet_and_scripts(self):
        bing = ENGINES["bing"]
        assert bing.supports(EngineFeature.NEEDS_CSS)
        assert bing.supports(EngineFeature.NEEDS_COMMON_SCRIPT)
        assert bing.uses_content_script

    def test_google_uses_upload_page_with_key(self):
        google = ENGINES["google"]
        assert google.supports(EngineFeature.UPLOAD_KEY)
        assert "{dataKey}" in google.upload_url
        assert not google.uses_content_script

    def test_yandex_has_no_stylesheet(self):
        assert not ENGINES["yandex"].supports(EngineFeature.NEEDS_CSS)


class TestEnabledEngines:

    def test_keeps_configured_order(self):
        opts = Options(engines=["yandex", "google", "bing"], disabled_engines=[])
        assert get_enabled_engines(opts) == ["yandex", "google", "bing"]

    def test_drops_disabled(self):
        opts = Options(engines=["google", "bing", "yandex"], disabled_engines=["bing"])
        assert get_enabled_engines(opts) == ["google", "yandex"]

    def test_all_disabled_is_empty(self):
        opts = Options(engines=["google"], disabled_engines=["google"])
        assert get_enabled_engines(opts) == []

    def test_duplicates_and_unknown_ids_dropped(self):
        opts = Options(engines=["bing", "nope", "bing", "google"], disabled_engines=[])
        assert get_enabled_engines(opts) == ["bing", "google"]

    def test_defaults_enable_whole_catalog(self):
        assert get_enabled_engines(Options()) == list(ENGINES)


class TestMimeTypes:

    def test_common_types_mapped(self):
        assert IMAGE_MIME_TYPES["image/png"] == "png"
        assert IMAGE_MIME_TYPES["image/jpeg"] == "jpg"
