"""
Unit tests for imgsearch/app.py

Coverage plan
─────────────
Background  → start/shutdown, event callbacks as the error boundary
              (errors become notifications), menu and action bindings
              gating their clicks, malformed messages dropped
"""

from conftest import PNG_DATA_URI, run

from imgsearch.browser.models import MenuClick, MessageSender

PAGE = "https://site.example/gallery"


class TestMenuClickScenarios:

    def test_scripts_disallowed_with_src_searches_all_engines(self, background, browser, notifier, source_tab):
        browser.restricted.add(1)
        click = MenuClick("allEngines", src_url="https://site.example/raw.jpg", page_url=PAGE)
        run(background.on_context_menu_click(click, source_tab))
        assert [t.index for t in browser.created_tabs] == [5, 6, 7]
        assert [t.active for t in browser.created_tabs] == [True, False, False]
        assert browser.calls == []
        assert notifier.shown == []

    def test_scripts_disallowed_without_src_notifies(self, background, browser, notifier, source_tab):
        browser.restricted.add(1)
        result = run(background.on_context_menu_click(MenuClick("google", page_url=PAGE), source_tab))
        assert result is None
        assert notifier.shown == [("error_scriptsNotAllowed", "error")]
        assert browser.created_tabs == []

    def test_all_engines_disabled_notifies(self, background, browser, notifier, options, source_tab):
        run(options.set({"disabledEngines": ["google", "bing", "yandex"], "showInContextMenu": True}))
        browser.page_images[(1, 0)] = [{"data": "https://site.example/a.png"}]
        run(background.on_context_menu_click(MenuClick("allEngines", page_url=PAGE), source_tab))
        assert notifier.keys == ["error_allEnginesDisabled"]
        assert browser.created_tabs == []

    def test_image_not_found_notifies(self, background, browser, notifier, source_tab):
        browser.page_images[(1, 0)] = []
        run(background.on_context_menu_click(MenuClick("bing", page_url=PAGE), source_tab))
        assert notifier.keys == ["error_imageNotFound"]

    def test_hidden_menu_ignores_clicks(self, background, browser, options, source_tab):
        run(options.set({"showInContextMenu": False}))
        browser.page_images[(1, 0)] = [{"data": "https://site.example/a.png"}]
        run(background.on_context_menu_click(MenuClick("bing", page_url=PAGE), source_tab))
        assert browser.created_tabs == []
        assert browser.calls == []


class TestActionClick:

    def test_ignored_while_popup_bound(self, background, browser, source_tab):
        assert run(background.on_action_clicked(source_tab)) is None
        assert browser.calls == []

    def test_main_mode_arms_selection(self, background, browser, options, source_tab):
        run(options.set({"searchAllEnginesAction": "main"}))
        wf = run(background.on_action_clicked(source_tab))
        assert wf.engine == "allEngines"
        assert browser.messages("imageSelectionOpen")

    def test_url_mode_error_notifies(self, background, notifier, options, source_tab):
        run(options.set({"searchAllEnginesAction": "main", "searchModeAction": "url"}))
        run(background.on_action_clicked(source_tab))
        assert notifier.keys == ["error_invalidSearchMode_url"]


class TestMessages:

    def test_malformed_message_dropped(self, background, browser, notifier, source_tab):
        sender = MessageSender(tab=source_tab)
        assert run(background.on_message({"id": "imageDataRequest"}, sender)) is None
        assert browser.sent == []
        assert notifier.shown == []

    def test_message_error_becomes_notification(self, background, notifier, options, source_tab):
        run(options.set({"searchModeAction": "url"}))
        sender = MessageSender(tab=source_tab)
        raw = {"id": "actionPopupSubmit", "engine": "bing", "imageUrl": "javascript:void(0)"}
        assert run(background.on_message(raw, sender)) is None
        assert notifier.keys == ["error_invalidImageUrl_fileUrl"]


class TestLifetime:

    def test_option_change_rebuilds_once(self, background, menus, options):
        run(options.set({"localGoogle": False}))
        assert menus.rebuilds == 1

    def test_shutdown_drops_stored_payloads(self, background, scheduler):
        key = background.store.put({"data": PNG_DATA_URI})
        background.shutdown()
        assert key not in background.store
        assert scheduler.pending == 0
