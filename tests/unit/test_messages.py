"""
Unit tests for imgsearch/messages/

Coverage plan
─────────────
schemas.py  → parse_inbound (unknown kinds, invalid fields, camelCase),
              outbound wire form
router.py   → handler table covers every inbound kind, data requests,
              upload sessions (receipts, completion, expiry), frame id
              echo, handshake, notifications, relays, senders without a tab
"""

import pytest

from conftest import PNG_DATA_URI, run

from imgsearch.browser.models import MessageSender, Tab
from imgsearch.dispatch.payload import ImageCandidate
from imgsearch.exceptions import ProtocolError
from imgsearch.messages.schemas import (
    ImageDataRequest,
    ImageDataResponse,
    ImageUploadSubmit,
    InboundKind,
    parse_inbound,
)


@pytest.fixture
def sender(source_tab):
    return MessageSender(tab=source_tab, frame_id=0)


def handle(background, raw, sender):
    return run(background.router.handle(raw, sender))


# ─────────────────────────────────────────────────────────────────────────────
# 1. Schemas
# ─────────────────────────────────────────────────────────────────────────────

class TestParseInbound:

    def test_known_kind_with_camel_case_fields(self):
        msg = parse_inbound({"id": "imageDataRequest", "dataKey": "abc"})
        assert isinstance(msg, ImageDataRequest)
        assert msg.data_key == "abc"

    def test_unknown_kind_ignored(self):
        assert parse_inbound({"id": "somethingElse"}) is None
        assert parse_inbound({"noId": True}) is None
        assert parse_inbound("imageDataRequest") is None

    def test_non_string_kind_ignored(self):
        assert parse_inbound({"id": ["imageDataRequest"]}) is None
        assert parse_inbound({"id": {"a": 1}}) is None
        assert parse_inbound({"id": 7}) is None

    def test_unhashable_kind_dropped_at_boundary(self, background, browser, sender):
        assert run(background.on_message({"id": ["x"]}, sender)) is None
        assert run(background.on_message({"id": {"a": 1}}, sender)) is None
        assert browser.sent == []

    def test_missing_field_is_protocol_error(self):
        with pytest.raises(ProtocolError):
            parse_inbound({"id": "imageUploadReceipt"})

    def test_negative_search_count_rejected(self):
        with pytest.raises(ProtocolError):
            parse_inbound({"id": "imageUploadSubmit", "engine": "bing", "images": [], "searchCount": -1})

    def test_upload_total_defaults_to_image_count(self):
        msg = parse_inbound({"id": "imageUploadSubmit", "engine": "bing",
                             "images": [{"data": "a"}, {"data": "b"}]})
        assert isinstance(msg, ImageUploadSubmit)
        assert msg.total == 2

    def test_both_frame_id_kinds_parse(self):
        assert parse_inbound({"id": "confirmFrameId"}).id == "confirmFrameId"
        assert parse_inbound({"id": "selectFrameId"}).id == "selectFrameId"

    def test_image_data_to_candidate(self):
        msg = parse_inbound({
            "id": "imageConfirmationSubmit",
            "engine": "bing",
            "img": {"data": "d", "objectUrl": "blob:1", "info": {"filename": "f.png"}},
        })
        candidate = msg.img.to_candidate()
        assert (candidate.data, candidate.object_url, candidate.filename) == ("d", "blob:1", "f.png")
        assert msg.token is None


def test_outbound_wire_form_is_camel_case_without_nulls():
    assert ImageDataResponse(error="sessionExpired").to_wire() == {
        "id": "imageDataResponse",
        "error": "sessionExpired",
    }


def test_router_handles_every_inbound_kind(background):
    assert background.router.handled_kinds == frozenset(InboundKind)


# ─────────────────────────────────────────────────────────────────────────────
# 2. Image data requests
# ─────────────────────────────────────────────────────────────────────────────

class TestImageDataRequest:

    def test_stored_payload_returned_to_top_frame(self, background, browser, sender):
        payload = background.dispatcher.prepare_payload(ImageCandidate(data=PNG_DATA_URI))
        handle(background, {"id": "imageDataRequest", "dataKey": payload.data_key},
               MessageSender(tab=sender.tab, frame_id=5))
        tab_id, frame_id, message = browser.sent[-1]
        assert (tab_id, frame_id) == (1, 0)
        assert message["id"] == "imageDataResponse"
        assert message["imgData"] == {
            "isBlob": True,
            "objectUrl": payload.object_url,
            "filename": payload.filename,
            "dataKey": payload.data_key,
        }
        assert "error" not in message

    def test_expired_key_reports_session_expired(self, background, browser, scheduler, sender):
        payload = background.dispatcher.prepare_payload(ImageCandidate(data=PNG_DATA_URI))
        run(scheduler.advance(120))
        handle(background, {"id": "imageDataRequest", "dataKey": payload.data_key}, sender)
        assert browser.sent[-1][2] == {"id": "imageDataResponse", "error": "sessionExpired"}


# ─────────────────────────────────────────────────────────────────────────────
# 3. Upload sessions
# ─────────────────────────────────────────────────────────────────────────────

class TestUploadSession:

    @pytest.fixture
    def upload_tab(self, browser):
        tab = Tab(id=20, index=8, url="moz-extension://imgsearch/src/browse/index.html")
        browser.tabs[tab.id] = tab
        return MessageSender(tab=tab)

    def submit(self, background, upload_tab, count=2, **extra):
        raw = {
            "id": "imageUploadSubmit",
            "engine": "google",
            "images": [{"data": PNG_DATA_URI, "info": {"filename": f"{i}.png"}} for i in range(count)],
        }
        raw.update(extra)
        return handle(background, raw, upload_tab)

    def receipt(self, background, key, upload_tab):
        return handle(background, {"id": "imageUploadReceipt", "receiptKey": key}, upload_tab)

    def test_each_image_opens_search_tab(self, background, browser, upload_tab):
        self.submit(background, upload_tab)
        assert len(browser.created_tabs) == 2
        assert all(t.index == 9 for t in browser.created_tabs)
        assert all("dataKey=" in t.url for t in browser.created_tabs)

    def test_tab_closed_on_last_receipt_only(self, background, browser, upload_tab):
        key = self.submit(background, upload_tab)
        assert self.receipt(background, key, upload_tab) is False
        assert browser.removed_tabs == []
        assert self.receipt(background, key, upload_tab) is True
        assert browser.removed_tabs == [20]
        assert key not in background.store

    def test_extra_receipt_ignored(self, background, browser, upload_tab):
        key = self.submit(background, upload_tab, count=1)
        self.receipt(background, key, upload_tab)
        assert self.receipt(background, key, upload_tab) is False
        assert browser.removed_tabs == [20]

    def test_search_count_overrides_image_count(self, background, browser, upload_tab):
        key = self.submit(background, upload_tab, count=1, searchCount=3)
        assert self.receipt(background, key, upload_tab) is False
        assert self.receipt(background, key, upload_tab) is False
        assert self.receipt(background, key, upload_tab) is True

    def test_expiry_closes_tab_once(self, background, browser, scheduler, upload_tab):
        key = self.submit(background, upload_tab)
        self.receipt(background, key, upload_tab)
        run(scheduler.advance(120))
        assert browser.removed_tabs == [20]
        assert self.receipt(background, key, upload_tab) is False
        assert browser.removed_tabs == [20]

    def test_blobs_revoked_once_after_completion(self, background, browser, scheduler, upload_tab):
        key = self.submit(background, upload_tab)
        self.receipt(background, key, upload_tab)
        self.receipt(background, key, upload_tab)
        assert browser.revoked == []
        run(scheduler.advance(120))
        assert len(browser.revoked) == 2
        assert len(set(browser.revoked)) == 2

    def test_session_expiry_releases_blobs_and_closes_tab(self, background, browser, scheduler, upload_tab):
        self.submit(background, upload_tab)
        run(scheduler.advance(120))
        assert len(browser.revoked) == 2
        assert browser.removed_tabs == [20]

    def test_closed_upload_tab_is_logged_not_raised(self, background, browser, scheduler, upload_tab):
        key = self.submit(background, upload_tab, count=1)
        del browser.tabs[20]
        assert self.receipt(background, key, upload_tab) is True
        assert browser.removed_tabs == []

    def test_unknown_receipt_key(self, background, upload_tab):
        assert self.receipt(background, "nope", upload_tab) is False


# ─────────────────────────────────────────────────────────────────────────────
# 4. Frames, notifications, relays
# ─────────────────────────────────────────────────────────────────────────────

class TestFrameMessages:

    def test_frame_id_echoed_to_top_frame(self, background, browser, source_tab):
        handle(background, {"id": "selectFrameId"}, MessageSender(tab=source_tab, frame_id=7))
        assert browser.sent[-1] == (1, 0, {"id": "selectFrameId", "frameId": 7})

    def test_handshake_updates_registry(self, background, browser, source_tab):
        handle(background, {"id": "frameHandshake", "modules": {"parse": True}},
               MessageSender(tab=source_tab, frame_id=2))
        assert background.frames.probe(1, 2).parse is True
        browser.page_images[(1, 2)] = [{"data": "https://a.example/x.png"}]
        run(background.click.search_click_target("bing", 1, 4, 2))
        assert browser.injected("execute_file", 1) == []


class TestNotificationAndRelay:

    def test_notification_shown(self, background, notifier, sender):
        handle(background, {"id": "notification", "messageId": "error_x", "type": "error"}, sender)
        assert notifier.shown == [("error_x", "error")]

    def test_relay_defaults_to_sender_tab(self, background, browser, sender):
        handle(background, {"id": "routeMessage", "data": {"id": "custom", "n": 1}}, sender)
        assert browser.sent[-1] == (1, None, {"id": "custom", "n": 1})

    def test_relay_to_explicit_frame(self, background, browser, sender):
        handle(background, {"id": "routeMessage", "data": {"id": "x"}, "tabId": 1, "frameId": 3}, sender)
        assert browser.sent[-1] == (1, 3, {"id": "x"})

    def test_unknown_kind_is_ignored(self, background, browser, sender):
        assert handle(background, {"id": "imageSomething"}, sender) is None
        assert browser.sent == []


class TestWorkflowMessages:

    def test_confirmation_submit_via_router(self, background, browser, source_tab, sender):
        browser.page_images[(1, 0)] = [{"data": "https://a.example/1.png"}, {"data": "https://a.example/2.png"}]
        wf = run(background.click.search_click_target("bing", 1, 4, 0))
        handle(background, {
            "id": "imageConfirmationSubmit",
            "img": {"data": "https://a.example/1.png"},
            "engine": "bing",
            "token": wf.token,
        }, sender)
        assert len(browser.created_tabs) == 1

    def test_selection_cancel_via_router(self, background, browser, sender):
        wf = run(background.action.on_action_click(4, 1, "https://site.example/", "bing", "select"))
        handle(background, {"id": "imageSelectionCancel", "token": wf.token}, sender)
        assert background.workflows.get(wf.token) is None

    def test_action_popup_submit_via_router(self, background, browser, options, sender):
        run(options.set({"searchModeAction": "upload"}))
        handle(background, {"id": "actionPopupSubmit", "engine": "bing"}, sender)
        assert browser.created_tabs[0].url.endswith("/src/browse/index.html?engine=bing")


# ─────────────────────────────────────────────────────────────────────────────
# 5. Senders without a tab (action popup, extension pages)
# ─────────────────────────────────────────────────────────────────────────────

class TestTablessSender:

    @pytest.fixture
    def popup(self):
        return MessageSender(tab=None)

    def test_relay_with_explicit_tab(self, background, browser, popup):
        handle(background, {"id": "routeMessage", "tabId": 1, "data": {"id": "x"}}, popup)
        assert browser.sent[-1] == (1, None, {"id": "x"})

    def test_relay_without_any_tab_rejected(self, background, browser, popup):
        with pytest.raises(ProtocolError):
            handle(background, {"id": "routeMessage", "data": {"id": "x"}}, popup)
        assert run(background.on_message({"id": "routeMessage", "data": {"id": "x"}}, popup)) is None
        assert browser.sent == []

    def test_action_popup_submit_upload_mode(self, background, browser, options, popup):
        run(options.set({"searchModeAction": "upload"}))
        handle(background, {"id": "actionPopupSubmit", "engine": "bing"}, popup)
        assert browser.created_tabs[0].url.endswith("/src/browse/index.html?engine=bing")
        assert browser.created_tabs[0].index == 5

    def test_notification_shown(self, background, notifier, popup):
        handle(background, {"id": "notification", "messageId": "error_x", "type": "error"}, popup)
        assert notifier.shown == [("error_x", "error")]

    @pytest.mark.parametrize("raw", [
        {"id": "imageDataRequest", "dataKey": "k"},
        {"id": "frameHandshake", "modules": {"parse": True}},
        {"id": "confirmFrameId"},
        {"id": "imageSelectionCancel"},
        {"id": "imageConfirmationCancel"},
    ])
    def test_tab_bound_kind_rejected(self, background, browser, popup, raw):
        with pytest.raises(ProtocolError):
            handle(background, raw, popup)
        assert browser.sent == []
        assert browser.calls == []

    def test_tab_bound_kind_dropped_at_boundary(self, background, notifier, popup):
        assert run(background.on_message({"id": "selectFrameId"}, popup)) is None
        assert notifier.shown == []
