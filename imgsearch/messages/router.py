"""
MessageRouter — single entry point for runtime messages.

Usage::

    router = MessageRouter(bridge, store, frames, dispatcher, click, action, notifier)
    await router.handle({"id": "imageDataRequest", "dataKey": key}, sender)

Kinds outside InboundKind are ignored. Handlers are independent of each
other; errors propagate to the caller (the Background event boundary).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from imgsearch.browser.models import TOP_FRAME, MessageSender
from imgsearch.exceptions import BrowserError, ProtocolError, SessionExpiredError
from imgsearch.store.models import ImagePayload, UploadSession

from .schemas import (
    FrameIdResponse,
    ImageDataResponse,
    InboundKind,
    parse_inbound,
)

if TYPE_CHECKING:
    from imgsearch.browser.bridge import BrowserBridge, Notifier
    from imgsearch.dispatch.dispatcher import SearchDispatcher
    from imgsearch.frames.registry import FrameRegistry
    from imgsearch.store.ephemeral import EphemeralStore
    from imgsearch.workflows.action import ActionOrchestrator
    from imgsearch.workflows.click import ClickOrchestrator

__all__ = ["MessageRouter"]

logger = logging.getLogger(__name__)

Handler = Callable[[Any, MessageSender], Awaitable[Any]]

# Kinds whose handlers never touch the sender tab (popup and extension pages).
_TABLESS_KINDS = frozenset({
    InboundKind.ACTION_POPUP_SUBMIT,
    InboundKind.IMAGE_UPLOAD_RECEIPT,
    InboundKind.NOTIFICATION,
    InboundKind.ROUTE_MESSAGE,
})


class MessageRouter:
    """Dispatches inbound messages by kind."""

    def __init__(
        self,
        bridge: "BrowserBridge",
        store: "EphemeralStore",
        frames: "FrameRegistry",
        dispatcher: "SearchDispatcher",
        click: "ClickOrchestrator",
        action: "ActionOrchestrator",
        notifier: "Notifier",
    ) -> None:
        self._bridge = bridge
        self._store = store
        self._frames = frames
        self._dispatcher = dispatcher
        self._click = click
        self._action = action
        self._notifier = notifier
        self._handlers: dict[InboundKind, Handler] = {
            InboundKind.IMAGE_DATA_REQUEST:        self._on_image_data_request,
            InboundKind.ACTION_POPUP_SUBMIT:       self._on_action_popup_submit,
            InboundKind.IMAGE_UPLOAD_SUBMIT:       self._on_upload_submit,
            InboundKind.IMAGE_UPLOAD_RECEIPT:      self._on_upload_receipt,
            InboundKind.IMAGE_SELECTION_SUBMIT:    self._on_selection_submit,
            InboundKind.IMAGE_SELECTION_CANCEL:    self._on_selection_cancel,
            InboundKind.IMAGE_CONFIRMATION_SUBMIT: self._on_confirmation_submit,
            InboundKind.IMAGE_CONFIRMATION_CANCEL: self._on_confirmation_cancel,
            InboundKind.CONFIRM_FRAME_ID:          self._on_frame_id_request,
            InboundKind.SELECT_FRAME_ID:           self._on_frame_id_request,
            InboundKind.FRAME_HANDSHAKE:           self._on_frame_handshake,
            InboundKind.NOTIFICATION:              self._on_notification,
            InboundKind.ROUTE_MESSAGE:             self._on_route_message,
        }

    @property
    def handled_kinds(self) -> frozenset:
        return frozenset(self._handlers)

    async def handle(self, raw: Any, sender: MessageSender) -> Any:
        """
        Route one raw message.

        Returns:
            The handler's result, or None for ignored kinds.

        Raises:
            ProtocolError: a known kind with invalid fields, or a
                tab-bound kind from a sender without a tab.
            ImgSearchError: raised by the workflow the message started.
        """
        message = parse_inbound(raw)
        if message is None:
            kind = raw.get("id") if isinstance(raw, dict) else type(raw).__name__
            logger.debug("Ignoring message of unknown kind %r", kind)
            return None
        kind = InboundKind(message.id)
        tab_id = sender.tab.id if sender.tab is not None else None
        logger.debug("message %s from tab %s frame %s", kind.value, tab_id, sender.frame_id)
        if tab_id is None and kind not in _TABLESS_KINDS:
            raise ProtocolError(f"{kind.value} message requires a sender tab")
        return await self._handlers[kind](message, sender)

    # ── Data / upload ─────────────────────────────────────────────────────

    async def _on_image_data_request(self, message, sender: MessageSender) -> ImageDataResponse:
        payload = self._store.get(message.data_key)
        if isinstance(payload, ImagePayload):
            response = ImageDataResponse(img_data=payload.to_dict())
        else:
            response = ImageDataResponse(error=SessionExpiredError.message_key)
            logger.info("Data request for expired key %s", message.data_key)
        await self._bridge.send_message(sender.tab.id, response.to_wire(), frame_id=TOP_FRAME)
        return response

    async def _on_upload_submit(self, message, sender: MessageSender) -> str:
        session = UploadSession(total=message.total, tab_id=sender.tab.id)
        receipt_key = self._store.put(session, on_expire=self._on_session_expired)
        logger.info("Upload batch of %d image(s), expecting %d receipt(s)",
                    len(message.images), session.total)
        for image in message.images:
            await self._dispatcher.search_image(
                image.to_candidate(), message.engine, sender.tab.index, receipt_key
            )
        return receipt_key

    async def _on_upload_receipt(self, message, sender: MessageSender) -> bool:
        session = self._store.get(message.receipt_key)
        if not isinstance(session, UploadSession):
            logger.debug("Receipt for unknown session %s", message.receipt_key)
            return False
        if session.complete:
            logger.warning("Extra receipt for %s ignored", session)
            return False
        if not session.record_receipt():
            return False
        if self._store.delete(message.receipt_key):
            await self._teardown_session(session)
        return True

    def _on_session_expired(self, session: UploadSession) -> Awaitable[None]:
        logger.info("Upload session for tab %s expired at %s", session.tab_id, session)
        return self._teardown_session(session)

    async def _teardown_session(self, session: UploadSession) -> None:
        self._dispatcher.release_session_blobs(session)
        try:
            await self._bridge.remove_tab(session.tab_id)
        except BrowserError as exc:
            logger.warning("Could not close upload tab %s: %s", session.tab_id, exc)

    # ── Workflows ─────────────────────────────────────────────────────────

    async def _on_action_popup_submit(self, message, sender: MessageSender):
        return await self._action.on_action_popup_submit(message.engine, message.image_url)

    async def _on_selection_submit(self, message, sender: MessageSender):
        return await self._action.select(message.token, message.engine, sender)

    async def _on_selection_cancel(self, message, sender: MessageSender):
        return await self._action.cancel_selection(message.token, sender)

    async def _on_confirmation_submit(self, message, sender: MessageSender):
        return await self._click.confirm(
            message.token, message.img.to_candidate(), message.engine, sender
        )

    async def _on_confirmation_cancel(self, message, sender: MessageSender):
        return await self._click.cancel_confirmation(message.token, sender)

    # ── Frames / relays ───────────────────────────────────────────────────

    async def _on_frame_id_request(self, message, sender: MessageSender) -> None:
        response = FrameIdResponse(id=message.id, frame_id=sender.frame_id)
        await self._bridge.send_message(sender.tab.id, response.to_wire(), frame_id=TOP_FRAME)

    async def _on_frame_handshake(self, message, sender: MessageSender) -> None:
        self._frames.report(sender.tab.id, sender.frame_id, message.modules)

    async def _on_notification(self, message, sender: MessageSender) -> None:
        await self._notifier.show(message.message_id, message.type)

    async def _on_route_message(self, message, sender: MessageSender) -> None:
        tab_id = message.tab_id
        if tab_id is None and sender.tab is not None:
            tab_id = sender.tab.id
        if tab_id is None:
            raise ProtocolError("routeMessage without tabId from a sender without a tab")
        await self._bridge.send_message(tab_id, message.data, frame_id=message.frame_id)
