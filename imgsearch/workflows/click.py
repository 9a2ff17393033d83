"""
ClickOrchestrator — context-menu searches and the parse/confirm workflow.

Menu click
──────────
  scripts_check   page refuses scripts → search the clicked element's src
                  URL directly, or report error_scriptsNotAllowed
                  legacy shim: top frame id with a frame URL different from
                  the page URL → src URL, or error_imageNotFound
  parse_probe     push imgFullParse, install "parse", extract images
  parsed          de-duplicate by data; one image → dispatch,
                  several → install "confirm", open the confirmation UI in
                  the top frame and suspend until the user answers
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Optional, Union

from imgsearch.browser.models import TOP_FRAME, MenuClick, MessageSender, Tab
from imgsearch.dispatch.payload import ImageCandidate, unique_by_data
from imgsearch.exceptions import (
    BrowserError,
    ExtractionError,
    ImageNotFoundError,
    ScriptsNotAllowedError,
)
from imgsearch.frames.models import PARSE_DOCUMENT_CODE, FrameModule
from imgsearch.messages.schemas import ImageConfirmationClose, ImageConfirmationOpen

from .models import Workflow, WorkflowKind, WorkflowState

if TYPE_CHECKING:
    from imgsearch.browser.bridge import BrowserBridge
    from imgsearch.config.provider import OptionsProvider
    from imgsearch.dispatch.dispatcher import SearchDispatcher
    from imgsearch.frames.registry import FrameRegistry

    from .registry import WorkflowRegistry

__all__ = ["ClickOrchestrator", "is_legacy_frame_mismatch"]

logger = logging.getLogger(__name__)


def is_legacy_frame_mismatch(click: MenuClick) -> bool:
    """
    Old Firefox (< 55) reported frame id 0 for clicks inside sub-frames;
    the only trace is a frame URL that differs from the page URL.
    """
    return (
        not click.frame_id
        and click.frame_url is not None
        and click.page_url != click.frame_url
    )


class ClickOrchestrator:
    """Drives menu-click searches and resumes them after confirmation."""

    def __init__(
        self,
        bridge: "BrowserBridge",
        frames: "FrameRegistry",
        dispatcher: "SearchDispatcher",
        options: "OptionsProvider",
        workflows: "WorkflowRegistry",
    ) -> None:
        self._bridge = bridge
        self._frames = frames
        self._dispatcher = dispatcher
        self._options = options
        self._workflows = workflows

    # ── Entry points ──────────────────────────────────────────────────────

    async def on_menu_click(self, click: MenuClick, tab: Tab) -> Workflow:
        """
        Handle a context-menu click.

        Raises:
            ScriptsNotAllowedError / ImageNotFoundError / ExtractionError /
            NoEnginesEnabledError — the workflow ends in "failed".
        """
        wf = self._workflows.open(
            WorkflowKind.MENU_CLICK, tab.id, tab.index, click.menu_item_id, click.frame_id
        )
        with self._workflows.guard(wf):
            self._workflows.transition(wf, WorkflowState.SCRIPTS_CHECK)

            if not await self._bridge.scripts_allowed(tab.id, click.frame_id):
                if click.src_url:
                    return await self._dispatch(wf, ImageCandidate(data=click.src_url))
                raise ScriptsNotAllowedError(f"scripts are not allowed in tab {tab.id}")

            if is_legacy_frame_mismatch(click):
                if click.src_url:
                    return await self._dispatch(wf, ImageCandidate(data=click.src_url))
                raise ImageNotFoundError("frame id unavailable for the clicked frame")

        return await self.search_click_target(
            click.menu_item_id, tab.id, tab.index, click.frame_id, workflow=wf
        )

    async def search_click_target(
        self,
        engine: str,
        tab_id: int,
        tab_index: int,
        frame_id: int,
        workflow: Optional[Workflow] = None,
    ) -> Workflow:
        """
        Extract the clicked image(s) from a frame and search or ask the user.

        Returns the workflow: "done" after a direct search, or suspended in
        "confirmation_open" when the user must pick one image.
        """
        wf = workflow or self._workflows.open(
            WorkflowKind.MENU_CLICK, tab_id, tab_index, engine, frame_id
        )
        wf.frame_id = frame_id
        with self._workflows.guard(wf):
            self._workflows.transition(wf, WorkflowState.PARSE_PROBE)
            images = await self._extract(tab_id, frame_id)

            wf.candidates = unique_by_data(images)
            self._workflows.transition(wf, WorkflowState.PARSED)
            logger.debug("%s: %d candidate image(s)", wf, len(wf.candidates))

            if len(wf.candidates) == 1:
                return await self._dispatch(wf, wf.candidates[0])

            await self._frames.ensure(FrameModule.CONFIRM, tab_id, TOP_FRAME)
            await self._bridge.send_message(
                tab_id,
                ImageConfirmationOpen(
                    images=[c.to_dict() for c in wf.candidates],
                    engine=wf.engine,
                    token=wf.token,
                ).to_wire(),
                frame_id=TOP_FRAME,
            )
            self._workflows.suspend(wf, WorkflowState.CONFIRMATION_OPEN)
        return wf

    async def confirm(
        self,
        token: Optional[str],
        image: Union[ImageCandidate, str],
        engine: str,
        sender: MessageSender,
    ) -> Optional[Workflow]:
        """
        The user picked *image* in the confirmation UI.

        The token, or failing that the tab's open confirmation, picks the
        workflow to resume (engine and tab index come from the workflow).
        With no workflow waiting the message's own fields are used.
        """
        await self._close_confirmation(sender)
        wf = self._workflows.resolve(token, sender.tab.id, WorkflowState.CONFIRMATION_OPEN)
        if wf is None:
            await self._dispatcher.search_image(image, engine, sender.tab.index)
            return None
        if isinstance(image, str):
            image = ImageCandidate(data=image)
        with self._workflows.guard(wf):
            return await self._dispatch(wf, image)

    async def cancel_confirmation(self, token: Optional[str], sender: MessageSender) -> None:
        await self._close_confirmation(sender)
        wf = self._workflows.resolve(token, sender.tab.id, WorkflowState.CONFIRMATION_OPEN)
        if wf is not None:
            self._workflows.finish(wf, WorkflowState.CANCELLED)

    # ── Internal helpers ──────────────────────────────────────────────────

    async def _extract(self, tab_id: int, frame_id: int) -> list[ImageCandidate]:
        options = await self._options.options(["imgFullParse"])
        try:
            await self._bridge.execute_code(
                f"frameStore.options.imgFullParse = {json.dumps(options.img_full_parse)};",
                tab_id,
                frame_id,
            )
            await self._frames.ensure(FrameModule.PARSE, tab_id, frame_id)
            results = await self._bridge.execute_code(PARSE_DOCUMENT_CODE, tab_id, frame_id)
        except BrowserError as exc:
            raise ExtractionError(f"image extraction failed: {exc}") from exc

        images = results[0] if results else None
        if images is None:
            raise ExtractionError("image extraction returned no result")
        if not images:
            raise ImageNotFoundError("no image found at the click target")
        try:
            return [ImageCandidate.from_dict(img) for img in images]
        except (AttributeError, TypeError) as exc:
            raise ExtractionError(f"malformed extraction result: {exc}") from exc

    async def _dispatch(self, wf: Workflow, image: ImageCandidate) -> Workflow:
        self._workflows.transition(wf, WorkflowState.DISPATCH)
        await self._dispatcher.search_image(image, wf.engine, wf.tab_index)
        self._workflows.finish(wf)
        return wf

    async def _close_confirmation(self, sender: MessageSender) -> None:
        await self._bridge.send_message(
            sender.tab.id, ImageConfirmationClose().to_wire(), frame_id=TOP_FRAME
        )
