"""
ActionOrchestrator — toolbar button / popup searches and point-and-select.

Search modes (option ``searchModeAction``)
──────────────────────────────────────────
  upload  open the upload page next to the current tab
  url     search a URL directly (the popup's URL, or the tab's own URL)
  select  install "select", arm a click listener in every frame and
          suspend until a frame reports the selected element
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Optional
from urllib.parse import quote, urlsplit

from imgsearch.browser.models import TOP_FRAME, MessageSender, Tab
from imgsearch.engines.catalog import get_enabled_engines
from imgsearch.engines.models import ALL_ENGINES
from imgsearch.exceptions import (
    InvalidImageUrlError,
    InvalidSearchModeError,
    NoEnginesEnabledError,
    ScriptsNotAllowedError,
)
from imgsearch.frames.models import FrameModule
from imgsearch.messages.schemas import ImageSelectionClose, ImageSelectionOpen

from .models import Workflow, WorkflowKind, WorkflowState

if TYPE_CHECKING:
    from imgsearch.browser.bridge import BrowserBridge
    from imgsearch.config.models import RuntimeConfig
    from imgsearch.config.provider import OptionsProvider
    from imgsearch.dispatch.dispatcher import SearchDispatcher
    from imgsearch.frames.registry import FrameRegistry

    from .click import ClickOrchestrator
    from .registry import WorkflowRegistry

__all__ = ["ActionOrchestrator", "ARM_SELECTION_CODE", "DISARM_SELECTION_CODE"]

logger = logging.getLogger(__name__)

ARM_SELECTION_CODE = (
    "addClickListener();\n"
    "showPointer();\n"
    "frameStore.data.engine = {engine};\n"
    "frameStore.data.token = {token};"
)
DISARM_SELECTION_CODE = "removeClickListener();\nhidePointer();"

_URL_SCHEMES = {"http", "https", "ftp", "data"}


class ActionOrchestrator:
    """Drives searches started from the toolbar action."""

    def __init__(
        self,
        bridge: "BrowserBridge",
        frames: "FrameRegistry",
        dispatcher: "SearchDispatcher",
        click: "ClickOrchestrator",
        options: "OptionsProvider",
        workflows: "WorkflowRegistry",
        config: "RuntimeConfig",
    ) -> None:
        self._bridge = bridge
        self._frames = frames
        self._dispatcher = dispatcher
        self._click = click
        self._options = options
        self._workflows = workflows
        self._config = config

    # ── Entry points ──────────────────────────────────────────────────────

    async def on_action_button_click(self, tab: Tab) -> Optional[Workflow]:
        """
        Toolbar button clicked while no popup is bound.

        Raises:
            InvalidSearchModeError: "url" mode outside Firefox.
            NoEnginesEnabledError:  every engine is disabled.
        """
        options = await self._options.options(
            ["engines", "disabledEngines", "searchAllEnginesAction", "searchModeAction"]
        )
        if options.search_mode_action == "url" and not self._config.is_firefox:
            raise InvalidSearchModeError("the url search mode requires Firefox")

        enabled = get_enabled_engines(options)
        if not enabled:
            raise NoEnginesEnabledError("all search engines are disabled")

        if options.search_all_engines_action == "main" and len(enabled) > 1:
            engine = ALL_ENGINES
        else:
            engine = enabled[0]
        return await self.on_action_click(
            tab.index, tab.id, tab.url, engine, options.search_mode_action
        )

    async def on_action_popup_submit(self, engine: str, image_url: Optional[str]) -> Optional[Workflow]:
        """Engine picked in the action popup (optionally with an image URL)."""
        options = await self._options.options(["searchModeAction"])
        tab = await self._bridge.active_tab()

        if options.search_mode_action == "url":
            self._check_image_url(image_url)
            await self._dispatcher.search_image(image_url, engine, tab.index)
            return None
        return await self.on_action_click(
            tab.index, tab.id, tab.url, engine, options.search_mode_action
        )

    async def on_action_click(
        self,
        tab_index: int,
        tab_id: int,
        tab_url: str,
        engine: str,
        search_mode: str,
    ) -> Optional[Workflow]:
        """
        Run *search_mode* for the tab.

        Returns the suspended workflow for "select", else None.
        """
        if search_mode == "upload":
            page = f"{self._config.browse_page}?engine={quote(engine, safe='')}"
            await self._bridge.create_tab(
                self._bridge.extension_url(page), tab_index + 1, True, tab_id
            )
            logger.info("Opened upload page for %s", engine)
            return None

        if search_mode == "url":
            self._check_image_url(tab_url)
            await self._dispatcher.search_image(tab_url, engine, tab_index)
            return None

        if search_mode == "select":
            return await self._arm_selection(tab_index, tab_id, tab_url, engine)

        raise InvalidSearchModeError(f"unknown search mode: {search_mode!r}")

    async def select(self, token: Optional[str], engine: str, sender: MessageSender) -> Workflow:
        """
        A frame reported the element the user selected; parse it.

        The token, or failing that the tab's armed selection, picks the
        workflow to resume with the engine chosen at arm time.
        """
        await self._disarm(sender.tab.id, message_frame=True)
        wf = self._workflows.resolve(token, sender.tab.id, WorkflowState.AWAITING_SELECTION)
        if wf is not None:
            engine = wf.engine
        return await self._click.search_click_target(
            engine, sender.tab.id, sender.tab.index, sender.frame_id, workflow=wf
        )

    async def cancel_selection(self, token: Optional[str], sender: MessageSender) -> None:
        await self._disarm(sender.tab.id, message_frame=False)
        wf = self._workflows.resolve(token, sender.tab.id, WorkflowState.AWAITING_SELECTION)
        if wf is not None:
            self._workflows.finish(wf, WorkflowState.CANCELLED)

    # ── Internal helpers ──────────────────────────────────────────────────

    async def _arm_selection(self, tab_index: int, tab_id: int, tab_url: str, engine: str) -> Workflow:
        if tab_url.startswith("file:") and not self._config.is_firefox:
            raise InvalidImageUrlError("file: pages cannot be searched on this browser")
        if not await self._bridge.scripts_allowed(tab_id):
            raise ScriptsNotAllowedError(f"scripts are not allowed in tab {tab_id}")

        wf = self._workflows.open(WorkflowKind.ACTION_SELECT, tab_id, tab_index, engine)
        with self._workflows.guard(wf):
            self._workflows.transition(wf, WorkflowState.SCRIPTS_CHECK)
            await self._frames.ensure(FrameModule.SELECT, tab_id, TOP_FRAME)
            await self._bridge.execute_code(
                ARM_SELECTION_CODE.format(engine=json.dumps(engine), token=json.dumps(wf.token)),
                tab_id,
                all_frames=True,
                run_at="document_start",
            )
            await self._bridge.send_message(
                tab_id, ImageSelectionOpen(token=wf.token).to_wire(), frame_id=TOP_FRAME
            )
            self._workflows.suspend(wf, WorkflowState.AWAITING_SELECTION)
        logger.info("Waiting for image selection in tab %s", tab_id)
        return wf

    async def _disarm(self, tab_id: int, message_frame: bool) -> None:
        await self._bridge.execute_code(
            DISARM_SELECTION_CODE, tab_id, all_frames=True, run_at="document_start"
        )
        close = ImageSelectionClose(message_frame=True if message_frame else None)
        await self._bridge.send_message(tab_id, close.to_wire(), frame_id=TOP_FRAME)

    def _check_image_url(self, url: Optional[str]) -> None:
        scheme = urlsplit(url or "").scheme.lower()
        allowed = _URL_SCHEMES | ({"file"} if self._config.is_firefox else set())
        if scheme not in allowed:
            raise InvalidImageUrlError(f"cannot search URL {url!r}")
