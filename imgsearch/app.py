"""
Background — composition root of the orchestration core.

Usage::

    background = Background(
        browser=bridge, menus=menus, action=action, notifier=notifier,
        options=MemoryOptionsStore(), config=RuntimeConfig(target_env="chrome"),
    )
    await background.start()

    # wire browser events
    await background.on_context_menu_click(click, tab)
    await background.on_action_clicked(tab)
    await background.on_message(raw_message, sender)

    background.shutdown()

The event callbacks are the error boundary: ImgSearchError raised by a
workflow is logged and shown to the user through the notifier, then
swallowed so the event source never sees it.
"""

import logging
from typing import Any, Optional

from imgsearch.browser.bridge import ActionSurface, BrowserBridge, ContextMenuSurface, Notifier
from imgsearch.browser.models import MenuClick, MessageSender, Tab
from imgsearch.config.models import RuntimeConfig
from imgsearch.config.provider import OptionsProvider
from imgsearch.dispatch.dispatcher import SearchDispatcher
from imgsearch.exceptions import ImgSearchError, ProtocolError
from imgsearch.frames.registry import FrameRegistry
from imgsearch.messages.router import MessageRouter
from imgsearch.store.ephemeral import EphemeralStore
from imgsearch.store.scheduler import Scheduler
from imgsearch.ui.synchronizer import UISynchronizer
from imgsearch.workflows.action import ActionOrchestrator
from imgsearch.workflows.click import ClickOrchestrator
from imgsearch.workflows.registry import WorkflowRegistry

__all__ = ["Background"]

logger = logging.getLogger(__name__)


class Background:
    """Owns every core component; lifetime is start() … shutdown()."""

    def __init__(
        self,
        browser: BrowserBridge,
        menus: ContextMenuSurface,
        action: ActionSurface,
        notifier: Notifier,
        options: OptionsProvider,
        config: Optional[RuntimeConfig] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.config = config or RuntimeConfig()
        self.browser = browser
        self.notifier = notifier
        self.options = options

        self.store = EphemeralStore(scheduler=scheduler, ttl=self.config.data_ttl)
        self.frames = FrameRegistry(browser)
        self.workflows = WorkflowRegistry()
        self.dispatcher = SearchDispatcher(browser, self.store, options, self.config)
        self.click = ClickOrchestrator(browser, self.frames, self.dispatcher, options, self.workflows)
        self.action = ActionOrchestrator(
            browser, self.frames, self.dispatcher, self.click, options, self.workflows, self.config
        )
        self.router = MessageRouter(
            browser, self.store, self.frames, self.dispatcher, self.click, self.action, notifier
        )
        self.ui = UISynchronizer(menus, action, options, self.config)
        self._started = False

    # ── Lifetime ──────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Build the UI and follow option changes."""
        await self.ui.sync(remove_first=self._started)
        if not self._started:
            self.options.subscribe(self.on_options_changed)
            self._started = True
        logger.info("Background started (%s)", self.config.target_env)

    def shutdown(self) -> None:
        """Cancel store timers and drop all transient data."""
        self.store.close()
        logger.info("Background stopped")

    # ── Event callbacks ───────────────────────────────────────────────────

    async def on_options_changed(self, changes: dict, area: str = "sync") -> None:
        await self.ui.sync(remove_first=True)

    async def on_context_menu_click(self, click: MenuClick, tab: Tab) -> Any:
        if not self.ui.menu_bound:
            logger.debug("context menu disabled; click ignored")
            return None
        return await self._run(self.click.on_menu_click(click, tab))

    async def on_action_clicked(self, tab: Tab) -> Any:
        if not self.ui.action_bound:
            logger.debug("action popup bound; click ignored")
            return None
        return await self._run(self.action.on_action_button_click(tab))

    async def on_message(self, raw: Any, sender: MessageSender) -> Any:
        try:
            return await self._run(self.router.handle(raw, sender))
        except ProtocolError as exc:
            logger.warning("Dropped malformed message: %s", exc)
            return None

    # ── Internal helpers ──────────────────────────────────────────────────

    async def _run(self, coro) -> Any:
        try:
            return await coro
        except ProtocolError:
            raise
        except ImgSearchError as exc:
            logger.info("%s: %s", type(exc).__name__, exc)
            await self.notifier.show(exc.message_key, "error")
            return None
