"""
UISynchronizer — rebuilds the context menu and toolbar action.

Both surfaces are recomputed from scratch on every sync, never patched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from imgsearch.engines.catalog import get_enabled_engines

from .builder import build_action_state, build_menu
from .models import ActionState, MenuItem

if TYPE_CHECKING:
    from imgsearch.browser.bridge import ActionSurface, ContextMenuSurface
    from imgsearch.config.models import RuntimeConfig
    from imgsearch.config.provider import OptionsProvider

__all__ = ["UISynchronizer"]

logger = logging.getLogger(__name__)


class UISynchronizer:
    """
    Keeps browser UI in step with the options.

    Attributes
    ──────────
    menu_bound    — context-menu clicks should be handled
    action_state  — last applied toolbar state (None before the first sync)
    menu_items    — last applied menu tree
    """

    def __init__(
        self,
        menus: "ContextMenuSurface",
        action: "ActionSurface",
        options: "OptionsProvider",
        config: "RuntimeConfig",
    ) -> None:
        self._menus = menus
        self._action = action
        self._options = options
        self._config = config
        self.menu_bound: bool = False
        self.menu_items: list[MenuItem] = []
        self.action_state: Optional[ActionState] = None

    @property
    def action_bound(self) -> bool:
        return self.action_state is not None and self.action_state.click_bound

    async def sync(self, remove_first: bool = False) -> None:
        """Recompute and apply both surfaces."""
        await self.sync_context_menu(remove_first=remove_first)
        await self.sync_action()

    async def sync_context_menu(self, remove_first: bool = False) -> list[MenuItem]:
        if remove_first:
            await self._menus.remove_all()
        options = await self._options.options()
        self.menu_bound = options.show_in_context_menu
        if not self.menu_bound:
            self.menu_items = []
            return []

        items = build_menu(get_enabled_engines(options), options, self._config.target_env)
        for item in items:
            await self._menus.create(item)
        self.menu_items = items
        logger.debug("context menu rebuilt with %d item(s)", len(items))
        return items

    async def sync_action(self) -> ActionState:
        options = await self._options.options(
            ["engines", "disabledEngines", "searchAllEnginesAction"]
        )
        state = build_action_state(
            get_enabled_engines(options), options, self._config.action_popup
        )
        await self._action.set_title(state.title)
        await self._action.set_popup(state.popup)
        self.action_state = state
        logger.debug("action: %s", "click" if state.click_bound else f"popup {state.popup}")
        return state
