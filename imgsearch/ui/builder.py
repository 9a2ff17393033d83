"""
Menu and action structure derived from the enabled engines.

Context menu
────────────
  0 engines           no entries
  1 engine            one top-level entry for it
  >1, "main"          one top-level "all engines" entry
  >1, otherwise       a titled group; "sub" adds an "all engines" entry
                      and a separator before the per-engine entries

Toolbar action
──────────────
  1 engine            click handler, titled after the engine
  >1, "main"          click handler, "all engines" title
  0 engines           click handler (the click reports the error)
  >1, otherwise       popup listing the engines
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from imgsearch.browser.models import TextRef
from imgsearch.engines.models import ALL_ENGINES

from .models import MENU_PARENT_ID, MENU_SEPARATOR_ID, ActionState, MenuItem

if TYPE_CHECKING:
    from imgsearch.config.models import Options

__all__ = ["build_menu", "build_action_state", "menu_url_patterns"]

_URL_PATTERNS = ("http://*/*", "https://*/*", "ftp://*/*")


def menu_url_patterns(target_env: str) -> tuple:
    if target_env == "firefox":
        return _URL_PATTERNS + ("file:///*",)
    return _URL_PATTERNS


def _engine_title(engine: str) -> TextRef:
    return TextRef(f"menuItemTitle_{engine}")


def build_menu(enabled: list[str], options: "Options", target_env: str) -> list[MenuItem]:
    """Context-menu entries, parents before children."""
    patterns = menu_url_patterns(target_env)

    if len(enabled) == 1:
        engine = enabled[0]
        return [MenuItem(
            id=engine,
            title=TextRef("mainMenuItemTitle_engine", (_engine_title(engine),)),
            url_patterns=patterns,
        )]

    if not enabled:
        return []

    mode = options.search_all_engines_context_menu
    if mode == "main":
        return [MenuItem(
            id=ALL_ENGINES,
            title=TextRef("mainMenuItemTitle_allEngines"),
            url_patterns=patterns,
        )]

    items = [MenuItem(
        id=MENU_PARENT_ID,
        title=TextRef("mainMenuGroupTitle_searchImage"),
        url_patterns=patterns,
    )]
    if mode == "sub":
        items.append(MenuItem(
            id=ALL_ENGINES,
            title=TextRef("menuItemTitle_allEngines"),
            parent=MENU_PARENT_ID,
            url_patterns=patterns,
        ))
        items.append(MenuItem(
            id=MENU_SEPARATOR_ID,
            parent=MENU_PARENT_ID,
            type="separator",
            url_patterns=patterns,
        ))
    items.extend(
        MenuItem(id=e, title=_engine_title(e), parent=MENU_PARENT_ID, url_patterns=patterns)
        for e in enabled
    )
    return items


def build_action_state(enabled: list[str], options: "Options", popup_page: str) -> ActionState:
    """Toolbar action binding for the current engine set."""
    if len(enabled) == 1:
        return ActionState(
            click_bound=True,
            title=TextRef("actionTitle_engine", (_engine_title(enabled[0]),)),
        )
    if options.search_all_engines_action == "main" and len(enabled) > 1:
        return ActionState(click_bound=True, title=TextRef("actionTitle_allEngines"))
    if not enabled:
        return ActionState(click_bound=True, title=TextRef("extensionName"))
    return ActionState(click_bound=False, title=TextRef("extensionName"), popup=popup_page)
