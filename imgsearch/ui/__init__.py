"""
ui — context-menu and toolbar-action state.

Public API
──────────
MenuItem, ActionState           — surface descriptions
build_menu, build_action_state  — pure builders from the enabled engines
UISynchronizer                  — applies both on start and on option change
"""

from imgsearch.ui.models import MENU_CONTEXTS, ActionState, MenuItem
from imgsearch.ui.builder import build_action_state, build_menu, menu_url_patterns
from imgsearch.ui.synchronizer import UISynchronizer

__all__ = [
    "MenuItem",
    "ActionState",
    "MENU_CONTEXTS",
    "build_menu",
    "build_action_state",
    "menu_url_patterns",
    "UISynchronizer",
]
