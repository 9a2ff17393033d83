"""
CLI entry point for imgsearch.

Usage
─────
  # Enabled engines, in tab order
  python -m imgsearch engines --options ./options.json

  # Context menu and toolbar action computed from the options
  python -m imgsearch menu --target chrome

  # Dry-run a search: print the tabs and injections it would produce
  python -m imgsearch search --engine allEngines \\
      --image "https://example.com/cat.png" --tab-index 3

Subcommands are implemented as standalone functions (cmd_engines, cmd_menu,
cmd_search) so they can be unit-tested without invoking argparse.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from imgsearch.app import Background
from imgsearch.browser.memory import (
    InMemoryBrowser,
    RecordingAction,
    RecordingContextMenu,
    RecordingNotifier,
)
from imgsearch.browser.models import Tab
from imgsearch.config.models import RuntimeConfig
from imgsearch.config.provider import MemoryOptionsStore, load_options_file
from imgsearch.engines.catalog import get_enabled_engines
from imgsearch.engines.models import ALL_ENGINES
from imgsearch.exceptions import ConfigError, ImgSearchError

__all__ = ["build_parser", "cmd_engines", "cmd_menu", "cmd_search", "main"]

logger = logging.getLogger(__name__)


# ── Argument parser ────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argument parser.

    Subcommands: engines | menu | search
    """
    parser = argparse.ArgumentParser(
        prog="imgsearch",
        description="Reverse image search orchestration core (dry-run tools)",
    )
    parser.add_argument(
        "--options",
        default=None,
        metavar="PATH",
        help="JSON options record (default: built-in defaults)",
    )
    parser.add_argument(
        "--target",
        default="firefox",
        metavar="ENV",
        help="Browser family: firefox, chrome, … (default: firefox)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable verbose debug logging",
    )

    sub = parser.add_subparsers(dest="subcommand")

    # ── engines ───────────────────────────────────────────────────────────
    sub.add_parser("engines", help="List enabled engines in tab order")

    # ── menu ──────────────────────────────────────────────────────────────
    sub.add_parser("menu", help="Show the context menu and toolbar action")

    # ── search ────────────────────────────────────────────────────────────
    srch = sub.add_parser("search", help="Dry-run an image search")
    srch.add_argument(
        "--engine",
        default=ALL_ENGINES,
        metavar="ID",
        help=f"Engine id or {ALL_ENGINES} (default: {ALL_ENGINES})",
    )
    srch.add_argument(
        "--image",
        required=True,
        metavar="URL",
        help="Remote image URL or data: URI",
    )
    srch.add_argument(
        "--tab-index",
        type=int,
        default=0,
        dest="tab_index",
        metavar="N",
        help="Index of the source tab (default: 0)",
    )

    return parser


# ── Helpers ───────────────────────────────────────────────────────────────────


def _load_options(path: Optional[str]) -> MemoryOptionsStore:
    return load_options_file(path) if path else MemoryOptionsStore()


def _build_background(options: MemoryOptionsStore, target: str, source: Tab) -> Background:
    return Background(
        browser=InMemoryBrowser(tabs=[source]),
        menus=RecordingContextMenu(),
        action=RecordingAction(),
        notifier=RecordingNotifier(),
        options=options,
        config=RuntimeConfig(target_env=target),
    )


# ── Command implementations ───────────────────────────────────────────────────


def cmd_engines(options: MemoryOptionsStore) -> list[str]:
    """Print and return the enabled engine ids."""
    enabled = get_enabled_engines(asyncio.run(options.options()))
    if not enabled:
        print("0 engines enabled.")
    for position, engine in enumerate(enabled, start=1):
        print(f"{position:>2}. {engine}")
    return enabled


def cmd_menu(options: MemoryOptionsStore, target: str) -> Background:
    """Print the menu tree and action state; return the synced Background."""
    source = Tab(id=1, index=0, url="https://example.com/")
    background = _build_background(options, target, source)

    async def _run() -> None:
        await background.start()
        background.shutdown()

    asyncio.run(_run())
    ui = background.ui
    if not ui.menu_bound:
        print("Context menu: disabled")
    else:
        print("Context menu:")
        for item in ui.menu_items:
            print(f"  {item}")
    state = ui.action_state
    binding = "click" if state.click_bound else f"popup {state.popup}"
    print(f"Action: {state.title} [{binding}]")
    return background


def cmd_search(
    options: MemoryOptionsStore,
    target: str,
    engine: str,
    image: str,
    tab_index: int = 0,
) -> InMemoryBrowser:
    """
    Dispatch *image* against the in-memory browser and print what happened.

    Raises:
        ImgSearchError: the search could not start (e.g. no engine enabled).
    """
    source = Tab(id=1, index=tab_index, url="https://example.com/")
    background = _build_background(options, target, source)

    async def _run() -> list[Tab]:
        try:
            return await background.dispatcher.search_image(image, engine, tab_index)
        finally:
            background.shutdown()

    tabs = asyncio.run(_run())
    browser = background.browser
    for tab in tabs:
        flag = "*" if tab.active else " "
        print(f"{flag}[{tab.index:>3}] {tab.url}")
        for kind, what, tab_id, _ in browser.calls:
            if tab_id == tab.id:
                shown = what if kind != "execute_code" else what.strip()
                print(f"        {kind}: {shown}")
    logger.info("Opened %d tab(s)", len(tabs))
    return browser


# ── Entry point ───────────────────────────────────────────────────────────────


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point. Returns exit code."""
    parser = build_parser()
    ns = parser.parse_args(argv)

    level = logging.DEBUG if ns.debug else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")

    if ns.subcommand is None:
        parser.print_help()
        return 0

    try:
        options = _load_options(ns.options)
    except (OSError, ConfigError) as exc:
        print(f"Error: cannot read options: {exc}", file=sys.stderr)
        return 1

    if ns.subcommand == "engines":
        cmd_engines(options)
        return 0

    if ns.subcommand == "menu":
        cmd_menu(options, ns.target)
        return 0

    if ns.subcommand == "search":
        try:
            cmd_search(
                options,
                ns.target,
                engine=ns.engine,
                image=ns.image,
                tab_index=ns.tab_index,
            )
        except ImgSearchError as exc:
            logger.debug("search failed", exc_info=True)
            print(f"Error [{exc.message_key}]: {exc}", file=sys.stderr)
            return 1
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
