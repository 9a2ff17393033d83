"""
cli — command-line dry-run tools for imgsearch.

Entry points
────────────
  python -m imgsearch   (via imgsearch/__main__.py)
  imgsearch             (via pyproject.toml [project.scripts])

Subcommands: engines | menu | search
"""

from imgsearch.cli.main import build_parser, cmd_engines, cmd_menu, cmd_search, main

__all__ = ["build_parser", "cmd_engines", "cmd_menu", "cmd_search", "main"]
