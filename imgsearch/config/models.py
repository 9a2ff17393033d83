"""
Data models for the config module.

Key concepts
────────────
Options        — the options record the core reads, with defaults
RuntimeConfig  — static settings fixed at startup (platform, TTL, assets)
"""

from dataclasses import dataclass, field, fields
from typing import Any, Mapping

__all__ = ["Options", "RuntimeConfig", "OPTION_KEYS", "DEFAULT_ENGINES"]

DEFAULT_ENGINES = ["google", "bing", "yandex", "baidu", "tineye", "sogou"]


@dataclass
class Options:
    """
    User options, as stored by the options collaborator.

    Field names are snake_case; the stored record uses the camelCase keys
    listed in ``_KEY_MAP`` (``tabInBackgound`` keeps its historical spelling).

    search_all_engines_context_menu / search_all_engines_action
        "main"  — a single "all engines" item replaces the per-engine items
        "sub"   — "all engines" is offered next to the per-engine items
        "false" — no "all engines" item
    search_mode_action
        "select" — arm an in-page click listener and wait for a selection
        "upload" — open the upload page
        "url"    — search the URL submitted from the action popup
    """
    engines:                         list[str] = field(default_factory=lambda: list(DEFAULT_ENGINES))
    disabled_engines:                list[str] = field(default_factory=list)
    show_in_context_menu:            bool = True
    search_all_engines_context_menu: str  = "sub"
    search_all_engines_action:       str  = "sub"
    search_mode_action:              str  = "select"
    tab_in_background:               bool = False
    local_google:                    bool = True
    img_full_parse:                  bool = False

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> "Options":
        """Build from a camelCase options record; missing keys keep defaults."""
        kwargs = {}
        for key, name in _KEY_MAP.items():
            if key in record:
                value = record[key]
                if name in _BOOL_FIELDS and not isinstance(value, bool):
                    value = str(value).lower() in ("1", "true", "yes", "on")
                elif name in _CHOICE_FIELDS and not isinstance(value, str):
                    value = str(value).lower()
                kwargs[name] = list(value) if name in _LIST_FIELDS else value
        return cls(**kwargs)

    def to_mapping(self) -> dict:
        """Inverse of from_mapping()."""
        return {key: getattr(self, name) for key, name in _KEY_MAP.items()}


_KEY_MAP = {
    "engines":                     "engines",
    "disabledEngines":             "disabled_engines",
    "showInContextMenu":           "show_in_context_menu",
    "searchAllEnginesContextMenu": "search_all_engines_context_menu",
    "searchAllEnginesAction":      "search_all_engines_action",
    "searchModeAction":            "search_mode_action",
    "tabInBackgound":              "tab_in_background",
    "localGoogle":                 "local_google",
    "imgFullParse":                "img_full_parse",
}
_BOOL_FIELDS = {f.name for f in fields(Options) if f.type in (bool, "bool")}
_LIST_FIELDS = {"engines", "disabled_engines"}
_CHOICE_FIELDS = {"search_all_engines_context_menu", "search_all_engines_action"}

OPTION_KEYS = list(_KEY_MAP)


@dataclass
class RuntimeConfig:
    """
    Startup configuration of the background core.

    target_env      — browser family; "firefox" allows file: pages and the
                      "url" action search mode
    data_ttl        — lifetime of stored payloads and upload sessions (seconds)
    browse_page     — extension page opened by the "upload" search mode
    action_popup    — extension page used as the toolbar popup
    """
    target_env:     str   = "firefox"
    data_ttl:       float = 120.0
    browse_page:    str   = "/src/browse/index.html"
    action_popup:   str   = "/src/action/index.html"
    engine_style:   str   = "/src/content/engines/style.css"
    common_script:  str   = "/src/content/common.js"
    engine_scripts: str   = "/src/content/engines/{engine}.js"

    @property
    def is_firefox(self) -> bool:
        return self.target_env == "firefox"
