"""
FrameRegistry — core-owned record of the script modules installed per frame.

The in-page runtime reports its state once per document through the
``frameHandshake`` message; the core updates the record itself whenever it
installs a module. ensure() therefore needs no state-query round trip and
still installs each module at most once per frame lifetime.

Usage::

    registry = FrameRegistry(bridge)
    await registry.ensure(FrameModule.PARSE, tab_id=7, frame_id=3)   # injects
    await registry.ensure(FrameModule.PARSE, tab_id=7, frame_id=3)   # no-op

Concurrent ensure() calls for one frame are not de-duplicated; scripts are
idempotent, so the worst case is a second injection, never a missing one.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Mapping, Optional

from imgsearch.browser.models import TOP_FRAME

from .models import MODULE_ASSETS, FrameModule, InjectionRecord

if TYPE_CHECKING:
    from imgsearch.browser.bridge import BrowserBridge

__all__ = ["FrameRegistry"]

logger = logging.getLogger(__name__)


class FrameRegistry:
    """Injection state keyed by (tab_id, frame_id)."""

    def __init__(self, bridge: "BrowserBridge") -> None:
        self._bridge = bridge
        self._records: dict[tuple[int, int], InjectionRecord] = {}

    # ── Public API ────────────────────────────────────────────────────────

    def report(self, tab_id: int, frame_id: int, modules: Optional[Mapping[str, bool]] = None) -> None:
        """Handshake from the in-page runtime; replaces the frame's record."""
        record = InjectionRecord.from_mapping(modules)
        self._records[(tab_id, frame_id)] = record
        logger.debug("frame %s/%s reported %s", tab_id, frame_id, record)

    def probe(self, tab_id: int, frame_id: int = TOP_FRAME) -> InjectionRecord:
        """Copy of the frame's record (blank when the frame is unknown)."""
        return copy.copy(self._records.get((tab_id, frame_id), InjectionRecord()))

    def mark(self, module: FrameModule, tab_id: int, frame_id: int = TOP_FRAME) -> None:
        self._records.setdefault((tab_id, frame_id), InjectionRecord()).set(module)

    async def ensure(self, module: FrameModule, tab_id: int, frame_id: int = TOP_FRAME) -> bool:
        """
        Install *module* into the frame unless it is already there.

        Returns:
            True iff files were injected by this call.

        Raises:
            BrowserError: injection failed; the flag stays unset.
        """
        if self.probe(tab_id, frame_id).has(module):
            return False
        assets = MODULE_ASSETS[module]
        if assets.stylesheet:
            await self._bridge.insert_css(assets.stylesheet, tab_id, frame_id, run_at=assets.run_at)
        await self._bridge.execute_file(assets.script, tab_id, frame_id)
        self.mark(module, tab_id, frame_id)
        logger.debug("installed %s into frame %s/%s", module.value, tab_id, frame_id)
        return True

    def forget_tab(self, tab_id: int) -> int:
        """Drop every record of *tab_id*; returns the number dropped."""
        keys = [k for k in self._records if k[0] == tab_id]
        for key in keys:
            del self._records[key]
        return len(keys)

    def __len__(self) -> int:
        return len(self._records)
