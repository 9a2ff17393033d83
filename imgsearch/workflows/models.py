"""
Data models for the workflows module.

A workflow is one user-initiated search. Its state is explicit so that
"waiting for the user" is an inspectable value, and its ``token`` travels
in outbound messages so the reply can resume the right workflow.

    idle → scripts_check → parse_probe → parsed → dispatch → done
                │                          │
                │                          └→ confirmation_open → dispatch
                ├→ dispatch  (raw link URL fallback)
                └→ awaiting_selection → parse_probe

Any non-terminal state may end in failed; the suspended states may end in
cancelled.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from imgsearch.dispatch.payload import ImageCandidate

__all__ = ["WorkflowKind", "WorkflowState", "Workflow", "TRANSITIONS", "TERMINAL_STATES"]


class WorkflowKind(str, Enum):
    MENU_CLICK    = "menu_click"
    ACTION_SELECT = "action_select"


class WorkflowState(str, Enum):
    IDLE               = "idle"
    SCRIPTS_CHECK      = "scripts_check"
    PARSE_PROBE        = "parse_probe"
    PARSED             = "parsed"
    DISPATCH           = "dispatch"
    CONFIRMATION_OPEN  = "confirmation_open"
    AWAITING_SELECTION = "awaiting_selection"
    DONE               = "done"
    CANCELLED          = "cancelled"
    FAILED             = "failed"


_S = WorkflowState

TRANSITIONS: dict[WorkflowState, frozenset] = {
    _S.IDLE:               frozenset({_S.SCRIPTS_CHECK, _S.PARSE_PROBE}),
    _S.SCRIPTS_CHECK:      frozenset({_S.PARSE_PROBE, _S.DISPATCH, _S.AWAITING_SELECTION}),
    _S.AWAITING_SELECTION: frozenset({_S.PARSE_PROBE, _S.CANCELLED}),
    _S.PARSE_PROBE:        frozenset({_S.PARSED}),
    _S.PARSED:             frozenset({_S.DISPATCH, _S.CONFIRMATION_OPEN}),
    _S.CONFIRMATION_OPEN:  frozenset({_S.DISPATCH, _S.CANCELLED}),
    _S.DISPATCH:           frozenset({_S.DONE}),
}

TERMINAL_STATES = frozenset({_S.DONE, _S.CANCELLED, _S.FAILED})


@dataclass
class Workflow:
    """
    One search in progress.

    token       — resumption token echoed by confirmation / selection replies
    tab_id      — tab the search started in
    tab_index   — its index; search tabs open right after it
    frame_id    — frame being parsed (updated when a selection arrives)
    engine      — engine id or "allEngines"
    candidates  — de-duplicated images found by extraction
    error_key   — message key of the failure, when state is failed
    """
    token:      str
    kind:       WorkflowKind
    tab_id:     int
    tab_index:  int
    engine:     str
    frame_id:   int = 0
    state:      WorkflowState = WorkflowState.IDLE
    candidates: list[ImageCandidate] = field(default_factory=list)
    history:    list[WorkflowState] = field(default_factory=list)
    error_key:  Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def __str__(self) -> str:
        return f"Workflow({self.kind.value}, {self.token[:8]}, {self.state.value})"
