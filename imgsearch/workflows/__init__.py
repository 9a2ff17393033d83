"""
workflows — user-initiated searches as explicit state machines.

Public API
──────────
WorkflowKind, WorkflowState, Workflow — workflow data + states
WorkflowRegistry                      — live workflows by resumption token
ClickOrchestrator                     — context-menu click, parse, confirm
ActionOrchestrator                    — toolbar button / popup, select mode
"""

from imgsearch.workflows.models import TERMINAL_STATES, Workflow, WorkflowKind, WorkflowState
from imgsearch.workflows.registry import WorkflowRegistry
from imgsearch.workflows.click import ClickOrchestrator, is_legacy_frame_mismatch
from imgsearch.workflows.action import ActionOrchestrator

__all__ = [
    "Workflow",
    "WorkflowKind",
    "WorkflowState",
    "TERMINAL_STATES",
    "WorkflowRegistry",
    "ClickOrchestrator",
    "ActionOrchestrator",
    "is_legacy_frame_mismatch",
]
