"""WorkflowRegistry — live workflows keyed by resumption token."""

import contextlib
import logging
import uuid
from typing import Iterator, Optional

from imgsearch.exceptions import ImgSearchError, WorkflowStateError

from .models import TERMINAL_STATES, TRANSITIONS, Workflow, WorkflowKind, WorkflowState

__all__ = ["WorkflowRegistry"]

logger = logging.getLogger(__name__)


class WorkflowRegistry:
    """
    Owns every unfinished workflow.

    Finished workflows are dropped on their terminal transition. A workflow
    suspended in a tab that gets closed is never resumed and stays here
    until a newer one suspends in the same tab.
    """

    def __init__(self) -> None:
        self._live: dict[str, Workflow] = {}

    def open(
        self,
        kind: WorkflowKind,
        tab_id: int,
        tab_index: int,
        engine: str,
        frame_id: int = 0,
    ) -> Workflow:
        wf = Workflow(
            token=uuid.uuid4().hex,
            kind=kind,
            tab_id=tab_id,
            tab_index=tab_index,
            engine=engine,
            frame_id=frame_id,
        )
        self._live[wf.token] = wf
        logger.debug("opened %s", wf)
        return wf

    def get(self, token: Optional[str]) -> Optional[Workflow]:
        if not token:
            return None
        return self._live.get(token)

    def transition(self, wf: Workflow, state: WorkflowState) -> None:
        """
        Move *wf* to *state*.

        Raises:
            WorkflowStateError: *state* is not reachable from the current one.
        """
        allowed = TRANSITIONS.get(wf.state, frozenset())
        if state is not WorkflowState.FAILED and state not in allowed:
            raise WorkflowStateError(
                f"{wf}: cannot go from {wf.state.value} to {state.value}"
            )
        if wf.finished:
            raise WorkflowStateError(f"{wf} already finished")
        wf.history.append(wf.state)
        wf.state = state
        if state in TERMINAL_STATES:
            self._live.pop(wf.token, None)
        logger.debug("%s", wf)

    def finish(self, wf: Workflow, state: WorkflowState = WorkflowState.DONE) -> None:
        """Move *wf* to the terminal *state* and drop it from the live set."""
        if state not in TERMINAL_STATES:
            raise WorkflowStateError(f"{state.value} is not a terminal state")
        self.transition(wf, state)

    def suspend(self, wf: Workflow, state: WorkflowState) -> None:
        """
        Park *wf* in the waiting *state*.

        Older workflows waiting in the same state in the same tab are
        cancelled, so a tab holds at most one of each.
        """
        self.transition(wf, state)
        for other in self.pending(wf.tab_id):
            if other is not wf and other.state is state:
                logger.info("%s superseded by %s", other, wf.token)
                self.finish(other, WorkflowState.CANCELLED)

    def resolve(
        self,
        token: Optional[str],
        tab_id: int,
        state: WorkflowState,
    ) -> Optional[Workflow]:
        """
        Find the workflow a resume message refers to.

        The token wins when it names a workflow waiting in *state*. A missing
        or stale token falls back to the tab's latest workflow in *state*.
        """
        wf = self.get(token)
        if wf is not None and wf.state is state:
            return wf
        waiting = [w for w in self.pending(tab_id) if w.state is state]
        if token and waiting:
            logger.debug("unknown token %s; resuming %s", token, waiting[-1])
        return waiting[-1] if waiting else None

    @contextlib.contextmanager
    def guard(self, wf: Workflow) -> Iterator[Workflow]:
        """Mark *wf* failed when the body raises an ImgSearchError."""
        try:
            yield wf
        except ImgSearchError as exc:
            if not wf.finished:
                wf.error_key = exc.message_key
                self.transition(wf, WorkflowState.FAILED)
            raise

    def pending(self, tab_id: Optional[int] = None) -> list[Workflow]:
        """Unfinished workflows, optionally restricted to one tab."""
        return [w for w in self._live.values() if tab_id is None or w.tab_id == tab_id]

    def __len__(self) -> int:
        return len(self._live)
