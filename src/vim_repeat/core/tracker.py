"""Sync state machine reconciling registrations with document revisions."""

from __future__ import annotations

from vim_repeat.runtime import telemetry

from .events import ENTER_EVENTS, LEAVE_EVENTS, LifecycleEvent
from .models import SYNCED, UNSYNCED, Revision, Synced, SyncState


class SyncTracker:
    """Tracks whether the last registered action still matches the document.

    A snapshot remembers the document it was taken in as well as its revision.
    Leave-type events on that document fold "was synced" into ``Synced`` so
    that any number of consecutive leaves, followed by an enter into any
    document, keeps the action repeatable. Leaves on other documents (closing
    a background buffer, saving a split) leave the snapshot untouched.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._state: SyncState = UNSYNCED
        self._logger_name = logger_name

    @property
    def state(self) -> SyncState:
        return self._state

    def is_synced(self, document_id: str, revision: int) -> bool:
        state = self._state
        return (
            isinstance(state, Revision)
            and state.document_id == document_id
            and state.value == revision
        )

    def snapshot(self, document_id: str, revision: int) -> None:
        self._transition(
            "snapshot", Revision(document_id, revision), document_id, revision
        )

    def leave(self, document_id: str, revision: int) -> None:
        state = self._state
        if isinstance(state, Revision) and state.document_id != document_id:
            return
        if isinstance(state, Synced) or self.is_synced(document_id, revision):
            target: SyncState = SYNCED
        else:
            target = UNSYNCED
        self._transition("leave", target, document_id, revision)

    def enter(self, document_id: str, revision: int) -> None:
        if isinstance(self._state, Synced):
            self._transition(
                "enter", Revision(document_id, revision), document_id, revision
            )

    def invalidate(self) -> None:
        self._transition("invalidate", UNSYNCED, None, None)

    def observe(
        self, event: LifecycleEvent, document_id: str, revision: int
    ) -> None:
        if event in LEAVE_EVENTS:
            self.leave(document_id, revision)
        elif event in ENTER_EVENTS:
            self.enter(document_id, revision)

    def _transition(
        self,
        reason: str,
        target: SyncState,
        document_id: str | None,
        revision: int | None,
    ) -> None:
        previous = self._state
        self._state = target
        telemetry.record_event(
            "sync.transition",
            data={
                "reason": reason,
                "from": repr(previous),
                "to": repr(target),
                "document": document_id,
                "revision": revision,
            },
            logger_name=self._logger_name,
        )


__all__ = ["SyncTracker"]
