"""Keeps undo/redo from disturbing what ``repeat`` would replay."""

from __future__ import annotations

from typing import TYPE_CHECKING

from vim_repeat.host.protocols import InputSink, ReplayRejectedError
from vim_repeat.runtime import telemetry

from .context import DocumentContext
from .events import DeferredTasks, LifecycleEvent
from .models import ActionSequence, count_tokens, normalize_count
from .tracker import SyncTracker

if TYPE_CHECKING:
    from vim_repeat.config import RepeatSettings

UNDO_PURPOSE = "undo"
REVEAL_TOKENS = ("z", "v")


class UndoRedoWrapper:
    """Runs undo-like commands while carrying the sync state across them."""

    def __init__(
        self,
        tracker: SyncTracker,
        deferred: DeferredTasks,
        sink: InputSink,
        settings: "RepeatSettings",
        *,
        logger_name: str | None = None,
    ) -> None:
        self.tracker = tracker
        self.deferred = deferred
        self.sink = sink
        self.settings = settings
        self._logger_name = logger_name

    def wrap(
        self,
        context: DocumentContext,
        command: ActionSequence | str,
        count: object = 0,
    ) -> bool:
        """Feed ``command``; returns whether sync will be carried forward.

        A sink that refuses the keys leaves the sync state alone and the call
        returns ``False``.
        """

        sequence = ActionSequence.coerce(command)
        was_synced = self.tracker.is_synced(context.document_id, context.revision())
        tokens = count_tokens(normalize_count(count)) + sequence.tokens
        reveal = REVEAL_TOKENS if self.settings.reveal_on_undo else ()
        try:
            self.sink.reserve(tokens + reveal)
            self.sink.feed(tokens, remap=False, insert=False)
            if reveal:
                self.sink.feed(reveal, remap=False, insert=False)
        except ReplayRejectedError as exc:
            telemetry.record_event(
                "undo.rejected",
                level="error",
                data={"document": context.document_id, "reason": str(exc)},
                logger_name=self._logger_name,
            )
            return False

        telemetry.record_event(
            "undo.wrap",
            data={
                "document": context.document_id,
                "keys": "".join(tokens),
                "was_synced": was_synced,
            },
            logger_name=self._logger_name,
        )
        if was_synced:
            self.deferred.schedule(
                UNDO_PURPOSE,
                context.bus,
                (LifecycleEvent.TEXT_CHANGED,),
                lambda: self._resnapshot(context),
            )
        return was_synced

    def _resnapshot(self, context: DocumentContext) -> None:
        self.tracker.snapshot(context.document_id, context.revision())


__all__ = ["UndoRedoWrapper", "UNDO_PURPOSE"]
