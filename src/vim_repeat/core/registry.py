"""Registry holding the single most recent repeatable action."""

from __future__ import annotations

from typing import Iterable, Optional

from vim_repeat.runtime.telemetry import span

from .context import DocumentContext
from .events import DeferredTasks, LifecycleEvent
from .models import (
    ActionSequence,
    RegisterAssociation,
    RegisteredAction,
    normalize_count,
)
from .tracker import SyncTracker

RESYNC_PURPOSE = "resync"


class ActionRegistry:
    """Records what ``repeat`` should replay and which register goes with it."""

    def __init__(
        self,
        tracker: SyncTracker,
        deferred: DeferredTasks,
        *,
        resync_events: Iterable[LifecycleEvent] = (
            LifecycleEvent.CURSOR_MOVED,
            LifecycleEvent.TEXT_CHANGED,
        ),
        logger_name: str | None = None,
    ) -> None:
        self.tracker = tracker
        self.deferred = deferred
        self.resync_events = tuple(resync_events)
        self._action: Optional[RegisteredAction] = None
        self._association: Optional[RegisterAssociation] = None
        self._logger_name = logger_name

    @property
    def action(self) -> Optional[RegisteredAction]:
        return self._action

    @property
    def association(self) -> Optional[RegisterAssociation]:
        return self._association

    def register(
        self,
        context: DocumentContext,
        sequence: ActionSequence | str,
        count: object = 0,
    ) -> RegisteredAction:
        action = RegisteredAction(
            sequence=ActionSequence.coerce(sequence), count=normalize_count(count)
        )
        with span(
            "registry::register",
            logger_name=self._logger_name,
            component="registry",
            metadata={
                "document": context.document_id,
                "sequence": action.sequence.keys,
            },
        ) as handle:
            self._action = action
            revision = context.revision()
            self.tracker.snapshot(context.document_id, revision)
            handle.add_metadata("revision", revision)

            # Operator-pending commands bump the revision only after
            # registration returns; resnapshot once on the next movement.
            self.deferred.cancel_all()
            self.deferred.schedule(
                RESYNC_PURPOSE,
                context.bus,
                self.resync_events,
                lambda: self._resnapshot(context),
            )
        return action

    def _resnapshot(self, context: DocumentContext) -> None:
        self.tracker.snapshot(context.document_id, context.revision())

    def associate_register(
        self, sequence: ActionSequence | str, register_name: str
    ) -> RegisterAssociation:
        association = RegisterAssociation(
            sequence=ActionSequence.coerce(sequence), register_name=register_name
        )
        self._association = association
        return association

    def associated_register(self) -> Optional[str]:
        """Register recorded for the current action, if one was associated."""

        association = self._association
        if association is None or not association.applies_to(self._action):
            return None
        return association.register_name or None

    def invalidate(self) -> str:
        self.deferred.cancel_all()
        self.tracker.invalidate()
        return ""


__all__ = ["ActionRegistry", "RESYNC_PURPOSE"]
