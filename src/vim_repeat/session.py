"""Session manager owning per-document contexts and the public repeat API."""

from __future__ import annotations

from typing import Callable, Dict, Iterator, Optional

from vim_repeat.config import RepeatSettings
from vim_repeat.core import (
    ActionRegistry,
    ActionSequence,
    DeferredTasks,
    DocumentContext,
    LifecycleEvent,
    RegisterAssociation,
    RegisteredAction,
    RepeatDispatcher,
    RepeatOutcome,
    SyncTracker,
    UndoRedoWrapper,
)
from vim_repeat.core.events import ENTER_EVENTS, LEAVE_EVENTS
from vim_repeat.host.protocols import ExpressionSource, InputSink, RevisionOracle
from vim_repeat.runtime import telemetry


class UnknownDocumentError(KeyError):
    """Raised when an operation names a document that is not open."""

    def __init__(self, document_id: str) -> None:
        super().__init__(f"Document '{document_id}' is not open")
        self.document_id = document_id


class SessionBus:
    """Minimal observer bus for collaborators outside the repeat engine."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


class SessionManager:
    """Owns the tracker, registry, and one ``DocumentContext`` per open document.

    The session keeps one sync record, bound to the document it was taken in.
    Focus changes carry it along so that a change registered in one document
    stays repeatable after switching to another.
    Lifecycle notifications are routed per document through ``notify``.
    """

    def __init__(
        self,
        sink: InputSink,
        *,
        settings: Optional[RepeatSettings] = None,
        expressions: Optional[ExpressionSource] = None,
        logger_name: str = "vim_repeat.session",
    ) -> None:
        self.settings = settings or RepeatSettings.from_env()
        self._logger_name = logger_name
        self.observers = SessionBus()
        self.tracker = SyncTracker(logger_name="vim_repeat.tracker")
        self.deferred = DeferredTasks(logger_name="vim_repeat.deferred")
        self.registry = ActionRegistry(
            self.tracker,
            self.deferred,
            resync_events=self.settings.resync_events,
            logger_name="vim_repeat.registry",
        )
        self.dispatcher = RepeatDispatcher(
            self.registry,
            self.tracker,
            sink,
            self.settings,
            expressions=expressions,
            logger_name="vim_repeat.dispatcher",
        )
        self.undo_redo = UndoRedoWrapper(
            self.tracker,
            self.deferred,
            sink,
            self.settings,
            logger_name="vim_repeat.undo",
        )
        self._contexts: Dict[str, DocumentContext] = {}

    # -- documents -----------------------------------------------------

    def open_document(
        self, document_id: str, oracle: RevisionOracle
    ) -> DocumentContext:
        if document_id in self._contexts:
            raise ValueError(f"Document '{document_id}' already open")
        context = DocumentContext(document_id=document_id, oracle=oracle)
        for event in sorted(LEAVE_EVENTS | ENTER_EVENTS, key=lambda e: e.value):
            context.bus.subscribe(
                event,
                lambda event=event, context=context: self.tracker.observe(
                    event, context.document_id, context.revision()
                ),
            )
        self._contexts[document_id] = context
        telemetry.record_event(
            "session.open",
            data={"document": document_id},
            logger_name=self._logger_name,
        )
        return context

    def close_document(self, document_id: str) -> None:
        context = self.context(document_id)
        self.deferred.forget_bus(context.bus)
        context.bus.clear()
        del self._contexts[document_id]
        telemetry.record_event(
            "session.close",
            data={"document": document_id},
            logger_name=self._logger_name,
        )

    def context(self, document_id: str) -> DocumentContext:
        try:
            return self._contexts[document_id]
        except KeyError:
            raise UnknownDocumentError(document_id) from None

    def documents(self) -> Iterator[str]:
        yield from self._contexts

    def notify(self, document_id: str, event: LifecycleEvent) -> None:
        self.context(document_id).bus.emit(event)

    # -- public repeat API --------------------------------------------

    @property
    def last_action(self) -> Optional[RegisteredAction]:
        return self.registry.action

    @property
    def last_sequence(self) -> Optional[ActionSequence]:
        action = self.registry.action
        return action.sequence if action else None

    def register(
        self, document_id: str, sequence: ActionSequence | str, count: object = 0
    ) -> RegisteredAction:
        action = self.registry.register(self.context(document_id), sequence, count)
        self.observers.emit("action.registered", action.sequence)
        return action

    def associate_register(
        self, sequence: ActionSequence | str, register_name: str
    ) -> RegisterAssociation:
        return self.registry.associate_register(sequence, register_name)

    def invalidate(self) -> str:
        return self.registry.invalidate()

    def repeat(
        self, document_id: str, count: object = 0, register: Optional[str] = None
    ) -> RepeatOutcome:
        return self.dispatcher.repeat(self.context(document_id), count, register)

    def wrap_undo_redo(
        self, document_id: str, command: ActionSequence | str, count: object = 0
    ) -> bool:
        return self.undo_redo.wrap(self.context(document_id), command, count)


__all__ = ["SessionBus", "SessionManager", "UnknownDocumentError"]
