"""Lifecycle events, the per-document event bus, and one-shot deferred tasks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from vim_repeat.runtime import telemetry

Callback = Callable[[], None]


class LifecycleEvent(str, Enum):
    """Host notifications the repeat engine listens to."""

    BUF_LEAVE = "BufLeave"
    BUF_WRITE_PRE = "BufWritePre"
    BUF_READ_PRE = "BufReadPre"
    BUF_UNLOAD = "BufUnload"
    BUF_ENTER = "BufEnter"
    BUF_WRITE_POST = "BufWritePost"
    TEXT_CHANGED = "TextChanged"
    CURSOR_MOVED = "CursorMoved"

    @classmethod
    def parse(cls, name: str) -> "LifecycleEvent":
        cleaned = name.strip()
        for member in cls:
            if cleaned.lower() in {member.value.lower(), member.name.lower()}:
                return member
        raise ValueError(f"Unknown lifecycle event '{name}'")


LEAVE_EVENTS = frozenset(
    {
        LifecycleEvent.BUF_LEAVE,
        LifecycleEvent.BUF_WRITE_PRE,
        LifecycleEvent.BUF_READ_PRE,
        LifecycleEvent.BUF_UNLOAD,
    }
)
ENTER_EVENTS = frozenset({LifecycleEvent.BUF_ENTER, LifecycleEvent.BUF_WRITE_POST})


@dataclass(eq=False, slots=True)
class Subscription:
    bus: "EventBus"
    event: LifecycleEvent
    callback: Callback
    active: bool = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self.bus._discard(self)


class EventBus:
    """Serial event bus; callbacks run in subscription order."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._subscribers: Dict[LifecycleEvent, List[Subscription]] = {}

    def subscribe(self, event: LifecycleEvent, callback: Callback) -> Subscription:
        subscription = Subscription(bus=self, event=event, callback=callback)
        self._subscribers.setdefault(event, []).append(subscription)
        return subscription

    def once(
        self, events: Iterable[LifecycleEvent], callback: Callback, *, purpose: str = ""
    ) -> "OneShot":
        """Run ``callback`` on the first of ``events``, then unsubscribe from all."""

        handle = OneShot(purpose=purpose, callback=callback)
        for event in dict.fromkeys(events):
            handle.subscriptions.append(self.subscribe(event, handle.fire))
        if not handle.subscriptions:
            raise ValueError("once() requires at least one event")
        return handle

    def emit(self, event: LifecycleEvent) -> None:
        for subscription in list(self._subscribers.get(event, ())):
            if subscription.active:
                subscription.callback()

    def subscriber_count(self, event: Optional[LifecycleEvent] = None) -> int:
        if event is not None:
            return len(self._subscribers.get(event, ()))
        return sum(len(bucket) for bucket in self._subscribers.values())

    def clear(self) -> None:
        for bucket in list(self._subscribers.values()):
            for subscription in list(bucket):
                subscription.cancel()
        self._subscribers.clear()

    def _discard(self, subscription: Subscription) -> None:
        bucket = self._subscribers.get(subscription.event)
        if not bucket:
            return
        try:
            bucket.remove(subscription)
        except ValueError:
            return
        if not bucket:
            self._subscribers.pop(subscription.event, None)


@dataclass(eq=False, slots=True)
class OneShot:
    """Handle for a callback that fires at most once."""

    purpose: str
    callback: Callback
    subscriptions: List[Subscription] = field(default_factory=list)
    fired: bool = False
    cancelled: bool = False

    @property
    def pending(self) -> bool:
        return not (self.fired or self.cancelled)

    def fire(self) -> None:
        if not self.pending:
            return
        self.fired = True
        self._detach()
        self.callback()

    def cancel(self) -> None:
        if not self.pending:
            return
        self.cancelled = True
        self._detach()

    def _detach(self) -> None:
        for subscription in self.subscriptions:
            subscription.cancel()


class DeferredTasks:
    """At most one outstanding one-shot per purpose; scheduling replaces."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._tasks: Dict[str, OneShot] = {}
        self._logger_name = logger_name

    def schedule(
        self,
        purpose: str,
        bus: EventBus,
        events: Iterable[LifecycleEvent],
        callback: Callback,
    ) -> OneShot:
        self.cancel(purpose)
        events = tuple(events)

        def run() -> None:
            if self._tasks.get(purpose) is handle:
                del self._tasks[purpose]
            telemetry.record_event(
                "deferred.fire",
                data={"purpose": purpose, "bus": bus.name},
                logger_name=self._logger_name,
            )
            callback()

        handle = bus.once(events, run, purpose=purpose)
        self._tasks[purpose] = handle
        telemetry.record_event(
            "deferred.schedule",
            data={
                "purpose": purpose,
                "bus": bus.name,
                "events": ",".join(event.value for event in events),
            },
            logger_name=self._logger_name,
        )
        return handle

    def cancel(self, purpose: str) -> bool:
        handle = self._tasks.pop(purpose, None)
        if handle is None or not handle.pending:
            return False
        handle.cancel()
        telemetry.record_event(
            "deferred.cancel",
            data={"purpose": purpose},
            logger_name=self._logger_name,
        )
        return True

    def cancel_all(self) -> None:
        for purpose in list(self._tasks):
            self.cancel(purpose)

    def pending(self, purpose: str) -> Optional[OneShot]:
        handle = self._tasks.get(purpose)
        if handle is not None and handle.pending:
            return handle
        return None

    def forget_bus(self, bus: EventBus) -> None:
        """Drop tasks bound to ``bus`` (its document went away)."""

        for purpose, handle in list(self._tasks.items()):
            if any(sub.bus is bus for sub in handle.subscriptions):
                self.cancel(purpose)


__all__ = [
    "Callback",
    "DeferredTasks",
    "ENTER_EVENTS",
    "EventBus",
    "LEAVE_EVENTS",
    "LifecycleEvent",
    "OneShot",
    "Subscription",
]
