"""Decides between replaying the registered action and native repeat."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Optional

from vim_repeat.host.protocols import ExpressionSource, InputSink, ReplayRejectedError
from vim_repeat.runtime import telemetry

from .context import DocumentContext
from .models import EXPRESSION_REGISTER, count_tokens, normalize_count
from .registry import ActionRegistry
from .tracker import SyncTracker

if TYPE_CHECKING:
    from vim_repeat.config import RepeatSettings


@dataclass(frozen=True, slots=True)
class RepeatOutcome:
    """Result returned from ``RepeatDispatcher.repeat``."""

    status: Literal["replay", "fallback", "error"]
    tokens: tuple[str, ...] = ()
    count: int = 0
    register: Optional[str] = None
    message: Optional[str] = None

    @property
    def keys(self) -> str:
        return "".join(self.tokens)


class RepeatDispatcher:
    def __init__(
        self,
        registry: ActionRegistry,
        tracker: SyncTracker,
        sink: InputSink,
        settings: "RepeatSettings",
        *,
        expressions: Optional[ExpressionSource] = None,
        logger_name: str | None = None,
    ) -> None:
        self.registry = registry
        self.tracker = tracker
        self.sink = sink
        self.settings = settings
        self.expressions = expressions
        self._logger_name = logger_name

    def repeat(
        self,
        context: DocumentContext,
        count: object = 0,
        register: Optional[str] = None,
    ) -> RepeatOutcome:
        explicit = normalize_count(count)
        with telemetry.span(
            "repeat::dispatch",
            logger_name=self._logger_name,
            component="dispatcher",
            metadata={"document": context.document_id, "count": explicit},
        ) as handle:
            action = self.registry.action
            revision = context.revision()
            synced = self.tracker.is_synced(context.document_id, revision)
            if action is None or not synced:
                handle.add_metadata("path", "fallback")
                return self._fallback(explicit)

            effective = explicit or action.count
            register_name = self.effective_register(register)
            prefix = self._register_prefix(register_name) + count_tokens(effective)
            handle.add_metadata("path", "replay")
            try:
                self.sink.reserve(prefix + action.sequence.tokens)
                self.sink.feed(action.sequence.tokens, remap=True, insert=True)
                if prefix:
                    self.sink.feed(prefix, remap=False, insert=True)
            except ReplayRejectedError as exc:
                return self._rejected(exc)

            outcome = RepeatOutcome(
                status="replay",
                tokens=prefix + action.sequence.tokens,
                count=effective,
                register=register_name,
            )
            telemetry.record_event(
                "repeat.replay",
                data={"keys": outcome.keys, "revision": revision},
                logger_name=self._logger_name,
            )
            return outcome

    def effective_register(self, explicit: Optional[str]) -> Optional[str]:
        if not self.settings.is_default_register(explicit):
            return explicit
        associated = self.registry.associated_register()
        if associated and not self.settings.is_default_register(associated):
            return associated
        return None

    def _register_prefix(self, name: Optional[str]) -> tuple[str, ...]:
        if name is None:
            return ()
        if name == EXPRESSION_REGISTER:
            # read fresh so the expression is evaluated again on replay
            source = self.expressions.expression_source() if self.expressions else ""
            return ('"', EXPRESSION_REGISTER, *source, "<CR>")
        return ('"', name)

    def _fallback(self, count: int) -> RepeatOutcome:
        tokens = count_tokens(count) + (self.settings.native_repeat,)
        try:
            self.sink.feed(tokens, remap=False, insert=True)
        except ReplayRejectedError as exc:
            return self._rejected(exc)
        telemetry.record_event(
            "repeat.fallback",
            data={"keys": "".join(tokens)},
            logger_name=self._logger_name,
        )
        return RepeatOutcome(status="fallback", tokens=tokens, count=count)

    def _rejected(self, exc: ReplayRejectedError) -> RepeatOutcome:
        telemetry.record_event(
            "repeat.rejected",
            level="error",
            data={"reason": str(exc), "keys": "".join(exc.tokens)},
            logger_name=self._logger_name,
        )
        return RepeatOutcome(status="error", tokens=exc.tokens, message=str(exc))


__all__ = ["RepeatDispatcher", "RepeatOutcome"]
