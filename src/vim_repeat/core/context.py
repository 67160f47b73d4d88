"""Per-document context handed to every repeat operation."""

from __future__ import annotations

from dataclasses import dataclass, field

from vim_repeat.host.protocols import RevisionOracle

from .events import EventBus


@dataclass(slots=True)
class DocumentContext:
    """Binds a document id to its revision oracle and lifecycle bus."""

    document_id: str
    oracle: RevisionOracle
    bus: EventBus = field(init=False)

    def __post_init__(self) -> None:
        if not self.document_id:
            raise ValueError("document_id cannot be empty")
        self.bus = EventBus(name=self.document_id)

    def revision(self) -> int:
        revision = self.oracle.current_revision()
        if revision < 1:
            raise ValueError(
                f"Document '{self.document_id}' reported revision {revision} < 1"
            )
        return revision


__all__ = ["DocumentContext"]
