"""Host-editor contracts and an in-memory reference host.

``MemoryEditor`` lives in ``vim_repeat.host.editor``; it depends on the
session layer and is not imported here.
"""

from .protocols import ExpressionSource, InputSink, ReplayRejectedError, RevisionOracle
from .document import MemoryDocument, UndoEntry, UndoTimeline
from .input import InputChunk, InputQueue
from .registers import RegisterBank

__all__ = [
    "ExpressionSource",
    "InputChunk",
    "InputQueue",
    "InputSink",
    "MemoryDocument",
    "RegisterBank",
    "ReplayRejectedError",
    "RevisionOracle",
    "UndoEntry",
    "UndoTimeline",
]
