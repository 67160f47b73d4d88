"""Sync tracking, action registry, and repeat dispatch."""

from .context import DocumentContext
from .dispatcher import RepeatDispatcher, RepeatOutcome
from .events import DeferredTasks, EventBus, LifecycleEvent, OneShot
from .models import (
    SYNCED,
    UNSYNCED,
    ActionSequence,
    RegisterAssociation,
    RegisteredAction,
    Revision,
    Synced,
    SyncState,
    Unsynced,
)
from .registry import ActionRegistry
from .tracker import SyncTracker
from .undo_redo import UndoRedoWrapper

__all__ = [
    "ActionRegistry",
    "ActionSequence",
    "DeferredTasks",
    "DocumentContext",
    "EventBus",
    "LifecycleEvent",
    "OneShot",
    "RegisterAssociation",
    "RegisteredAction",
    "RepeatDispatcher",
    "RepeatOutcome",
    "Revision",
    "SYNCED",
    "SyncState",
    "SyncTracker",
    "Synced",
    "UNSYNCED",
    "UndoRedoWrapper",
    "Unsynced",
]
