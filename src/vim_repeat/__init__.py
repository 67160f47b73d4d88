"""Repeat-last-change engine with revision-based invalidation."""

__all__ = [
    "config",
    "core",
    "host",
    "runtime",
    "session",
]

__version__ = "0.1.0"
