"""Engine error taxonomy.

``InvalidSwap`` is a recoverable, expected condition: the turn orchestrator
catches it and reports the swap as rejected. ``InconsistentBoard`` signals an
engine bug and is never caught inside the package.
"""
from __future__ import annotations


class InvalidSwap(ValueError):
    """Requested swap cannot be performed on the current board."""

    def __init__(self, reason: str, src=None, dst=None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.src = src
        self.dst = dst


class InconsistentBoard(RuntimeError):
    """A board invariant was violated (e.g. an empty cell survived refill)."""
