"""
Errors raised by sorting machines.

Every error here signals a broken call contract (a programming error on the
caller's side), never a transient condition. Nothing is retried and the
machine's state is left exactly as it was before the offending call.

Hierarchy:
    PreconditionViolation (RuntimeError)
    ├── WrongModeError      # operation not legal in the current phase
    └── EmptyMachineError   # remove_first() with nothing left to extract
"""

from __future__ import annotations

__all__ = ["PreconditionViolation", "WrongModeError", "EmptyMachineError"]


class PreconditionViolation(RuntimeError):
    """Base class: an operation was called while its precondition was false."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class WrongModeError(PreconditionViolation):
    """Raised for add() after the transition, a second transition, or
    remove_first() while still inserting."""


class EmptyMachineError(PreconditionViolation):
    """Raised for remove_first() on a machine in extraction mode with size 0."""
