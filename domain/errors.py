"""Exceptions raised by the schedule and leave engine."""
from __future__ import annotations


class EngineError(Exception):
    """Base class for every error the engine raises on purpose."""


class ValidationError(EngineError, ValueError):
    """Raised when an operation receives values that would break an invariant."""


class NotFoundError(EngineError, LookupError):
    """Raised when a schedule, variation, leave or request id is unknown."""


class StateConflictError(EngineError):
    """Raised when an operation is not allowed in the entity's current state."""


class ConcurrentModificationError(StateConflictError):
    """Raised when a stored employee document changed since it was loaded."""


__all__ = [
    "EngineError",
    "ValidationError",
    "NotFoundError",
    "StateConflictError",
    "ConcurrentModificationError",
]
