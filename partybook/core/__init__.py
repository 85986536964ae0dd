"""Core utilities: exceptions, middleware and background scheduling."""

from partybook.core.exceptions import (
    AppException,
    ConflictError,
    IllegalTransition,
    NotBookingParticipant,
    NotFoundError,
    PersistenceFailure,
    ValidationError,
    WindowClosed,
)

__all__ = [
    "AppException",
    "ConflictError",
    "IllegalTransition",
    "NotBookingParticipant",
    "NotFoundError",
    "PersistenceFailure",
    "ValidationError",
    "WindowClosed",
]
