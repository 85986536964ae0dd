"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    code: str = "error"

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Validation error exception."""

    code = "validation_error"

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    code = "not_found"

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class NotBookingParticipant(AppException):
    """Actor may not drive this booking transition."""

    code = "forbidden"

    def __init__(self, detail: str = "You don't have permission to change this booking") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class IllegalTransition(AppException):
    """Requested status is not reachable from the current status."""

    code = "illegal_transition"

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Invalid booking transition: {current} → {target}",
        )


class WindowClosed(AppException):
    """Business-rule refusal: the cancellation window has closed."""

    code = "window_closed"

    def __init__(
        self,
        detail: str = "Bookings can no longer be cancelled this close to the event",
    ) -> None:
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class ConflictError(AppException):
    """The record changed since it was read."""

    code = "conflict"

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} was modified concurrently"
        if identifier:
            detail = f"{resource} '{identifier}' was modified concurrently"
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class PersistenceFailure(AppException):
    """Transient storage failure."""

    code = "persistence_failure"

    def __init__(self, detail: str | None = None) -> None:
        message = "Booking storage is temporarily unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=message)
