# backend/evenlyo/core/exceptions.py
"""
Domain-specific exceptions for the Evenlyo booking platform.

Services raise these; the API layer converts them to HTTP responses
through ``to_http_exception`` so handlers never build status codes by hand.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found (or not visible to the caller)."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when a booking overlaps existing bookings on the same listing."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        conflicting_bookings: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(
            message=message
            or "Selected dates are not available. Some days may already be booked.",
            code="BOOKING_CONFLICT",
            details={"conflicting_bookings": conflicting_bookings or []},
        )


class InsufficientNoticeException(BusinessRuleException):
    """Raised when a booking starts earlier than the listing's lead time allows."""

    def __init__(self, required_days: int, provided_days: int):
        super().__init__(
            message=f"Bookings for this listing must be made at least {required_days} days in advance",
            code="INSUFFICIENT_NOTICE",
            details={
                "required_days": required_days,
                "provided_days": provided_days,
            },
        )


class CancellationWindowExpiredException(BusinessRuleException):
    """Raised when a client tries to cancel outside the cancellation window."""

    def __init__(self, window_minutes: int, elapsed_minutes: float):
        super().__init__(
            message=(
                f"Cancellation period expired. You can only cancel within {window_minutes} "
                "minutes of booking."
            ),
            code="CANCELLATION_WINDOW_EXPIRED",
            details={
                "window_minutes": window_minutes,
                "elapsed_minutes": round(elapsed_minutes, 2),
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
