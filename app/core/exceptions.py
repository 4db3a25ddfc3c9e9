"""
Typed application errors.

Route handlers and services raise these; the handlers registered in
``app.main`` turn them into the ``{success: false, message, errors?, code}``
envelope with the matching HTTP status.
"""

from typing import Any


class AppError(Exception):
    """Base class for errors that map to a client-visible HTTP status."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None, errors: Any = None, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation failed"


class UnauthenticatedError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Conflict"


class InvalidTransitionError(ConflictError):
    default_message = "Invalid status transition"


class ExternalServiceError(AppError):
    """An object-storage or payment-gateway call failed.

    The message is safe to show to clients; details belong in the logs.
    """

    status_code = 500
    default_message = "External service error"


class PaymentGatewayTimeout(ExternalServiceError):
    """The gateway did not answer in time. The outcome on its side is unknown."""

    default_message = "Payment gateway timed out"


class PaymentGatewayRejected(ExternalServiceError):
    """The gateway answered with a non-success result code."""

    default_message = "Payment gateway rejected the request"

    def __init__(self, message: str | None = None, result_code: str = "", explanation: str = "") -> None:
        super().__init__(message)
        self.result_code = result_code
        self.explanation = explanation
