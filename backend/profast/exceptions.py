"""
ProFast Parcel API — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for every failure the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. Services raise them; the handlers registered in main.py turn them
       into JSON error responses with the matching HTTP status code.

Exception Hierarchy:
    ProFastError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized (missing credential)
    ├── AuthorizationError       → 403 Forbidden (rejected credential / not yours)
    ├── NotFoundError            → 404 Not Found
    ├── DatabaseError            → 500 Internal Server Error (generic message)
    │   └── DuplicateRecordError → 500 unless a service handles it
    ├── PaymentGatewayError      → 500 Internal Server Error (gateway message)
    └── ServiceUnavailableError  → 503 Service Unavailable

The `context` dict is logged server-side and never returned to the client.
"""

from typing import Any, Dict, Optional


class ProFastError(Exception):
    """
    Base exception for all ProFast application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ProFastError):
    """
    Raised when client input fails validation.

    When:    Missing query parameter, malformed object id, role outside the
             allowed set, non-object JSON body.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(ProFastError):
    """
    Raised when a protected route is called without a usable bearer token.

    HTTP:    401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    def __init__(
        self,
        message: str = "Unauthorized access",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(ProFastError):
    """
    Raised when a credential is present but rejected, or the caller asks for
    data that belongs to somebody else.

    When:    Expired/malformed/forged ID token, token without an email claim,
             GET /payments for another user's email.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Forbidden access",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ProFastError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found

    The driver returns None for missing documents; services convert that into
    this exception so routes stay free of status-code logic.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(ProFastError):
    """
    Raised when a MongoDB operation fails unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. Driver details
    (operation, collection, server error) go to the log only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicateRecordError(DatabaseError):
    """Unique index violation. Services that expect it treat it as "already exists"."""

    def __init__(
        self,
        message: str = "A record with the same unique key already exists.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PaymentGatewayError(ProFastError):
    """
    Raised when Stripe rejects or fails a payment-intent request.

    HTTP:    500 Internal Server Error

    Unlike DatabaseError, the gateway's own message is returned to the client
    so the checkout form can display it ("Your card was declined", ...).
    """

    def __init__(
        self,
        message: str = "Payment gateway request failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ServiceUnavailableError(ProFastError):
    """
    Raised when a dependency could not be initialized at startup.

    When:    MongoDB ping failed, Firebase credentials missing, identity
             provider certificates unreachable.
    HTTP:    503 Service Unavailable
    """

    def __init__(
        self,
        service: str = "service",
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["service"] = service
        super().__init__(
            message=message or f"The {service} is currently unavailable. Please try again later.",
            context=ctx,
        )
        self.service = service
