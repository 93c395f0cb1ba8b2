"""
Edward Backend — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for every failure the content API can
       report.
Why:   Services raise typed errors; global handlers in main.py turn them into
       structured JSON responses with the right status code.
How:   Each exception carries a user-safe message and an optional context dict
       that is logged but never returned verbatim unless the handler opts in.

Exception Hierarchy:
    EdwardError (base)
    ├── ValidationError          → 400 Bad Request
    │   ├── InvalidOrderError    → 400 (reorder candidate is not a permutation)
    │   └── UnknownTopicError    → 400 (binding names a foreign master topic)
    ├── AuthenticationError      → 401 Unauthorized
    ├── PremiumRequiredError     → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── InvalidArgumentsError    → 500 (a service misused the upsert engine)
    └── DatabaseError            → 500 Internal Server Error

None of these are retried by the server; retrying is the client's decision.
"""

from typing import Any, Dict, Iterable, Optional


class EdwardError(Exception):
    """
    Base exception for all Edward application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, not returned unless noted)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(EdwardError):
    """Raised when client input fails a business rule. HTTP 400."""

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


class InvalidOrderError(ValidationError):
    """
    Raised when a reorder request is not a permutation of the stored order.

    The message deliberately says nothing about the stored identifiers;
    only the container guid goes into the log context.
    """

    def __init__(
        self,
        kind: str = "item",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=f"Cannot rearrange {kind}s: an invalid {kind} array was received.",
            context=context,
        )
        self.kind = kind


class UnknownTopicError(ValidationError):
    """Raised when submitted chapter topics reference master topics outside the document."""

    def __init__(
        self,
        topic_ids: Iterable[str],
        context: Optional[Dict[str, Any]] = None,
    ):
        self.topic_ids = sorted(topic_ids)
        ctx = context or {}
        ctx["topic_ids"] = self.topic_ids
        super().__init__(
            message=f"Master topics {self.topic_ids} were not found.",
            field="topics",
            context=ctx,
        )


class AuthenticationError(EdwardError):
    """Raised when the identity header is missing or names no known user. HTTP 401."""

    def __init__(
        self,
        message: str = "User not found.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PremiumRequiredError(EdwardError):
    """
    Raised when a non-premium account calls a server-storage endpoint. HTTP 403.

    Limited and demo accounts keep their documents on the client; the server
    holds nothing for them.
    """

    def __init__(
        self,
        account_type: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if account_type:
            ctx["account_type"] = account_type
        super().__init__(
            message="Server storage is only available to premium accounts.",
            context=ctx,
        )


class NotFoundError(EdwardError):
    """Raised when a natural-key lookup requires a row that does not exist. HTTP 404."""

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class InvalidArgumentsError(EdwardError):
    """Raised when the upsert engine is called without its required arguments."""

    def __init__(
        self,
        message: str = "upsert was called without all the required arguments.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(EdwardError):
    """
    Raised when database operations fail unexpectedly. HTTP 500.

    The message returned to the client is always generic; details are logged.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(EdwardError):
    """Raised when a caller exceeds the sliding-window rate limit. HTTP 429."""

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
