"""
Custom exceptions for FocusQueue.

Caller-facing errors carry one of the taxonomy codes below as ``error_code``
so the API layer can map them onto HTTP responses without inspecting types.
"""

from typing import Any

UNAUTHENTICATED = "unauthenticated"
INVALID_ARGUMENT = "invalid-argument"
NOT_FOUND = "not-found"
FAILED_PRECONDITION = "failed-precondition"
PERMISSION_DENIED = "permission-denied"
RESOURCE_EXHAUSTED = "resource-exhausted"
INTERNAL = "internal"


class FocusQueueError(Exception):
    """Base exception for all FocusQueue errors."""

    def __init__(self, message: str, error_code: str | None = None, details: dict | None = None):
        """
        Initialize exception.

        Args:
            message: Error message
            error_code: Optional error code
            details: Optional error details
        """
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


# Caller-facing errors


class UnauthenticatedError(FocusQueueError):
    """No caller identity was supplied."""

    def __init__(self, message: str = "Authentication required"):
        """Initialize exception."""
        super().__init__(message, error_code=UNAUTHENTICATED)


class InvalidArgumentError(FocusQueueError):
    """A required request field is missing or malformed."""

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        """
        Initialize exception.

        Args:
            message: Error message
            field: Field name
            value: Field value
        """
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, error_code=INVALID_ARGUMENT, details=details)


class NotFoundError(FocusQueueError):
    """A thought, job or document does not exist."""

    def __init__(self, message: str, path: str | None = None):
        """
        Initialize exception.

        Args:
            message: Error message
            path: Document path that was looked up
        """
        details = {"path": path} if path else {}
        super().__init__(message, error_code=NOT_FOUND, details=details)


class FailedPreconditionError(FocusQueueError):
    """The request is valid but the target is in the wrong state."""

    def __init__(self, message: str, details: dict | None = None):
        """Initialize exception."""
        super().__init__(message, error_code=FAILED_PRECONDITION, details=details)


class PermissionDeniedError(FocusQueueError):
    """AI processing is not permitted for this user."""

    def __init__(self, message: str, reason_code: str | None = None):
        """
        Initialize exception.

        Args:
            message: User-facing denial message
            reason_code: Entitlement reason code behind the denial
        """
        details = {"reason_code": reason_code} if reason_code else {}
        super().__init__(message, error_code=PERMISSION_DENIED, details=details)
        self.reason_code = reason_code


class ResourceExhaustedError(FocusQueueError):
    """A usage ceiling has been reached."""

    def __init__(self, message: str, details: dict | None = None):
        """Initialize exception."""
        super().__init__(message, error_code=RESOURCE_EXHAUSTED, details=details)


class RateLimitExceeded(ResourceExhaustedError):
    """Raised when an interval or daily processing limit is hit."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: float | None = None,
        limit: str | None = None,
    ):
        """
        Initialize rate limit exception.

        Args:
            message: Error message
            retry_after: Seconds until the limit resets
            limit: Which limit was hit ("interval" or "daily")
        """
        details: dict[str, Any] = {}
        if retry_after is not None:
            details["retry_after"] = retry_after
        if limit:
            details["limit"] = limit
        super().__init__(message, details=details)
        self.retry_after = retry_after
        self.limit = limit


# Document store errors


class DocumentStoreError(FocusQueueError):
    """Document store errors."""

    def __init__(self, message: str, details: dict | None = None):
        """Initialize exception."""
        super().__init__(message, error_code=INTERNAL, details=details)


class DocumentAlreadyExistsError(DocumentStoreError):
    """A create targeted a path that is already occupied."""

    def __init__(self, path: str):
        """
        Initialize exception.

        Args:
            path: Document path
        """
        super().__init__(f"Document already exists: {path}", details={"path": path})


class TransactionConflictError(DocumentStoreError):
    """A transaction could not commit after exhausting its retries."""

    def __init__(self, message: str = "Transaction aborted due to contention", attempts: int = 0):
        """Initialize exception."""
        super().__init__(message, details={"attempts": attempts})


# Cache errors


class CacheError(FocusQueueError):
    """Cache-related errors."""

    pass


class CacheConnectionError(CacheError):
    """Cache connection errors."""

    def __init__(self, message: str = "Failed to connect to cache"):
        """Initialize exception."""
        super().__init__(message, error_code="CACHE_CONNECTION_ERROR")


# Messaging errors


class MessagingError(FocusQueueError):
    """Messaging-related errors."""

    pass


class MessagePublishError(MessagingError):
    """Message publishing errors."""

    def __init__(self, queue: str, message: str = "Failed to publish message"):
        """
        Initialize exception.

        Args:
            queue: Queue name
            message: Error message
        """
        super().__init__(message, error_code="MESSAGE_PUBLISH_ERROR", details={"queue": queue})


class MessageConsumeError(MessagingError):
    """Message consumption errors."""

    def __init__(self, queue: str, message: str = "Failed to consume message"):
        """
        Initialize exception.

        Args:
            queue: Queue name
            message: Error message
        """
        super().__init__(message, error_code="MESSAGE_CONSUME_ERROR", details={"queue": queue})


# LLM errors


class LLMError(FocusQueueError):
    """LLM-related errors."""

    def __init__(self, message: str, details: dict | None = None):
        """Initialize exception."""
        super().__init__(message, error_code=INTERNAL, details=details)


class LLMResponseError(LLMError):
    """The model replied with something that is not a usable action list."""

    def __init__(self, message: str, raw_response: str | None = None):
        """
        Initialize exception.

        Args:
            message: Error message
            raw_response: Raw model output, if any
        """
        super().__init__(message, details={"raw_response": raw_response} if raw_response else None)
        self.raw_response = raw_response


# Handler errors


class HandlerSpecNotFoundError(FocusQueueError):
    """No handler spec is registered under the requested id."""

    def __init__(self, handler_id: str):
        """
        Initialize exception.

        Args:
            handler_id: Requested handler id
        """
        super().__init__(
            f'Tool spec "{handler_id}" is not defined',
            error_code=INTERNAL,
            details={"handler_id": handler_id},
        )
        self.handler_id = handler_id


# Configuration errors


class ConfigurationError(FocusQueueError):
    """Configuration errors."""

    def __init__(self, message: str, key: str | None = None):
        """
        Initialize exception.

        Args:
            message: Error message
            key: Configuration key
        """
        details = {"key": key} if key else {}
        super().__init__(message, error_code="CONFIGURATION_ERROR", details=details)
