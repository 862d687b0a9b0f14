"""
Error kinds and exception hierarchy for mediagate.

Authorization, validation and not-found failures are reported to callers as
typed results carrying an ``ErrorCode``. The exceptions below are raised by
storage collaborators and converted to results at the facade boundary.
"""

from enum import Enum
from datetime import datetime
from typing import Dict, Any, Optional
from dataclasses import dataclass


class ErrorCode(str, Enum):
    """Failure kinds surfaced to callers."""

    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    FLAGGED = "flagged"
    ADMINISTRATIVELY_APPROVED = "administratively_approved"
    EMPTY_NOTE = "empty_note"
    TEXT_TOO_LONG = "text_too_long"
    INVALID_METADATA = "invalid_metadata"
    NOT_FOUND = "not_found"
    STORAGE_ERROR = "storage_error"

    def __str__(self) -> str:
        return self.value


# Human readable messages, keyed by error kind
MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.UNAUTHENTICATED: "You need to login first",
    ErrorCode.FORBIDDEN: "You are not authorized to access that resource",
    ErrorCode.FLAGGED: "Resource flagged",
    ErrorCode.ADMINISTRATIVELY_APPROVED: "This post has administrative approval",
    ErrorCode.EMPTY_NOTE: "Empty note not saved",
    ErrorCode.TEXT_TOO_LONG: "That text is too long",
    ErrorCode.INVALID_METADATA: "That field cannot be edited",
    ErrorCode.NOT_FOUND: "Resource not found",
    ErrorCode.STORAGE_ERROR: "Storage failure",
}


def message_for(code: ErrorCode) -> str:
    """Return the default user-facing message for an error kind."""
    return MESSAGES.get(code, code.value)


class ErrorSource(Enum):
    """Sources where errors can originate."""

    AUTHORIZATION = "authorization"
    MODERATION = "moderation"
    VALIDATION = "validation"
    STORAGE = "storage"
    MEDIA = "media"


@dataclass
class ErrorContext:
    """Additional context for errors."""

    agent_id: Optional[str] = None
    resource_id: Optional[str] = None
    timestamp: datetime = None
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()
        if self.metadata is None:
            self.metadata = {}


class MediaGateError(Exception):
    """
    Base exception class for all mediagate errors.

    Carries an error code, the source it came from, optional context and
    the underlying cause.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: Optional[str] = None,
        source: ErrorSource = ErrorSource.STORAGE,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None
    ):
        self.code = code
        self.message = message or message_for(code)
        self.source = source
        self.context = context or ErrorContext()
        self.cause = cause

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "error": self.code.value,
            "error_description": self.message,
            "error_source": self.source.value,
            "timestamp": self.context.timestamp.isoformat(),
        }

        if self.context.agent_id:
            result["agent_id"] = self.context.agent_id

        if self.context.resource_id:
            result["resource_id"] = self.context.resource_id

        if self.context.metadata:
            result["metadata"] = self.context.metadata

        if self.cause:
            result["caused_by"] = str(self.cause)

        return result


class AuthorizationError(MediaGateError):
    """Raised when a caller insists on an exception for a denied decision."""

    def __init__(self, code: ErrorCode, message: Optional[str] = None, **kwargs):
        super().__init__(
            code=code,
            message=message,
            source=ErrorSource.AUTHORIZATION,
            **kwargs
        )


class ValidationError(MediaGateError):
    """Errors related to input validation."""

    def __init__(self, code: ErrorCode, message: Optional[str] = None,
                 field: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", None) or ErrorContext()
        if field:
            context.metadata["field"] = field

        super().__init__(
            code=code,
            message=message,
            source=ErrorSource.VALIDATION,
            context=context,
            **kwargs
        )


class StorageError(MediaGateError):
    """Errors raised by a repository or media store collaborator."""

    def __init__(self, message: str, operation: str = "", key: str = "",
                 source: ErrorSource = ErrorSource.STORAGE, **kwargs):
        self.operation = operation
        self.key = key
        super().__init__(
            code=ErrorCode.STORAGE_ERROR,
            message=message,
            source=source,
            **kwargs
        )


class NotFoundError(MediaGateError):
    """A resource, agent or note identifier did not resolve."""

    def __init__(self, message: str, key: str = "", **kwargs):
        self.key = key
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=message,
            source=ErrorSource.STORAGE,
            **kwargs
        )


_VALIDATION_CODES = frozenset({
    ErrorCode.EMPTY_NOTE,
    ErrorCode.TEXT_TOO_LONG,
    ErrorCode.INVALID_METADATA,
})


def error_for(code: ErrorCode, message: Optional[str] = None,
              context: Optional[ErrorContext] = None) -> MediaGateError:
    """Build the exception matching an error kind, for hosts that prefer raising."""
    if code is ErrorCode.NOT_FOUND:
        return NotFoundError(message or message_for(code), context=context)
    if code is ErrorCode.STORAGE_ERROR:
        return StorageError(message or message_for(code), context=context)
    if code in _VALIDATION_CODES:
        return ValidationError(code, message, context=context)
    return AuthorizationError(code, message, context=context)
