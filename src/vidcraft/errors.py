"""Error taxonomy shared by services, jobs, the API and the client.

Every failure that reaches a user is expressed as a ``ServiceError`` with a
category, a severity and a sanitized message. Stack traces stay in the logs.
"""

from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

import httpx

from vidcraft.logging import get_logger

logger = get_logger(__name__)


class ErrorCategory(StrEnum):
    """Broad class of a failure."""

    NETWORK = "network"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    UPLOAD = "upload"
    TRANSCRIPTION = "transcription"
    AI_GENERATION = "ai_generation"
    STORAGE = "storage"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    UNKNOWN = "unknown"


class ErrorSeverity(StrEnum):
    """How bad a failure is for the user."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Sanitized text shown to users when a failure carries no message of its own
USER_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.NETWORK: "Network connection failed. Please check your connection and try again.",
    ErrorCategory.AUTHENTICATION: "Authentication required. Please sign in to continue.",
    ErrorCategory.VALIDATION: "Invalid input provided.",
    ErrorCategory.UPLOAD: "File upload failed. Please try again.",
    ErrorCategory.TRANSCRIPTION: "Transcription failed. Please try again.",
    ErrorCategory.AI_GENERATION: "AI generation failed. Please try again.",
    ErrorCategory.STORAGE: "Storage operation failed. Please try again.",
    ErrorCategory.RATE_LIMIT: "Rate limit exceeded. Please wait a moment before trying again.",
    ErrorCategory.SERVER: "Our servers are experiencing issues. Please try again later.",
    ErrorCategory.UNKNOWN: "An unexpected error occurred. Please try again.",
}

_DEFAULT_SEVERITY: dict[ErrorCategory, ErrorSeverity] = {
    ErrorCategory.NETWORK: ErrorSeverity.MEDIUM,
    ErrorCategory.AUTHENTICATION: ErrorSeverity.HIGH,
    ErrorCategory.VALIDATION: ErrorSeverity.LOW,
    ErrorCategory.UPLOAD: ErrorSeverity.MEDIUM,
    ErrorCategory.TRANSCRIPTION: ErrorSeverity.MEDIUM,
    ErrorCategory.AI_GENERATION: ErrorSeverity.MEDIUM,
    ErrorCategory.STORAGE: ErrorSeverity.HIGH,
    ErrorCategory.RATE_LIMIT: ErrorSeverity.LOW,
    ErrorCategory.SERVER: ErrorSeverity.HIGH,
    ErrorCategory.UNKNOWN: ErrorSeverity.MEDIUM,
}

_DEFAULT_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.NETWORK: 502,
    ErrorCategory.AUTHENTICATION: 401,
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.UPLOAD: 400,
    ErrorCategory.TRANSCRIPTION: 502,
    ErrorCategory.AI_GENERATION: 502,
    ErrorCategory.STORAGE: 500,
    ErrorCategory.RATE_LIMIT: 429,
    ErrorCategory.SERVER: 500,
    ErrorCategory.UNKNOWN: 500,
}

# Status codes that will fail the same way on every attempt
NON_RETRYABLE_STATUS = frozenset({400, 401, 403, 404, 422})


class ServiceError(Exception):
    """A categorized, user-presentable failure."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        *,
        severity: ErrorSeverity | None = None,
        code: str | None = None,
        recoverable: bool = True,
        retryable: bool | None = None,
        status_code: int | None = None,
        context: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity or _DEFAULT_SEVERITY[category]
        self.code = code or f"{category.upper()}_ERROR"
        self.recoverable = recoverable
        self.status_code = status_code or _DEFAULT_STATUS[category]
        if retryable is None:
            retryable = recoverable and self.status_code not in NON_RETRYABLE_STATUS
        self.retryable = retryable
        self.context = context
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        return {
            "code": self.code,
            "category": str(self.category),
            "severity": str(self.severity),
            "message": self.message,
            "recoverable": self.recoverable,
            "details": self.details,
        }


class ValidationError(ServiceError):
    """Input rejected before any external call."""

    def __init__(self, message: str, errors: list[str] | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, ErrorCategory.VALIDATION, **kwargs)
        self.errors = errors or [message]


class NotFoundError(ServiceError):
    """Referenced record does not exist or is not visible to the caller."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("code", "NOT_FOUND")
        kwargs.setdefault("status_code", 404)
        kwargs.setdefault("retryable", False)
        super().__init__(message, ErrorCategory.VALIDATION, **kwargs)


class PermissionDeniedError(ServiceError):
    """Caller is authenticated but does not own the resource."""

    def __init__(self, message: str = "Unauthorized", **kwargs: Any) -> None:
        kwargs.setdefault("code", "FORBIDDEN")
        kwargs.setdefault("status_code", 403)
        kwargs.setdefault("recoverable", False)
        super().__init__(message, ErrorCategory.AUTHENTICATION, **kwargs)


class ConfigurationError(ServiceError):
    """A required credential or setting is missing."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("code", "CONFIGURATION_ERROR")
        kwargs.setdefault("status_code", 503)
        kwargs.setdefault("severity", ErrorSeverity.CRITICAL)
        kwargs.setdefault("recoverable", False)
        super().__init__(message, ErrorCategory.AUTHENTICATION, **kwargs)


class UploadError(ServiceError):
    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, ErrorCategory.UPLOAD, **kwargs)


class StorageError(ServiceError):
    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, ErrorCategory.STORAGE, **kwargs)


class TranscriptionError(ServiceError):
    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, ErrorCategory.TRANSCRIPTION, **kwargs)


class GenerationError(ServiceError):
    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, ErrorCategory.AI_GENERATION, **kwargs)


class ScrapeError(ServiceError):
    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, ErrorCategory.NETWORK, **kwargs)


def _status_category(status_code: int) -> ErrorCategory | None:
    if status_code in (401, 403):
        return ErrorCategory.AUTHENTICATION
    if status_code in (400, 404, 422):
        return ErrorCategory.VALIDATION
    if status_code == 429:
        return ErrorCategory.RATE_LIMIT
    if status_code >= 500:
        return ErrorCategory.SERVER
    return None


_KEYWORDS: list[tuple[ErrorCategory, tuple[str, ...]]] = [
    (ErrorCategory.RATE_LIMIT, ("rate limit", "too many requests")),
    (ErrorCategory.NETWORK, ("fetch", "network", "connection", "timeout", "timed out")),
    (ErrorCategory.AUTHENTICATION, ("unauthorized", "authentication", "api key")),
    (ErrorCategory.VALIDATION, ("validation", "invalid", "required")),
    (ErrorCategory.TRANSCRIPTION, ("transcri", "whisper", "elevenlabs", "speech")),
    (ErrorCategory.UPLOAD, ("upload", "too large")),
    (ErrorCategory.STORAGE, ("storage", "disk", "file")),
    (ErrorCategory.AI_GENERATION, ("openai", "anthropic", "gpt", "generation", "model")),
]


def categorize_error(error: BaseException, context: str | None = None) -> ServiceError:
    """Convert any exception into a ServiceError.

    ServiceErrors pass through (with context added when missing). HTTP errors
    are classified by status code first; everything else by keywords in the
    message.
    """
    if isinstance(error, ServiceError):
        if context and not error.context:
            error.context = context
        return error

    message = str(error) or error.__class__.__name__

    if isinstance(error, httpx.TimeoutException):
        return ServiceError(
            "Request timeout",
            ErrorCategory.NETWORK,
            code="TIMEOUT_ERROR",
            context=context,
            details=message,
        )
    if isinstance(error, httpx.TransportError):
        return ServiceError(
            "Network connection failed",
            ErrorCategory.NETWORK,
            code="NETWORK_ERROR",
            context=context,
            details=message,
        )
    if isinstance(error, httpx.HTTPStatusError):
        status_code = error.response.status_code
        category = _status_category(status_code) or ErrorCategory.UNKNOWN
        return ServiceError(
            USER_MESSAGES[category],
            category,
            status_code=status_code,
            recoverable=category is not ErrorCategory.AUTHENTICATION,
            context=context,
            details=message,
        )

    lowered = message.lower()
    for category, keywords in _KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return ServiceError(
                message,
                category,
                recoverable=category is not ErrorCategory.AUTHENTICATION,
                context=context,
            )

    return ServiceError(message, ErrorCategory.UNKNOWN, context=context)


def user_message(error: BaseException) -> str:
    """Sanitized text for a failure, suitable for persistence or display."""
    service_error = categorize_error(error)
    if service_error.category is ErrorCategory.UNKNOWN and not isinstance(error, ServiceError):
        return USER_MESSAGES[ErrorCategory.UNKNOWN]
    return service_error.message or USER_MESSAGES[service_error.category]


@dataclass
class TrackedError:
    """One recorded failure."""

    code: str
    category: ErrorCategory
    message: str
    context: str | None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class ErrorTracker:
    """Counts failures per category and keeps the most recent ones."""

    def __init__(self, max_recent: int = 50) -> None:
        self.counts: Counter[str] = Counter()
        self.recent: deque[TrackedError] = deque(maxlen=max_recent)

    def record(self, error: BaseException, context: str | None = None) -> ServiceError:
        service_error = categorize_error(error, context)
        self.counts[str(service_error.category)] += 1
        self.recent.append(
            TrackedError(
                code=service_error.code,
                category=service_error.category,
                message=service_error.message,
                context=service_error.context,
            )
        )
        logger.warning(
            "service_error_recorded",
            code=service_error.code,
            category=str(service_error.category),
            severity=str(service_error.severity),
            context=service_error.context,
            error=service_error.message,
        )
        return service_error

    def stats(self) -> dict[str, Any]:
        return {
            "total": sum(self.counts.values()),
            "by_category": dict(self.counts),
            "recent": [
                {
                    "code": e.code,
                    "category": str(e.category),
                    "message": e.message,
                    "context": e.context,
                    "occurred_at": e.occurred_at.isoformat(),
                }
                for e in self.recent
            ],
        }

    def reset(self) -> None:
        self.counts.clear()
        self.recent.clear()


error_tracker = ErrorTracker()
