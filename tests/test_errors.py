"""Tests for error categorization and tracking."""

import httpx
import pytest

from vidcraft.errors import (
    USER_MESSAGES,
    ErrorCategory,
    ErrorSeverity,
    ErrorTracker,
    NotFoundError,
    PermissionDeniedError,
    ServiceError,
    ValidationError,
    categorize_error,
    user_message,
)


def _status_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://api.example.com/thing")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("boom", request=request, response=response)


@pytest.mark.parametrize(
    ("status_code", "category"),
    [
        (401, ErrorCategory.AUTHENTICATION),
        (403, ErrorCategory.AUTHENTICATION),
        (400, ErrorCategory.VALIDATION),
        (404, ErrorCategory.VALIDATION),
        (422, ErrorCategory.VALIDATION),
        (429, ErrorCategory.RATE_LIMIT),
        (500, ErrorCategory.SERVER),
        (503, ErrorCategory.SERVER),
    ],
)
def test_http_status_categories(status_code: int, category: ErrorCategory) -> None:
    error = categorize_error(_status_error(status_code))

    assert error.category is category
    assert error.status_code == status_code
    assert error.message == USER_MESSAGES[category]


def test_auth_failures_are_not_recoverable() -> None:
    error = categorize_error(_status_error(401))
    assert error.recoverable is False
    assert error.retryable is False


def test_server_errors_are_retryable() -> None:
    assert categorize_error(_status_error(503)).retryable is True


def test_timeout_is_network_error() -> None:
    error = categorize_error(httpx.ReadTimeout("read timed out"))

    assert error.category is ErrorCategory.NETWORK
    assert error.code == "TIMEOUT_ERROR"
    assert error.message == "Request timeout"


def test_connection_error_is_network_error() -> None:
    error = categorize_error(httpx.ConnectError("connection refused"))
    assert error.category is ErrorCategory.NETWORK


@pytest.mark.parametrize(
    ("message", "category"),
    [
        ("Rate limit reached for gpt-4o", ErrorCategory.RATE_LIMIT),
        ("Failed to fetch", ErrorCategory.NETWORK),
        ("Invalid API key provided", ErrorCategory.AUTHENTICATION),
        ("title is required", ErrorCategory.VALIDATION),
        ("Whisper rejected the audio", ErrorCategory.TRANSCRIPTION),
        ("File too large", ErrorCategory.UPLOAD),
        ("disk quota exceeded", ErrorCategory.STORAGE),
        ("OpenAI returned an empty completion", ErrorCategory.AI_GENERATION),
        ("something odd happened", ErrorCategory.UNKNOWN),
    ],
)
def test_keyword_categories(message: str, category: ErrorCategory) -> None:
    assert categorize_error(RuntimeError(message)).category is category


def test_service_error_passes_through() -> None:
    original = ValidationError("Message is required")

    result = categorize_error(original, context="refine")

    assert result is original
    assert result.context == "refine"


def test_to_dict_shape() -> None:
    error = NotFoundError("Project not found")

    assert error.to_dict() == {
        "code": "NOT_FOUND",
        "category": "validation",
        "severity": "low",
        "message": "Project not found",
        "recoverable": True,
        "details": None,
    }
    assert error.status_code == 404


def test_permission_denied_defaults() -> None:
    error = PermissionDeniedError()

    assert error.message == "Unauthorized"
    assert error.status_code == 403
    assert error.severity is ErrorSeverity.HIGH


def test_user_message_hides_unknown_details() -> None:
    assert user_message(RuntimeError("NoneType has no attribute 'x'")) == (
        USER_MESSAGES[ErrorCategory.UNKNOWN]
    )
    assert user_message(ServiceError("Custom text")) == "Custom text"


def test_tracker_counts_and_recent() -> None:
    tracker = ErrorTracker(max_recent=2)

    tracker.record(ValidationError("one"))
    tracker.record(ValidationError("two"))
    tracker.record(httpx.ConnectError("down"), context="health")

    stats = tracker.stats()
    assert stats["total"] == 3
    assert stats["by_category"] == {"validation": 2, "network": 1}
    assert [e["message"] for e in stats["recent"]] == ["two", "Network connection failed"]
    assert stats["recent"][-1]["context"] == "health"

    tracker.reset()
    assert tracker.stats()["total"] == 0
