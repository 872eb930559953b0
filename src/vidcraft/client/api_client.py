"""HTTP client for the VidCraft API with retries, timeouts and cancellation."""

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx

from vidcraft.config import settings
from vidcraft.errors import ErrorCategory, ServiceError, categorize_error
from vidcraft.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

MAX_RETRIES = 3
BASE_RETRY_DELAY = 1.0  # seconds
MAX_RETRY_DELAY = 10.0
NO_RETRY_STATUS = frozenset({400, 401, 404})


def retry_delay(attempt: int) -> float:
    """Exponential backoff for ``attempt`` (1-based) with up to 10% jitter."""
    delay = min(BASE_RETRY_DELAY * 2 ** (attempt - 1), MAX_RETRY_DELAY)
    return delay + random.random() * 0.1 * delay


def should_not_retry(error: BaseException) -> bool:
    if not isinstance(error, ServiceError):
        return False
    if "Unauthorized" in error.message or error.status_code in NO_RETRY_STATUS:
        return True
    return not error.retryable


def error_from_response(response: httpx.Response) -> ServiceError:
    """Rebuild the server's ServiceError from an error response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        try:
            category = ErrorCategory(error.get("category", "unknown"))
        except ValueError:
            category = ErrorCategory.UNKNOWN
        return ServiceError(
            error["message"],
            category,
            code=error.get("code"),
            recoverable=bool(error.get("recoverable", True)),
            status_code=response.status_code,
            details=error.get("details"),
        )

    request = response.request
    return categorize_error(
        httpx.HTTPStatusError(
            f"{response.status_code} response from {request.url}",
            request=request,
            response=response,
        )
    )


@dataclass
class ParallelResult(Generic[T]):
    """Outcome of one operation run through ``ApiClient.parallel``."""

    success: bool
    data: T | None = None
    error: str | None = None


class ApiClient:
    """Async client for the VidCraft HTTP API.

    ``query`` makes one attempt, ``mutation`` retries transient failures,
    ``action`` races the call against a timeout and an optional cancel event.
    Every failure surfaces as a ServiceError.
    """

    def __init__(
        self,
        base_url: str | None = None,
        user_id: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"X-User-Id": user_id} if user_id else {}
        self.default_timeout = timeout or settings.action_timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.public_base_url).rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(self.default_timeout, connect=10.0),
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one request; non-2xx responses raise a ServiceError."""
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise categorize_error(e, context=f"{method} {url}") from e
        if response.is_error:
            raise error_from_response(response)
        return response

    async def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        response = await self.request(method, url, **kwargs)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def query(self, url: str, **kwargs: Any) -> Any:
        """GET with a single attempt."""
        return await self._send("GET", url, **kwargs)

    async def mutation(
        self,
        method: str,
        url: str,
        *,
        on_success: Callable[[Any], None] | None = None,
        on_error: Callable[[ServiceError], None] | None = None,
        **kwargs: Any,
    ) -> Any:
        """Send a write, retrying up to three attempts with backoff.

        Bad requests, unauthorized, not found and non-retryable errors fail
        on the first attempt.
        """
        last_error: ServiceError | None = None
        for attempt in range(1, MAX_RETRIES + 1):
            try:
                result = await self._send(method, url, **kwargs)
            except ServiceError as e:
                last_error = e
                if on_error:
                    on_error(e)
                if should_not_retry(e) or attempt == MAX_RETRIES:
                    break
                delay = retry_delay(attempt)
                logger.info(
                    "api_request_retrying",
                    method=method,
                    url=url,
                    attempt=attempt,
                    delay=round(delay, 2),
                    error=e.message,
                )
                await asyncio.sleep(delay)
                continue

            if on_success:
                on_success(result)
            return result

        assert last_error is not None
        raise last_error

    async def action(
        self,
        method: str,
        url: str,
        *,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
        **kwargs: Any,
    ) -> Any:
        """Run a long call that gives up after ``timeout`` or when cancelled.

        Raises:
            ServiceError: "Request timeout" or "Request cancelled" (network
                category), or the server's error
        """
        timeout = timeout if timeout is not None else self.default_timeout
        call = asyncio.ensure_future(
            self._send(method, url, timeout=httpx.Timeout(None), **kwargs)
        )
        waiters: set[asyncio.Future[Any]] = {call}
        cancelled = None
        if cancel_event is not None:
            cancelled = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancelled)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for future in waiters:
                if not future.done():
                    future.cancel()

        if call in done:
            return call.result()
        if cancelled is not None and cancelled in done:
            raise ServiceError(
                "Request cancelled",
                ErrorCategory.NETWORK,
                code="CANCELLED",
                details="Operation was cancelled by user",
            )
        raise ServiceError(
            "Request timeout",
            ErrorCategory.NETWORK,
            code="TIMEOUT_ERROR",
            details=f"Operation timed out after {timeout}s",
        )

    async def parallel(
        self,
        operations: list[Callable[[], Awaitable[T]]],
        max_concurrency: int = 5,
        fail_fast: bool = False,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> list[ParallelResult[T]]:
        """Run operations in groups of ``max_concurrency``, collecting every outcome.

        With ``fail_fast`` the first failure raises once its group has settled.
        """
        results: list[ParallelResult[T]] = []
        for start in range(0, len(operations), max_concurrency):
            group = operations[start : start + max_concurrency]
            outcomes = await asyncio.gather(*(op() for op in group), return_exceptions=True)
            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    message = outcome.message if isinstance(outcome, ServiceError) else str(outcome)
                    results.append(ParallelResult(success=False, error=message or "Unknown error"))
                    if fail_fast:
                        raise ServiceError(
                            "Parallel operation failed",
                            ErrorCategory.UNKNOWN,
                            details=message,
                        )
                else:
                    results.append(ParallelResult(success=True, data=outcome))
            if on_progress:
                on_progress(len(results), len(operations))
        return results
