"""
Shared HTTP call handling for upstream APIs (Linear, GitHub)

Each upstream client subclasses UpstreamAPIClient and gets:
- Rate limiting (429, or 403 with exhausted rate-limit headers) honoring Retry-After
- Server errors (500, 502, 503, 504) retried with exponential backoff
- Network errors retried with exponential backoff
- Everything else raised immediately as UpstreamAPIError

The aggregators never retry on their own; this is the only backoff in the system.
"""

import asyncio
import json
import time
from typing import Any

import httpx

from workboard.async_http_client import AsyncSecureHTTPClient
from workboard.core import get_logger
from workboard.utils.error_handling import log_and_continue

logger = get_logger(__name__)

RETRYABLE_SERVER_ERRORS = (500, 502, 503, 504)
MAX_RATE_LIMIT_WAIT = 60.0  # seconds


class UpstreamAPIError(RuntimeError):
    """
    Raised when an upstream API answers with a non-success status.

    Attributes:
        service: Upstream name ("Linear", "GitHub")
        status_code: HTTP status, or None for errors reported inside a 200 body
    """

    def __init__(self, message: str, service: str, status_code: int | None = None):
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class GraphQLResponseError(UpstreamAPIError):
    """Raised when a GraphQL response carries an `errors` array."""

    def __init__(self, message: str, service: str, errors: list[Any]):
        super().__init__(message, service)
        self.errors = errors


def _rate_limit_wait(response: httpx.Response) -> float | None:
    """
    Seconds to wait before retrying a rate-limited response.

    Returns:
        Wait in seconds, or None if the response is not a rate limit
    """
    retry_after = response.headers.get("Retry-After")
    remaining = response.headers.get("X-RateLimit-Remaining")

    if response.status_code == 403 and retry_after is None and remaining != "0":
        return None  # A real permission error

    if retry_after is not None:
        try:
            return min(float(retry_after), MAX_RATE_LIMIT_WAIT)
        except ValueError:
            pass

    reset = response.headers.get("X-RateLimit-Reset")
    if reset is not None:
        try:
            return min(max(0.0, float(reset) - time.time()), MAX_RATE_LIMIT_WAIT)
        except ValueError:
            pass

    return 1.0


class UpstreamAPIClient:
    """
    Base class for upstream API clients.

    Args:
        service: Display name used in error messages and logs
        headers: Headers sent with every request (auth, accept)
        timeout: Request timeout in seconds
        max_retries: Attempts per call, including the first one
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        service: str,
        headers: dict[str, str],
        timeout: float = AsyncSecureHTTPClient.DEFAULT_TIMEOUT,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.service = service
        self.headers = headers
        self.max_retries = max(1, max_retries)
        self.api_calls = 0
        self._http = AsyncSecureHTTPClient(timeout=timeout, transport=transport)

    async def __aenter__(self):
        await self._http.__aenter__()
        return self

    async def __aexit__(self, *args):
        await self._http.__aexit__(*args)

    async def _handle_api_call(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Execute API call with retry logic and error handling.

        Args:
            method: HTTP method (GET or POST)
            url: Full API URL
            **kwargs: Additional arguments for the HTTP client (params, json, headers)

        Returns:
            The successful (2xx) response

        Raises:
            UpstreamAPIError: For non-retryable HTTP errors, or retryable ones once retries run out
            httpx.RequestError: For network errors after retries exhausted
        """
        headers = {**self.headers, **kwargs.pop("headers", {})}
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            self.api_calls += 1
            try:
                if method.upper() == "GET":
                    response = await self._http.get(url, headers=headers, **kwargs)
                elif method.upper() == "POST":
                    response = await self._http.post(url, headers=headers, **kwargs)
                else:
                    raise ValueError(f"Unsupported HTTP method: {method}")
            except (httpx.TimeoutException, httpx.RequestError) as e:
                last_error = e
                if attempt + 1 < self.max_retries:
                    backoff = 2**attempt
                    logger.warning(
                        f"{self.service} network error, retrying in {backoff}s "
                        f"(attempt {attempt + 1}/{self.max_retries}): {e}"
                    )
                    await asyncio.sleep(backoff)
                continue

            if response.is_success:
                return response

            status_code = response.status_code
            last_error = UpstreamAPIError(f"{self.service} API error: {status_code}", self.service, status_code)

            if status_code in (403, 429):
                wait = _rate_limit_wait(response)
                if wait is not None:
                    if attempt + 1 < self.max_retries:
                        logger.warning(
                            f"{self.service} rate limited, retrying after {wait:.0f}s "
                            f"(attempt {attempt + 1}/{self.max_retries})"
                        )
                        await asyncio.sleep(wait)
                    continue

            if status_code in RETRYABLE_SERVER_ERRORS:
                if attempt + 1 < self.max_retries:
                    backoff = 2**attempt
                    logger.warning(
                        f"{self.service} server error (HTTP {status_code}), retrying in {backoff}s "
                        f"(attempt {attempt + 1}/{self.max_retries})"
                    )
                    await asyncio.sleep(backoff)
                continue

            # Other HTTP errors - fail fast
            logger.error(f"{self.service} HTTP error {status_code}: {response.text[:500]}")
            raise last_error

        if last_error:
            log_and_continue(logger, last_error, {"url": url, "max_retries": self.max_retries}, f"{self.service} API call")
            raise last_error

        raise RuntimeError("Unexpected: No error but retries exhausted")

    async def _graphql(self, url: str, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """
        POST a GraphQL query and return its `data` object.

        Raises:
            UpstreamAPIError: On non-success HTTP status
            GraphQLResponseError: When the body carries an `errors` array
        """
        response = await self._handle_api_call("POST", url, json={"query": query, "variables": variables})
        result = response.json()
        errors = result.get("errors")
        if errors:
            raise GraphQLResponseError(f"{self.service} GraphQL errors: {json.dumps(errors)}", self.service, errors)
        data: dict[str, Any] = result.get("data") or {}
        return data
