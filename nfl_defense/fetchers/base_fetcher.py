import json
from typing import Any, Dict, Optional

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from nfl_defense.config.settings import settings

# Define common HTTP status codes that warrant a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


class FetchError(Exception):
    """Raised when an upstream document cannot be fetched or parsed."""

    pass


class RateLimitError(FetchError):
    """Exception raised for rate limit errors (429)."""

    pass


class PrimarySourceError(FetchError):
    """The standings document failed or held no teams; the request cannot proceed."""

    pass


class _RetryableStatus(FetchError):
    def __init__(self, response: httpx.Response):
        super().__init__(f"HTTP error: {response.status_code}")
        self.response = response


class BaseFetcher:
    """Fetches JSON documents over HTTP.

    The number of attempts per request comes from ``settings.request_attempts``;
    with the default of 1 a failure is reported immediately.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        attempts: Optional[int] = None,
    ):
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout),
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )
        self.attempts = attempts or settings.request_attempts

    async def __aenter__(self) -> "BaseFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def fetch_json(
        self, url: str, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """GETs ``url`` and returns the parsed JSON body.

        Raises:
            FetchError: non-success status, transport failure or invalid JSON.
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.attempts),
                wait=wait_exponential(multiplier=1, min=1, max=10),
                retry=retry_if_exception_type(
                    (httpx.RequestError, _RetryableStatus, RateLimitError)
                ),
                reraise=False,
            ):
                with attempt:
                    response = await self._make_request(url, params)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error(
                f"Giving up on {url} after {self.attempts} attempt(s). Last exception: {cause}"
            )
            if isinstance(cause, RateLimitError):
                raise cause
            raise FetchError(f"Failed request to {url}: {cause}") from cause

        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Invalid JSON from {url}: {e}")
            logger.debug(f"Raw response content: {response.text[:500]}")
            raise FetchError(f"Invalid JSON from {url}") from e

    async def _make_request(
        self, url: str, params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        logger.debug(f"GET {url} params={params}")
        response = await self.client.get(url, params=params)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            logger.warning(f"Rate limit hit (429) at {url}. Retry-After: {retry_after}")
            raise RateLimitError(f"Rate limited by upstream at {url}")

        if response.status_code in RETRYABLE_STATUS_CODES:
            logger.warning(f"Upstream status {response.status_code} for {url}")
            raise _RetryableStatus(response)

        if response.is_error:
            logger.error(f"HTTP error {response.status_code} for {url}")
            raise FetchError(f"HTTP error: {response.status_code}")

        logger.debug(f"Request successful: {response.status_code} for {url}")
        return response

    async def close(self):
        """Closes the underlying HTTP client."""
        await self.client.aclose()
        logger.debug("Closed HTTP client")
