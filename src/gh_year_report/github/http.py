"""GitHub HTTP client with rate limit handling.

Async HTTP client used by the GraphQL layer. Retries server errors, timeouts
and network failures with exponential backoff, and waits out primary and
secondary rate limits up to the configured retry budget.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from gh_year_report import __version__
from gh_year_report.github.auth import GitHubAuth

logger = logging.getLogger(__name__)


class RateLimitInfo(BaseModel):
    """GitHub API rate limit information from response headers."""

    limit: int
    remaining: int
    reset: datetime
    used: int
    resource: str = "core"

    @classmethod
    def from_headers(cls, headers: httpx.Headers) -> Optional["RateLimitInfo"]:
        """Extract rate limit info from response headers.

        Returns:
            RateLimitInfo if headers present, None otherwise.
        """
        if "x-ratelimit-limit" not in headers:
            return None

        reset_timestamp = int(headers.get("x-ratelimit-reset", "0"))

        return cls(
            limit=int(headers.get("x-ratelimit-limit", "0")),
            remaining=int(headers.get("x-ratelimit-remaining", "0")),
            reset=datetime.fromtimestamp(reset_timestamp, tz=UTC),
            used=int(headers.get("x-ratelimit-used", "0")),
            resource=headers.get("x-ratelimit-resource", "core"),
        )


@dataclass
class GitHubResponse:
    """GitHub API response with parsed data and metadata."""

    status_code: int
    data: Any
    headers: httpx.Headers
    rate_limit: RateLimitInfo | None = None
    url: str = ""

    @property
    def is_success(self) -> bool:
        """Whether the status code is 2xx."""
        return 200 <= self.status_code < 300


@dataclass
class HTTPRateLimitState:
    """Tracks rate limit state across HTTP requests."""

    last_rate_limit: RateLimitInfo | None = None
    last_check: datetime = field(default_factory=lambda: datetime.now(UTC))
    requests_made: int = 0
    rate_limit_hits: int = 0

    def update(self, rate_limit: RateLimitInfo | None) -> None:
        """Count a request and remember the rate limit it reported, if any."""
        self.requests_made += 1
        if rate_limit:
            self.last_rate_limit = rate_limit
            self.last_check = datetime.now(UTC)

            if rate_limit.remaining == 0:
                self.rate_limit_hits += 1
                logger.warning(
                    "Rate limit reached. Limit: %d, Reset: %s",
                    rate_limit.limit,
                    rate_limit.reset.isoformat(),
                )


class GitHubHTTPError(Exception):
    """Base exception for GitHub HTTP errors."""


class RateLimitExceeded(GitHubHTTPError):
    """Raised when the rate limit is still exhausted after all retries."""

    def __init__(self, reset_at: datetime) -> None:
        self.reset_at = reset_at
        super().__init__(f"Rate limit exceeded. Resets at {reset_at.isoformat()}")


class GitHubClient:
    """Async HTTP client for the GitHub API.

    Features:
    - Automatic authentication
    - Retry logic with exponential backoff
    - Rate limit detection and handling
    """

    BASE_URL = "https://api.github.com"
    DEFAULT_TIMEOUT = 30.0
    DEFAULT_MAX_RETRIES = 3
    INITIAL_BACKOFF = 1.0
    BACKOFF_MULTIPLIER = 2.0

    def __init__(
        self,
        auth: GitHubAuth | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_url: str = BASE_URL,
    ) -> None:
        """Initialize GitHub HTTP client.

        Args:
            auth: GitHubAuth instance. If None, creates from environment.
            timeout: Request timeout in seconds.
            max_retries: Maximum number of retries for failed requests.
            base_url: Base URL for GitHub API.
        """
        self._auth = auth or GitHubAuth()
        self._timeout = timeout
        self._max_retries = max_retries
        self._base_url = base_url.rstrip("/")

        self._client: httpx.AsyncClient | None = None
        self._rate_limit_state = HTTPRateLimitState()

    @property
    def rate_limit_state(self) -> HTTPRateLimitState:
        """Rate limit bookkeeping for every request made by this client."""
        return self._rate_limit_state

    def _get_headers(self) -> dict[str, str]:
        """Build default headers: JSON media type, user agent and authorization.

        Returns:
            Header mapping applied to every request.
        """
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": f"gh-year-report/{__version__}",
        }
        headers.update(self._auth.get_authorization_header())
        return headers

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Create the underlying httpx client on first use.

        Returns:
            The shared httpx.AsyncClient.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=self._get_headers(),
                follow_redirects=True,
            )
        return self._client

    def _rate_limit_wait(self, response: httpx.Response, attempt: int) -> float | None:
        """Seconds to wait before retrying a rate limited response.

        Returns:
            Wait time, or None if the response is not rate limited.

        Raises:
            RateLimitExceeded: If the primary limit is exhausted and no retries remain.
        """
        retry_after = response.headers.get("retry-after")
        if retry_after:
            wait_seconds = int(retry_after)
            logger.warning("Secondary rate limit hit. Retry after %d seconds", wait_seconds)
            return float(wait_seconds)

        rate_limit = RateLimitInfo.from_headers(response.headers)
        if rate_limit and rate_limit.remaining == 0:
            if attempt >= self._max_retries:
                raise RateLimitExceeded(reset_at=rate_limit.reset)

            wait_seconds = max(int((rate_limit.reset - datetime.now(UTC)).total_seconds()) + 1, 0)
            logger.warning(
                "Primary rate limit exhausted. Waiting %d seconds until %s",
                wait_seconds,
                rate_limit.reset.isoformat(),
            )
            return float(wait_seconds)

        return None

    def _backoff(self, attempt: int) -> float:
        """Exponential delay before retry number attempt + 1."""
        return self.INITIAL_BACKOFF * (self.BACKOFF_MULTIPLIER**attempt)

    async def _do_request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Execute an HTTP request with retry logic.

        Raises:
            GitHubHTTPError: On request failure after retries.
            RateLimitExceeded: If rate limit exceeded.
        """
        client = await self._ensure_client()
        attempt = 0

        while True:
            logger.debug("%s %s (attempt %d)", method, path, attempt + 1)
            wait_seconds: float | None = None

            try:
                response = await client.request(method, path, **kwargs)
            except httpx.TimeoutException as e:
                logger.warning("Timeout for %s %s", method, path)
                if attempt >= self._max_retries:
                    raise GitHubHTTPError(f"Request timeout: {e}") from e
            except httpx.NetworkError as e:
                logger.warning("Network error for %s %s: %s", method, path, e)
                if attempt >= self._max_retries:
                    raise GitHubHTTPError(f"Network error: {e}") from e
            else:
                if response.status_code in (429, 403):
                    wait_seconds = self._rate_limit_wait(response, attempt)
                    if wait_seconds is None:
                        return response
                elif 500 <= response.status_code < 600:
                    logger.warning("Server error %d for %s %s", response.status_code, method, path)
                else:
                    return response

                if attempt >= self._max_retries:
                    raise GitHubHTTPError(
                        f"Max retries ({self._max_retries}) exceeded for {method} {path}"
                    )

            if wait_seconds is None:
                wait_seconds = self._backoff(attempt)
            logger.debug(
                "Retry %d/%d for %s %s after %.1fs",
                attempt + 1,
                self._max_retries,
                method,
                path,
                wait_seconds,
            )
            await asyncio.sleep(wait_seconds)
            attempt += 1

    async def request(self, method: str, path: str, **kwargs: Any) -> GitHubResponse:
        """Make an HTTP request to the GitHub API.

        Args:
            method: HTTP method (GET, POST, etc.).
            path: API path (e.g., "/graphql").
            **kwargs: Additional arguments passed to httpx (params, json, etc.).

        Returns:
            GitHubResponse with parsed data and metadata.
        """
        response = await self._do_request(method, path, **kwargs)

        rate_limit = RateLimitInfo.from_headers(response.headers)
        self._rate_limit_state.update(rate_limit)

        data = None
        if response.content:
            try:
                data = response.json()
            except ValueError as e:
                logger.warning("Failed to parse JSON response: %s", e)
                data = response.text

        return GitHubResponse(
            status_code=response.status_code,
            data=data,
            headers=response.headers,
            rate_limit=rate_limit,
            url=str(response.url),
        )

    async def post(self, path: str, **kwargs: Any) -> GitHubResponse:
        """Send a POST request.

        Args:
            path: API path, relative to the base URL.
            **kwargs: Passed through to request (json, params, ...).

        Returns:
            GitHubResponse for the request.
        """
        return await self.request("POST", path, **kwargs)

    async def close(self) -> None:
        """Close the HTTP client and cleanup resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubClient":
        """Open the client for use in an async with block."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Close the client when the async with block exits."""
        await self.close()
