"""Base HTTP client for the submission repository."""

import logging
from abc import ABC, abstractmethod
from time import sleep
from typing import Any

import httpx

from .exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 1


class Client(ABC):
    """Base class for repository clients.

    The underlying httpx.Client is created on first use and follows
    redirects, since repositories commonly hand file downloads off to
    separate storage. Transient failures (connect errors, timeouts and
    429 responses) are retried; other error responses are not.

    Config keys:
        base_url (required): Base URL of the repository
        timeout: Request timeout in seconds (default: 30)
        retry_attempts: Attempts per request before giving up (default: 3)
        retry_delay: Seconds between attempts, unless the repository sends
                     a Retry-After header (default: 1)
        headers: Additional headers sent with every request
        auth_token: Bearer token for the Authorization header
        user_agent: User-Agent header value
    """

    def __init__(self, config: dict):
        if "base_url" not in config:
            raise ValueError("config must include 'base_url'")

        self._config = config
        self._client: httpx.Client | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.base_url!r})"

    @property
    def base_url(self) -> str:
        return str(self._config["base_url"])

    @property
    def timeout(self) -> float:
        return float(self._config.get("timeout", DEFAULT_TIMEOUT))

    @property
    def retry_attempts(self) -> int:
        return int(self._config.get("retry_attempts", DEFAULT_RETRY_ATTEMPTS))

    @property
    def retry_delay(self) -> float:
        return float(self._config.get("retry_delay", DEFAULT_RETRY_DELAY))

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._config.get("headers", {}))

    @property
    def request_headers(self) -> dict[str, str]:
        """Configured headers plus authorization and user agent, if set."""
        headers = self.headers
        if self._config.get("auth_token"):
            headers["Authorization"] = f"Bearer {self._config['auth_token']}"
        if self._config.get("user_agent"):
            headers["User-Agent"] = str(self._config["user_agent"])
        return headers

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.request_headers,
                follow_redirects=True,
            )
        return self._client

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Raise for error responses, closing them first.

        A streamed error response would otherwise hold its connection until
        garbage collection.

        Raises:
            NotFoundError: For 404 responses
            RateLimitError: For 429 responses, with any Retry-After delay
            APIError: For other non-2xx responses
        """
        if response.is_success:
            return response

        status_code = response.status_code
        response.close()

        if status_code == 404:
            raise NotFoundError(f"Resource not found: {response.url}")
        if status_code == 429:
            raise RateLimitError(
                f"Rate limit exceeded: {response.url}",
                retry_after=_retry_after(response),
            )
        raise APIError(
            f"API error {status_code}: {response.url}",
            status_code=status_code,
        )

    def _send(self, method: str, path: str, stream: bool, **kwargs) -> httpx.Response:
        if stream:
            request = self.client.build_request(method, path, **kwargs)
            return self.client.send(request, stream=True)
        return self.client.request(method, path, **kwargs)

    def _request(
        self,
        method: str,
        path: str,
        stream: bool = False,
        **kwargs,
    ) -> httpx.Response:
        """Send a request, retrying transient failures.

        Args:
            method: HTTP method
            path: Path relative to base_url, or an absolute URL
            stream: If True, the body is not read; the caller must close
                    the response
            **kwargs: Passed through to httpx

        Returns:
            The successful response

        Raises:
            ConnectionError: If every attempt fails with a network error
            RateLimitError: If the last attempt is rate limited
            APIError: For any other non-2xx response
        """
        last_exception: Exception | None = None

        for attempt in range(1, self.retry_attempts + 1):
            delay = self.retry_delay
            try:
                return self._handle_response(self._send(method, path, stream, **kwargs))
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                logger.warning(
                    f"{type(e).__name__} on {method} {path} "
                    f"(attempt {attempt}/{self.retry_attempts}): {e}"
                )
            except RateLimitError as e:
                if attempt == self.retry_attempts:
                    raise
                if e.retry_after is not None:
                    delay = e.retry_after
                logger.warning(
                    f"Rate limited on {method} {path} "
                    f"(attempt {attempt}/{self.retry_attempts}); retrying in {delay}s"
                )

            if attempt < self.retry_attempts:
                sleep(delay)

        raise ConnectionError(
            f"Connection failed after {self.retry_attempts} attempts"
        ) from last_exception

    def get(self, path: str, **kwargs) -> httpx.Response:
        """Send a GET request.

        Args:
            path: Path relative to base_url, or an absolute URL
            **kwargs: Passed through to httpx

        Returns:
            The successful response
        """
        return self._request("GET", path, **kwargs)

    @abstractmethod
    def fetch(self, *args, **kwargs) -> Any:
        """Fetch a resource from the repository."""
        pass


def _retry_after(response: httpx.Response) -> float | None:
    """Seconds to wait from a Retry-After header, if it holds a number."""
    value = response.headers.get("Retry-After")
    try:
        return max(float(value), 0.0)
    except (TypeError, ValueError):
        return None
