"""Built-in httpx transport and tenacity retry layer.

HttpxTransport performs exactly one POST per send() and maps HTTP failures
onto the TransportError hierarchy. Retrying is not its concern: wrap it in
RetryingTransport to add exponential backoff for transient errors.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx
import tenacity

from chatfn.exceptions import ProtocolError
from chatfn.llm.errors import (
    TransportAuthError,
    TransportError,
    TransportRateLimitError,
)
from chatfn.llm.protocols import Transport

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_AUTH_ERROR_STATUS_CODES = {401, 403}


class HttpxTransport:
    """Sync httpx transport for JSON POST requests.

    Implements the Transport protocol. Fails fast: no retries.

    Usage::

        with HttpxTransport(timeout=30.0) as transport:
            body = transport.send(url, {"Authorization": "Bearer sk-..."}, payload)
    """

    def __init__(
        self,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            timeout: Request timeout in seconds (ignored if ``client`` is given).
            client: Pre-built httpx.Client to use, e.g. one with a
                MockTransport in tests. The transport closes it on close().
        """
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def send(
        self,
        endpoint: str,
        headers: Mapping[str, str],
        body: dict[str, Any],
    ) -> Any:
        """POST ``body`` and return the decoded JSON response.

        Raises:
            TransportAuthError: On 401/403.
            TransportRateLimitError: On 429.
            TransportError: On other HTTP errors, timeouts and connection failures.
            ProtocolError: If the response body is not JSON.
        """
        try:
            response = self._client.post(endpoint, json=body, headers=dict(headers))
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Failed to receive the response from {endpoint}: {exc}"
            ) from exc

        # Check for auth errors before the generic status check
        if response.status_code in _AUTH_ERROR_STATUS_CODES:
            raise TransportAuthError(
                f"Authentication failed: HTTP {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        if response.status_code == 429:
            raise TransportRateLimitError(
                f"Rate limited by {endpoint}: {response.text}",
                retry_after=_retry_after_seconds(response),
            )

        if response.status_code >= 400:
            raise TransportError(
                f"HTTP {response.status_code} from {endpoint} - {response.text}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ProtocolError(
                f"Response from {endpoint} is not valid JSON: {response.text[:200]!r}"
            ) from exc

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _retry_after_seconds(response: httpx.Response) -> float | None:
    """Numeric Retry-After header in seconds; the HTTP-date form yields None."""
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


def _is_retryable(exc: BaseException) -> bool:
    """Check if an exception is retryable.

    Retryable: 429, 500, 502, 503, 504, failures without a response.
    Not retryable: 401, 403, 400, other client errors, protocol errors.
    """
    if isinstance(exc, TransportAuthError):
        return False
    if isinstance(exc, TransportRateLimitError):
        return True
    if isinstance(exc, TransportError):
        return exc.status_code is None or exc.status_code in _RETRYABLE_STATUS_CODES
    return False


def _wait_for(base: tenacity.wait.wait_base):
    """Honor Retry-After on rate limits, otherwise fall back to ``base``."""

    def wait(retry_state: tenacity.RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, TransportRateLimitError) and exc.retry_after is not None:
            return exc.retry_after
        return base(retry_state)

    return wait


class RetryingTransport:
    """Retry policy layer around any Transport.

    Uses tenacity.Retrying programmatically (not as decorator) so that
    max_attempts is configurable per-instance.
    """

    def __init__(
        self,
        inner: Transport,
        max_attempts: int = 3,
        *,
        wait: tenacity.wait.wait_base | None = None,
    ) -> None:
        """Wrap ``inner``.

        Args:
            inner: Transport performing the actual request.
            max_attempts: Total attempts per send, including the first.
            wait: Backoff strategy; defaults to jittered exponential backoff.
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self._inner = inner
        self._max_attempts = max_attempts
        self._wait = wait if wait is not None else (
            tenacity.wait_exponential(multiplier=1, min=1, max=30)
            + tenacity.wait_random(0, 2)
        )

    @property
    def inner(self) -> Transport:
        return self._inner

    def send(
        self,
        endpoint: str,
        headers: Mapping[str, str],
        body: dict[str, Any],
    ) -> Any:
        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=_wait_for(self._wait),
            stop=tenacity.stop_after_attempt(self._max_attempts),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retryer(self._inner.send, endpoint, headers, body)

    def close(self) -> None:
        self._inner.close()

    def __enter__(self) -> RetryingTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
