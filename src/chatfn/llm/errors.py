"""Transport-specific error hierarchy.

All transport errors inherit from ChatFnError for consistent exception handling.
"""

from __future__ import annotations

from chatfn.exceptions import ChatFnError


class TransportError(ChatFnError):
    """Network or HTTP-layer failure while talking to the completion service.

    Attributes:
        status_code: HTTP status of the failed response, or None when no
            response was received (timeouts, connection failures).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class TransportAuthError(TransportError):
    """Authentication failed (401/403)."""


class TransportRateLimitError(TransportError):
    """The service answered 429.

    Attributes:
        retry_after: Delay in seconds the service asked for, when it sent a
            numeric Retry-After header.
    """

    def __init__(self, message: str = "Rate limited", retry_after: float | None = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after

    def __str__(self) -> str:
        text = super().__str__()
        if self.retry_after is None:
            return text
        return f"{text} (retry in {self.retry_after:g}s)"
