"""Transport infrastructure for chatfn.

Provides the Transport protocol, a built-in httpx transport, a tenacity
retry layer and the transport error hierarchy.
"""

from chatfn.llm.errors import (
    TransportAuthError,
    TransportError,
    TransportRateLimitError,
)
from chatfn.llm.protocols import Transport
from chatfn.llm.transport import HttpxTransport, RetryingTransport

__all__ = [
    "Transport",
    "HttpxTransport",
    "RetryingTransport",
    "TransportError",
    "TransportAuthError",
    "TransportRateLimitError",
]
