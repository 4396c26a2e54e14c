"""Transport protocol.

A transport performs the network exchange for one completion request. The
CompletionClient holds one explicitly, so independent conversations can use
independent transports and tests can substitute a fake.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Transport(Protocol):
    """Protocol for pluggable transports.

    Any object with send() and close() methods matching this signature works.
    The built-in HttpxTransport implements this protocol.
    """

    def send(
        self,
        endpoint: str,
        headers: Mapping[str, str],
        body: dict[str, Any],
    ) -> Any:
        """POST ``body`` as JSON to ``endpoint`` and return the decoded JSON reply.

        Raises:
            TransportError: On any network or HTTP-level failure.
        """
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...
