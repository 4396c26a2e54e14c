"""chatfn exception hierarchy.

All chatfn-specific exceptions inherit from ChatFnError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chatfn.models.completion import FunctionCallOutcome


class ChatFnError(Exception):
    """Base exception for all chatfn errors."""


class SchemaError(ChatFnError):
    """Raised when a function specification is malformed.

    Not a ValueError subclass, so it passes through pydantic validators
    unwrapped instead of becoming a ValidationError.
    """


class DuplicateFunctionError(ChatFnError):
    """Raised when a function name is registered twice on one context."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Function already registered: {name}")


class UnknownFunctionError(ChatFnError):
    """Raised when a turn references a function that was never registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Function not registered: {name}")


class ProtocolError(ChatFnError):
    """Raised when a completion response does not match the expected shape."""


class ConcurrentCompletionError(ChatFnError):
    """Raised when a completion is requested while another is in flight."""

    def __init__(self) -> None:
        super().__init__(
            "A completion is already in flight for this conversation. "
            "Wait for it to finish before calling complete() again."
        )


class ConfigError(ChatFnError):
    """Missing or invalid client configuration (e.g., no API key)."""


class UnhandledFunctionCallError(ChatFnError):
    """Raised by managed completions when the model asks to call a function.

    Attributes:
        outcome: The FunctionCallOutcome the model produced. The matching
            assistant turn is already in the conversation history.
    """

    def __init__(self, outcome: FunctionCallOutcome) -> None:
        self.outcome = outcome
        super().__init__(
            f"Model requested function '{outcome.name}' with arguments "
            f"{outcome.arguments!r}; execute it and submit the result with "
            f"append_function_result() before completing again."
        )
