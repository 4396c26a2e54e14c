"""chatfn: conversation state and function calling for chat-completion APIs.

Declare functions, accumulate turns, and let each completion cycle decide
whether the model answered with text or asked to call one of your functions.
"""

from chatfn._version import __version__

# Core entry points
from chatfn.client import CompletionClient
from chatfn.context import ConversationContext
from chatfn.session import SessionManager

# Function specifications
from chatfn.models.functions import (
    FunctionSpecification,
    Parameters,
    Property,
    load_functions,
)

# Turns
from chatfn.models.turns import (
    AssistantTurn,
    ConversationTurn,
    FunctionCallRequest,
    FunctionResultTurn,
    SystemTurn,
    UserTurn,
)

# Outcomes and configuration
from chatfn.models.completion import CompletionOutcome, ContentOutcome, FunctionCallOutcome
from chatfn.models.config import ClientConfig

# Transport
from chatfn.llm import HttpxTransport, RetryingTransport, Transport

# Exceptions
from chatfn.exceptions import (
    ChatFnError,
    ConcurrentCompletionError,
    ConfigError,
    DuplicateFunctionError,
    ProtocolError,
    SchemaError,
    UnhandledFunctionCallError,
    UnknownFunctionError,
)
from chatfn.llm.errors import (
    TransportAuthError,
    TransportError,
    TransportRateLimitError,
)

__all__ = [
    "__version__",
    # Core
    "CompletionClient",
    "ConversationContext",
    "SessionManager",
    # Function specifications
    "FunctionSpecification",
    "Parameters",
    "Property",
    "load_functions",
    # Turns
    "AssistantTurn",
    "ConversationTurn",
    "FunctionCallRequest",
    "FunctionResultTurn",
    "SystemTurn",
    "UserTurn",
    # Outcomes and configuration
    "ClientConfig",
    "CompletionOutcome",
    "ContentOutcome",
    "FunctionCallOutcome",
    # Transport
    "HttpxTransport",
    "RetryingTransport",
    "Transport",
    # Exceptions
    "ChatFnError",
    "ConcurrentCompletionError",
    "ConfigError",
    "DuplicateFunctionError",
    "ProtocolError",
    "SchemaError",
    "TransportAuthError",
    "TransportError",
    "TransportRateLimitError",
    "UnhandledFunctionCallError",
    "UnknownFunctionError",
]
