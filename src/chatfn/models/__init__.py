"""Data models for chatfn: function specifications, turns, responses, config."""

from chatfn.models.completion import (
    ChatCompletion,
    Choice,
    CompletionOutcome,
    ContentOutcome,
    FunctionCallOutcome,
    ResponseFunctionCall,
    ResponseMessage,
)
from chatfn.models.config import ClientConfig
from chatfn.models.functions import (
    FunctionSpecification,
    Parameters,
    Property,
    load_functions,
)
from chatfn.models.turns import (
    AssistantTurn,
    ConversationTurn,
    FunctionCallRequest,
    FunctionResultTurn,
    SystemTurn,
    UserTurn,
)

__all__ = [
    "AssistantTurn",
    "ChatCompletion",
    "Choice",
    "ClientConfig",
    "CompletionOutcome",
    "ContentOutcome",
    "ConversationTurn",
    "FunctionCallOutcome",
    "FunctionCallRequest",
    "FunctionResultTurn",
    "FunctionSpecification",
    "Parameters",
    "Property",
    "ResponseFunctionCall",
    "ResponseMessage",
    "SystemTurn",
    "UserTurn",
    "load_functions",
]
