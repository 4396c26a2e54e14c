"""Conversation turn models.

Each role has its own frozen Pydantic model, joined into the
ConversationTurn discriminated union on ``role``. Role-dependent fields are
enforced by the model shapes themselves:

- SystemTurn / UserTurn: ``content`` only.
- AssistantTurn: exactly one of ``content`` or ``function_call``.
- FunctionResultTurn: ``name`` of the function and its ``content`` (result text).

Role values are the lower-case names used on the wire.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, JsonValue, model_validator


class FunctionCallRequest(BaseModel):
    """A model's request to invoke a declared function.

    ``arguments`` holds the decoded JSON value; it is re-encoded as a JSON
    string when sent back to the service.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: JsonValue = None

    def to_wire(self) -> dict[str, str]:
        return {"name": self.name, "arguments": json.dumps(self.arguments)}


class _BaseTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    def to_wire(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}  # type: ignore[attr-defined]


class SystemTurn(_BaseTurn):
    """System-level instructions."""

    role: Literal["system"] = "system"
    content: str


class UserTurn(_BaseTurn):
    """A message from the user."""

    role: Literal["user"] = "user"
    content: str


class AssistantTurn(_BaseTurn):
    """A reply from the model: either text or a function-call request."""

    role: Literal["assistant"] = "assistant"
    content: str | None = None
    function_call: FunctionCallRequest | None = None

    @model_validator(mode="after")
    def _exactly_one_payload(self) -> AssistantTurn:
        if (self.content is None) == (self.function_call is None):
            raise ValueError(
                "AssistantTurn must carry exactly one of content or function_call"
            )
        return self

    @property
    def is_function_call(self) -> bool:
        return self.function_call is not None

    def to_wire(self) -> dict[str, Any]:
        if self.function_call is None:
            return {"role": self.role, "content": self.content}
        return {
            "role": self.role,
            "content": None,
            "function_call": self.function_call.to_wire(),
        }


class FunctionResultTurn(_BaseTurn):
    """The result of a function call, supplied by the caller."""

    role: Literal["function"] = "function"
    name: str
    content: str

    def to_wire(self) -> dict[str, Any]:
        return {"role": self.role, "name": self.name, "content": self.content}


ConversationTurn = Annotated[
    Union[SystemTurn, UserTurn, AssistantTurn, FunctionResultTurn],
    Field(discriminator="role"),
]
