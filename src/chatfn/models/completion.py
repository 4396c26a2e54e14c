"""Completion response models and outcomes.

ChatCompletion / Choice / ResponseMessage parse the body returned by the
completion service. Only ``choices[0].message`` is part of the contract;
``id``, ``created``, ``model`` and ``usage`` are carried through unvalidated.

ContentOutcome and FunctionCallOutcome are the two results of a completion
cycle (the CompletionOutcome union).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from chatfn.exceptions import ProtocolError


class ResponseFunctionCall(BaseModel):
    """``function_call`` as sent by the service: arguments are a JSON string."""

    model_config = ConfigDict(extra="ignore")

    name: str
    arguments: str = "{}"


class ResponseMessage(BaseModel):
    """The assistant message inside a choice."""

    model_config = ConfigDict(extra="ignore")

    role: str = "assistant"
    content: str | None = None
    function_call: ResponseFunctionCall | None = None


class Choice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    index: int = 0
    message: ResponseMessage
    finish_reason: str | None = None


class ChatCompletion(BaseModel):
    """Top-level completion response.

    ``choices`` is kept raw so that only the first entry has to conform;
    use ``first_choice()`` to get it validated.
    """

    model_config = ConfigDict(extra="ignore")

    id: Any = None
    created: Any = None
    model: Any = None
    choices: list[Any]
    usage: Any = None

    @classmethod
    def parse(cls, body: Any) -> ChatCompletion:
        """Validate the top-level response shape.

        Raises:
            ProtocolError: If the body is not an object or has no choices.
        """
        if not isinstance(body, dict):
            raise ProtocolError(
                f"Unexpected response format: expected a JSON object, "
                f"got {type(body).__name__}"
            )
        try:
            completion = cls.model_validate(body)
        except ValidationError as exc:
            raise ProtocolError(
                f"Unexpected response format: {exc}. Response: {body}"
            ) from exc
        if not completion.choices:
            raise ProtocolError(f"Unexpected response format: empty 'choices'. Response: {body}")
        return completion

    def first_choice(self) -> Choice:
        """Validate and return ``choices[0]``.

        Raises:
            ProtocolError: If the first choice has no well-formed ``message``.
        """
        raw = self.choices[0]
        try:
            return Choice.model_validate(raw)
        except ValidationError as exc:
            raise ProtocolError(
                f"Malformed choices[0].message: {exc}. Choice: {raw}"
            ) from exc


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContentOutcome:
    """The model answered with text.

    Attributes:
        text: The assistant's reply.
        finish_reason: Passthrough from the response, if present.
        usage: Passthrough token usage dict, if present.
    """

    text: str
    finish_reason: str | None = field(default=None, compare=False)
    usage: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class FunctionCallOutcome:
    """The model asked to invoke a declared function.

    Attributes:
        name: Name of the requested function (always registered).
        arguments: Decoded JSON arguments.
        finish_reason: Passthrough from the response, if present.
        usage: Passthrough token usage dict, if present.
    """

    name: str
    arguments: Any = None
    finish_reason: str | None = field(default=None, compare=False)
    usage: Any = field(default=None, compare=False)


CompletionOutcome = Union[ContentOutcome, FunctionCallOutcome]
