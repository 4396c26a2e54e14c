"""Shared test fixtures for chatfn.

Provides a scripted FakeTransport, canned response builders and a
pre-registered weather function specification.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import pytest

from chatfn import (
    ClientConfig,
    CompletionClient,
    ConversationContext,
    FunctionSpecification,
    Parameters,
    Property,
)


class FakeTransport:
    """Transport double that returns queued replies and records requests.

    Each queued item is either a response body, an exception instance to
    raise, or a callable ``(endpoint, headers, body) -> response``.
    """

    def __init__(self, *replies: Any) -> None:
        self.replies: list[Any] = list(replies)
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    def queue(self, *replies: Any) -> None:
        self.replies.extend(replies)

    def send(self, endpoint: str, headers: Mapping[str, str], body: dict[str, Any]) -> Any:
        self.requests.append({
            "endpoint": endpoint,
            "headers": dict(headers),
            # Snapshot: the payload must reflect history at send time
            "body": json.loads(json.dumps(body)),
        })
        if not self.replies:
            raise AssertionError("FakeTransport has no queued reply")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            return reply(endpoint, headers, body)
        return reply

    def close(self) -> None:
        self.closed = True


def content_response(content: str = "Hello", **extra: Any) -> dict:
    """Build a realistic chat completion response carrying text."""
    body = {
        "id": "chatcmpl-test123",
        "object": "chat.completion",
        "created": 1686983542,
        "model": "gpt-3.5-turbo-0613",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }
    body.update(extra)
    return body


def function_call_response(name: str, arguments: str | dict) -> dict:
    """Build a response in which the model requests a function call."""
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return {
        "id": "chatcmpl-test456",
        "object": "chat.completion",
        "created": 1686983543,
        "model": "gpt-3.5-turbo-0613",
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": None,
                    "function_call": {"name": name, "arguments": arguments},
                },
                "finish_reason": "function_call",
            }
        ],
        "usage": {"prompt_tokens": 80, "completion_tokens": 18, "total_tokens": 98},
    }


def make_weather_spec(name: str = "get_current_weather") -> FunctionSpecification:
    return FunctionSpecification(
        name=name,
        description="Get the current weather in a given location",
        parameters=Parameters(
            properties={
                "location": Property(
                    type="string",
                    description="The city and state, e.g. San Francisco, CA",
                ),
                "unit": Property(type="string", enum=("celsius", "fahrenheit")),
            },
            required=("location",),
        ),
    )


@pytest.fixture
def weather_spec() -> FunctionSpecification:
    return make_weather_spec()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(api_key="test-key", base_url="http://test-api/v1")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(config: ClientConfig, transport: FakeTransport) -> CompletionClient:
    return CompletionClient(config, transport)


@pytest.fixture
def context() -> ConversationContext:
    """A context with one user turn and no functions."""
    ctx = ConversationContext("gpt-3.5-turbo-0613")
    ctx.append_user("Hi there")
    return ctx


@pytest.fixture
def weather_context(weather_spec: FunctionSpecification) -> ConversationContext:
    """A context with get_current_weather registered and one user turn."""
    ctx = ConversationContext("gpt-3.5-turbo-0613", [weather_spec])
    ctx.append_user("What's the weather like in Madrid?")
    return ctx


