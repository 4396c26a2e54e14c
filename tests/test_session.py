"""Tests for SessionManager.

Tests cover session identity, the create() factory, managed_completion()
for both outcome kinds, and lifecycle.
"""

from __future__ import annotations

import threading
import uuid

import pytest

from chatfn import (
    ClientConfig,
    CompletionClient,
    ConfigError,
    ContentOutcome,
    ConcurrentCompletionError,
    ConversationContext,
    FunctionCallOutcome,
    FunctionSpecification,
    ProtocolError,
    SessionManager,
    UnhandledFunctionCallError,
)
from tests.conftest import FakeTransport, content_response, function_call_response


@pytest.fixture
def session(config, transport, weather_spec) -> SessionManager:
    return SessionManager.create(
        "gpt-3.5-turbo-0613",
        config,
        functions=[weather_spec],
        transport=transport,
    )


# ---------------------------------------------------------------------------
# Identity and construction
# ---------------------------------------------------------------------------


class TestSessionIdentity:

    def test_session_id_is_uuid(self, session):
        assert str(uuid.UUID(session.session_id)) == session.session_id

    def test_session_ids_are_unique(self, config, transport):
        ids = {
            SessionManager.create("gpt-4", config, transport=transport).session_id
            for _ in range(20)
        }
        assert len(ids) == 20

    def test_explicit_session_id(self, client):
        session = SessionManager(ConversationContext("gpt-4"), client, session_id="abc")
        assert session.session_id == "abc"

    def test_create_registers_functions(self, session):
        assert list(session.context.functions) == ["get_current_weather"]
        assert session.context.model == "gpt-3.5-turbo-0613"
        assert len(session.context) == 0

    def test_create_reads_config_from_env(self, monkeypatch, transport):
        monkeypatch.setenv("CHATFN_API_KEY", "env-key")
        session = SessionManager.create("gpt-4", transport=transport)
        assert session.client.config.api_key == "env-key"

    def test_create_without_credential(self, monkeypatch, transport):
        monkeypatch.delenv("CHATFN_API_KEY", raising=False)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ConfigError):
            SessionManager.create("gpt-4", transport=transport)

    def test_create_forwards_strict_arguments(self, config, transport, weather_spec):
        strict = SessionManager.create(
            "gpt-4", config, functions=[weather_spec], transport=transport, strict_arguments=True
        )
        strict.context.append_user("Weather?")
        transport.queue(function_call_response("get_current_weather", {}))
        with pytest.raises(ProtocolError):
            strict.complete()


# ---------------------------------------------------------------------------
# managed_completion
# ---------------------------------------------------------------------------


class TestManagedCompletion:

    def test_content_reply(self, session, transport):
        transport.queue(content_response("Hello! How can I help?"))

        reply = session.managed_completion("Hi")

        assert reply == "Hello! How can I help?"
        assert [t.role for t in session.context.history] == ["user", "assistant"]
        assert session.context.history[0].content == "Hi"

    def test_function_call_raises_with_outcome(self, session, transport):
        transport.queue(function_call_response("get_current_weather", {"location": "Madrid"}))

        with pytest.raises(UnhandledFunctionCallError) as exc_info:
            session.managed_completion("Weather in Madrid?")

        assert exc_info.value.outcome == FunctionCallOutcome(
            "get_current_weather", {"location": "Madrid"}
        )
        assert "get_current_weather" in str(exc_info.value)
        # The call is already recorded
        assert session.context.last_turn.is_function_call

    def test_resume_after_function_call(self, session, transport):
        transport.queue(
            function_call_response("get_current_weather", {"location": "Madrid"}),
            content_response("22 degrees in Madrid."),
        )
        with pytest.raises(UnhandledFunctionCallError):
            session.managed_completion("Weather in Madrid?")

        session.append_function_result("get_current_weather", "22")
        outcome = session.complete()

        assert outcome == ContentOutcome("22 degrees in Madrid.")
        assert [t.role for t in session.context.history] == [
            "user", "assistant", "function", "assistant",
        ]

    def test_failed_completion_keeps_user_turn(self, session, transport):
        transport.queue({"choices": []})
        with pytest.raises(ProtocolError):
            session.managed_completion("Hi")
        assert [t.role for t in session.context.history] == ["user"]

    def test_rejected_concurrent_call_appends_nothing(self, config):
        entered = threading.Event()
        release = threading.Event()

        def slow(endpoint, headers, body):
            entered.set()
            release.wait(timeout=5)
            return content_response("first reply")

        session = SessionManager.create("gpt-4", config, transport=FakeTransport(slow))
        results: dict = {}
        worker = threading.Thread(
            target=lambda: results.setdefault("reply", session.managed_completion("first"))
        )
        worker.start()
        try:
            assert entered.wait(timeout=5)
            with pytest.raises(ConcurrentCompletionError):
                session.managed_completion("second")
            assert [t.content for t in session.context.history] == ["first"]
        finally:
            release.set()
            worker.join(timeout=5)

        assert results["reply"] == "first reply"
        assert [(t.role, t.content) for t in session.context.history] == [
            ("user", "first"),
            ("assistant", "first reply"),
        ]
        assert not session.context.in_flight

    def test_register_function_through_session(self, config, transport):
        session = SessionManager.create("gpt-4", config, transport=transport)
        session.register_function(FunctionSpecification(name="get_time"))
        assert "get_time" in session.context.functions


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestSessionLifecycle:

    def test_context_manager_closes_client(self):
        closed: list[bool] = []

        class OwnedClient(CompletionClient):
            def close(self) -> None:
                closed.append(True)

        client = OwnedClient(ClientConfig(api_key="k"), FakeTransport())
        with SessionManager(ConversationContext("gpt-4"), client):
            pass
        assert closed == [True]

    def test_injected_transport_left_open(self, session, transport):
        with session:
            pass
        assert not transport.closed
