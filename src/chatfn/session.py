"""SessionManager -- one identified conversation with a one-call entry point.

Usage::

    with SessionManager.create("gpt-3.5-turbo-0613") as session:
        session.context.append_system("You are a terse assistant.")
        print(session.managed_completion("Hello!"))
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from typing import TYPE_CHECKING

from chatfn.client import CompletionClient
from chatfn.context import ConversationContext
from chatfn.exceptions import UnhandledFunctionCallError
from chatfn.models.completion import FunctionCallOutcome
from chatfn.models.config import ClientConfig

if TYPE_CHECKING:
    from chatfn.llm.protocols import Transport
    from chatfn.models.completion import CompletionOutcome
    from chatfn.models.functions import FunctionSpecification
    from chatfn.models.turns import FunctionResultTurn

logger = logging.getLogger(__name__)


class SessionManager:
    """Wraps one ConversationContext and CompletionClient under a session id.

    The session id is generated once and only used for correlation in logs.
    """

    def __init__(
        self,
        context: ConversationContext,
        client: CompletionClient,
        *,
        session_id: str | None = None,
    ) -> None:
        self._context = context
        self._client = client
        self._session_id = session_id or str(uuid.uuid4())
        logger.debug("Session %s opened (model=%s)", self._session_id, context.model)

    @classmethod
    def create(
        cls,
        model: str,
        config: ClientConfig | None = None,
        *,
        functions: Iterable[FunctionSpecification] = (),
        transport: Transport | None = None,
        strict_arguments: bool = False,
    ) -> SessionManager:
        """Build a fresh context and client in one go.

        Args:
            model: Remote model identifier.
            config: Connection settings; read from the environment if omitted.
            functions: Functions to register up front.
            transport: Optional transport (e.g. a fake in tests).
            strict_arguments: Forwarded to CompletionClient.

        Raises:
            ConfigError: If ``config`` is omitted and no credential is set.
        """
        if config is None:
            config = ClientConfig.from_env()
        context = ConversationContext(model, functions)
        client = CompletionClient(config, transport, strict_arguments=strict_arguments)
        return cls(context, client)

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def context(self) -> ConversationContext:
        return self._context

    @property
    def client(self) -> CompletionClient:
        return self._client

    def register_function(self, spec: FunctionSpecification) -> None:
        self._context.register_function(spec)

    def append_function_result(self, name: str, result_text: str) -> FunctionResultTurn:
        return self._context.append_function_result(name, result_text)

    def complete(self) -> CompletionOutcome:
        """Run one completion cycle on this session's context."""
        return self._log_outcome(self._client.complete(self._context))

    def _log_outcome(self, outcome: CompletionOutcome) -> CompletionOutcome:
        logger.info(
            "Session %s: %s outcome after %d turn(s)",
            self._session_id,
            "function_call" if isinstance(outcome, FunctionCallOutcome) else "content",
            len(self._context),
        )
        return outcome

    def managed_completion(self, user_text: str) -> str:
        """Send ``user_text`` and return the model's text reply.

        Function calls are not executed here.

        Raises:
            ConcurrentCompletionError: If a completion is already in flight;
                no user turn is appended.
            UnhandledFunctionCallError: If the model requested a function call.
                The call is already recorded in history; submit its result
                with append_function_result() and call complete().
        """
        # One guard covers both the user turn and the completion
        with self._context.completion_guard():
            self._context.append_user(user_text)
            outcome = self._log_outcome(self._client._complete(self._context))
        if isinstance(outcome, FunctionCallOutcome):
            raise UnhandledFunctionCallError(outcome)
        return outcome.text

    def close(self) -> None:
        self._client.close()
        logger.debug("Session %s closed", self._session_id)

    def __enter__(self) -> SessionManager:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
