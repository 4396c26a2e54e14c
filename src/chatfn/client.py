"""CompletionClient -- one request/response cycle against a ConversationContext.

A cycle builds the request body from the context, sends it through the
Transport, parses the reply and appends exactly one assistant turn. The
append is the last step and only happens once the response has been fully
validated; on any failure the context is left as it was.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chatfn.exceptions import ProtocolError, UnknownFunctionError
from chatfn.llm.transport import HttpxTransport, RetryingTransport
from chatfn.models.completion import (
    ChatCompletion,
    CompletionOutcome,
    ContentOutcome,
    FunctionCallOutcome,
)

if TYPE_CHECKING:
    from chatfn.context import ConversationContext
    from chatfn.llm.protocols import Transport
    from chatfn.models.config import ClientConfig

logger = logging.getLogger(__name__)


class CompletionClient:
    """Executes completion cycles for conversations.

    Holds connection settings and a Transport; carries no conversation
    state of its own, so one client can serve many contexts (but each
    context allows only one completion at a time).

    Usage::

        with CompletionClient(ClientConfig.from_env()) as client:
            outcome = client.complete(ctx)
            if isinstance(outcome, FunctionCallOutcome):
                result = my_functions[outcome.name](**outcome.arguments)
                ctx.append_function_result(outcome.name, json.dumps(result))
                outcome = client.complete(ctx)
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Transport | None = None,
        *,
        strict_arguments: bool = False,
    ) -> None:
        """Initialize the client.

        Args:
            config: Validated connection settings.
            transport: Transport to send requests through. When omitted an
                HttpxTransport is built from ``config`` (wrapped in a
                RetryingTransport if ``config.max_retries > 1``) and owned
                by this client.
            strict_arguments: If True, function-call arguments are checked
                against the declared parameters and non-conforming calls
                are rejected with ProtocolError.
        """
        self._config = config
        self._owns_transport = transport is None
        if transport is None:
            transport = HttpxTransport(timeout=config.timeout)
            if config.max_retries > 1:
                transport = RetryingTransport(transport, max_attempts=config.max_retries)
        self._transport = transport
        self._strict_arguments = strict_arguments

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def transport(self) -> Transport:
        return self._transport

    def complete(self, context: ConversationContext) -> CompletionOutcome:
        """Run one completion cycle and append the resulting assistant turn.

        Returns:
            ContentOutcome if the model answered with text, or
            FunctionCallOutcome if it requested a declared function.

        Raises:
            ConcurrentCompletionError: If a completion is already in flight
                for ``context``.
            TransportError: If the transport fails (not retried here).
            ProtocolError: If the response is malformed, carries neither
                content nor a function call, or names an undeclared function.
        """
        with context.completion_guard():
            return self._complete(context)

    def _complete(self, context: ConversationContext) -> CompletionOutcome:
        """Run one cycle; the caller must hold ``context.completion_guard()``."""
        payload = context.to_wire_payload()
        logger.debug(
            "Sending completion request: model=%s, %d message(s), %d function(s)",
            context.model,
            len(payload["messages"]),
            len(payload.get("functions", ())),
        )
        body = self._transport.send(
            self._config.endpoint,
            self._config.headers(),
            payload,
        )
        return self._apply_response(context, body)

    def _apply_response(self, context: ConversationContext, body: Any) -> CompletionOutcome:
        completion = ChatCompletion.parse(body)
        choice = completion.first_choice()
        message = choice.message

        if message.function_call is not None:
            name = message.function_call.name
            arguments = _decode_arguments(name, message.function_call.arguments)
            if self._strict_arguments and name in context.functions:
                problems = context.functions[name].check_arguments(arguments)
                if problems:
                    raise ProtocolError(
                        f"Arguments for function '{name}' do not match its "
                        f"parameters: {'; '.join(problems)}"
                    )
            try:
                context.append_assistant_function_call(name, arguments)
            except UnknownFunctionError as exc:
                raise ProtocolError(
                    f"Model requested undeclared function '{name}'"
                ) from exc
            logger.info("Completion returned function call '%s'", name)
            return FunctionCallOutcome(
                name=name,
                arguments=arguments,
                finish_reason=choice.finish_reason,
                usage=completion.usage,
            )

        if message.content is not None:
            context.append_assistant_content(message.content)
            logger.info("Completion returned content (%d chars)", len(message.content))
            return ContentOutcome(
                text=message.content,
                finish_reason=choice.finish_reason,
                usage=completion.usage,
            )

        raise ProtocolError(
            "Response message carries neither content nor function_call"
        )

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> CompletionClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _decode_arguments(name: str, raw: str) -> Any:
    """Decode the JSON argument string of a function call."""
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ProtocolError(
            f"Arguments for function '{name}' are not valid JSON: {raw!r}"
        ) from exc
