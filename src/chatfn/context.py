"""ConversationContext -- the mutable state of one conversation.

Holds the model identifier, the append-only turn history and the registry
of declared functions, and renders them as a chat-completion request body.

History only grows: turns are appended through the ``append_*`` methods and
are never reordered, edited or removed. Failed appends leave the history
exactly as it was.

Usage::

    ctx = ConversationContext("gpt-3.5-turbo-0613")
    ctx.register_function(weather_spec)
    ctx.append_system("You are a helpful assistant.")
    ctx.append_user("What's the weather in Madrid?")
    payload = ctx.to_wire_payload()
"""

from __future__ import annotations

import logging
import threading
import types
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from chatfn.exceptions import (
    ConcurrentCompletionError,
    ConfigError,
    DuplicateFunctionError,
    UnknownFunctionError,
)
from chatfn.models.functions import FunctionSpecification
from chatfn.models.turns import (
    AssistantTurn,
    ConversationTurn,
    FunctionCallRequest,
    FunctionResultTurn,
    SystemTurn,
    UserTurn,
)

logger = logging.getLogger(__name__)


class ConversationContext:
    """Ordered conversation history plus the active model and function registry."""

    def __init__(
        self,
        model: str,
        functions: Iterable[FunctionSpecification] = (),
    ) -> None:
        if not model:
            raise ConfigError("model must not be empty")
        self._model = model
        self._history: list[ConversationTurn] = []
        self._functions: dict[str, FunctionSpecification] = {}
        # Guards the in-flight flag only; held for a check-and-set, never
        # across the transport call.
        self._flag_lock = threading.Lock()
        self._in_flight = False
        self.register_functions(functions)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def model(self) -> str:
        return self._model

    @property
    def history(self) -> tuple[ConversationTurn, ...]:
        """Snapshot of the turns in conversation order."""
        return tuple(self._history)

    @property
    def functions(self) -> Mapping[str, FunctionSpecification]:
        """Read-only view of the registered functions, keyed by name."""
        return types.MappingProxyType(self._functions)

    @property
    def last_turn(self) -> ConversationTurn | None:
        return self._history[-1] if self._history else None

    @property
    def in_flight(self) -> bool:
        """Whether a completion is currently running against this context."""
        return self._in_flight

    def __len__(self) -> int:
        return len(self._history)

    def __repr__(self) -> str:
        return (
            f"ConversationContext(model={self._model!r}, turns={len(self._history)}, "
            f"functions={sorted(self._functions)})"
        )

    # ------------------------------------------------------------------
    # Function registry
    # ------------------------------------------------------------------

    def register_function(self, spec: FunctionSpecification) -> None:
        """Declare a function the model may request.

        Raises:
            DuplicateFunctionError: If a function with the same name is
                already registered. The registry is left unchanged.
        """
        if spec.name in self._functions:
            raise DuplicateFunctionError(spec.name)
        self._functions[spec.name] = spec
        logger.debug("Registered function '%s'", spec.name)

    def register_functions(self, specs: Iterable[FunctionSpecification]) -> None:
        """Declare several functions at once; all or nothing.

        Raises:
            DuplicateFunctionError: If any name is already registered or
                repeated within ``specs``. Nothing is registered in that case.
        """
        specs = list(specs)
        seen: set[str] = set()
        for spec in specs:
            if spec.name in self._functions or spec.name in seen:
                raise DuplicateFunctionError(spec.name)
            seen.add(spec.name)
        for spec in specs:
            self.register_function(spec)

    # ------------------------------------------------------------------
    # Appends
    # ------------------------------------------------------------------

    def _append(self, turn: ConversationTurn) -> ConversationTurn:
        self._history.append(turn)
        logger.debug("Appended %s turn (#%d)", turn.role, len(self._history))
        return turn

    def append_system(self, text: str) -> SystemTurn:
        return self._append(SystemTurn(content=text))

    def append_user(self, text: str) -> UserTurn:
        return self._append(UserTurn(content=text))

    def append_assistant_content(self, text: str) -> AssistantTurn:
        return self._append(AssistantTurn(content=text))

    def append_assistant_function_call(self, name: str, arguments: Any) -> AssistantTurn:
        """Record the model's request to call ``name``.

        Raises:
            UnknownFunctionError: If ``name`` is not registered.
        """
        if name not in self._functions:
            raise UnknownFunctionError(name)
        request = FunctionCallRequest(name=name, arguments=arguments)
        return self._append(AssistantTurn(function_call=request))

    def append_function_result(self, name: str, result_text: str) -> FunctionResultTurn:
        """Supply the result of executing function ``name``.

        Raises:
            UnknownFunctionError: If ``name`` was never registered.
        """
        if name not in self._functions:
            raise UnknownFunctionError(name)
        return self._append(FunctionResultTurn(name=name, content=result_text))

    # ------------------------------------------------------------------
    # Wire format
    # ------------------------------------------------------------------

    def to_wire_payload(self) -> dict[str, Any]:
        """Render the chat-completion request body.

        ``functions`` and the ``function_call: "auto"`` hint are only present
        when at least one function is registered.
        """
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [turn.to_wire() for turn in self._history],
        }
        if self._functions:
            payload["functions"] = [spec.to_wire() for spec in self._functions.values()]
            payload["function_call"] = "auto"
        return payload

    # ------------------------------------------------------------------
    # Completion guard
    # ------------------------------------------------------------------

    @contextmanager
    def completion_guard(self) -> Iterator[None]:
        """Mark this context busy for the duration of one completion.

        The flag is cleared on every exit path, including cancellation.

        Raises:
            ConcurrentCompletionError: If a completion is already in flight.
        """
        with self._flag_lock:
            if self._in_flight:
                raise ConcurrentCompletionError()
            self._in_flight = True
        try:
            yield
        finally:
            with self._flag_lock:
                self._in_flight = False
