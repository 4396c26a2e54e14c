"""Pretty-print support for chatfn objects.

Uses rich library for formatted terminal output. The ``*_table`` /
``*_panel`` builders return renderables for callers that own a Console
(the CLI); the ``pprint_*`` functions print them directly.
"""
from __future__ import annotations

import json
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from rich.console import Console, Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from chatfn.models.completion import FunctionCallOutcome

if TYPE_CHECKING:
    from chatfn.context import ConversationContext
    from chatfn.models.completion import CompletionOutcome
    from chatfn.models.functions import FunctionSpecification

_ROLE_COLORS: dict[str, str] = {
    "system": "yellow",
    "user": "blue",
    "assistant": "green",
    "function": "magenta",
}


def _make_console(file: Any = None) -> Console:
    """Create a Console, optionally writing to a file-like object."""
    if file is not None:
        return Console(file=file, force_terminal=True, width=100)
    return Console()


def _truncate(text: str, abbreviate: bool) -> str:
    if abbreviate and len(text) > 80:
        return text[:77] + "..."
    return text


def format_call(name: str, arguments: Any) -> str:
    """Render a function call as ``name(key='value', ...)``."""
    if isinstance(arguments, dict):
        args = ", ".join(f"{k}={v!r}" for k, v in arguments.items())
    else:
        args = json.dumps(arguments)
    return f"{name}({args})"


def history_table(context: ConversationContext, *, abbreviate: bool = False) -> Group:
    """Build a table of the conversation history with a summary footer."""
    table = Table(title=f"Conversation ({context.model})", show_lines=False)
    table.add_column("#", style="dim", width=4, justify="right")
    table.add_column("Role", min_width=9, no_wrap=True)
    table.add_column("Content", no_wrap=False)

    for i, turn in enumerate(context.history):
        color = _ROLE_COLORS.get(turn.role, "white")
        if turn.role == "assistant" and turn.function_call is not None:
            call = turn.function_call
            role_label = Text("function call", style="bold magenta")
            cell: Any = Text(
                _truncate(format_call(call.name, call.arguments), abbreviate),
                style="bold magenta",
            )
        elif turn.role == "function":
            role_label = Text(f"{turn.name} result", style=f"bold {color}")
            cell = Text(_truncate(turn.content, abbreviate))
        else:
            role_label = Text(turn.role, style=f"bold {color}")
            content = _truncate(turn.content, abbreviate)
            # system: dim (configuration, not conversation)
            # assistant: Markdown (preserves code blocks, lists)
            if turn.role == "system":
                cell = Text(content, style="italic white")
            elif turn.role == "assistant":
                cell = Markdown(content)
            else:
                cell = Text(content)
        table.add_row(str(i + 1), role_label, cell)

    summary = Text()
    summary.append(f"  {len(context)}", style="bold")
    summary.append(" turns | ", style="dim")
    summary.append(f"{len(context.functions)}", style="bold")
    summary.append(" functions", style="dim")
    return Group(table, summary)


def outcome_panel(outcome: CompletionOutcome) -> Panel:
    """Build a panel showing a completion outcome."""
    if isinstance(outcome, FunctionCallOutcome):
        body: Any = Text(format_call(outcome.name, outcome.arguments), style="bold magenta")
        title, border = "Function Call", "magenta"
    else:
        body = Markdown(outcome.text)
        title, border = "Assistant", "green"

    subtitle = None
    if isinstance(outcome.usage, dict):
        total = outcome.usage.get("total_tokens")
        if total is not None:
            subtitle = f"{total} tokens"
    return Panel(body, title=title, subtitle=subtitle, border_style=border)


def functions_table(specs: Iterable[FunctionSpecification]) -> Table:
    """Build a table describing function specifications and their parameters.

    Required parameters are bold and marked with ``*``.
    """
    table = Table(title="Functions", show_header=True, header_style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Parameters")

    for spec in specs:
        params = Text()
        if spec.parameters is not None:
            for i, (pname, prop) in enumerate(spec.parameters.properties.items()):
                if i:
                    params.append("\n")
                required = pname in spec.parameters.required
                params.append(pname, style="bold" if required else "")
                params.append(f": {prop.type}", style="dim")
                if prop.enum:
                    params.append(f" [{' | '.join(prop.enum)}]", style="yellow")
                if required:
                    params.append(" *", style="red")
        table.add_row(spec.name, spec.description or "", params)
    return table


def pprint_history(
    context: ConversationContext,
    *,
    abbreviate: bool = False,
    file: Any = None,
) -> None:
    """Pretty-print a conversation's history.

    Args:
        context: The ConversationContext to display.
        abbreviate: If True, truncate long content. Default False (show full).
        file: Optional file-like object for output (used in tests).
    """
    _make_console(file).print(history_table(context, abbreviate=abbreviate))


def pprint_outcome(outcome: CompletionOutcome, *, file: Any = None) -> None:
    """Pretty-print a CompletionOutcome."""
    _make_console(file).print(outcome_panel(outcome))
