"""chatfn talk -- interactive chat loop."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from chatfn.cli.formatting import format_error, format_session_header, get_console
from chatfn.exceptions import ChatFnError, UnhandledFunctionCallError
from chatfn.formatting import history_table, outcome_panel
from chatfn.models.completion import ContentOutcome, FunctionCallOutcome
from chatfn.models.config import ClientConfig
from chatfn.models.functions import load_functions
from chatfn.session import SessionManager

if TYPE_CHECKING:
    from rich.console import Console


@click.command()
@click.option(
    "--model",
    "-m",
    default="gpt-3.5-turbo-0613",
    envvar="CHATFN_MODEL",
    show_default=True,
    help="Remote model identifier.",
)
@click.option("--system", "-s", "system_prompt", default=None, help="System prompt.")
@click.option(
    "--functions",
    "-f",
    "functions_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with one function specification or a list of them.",
)
@click.option("--strict", is_flag=True, help="Reject function calls whose arguments do not match the schema.")
@click.option("--history", "show_history", is_flag=True, help="Print the full conversation on exit.")
@click.pass_context
def talk(
    ctx: click.Context,
    model: str,
    system_prompt: str | None,
    functions_path: str | None,
    strict: bool,
    show_history: bool,
) -> None:
    """Chat with the model. Function calls are answered by you at the prompt."""
    console = get_console()
    try:
        specs = load_functions(functions_path) if functions_path else []
        session = SessionManager.create(
            model,
            ClientConfig.from_env(),
            functions=specs,
            transport=ctx.obj.get("transport"),
            strict_arguments=strict,
        )
    except (ChatFnError, OSError) as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    with session:
        if system_prompt:
            session.context.append_system(system_prompt)
        format_session_header(model, session.session_id, len(specs), console)

        while True:
            try:
                text = click.prompt("You", default="", show_default=False)
            except click.Abort:
                break
            if not text.strip():
                break
            _exchange(session, text, console)

        if show_history:
            console.print(history_table(session.context))


def _exchange(session: SessionManager, text: str, console: Console) -> None:
    """Send one user message and resolve any function calls it triggers."""
    try:
        reply = session.managed_completion(text)
        console.print(outcome_panel(ContentOutcome(reply)))
        return
    except UnhandledFunctionCallError as exc:
        outcome: ContentOutcome | FunctionCallOutcome = exc.outcome
    except ChatFnError as e:
        format_error(str(e), console)
        return

    while isinstance(outcome, FunctionCallOutcome):
        console.print(outcome_panel(outcome))
        try:
            result = click.prompt(f"Result of {outcome.name}")
        except click.Abort:
            return
        session.append_function_result(outcome.name, result)
        try:
            outcome = session.complete()
        except ChatFnError as e:
            format_error(str(e), console)
            return
    console.print(outcome_panel(outcome))
