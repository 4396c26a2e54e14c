"""Rich helpers for the chatfn CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)


def format_session_header(model: str, session_id: str, functions: int, console: Console) -> None:
    """Display the banner printed when a chat session starts."""
    console.print(f"Initialised [bold]{escape(model)}[/bold] chatbot. Enter your message to start a conversation.")
    console.print(f"- Model: [cyan]{escape(model)}[/cyan]")
    console.print(f"- Session ID: [yellow]{session_id}[/yellow]")
    console.print(f"- Functions: {functions}")
    console.print("[dim]Send an empty line (or Ctrl+D) to quit.[/dim]")
    console.rule()


def configure_logging(verbose: bool) -> None:
    """Route chatfn logs through a RichHandler.

    WARNING and above by default; DEBUG for the chatfn package when verbose.
    """
    logger = logging.getLogger("chatfn")
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
