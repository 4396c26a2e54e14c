"""chatfn CLI -- terminal chat with function-calling support.

This module is NEVER imported from chatfn/__init__.py.
It is only loaded via the ``chatfn`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

try:
    import click
    from dotenv import load_dotenv
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install chatfn[cli]"
    ) from None

from chatfn.cli.formatting import configure_logging


@click.group()
@click.option(
    "--env-file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Load environment variables from this file (default: ./.env).",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs.")
@click.pass_context
def cli(ctx: click.Context, env_file: str | None, verbose: bool) -> None:
    """chatfn: chat with a completion model that can request function calls."""
    ctx.ensure_object(dict)
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()
    configure_logging(verbose)


# Register subcommands after cli group is defined
from chatfn.cli.commands.talk import talk  # noqa: E402
from chatfn.cli.commands.functions import show_functions  # noqa: E402

cli.add_command(talk)
cli.add_command(show_functions)


def main() -> None:
    cli(obj={})
