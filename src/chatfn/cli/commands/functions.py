"""chatfn show-functions -- validate and display a functions document."""

from __future__ import annotations

import click

from chatfn.cli.formatting import format_error, get_console
from chatfn.exceptions import SchemaError
from chatfn.formatting import functions_table
from chatfn.models.functions import load_functions


@click.command(name="show-functions")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the wire format instead of a table.")
def show_functions(path: str, as_json: bool) -> None:
    """Validate the function specifications in PATH and print them."""
    console = get_console()
    try:
        specs = load_functions(path)
    except SchemaError as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    if as_json:
        console.print_json(data=[spec.to_wire() for spec in specs])
    else:
        console.print(functions_table(specs))
