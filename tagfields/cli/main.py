"""tagfields CLI - Main entry point."""

import typer
from typing_extensions import Annotated

app = typer.Typer(
    name="tagfields",
    help="tagfields - Inspect tag-driven field schemas of dataclasses and pydantic models",
    add_completion=True,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from tagfields import __version__
        from tagfields.cli.output import console
        console.print(f"[bold]tagfields[/bold] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """tagfields CLI - Flattened field schemas for marshaling tools."""
    pass


# Import commands after app is defined to avoid circular imports
from tagfields.cli.commands.resolve import resolve_command
from tagfields.cli.commands.schema import schema_command

app.command(name="schema", help="Show the flattened field schema of a record type")(schema_command)
app.command(name="resolve", help="Resolve a lookup key to a schema field")(resolve_command)


if __name__ == "__main__":
    app()
