"""CLI command for printing the flattened field schema of a record type."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tagfields.cli.loading import build_introspector, load_record_type
from tagfields.cli.output import format_tags, log_error, policy_flags, policy_to_dict
from tagfields.tags import FieldPolicy


class OutputFormat(str, Enum):
    """Output format options."""

    table = "table"
    json = "json"
    markdown = "markdown"


console = Console()


def schema_command(
    target: Annotated[
        str,
        typer.Argument(help="Record type as package.module:ClassName"),
    ],
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.table,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Introspection config YAML"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file for json/markdown (default: stdout)"),
    ] = None,
) -> None:
    """Show the flattened field schema of a record type.

    Examples:

        # Rich table
        tagfields schema myapp.models:User

        # JSON for tools
        tagfields schema myapp.models:User --format json

        # Markdown reference with custom tag keys
        tagfields schema myapp.models:User -f markdown -c tagfields.yaml
    """
    record_type = load_record_type(target)
    introspector = build_introspector(config)

    try:
        schema = introspector.compute_schema(record_type)
    except TypeError as e:
        log_error(str(e))
        raise typer.Exit(code=1)

    if format == OutputFormat.table:
        console.print(build_table(record_type.__qualname__, schema))
        return

    if format == OutputFormat.json:
        result = json.dumps(
            {
                "record": f"{record_type.__module__}.{record_type.__qualname__}",
                "fields": [policy_to_dict(i, p) for i, p in enumerate(schema)],
            },
            indent=2,
        )
    else:
        result = format_as_markdown(record_type.__qualname__, schema)

    if output:
        output.write_text(result)
        typer.echo(f"Schema written to {output}")
    else:
        typer.echo(result)


def build_table(title: str, schema: tuple[FieldPolicy, ...]) -> Table:
    """Render a schema as a rich table.

    Names and tags are escaped; they come from user tags and must not be
    parsed as console markup.
    """
    table = Table(title=escape(f"{title} ({len(schema)} fields)"), show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Field")
    table.add_column("Flags", style="dim")
    table.add_column("Tags", style="dim")

    for i, policy in enumerate(schema):
        name = escape(policy.marshal_name)
        if policy.ignored:
            name = f"[strike]{name}[/strike]"
        table.add_row(
            str(i),
            name,
            escape(policy.field_name),
            ", ".join(policy_flags(policy)),
            escape(format_tags(policy.tags)),
        )
    return table


def format_as_markdown(title: str, schema: tuple[FieldPolicy, ...]) -> str:
    """Format a schema as a markdown reference table."""
    lines = [f"# {title} Fields", ""]
    lines.append("| # | Name | Field | Flags | Tags |")
    lines.append("|---|------|-------|-------|------|")
    for i, policy in enumerate(schema):
        flags = ", ".join(policy_flags(policy))
        tags = f"`{format_tags(policy.tags)}`" if policy.tags else ""
        lines.append(
            f"| {i} | `{policy.marshal_name}` | `{policy.field_name}` | {flags} | {tags} |"
        )
    return "\n".join(lines)
