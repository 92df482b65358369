"""CLI command for resolving a lookup key against a record type's schema."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from tagfields.cli.loading import build_introspector, load_record_type
from tagfields.cli.output import log_error, output_json, policy_to_dict


def resolve_command(
    target: Annotated[
        str,
        typer.Argument(help="Record type as package.module:ClassName"),
    ],
    name: Annotated[
        str,
        typer.Argument(help="External name, declared name or snake_case key"),
    ],
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Introspection config YAML"),
    ] = None,
) -> None:
    """Resolve a lookup key to a schema field.

    Prints the matching schema entry as JSON; exits with code 1 when no
    field matches.
    """
    record_type = load_record_type(target)
    introspector = build_introspector(config)

    try:
        schema = introspector.compute_schema(record_type)
    except TypeError as e:
        log_error(str(e))
        raise typer.Exit(code=1)

    index, found = introspector.resolve_index(schema, name)
    if not found:
        log_error(f"No field of {record_type.__qualname__} matches {name!r}")
        raise typer.Exit(code=1)

    output_json(policy_to_dict(index, schema[index]))
