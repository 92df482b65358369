"""Helpers shared by CLI commands for loading targets and configuration."""

from pathlib import Path
from typing import Optional

import typer

from tagfields.cli.output import log_error
from tagfields.config import import_dotted, load_config
from tagfields.introspector import Introspector
from tagfields.records import is_record_type


def load_record_type(target: str) -> type:
    """Import a ``package.module:ClassName`` target, exiting on failure."""
    try:
        record_type = import_dotted(target)
    except ValueError as e:
        log_error(f"Cannot load {target}: {e}")
        raise typer.Exit(code=1)

    if not is_record_type(record_type):
        log_error(f"{target} is not a dataclass or pydantic model")
        raise typer.Exit(code=1)
    return record_type


def build_introspector(config: Optional[Path]) -> Introspector:
    """Introspector for an optional YAML config file, exiting on failure."""
    if config is None:
        return Introspector()
    try:
        return Introspector(load_config(config))
    except (FileNotFoundError, ValueError) as e:
        log_error(f"Error loading config: {e}")
        raise typer.Exit(code=1)
