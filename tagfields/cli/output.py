"""Output formatting utilities for CLI.

Follows the golden rule:
- stdout = machine-readable data (JSON) and requested reports
- stderr = human-readable logs (errors, info)
"""

import json
from collections.abc import Mapping
from typing import Any, Optional

from rich.console import Console

from tagfields.tags import FieldPolicy

# stderr console for human logs (preserves colors when redirected)
console = Console(stderr=True)


def output_json(data: Any, indent: Optional[int] = 2):
    """Output JSON to stdout (machine-readable).

    Args:
        data: Data to serialize as JSON
        indent: Indentation level (None for compact)
    """
    print(json.dumps(data, indent=indent), flush=True)


def log_error(message: str):
    """Log error message to stderr (always shown).

    Args:
        message: Error message to log
    """
    console.print(f"[red]✗[/red] {message}", style="bold red")


def policy_flags(policy: FieldPolicy) -> list[str]:
    """Short names of the flags set on a policy."""
    flags = []
    if policy.ignored:
        flags.append("ignored")
    if policy.omit_empty:
        flags.append("omitempty")
    if policy.omit_zero:
        flags.append("omitzero")
    if policy.omit_false:
        flags.append("omitfalse")
    if policy.force_string:
        flags.append("string")
    return flags


def policy_to_dict(index: int, policy: FieldPolicy) -> dict[str, Any]:
    """Serialize one schema entry for JSON output."""
    return {
        "index": index,
        "name": policy.marshal_name,
        "field_name": policy.field_name,
        "ignored": policy.ignored,
        "omit_empty": policy.omit_empty,
        "omit_zero": policy.omit_zero,
        "omit_false": policy.omit_false,
        "force_string": policy.force_string,
        "tags": dict(policy.tags),
    }


def format_tags(tags: Mapping[str, str]) -> str:
    """Render a tag map back in ``key:"value"`` form."""
    return " ".join(f'{key}:"{value}"' for key, value in tags.items())
