"""Field tag parsing.

A record field carries its serialization policy in its metadata. The
metadata may hold a raw struct-style tag string under ``tag``::

    uid: str = tagged('json:"uid,allowempty" name:"user"')

or the tag keys directly::

    uid: str = field(default="", metadata={"json": "uid,allowempty"})

Both forms are flattened into one tag map by ``field_tags`` and turned into a
``FieldPolicy`` by ``parse_field_policy``.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Mapping
from functools import cached_property
from types import MappingProxyType
from typing import Any

from tagfields.naming import camel_split

TAG_KEY = "tag"
EMBEDDED_KEY = "embedded"

DEFAULT_PRIMARY_KEY = "json"
DEFAULT_NAME_KEY = "name"

_TAG_PAIR_RE = re.compile(r'([^\s:"]+):"((?:[^"\\]|\\.)*)"')
_ESCAPE_RE = re.compile(r"\\(.)")


def tag_map(tag: str) -> dict[str, str]:
    """Tokenize a struct-style tag string into a key/value mapping.

    Pairs that do not match ``key:"value"`` are skipped. The first
    occurrence of a key wins.

    Examples:
        >>> tag_map('json:"uid,omitempty" name:"user"')
        {'json': 'uid,omitempty', 'name': 'user'}
        >>> tag_map("garbage")
        {}
    """
    result: dict[str, str] = {}
    for key, raw in _TAG_PAIR_RE.findall(tag or ""):
        if key not in result:
            result[key] = _ESCAPE_RE.sub(r"\1", raw)
    return result


def field_tags(metadata: Mapping[str, Any] | None) -> dict[str, str]:
    """Merge a raw ``tag`` string and direct string entries of field metadata.

    Direct entries take precedence over keys of the same name in the raw tag.
    """
    if not metadata:
        return {}
    tags = tag_map(metadata.get(TAG_KEY) or "")
    for key, value in metadata.items():
        if key in (TAG_KEY, EMBEDDED_KEY) or not isinstance(value, str):
            continue
        tags[key] = value
    return tags


@dataclasses.dataclass(frozen=True)
class FieldPolicy:
    """Serialization policy of one flattened record field.

    Attributes:
        ignored: Field is excluded from marshaling altogether.
        omit_empty: Skip the field when its value is empty (default True).
        omit_false: Skip the field when its value is False.
        omit_zero: Skip the field when its value is numeric zero.
        name: Explicit external name, empty when it should be derived.
        field_name: Declared attribute name.
        force_string: Encode the value as a string.
        tags: The raw tag map the policy was parsed from.
    """

    field_name: str
    name: str = ""
    ignored: bool = False
    omit_empty: bool = True
    omit_false: bool = False
    omit_zero: bool = False
    force_string: bool = False
    tags: Mapping[str, str] = dataclasses.field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )

    @cached_property
    def marshal_name(self) -> str:
        """External name, derived from ``field_name`` when not tagged."""
        if self.name:
            return self.name
        return camel_split(self.field_name, "_")


# token -> (policy attribute, value)
_FLAG_TOKENS = {
    "omitempty": ("omit_empty", True),
    "allowempty": ("omit_empty", False),
    "omitzero": ("omit_zero", True),
    "allowzero": ("omit_zero", False),
    "omitfalse": ("omit_false", True),
    "allowfalse": ("omit_false", False),
    "string": ("force_string", True),
}


def parse_field_policy(
    field_name: str,
    tags: Mapping[str, str],
    primary_key: str = DEFAULT_PRIMARY_KEY,
    name_key: str = DEFAULT_NAME_KEY,
) -> FieldPolicy:
    """Build the policy of one field from its tag map.

    Args:
        field_name: Declared attribute name
        tags: Tag map of the field (see ``field_tags``)
        primary_key: Tag key holding ``name,opt1,opt2,...``
        name_key: Tag key whose value overrides the external name

    Returns:
        FieldPolicy; a missing or malformed tag yields the default policy

    Examples:
        >>> parse_field_policy("Skip", {"json": "-"}).ignored
        True
        >>> parse_field_policy("Dash", {"json": "-,string"}).marshal_name
        '-'
    """
    values: dict[str, Any] = {"field_name": field_name}

    primary = tags.get(primary_key)
    if primary is not None:
        tokens = primary.split(",")
        if tokens[0] == "-" and len(tokens) == 1:
            values["ignored"] = True
        else:
            values["name"] = tokens[0]
        for token in tokens[1:]:
            flag = _FLAG_TOKENS.get(token.lower())
            if flag is not None:
                attr, value = flag
                values[attr] = value

    if name_key in tags:
        values["name"] = tags[name_key]

    return FieldPolicy(tags=MappingProxyType(dict(tags)), **values)
