"""Name resolution over flattened schemas and value lists.

A lookup key matches a field when any of these holds, checked field by
field in schema order:

1. the key equals the field's external (marshal) name
2. the key and the declared name split to the same non-empty snake_case words
3. the key equals the declared name
4. the capitalized key equals the declared name
"""

from __future__ import annotations

import bisect
from collections.abc import Iterator, Sequence
from typing import Any

from tagfields.naming import camel_split, capitalize
from tagfields.tags import FieldPolicy
from tagfields.values import FieldValueRef


def matches_name(policy: FieldPolicy, name: str) -> bool:
    """Check ``name`` against one policy using the fallback chain."""
    if policy.marshal_name == name:
        return True
    words = camel_split(name, "_")
    if words and words == camel_split(policy.field_name, "_"):
        return True
    if policy.field_name == name:
        return True
    return policy.field_name == capitalize(name)


def resolve_index(schema: Sequence[FieldPolicy], name: str) -> tuple[int, bool]:
    """Find the schema index of ``name``.

    Returns:
        Tuple of (index, found); index is -1 when not found
    """
    for i, policy in enumerate(schema):
        if matches_name(policy, name):
            return i, True
    return -1, False


def find_value(values: Sequence[FieldValueRef], schema_index: int) -> FieldValueRef | None:
    """Find the reference tagged with ``schema_index``.

    ``values`` is ordered by strictly increasing schema index.
    """
    pos = bisect.bisect_left(values, schema_index, key=lambda ref: ref.schema_index)
    if pos < len(values) and values[pos].schema_index == schema_index:
        return values[pos]
    return None


def resolve_by_name(
    schema: Sequence[FieldPolicy],
    values: Sequence[FieldValueRef],
    name: str,
) -> tuple[FieldValueRef | None, bool]:
    """Resolve ``name`` to the value reference of the matching field.

    A name can resolve in the schema but have no value, when the field lives
    inside an absent optional composed record; that is reported as not
    found.
    """
    index, found = resolve_index(schema, name)
    if not found:
        return None, False
    ref = find_value(values, index)
    return ref, ref is not None


class FieldSet:
    """Schema and value references of one record instance.

    Example:
        >>> fs = extract_values(user)
        >>> fs.get_value("user_id")
        ('u-1', True)
        >>> [name for name, _, _ in fs]
        ['user_id', 'display_name']
    """

    def __init__(self, schema: Sequence[FieldPolicy], values: Sequence[FieldValueRef]) -> None:
        self.schema = tuple(schema)
        self.values = list(values)

    def index_of(self, name: str) -> int:
        """Schema index of ``name``, or -1."""
        return resolve_index(self.schema, name)[0]

    def ref(self, name: str) -> FieldValueRef | None:
        return resolve_by_name(self.schema, self.values, name)[0]

    def get_value(self, name: str) -> tuple[Any, bool]:
        """Read the value of ``name``.

        Returns:
            Tuple of (value, found); unreadable attributes count as not found
        """
        ref = self.ref(name)
        if ref is None or not ref.readable:
            return None, False
        return ref.value, True

    def set_value(self, name: str, value: Any) -> bool:
        ref = self.ref(name)
        if ref is None:
            return False
        return ref.set(value)

    def __iter__(self) -> Iterator[tuple[str, FieldPolicy, FieldValueRef]]:
        for ref in self.values:
            policy = ref.policy if ref.policy is not None else self.schema[ref.schema_index]
            yield policy.marshal_name, policy, ref

    def __len__(self) -> int:
        return len(self.values)


class FieldValueSet(list):
    """Value references paired with their own policies, without index joins."""

    def index_of(self, name: str) -> int:
        for i, ref in enumerate(self):
            if matches_name(ref.policy, name):
                return i
        return -1

    def get_value(self, name: str) -> tuple[Any, bool]:
        i = self.index_of(name)
        if i < 0 or not self[i].readable:
            return None, False
        return self[i].value, True
