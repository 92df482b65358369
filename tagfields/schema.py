"""Type-level flattened field schema and its cache."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from tagfields.records import TIMESTAMP_TYPES, ComposedKind, RecordLayout, build_layout
from tagfields.tags import DEFAULT_NAME_KEY, DEFAULT_PRIMARY_KEY, FieldPolicy, parse_field_policy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypeSchema:
    """Flattened schema of one record type.

    Attributes:
        layout: Declared fields with composed kinds resolved
        fields: Flattened policies, composed records spliced in place
        offsets: Position in ``fields`` where each declared field starts
        widths: Number of ``fields`` entries each declared field occupies
    """

    layout: RecordLayout
    fields: tuple[FieldPolicy, ...]
    offsets: tuple[int, ...]
    widths: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.fields)


# Tag keys and opaque types a schema was computed with.
SchemaVariant = tuple[str, str, tuple[type, ...]]

DEFAULT_VARIANT: SchemaVariant = (DEFAULT_PRIMARY_KEY, DEFAULT_NAME_KEY, TIMESTAMP_TYPES)


class SchemaCache:
    """Store of ``TypeSchema`` objects keyed by record type and variant.

    The variant holds the settings the policies depend on, so introspectors
    with different tag keys or opaque types can share one cache.

    Reads are plain dict lookups. Stores go through a lock with
    load-or-store semantics: when two threads compute the schema of the
    same new type, the first stored value wins and both callers get it.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[type, SchemaVariant], TypeSchema] = {}
        self._lock = threading.Lock()

    def get(self, record_type: type, variant: SchemaVariant = DEFAULT_VARIANT) -> TypeSchema | None:
        return self._entries.get((record_type, variant))

    def load_or_store(
        self,
        record_type: type,
        schema: TypeSchema,
        variant: SchemaVariant = DEFAULT_VARIANT,
    ) -> TypeSchema:
        with self._lock:
            stored = self._entries.setdefault((record_type, variant), schema)
        if stored is not schema:
            logger.debug("Discarding duplicate schema of %s", record_type.__qualname__)
        return stored

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, record_type: object) -> bool:
        """Whether a schema of ``record_type`` is stored under any variant."""
        return any(key[0] is record_type for key in list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


def build_type_schema(
    record_type: type,
    schema_of: Callable[[type], TypeSchema],
    opaque_types: tuple[type, ...] = TIMESTAMP_TYPES,
    primary_key: str = DEFAULT_PRIMARY_KEY,
    name_key: str = DEFAULT_NAME_KEY,
) -> TypeSchema:
    """Flatten ``record_type`` into its ordered field policies.

    Works on type information only; no instance is read or modified.
    Optional composed records are expanded from their declared type, so the
    schema is the same whether or not a given instance has them set.

    Args:
        record_type: Dataclass or pydantic model class
        schema_of: Returns the schema of a composed record type (usually a
            cached lookup)
        opaque_types: Types emitted as one field even when embedded
        primary_key: Tag key holding ``name,opt1,opt2,...``
        name_key: Tag key overriding the external name

    Returns:
        TypeSchema for ``record_type``

    Raises:
        TypeError: If ``record_type`` is not a record type
    """
    layout = build_layout(record_type, opaque_types)

    fields: list[FieldPolicy] = []
    offsets: list[int] = []
    widths: list[int] = []
    for decl in layout.fields:
        offsets.append(len(fields))
        if decl.kind in (ComposedKind.VALUE, ComposedKind.OPTIONAL):
            sub = schema_of(decl.record_type)
            fields.extend(sub.fields)
            widths.append(len(sub.fields))
            continue
        fields.append(parse_field_policy(decl.name, decl.tags, primary_key, name_key))
        widths.append(1)

    logger.debug("Computed schema of %s: %d fields", record_type.__qualname__, len(fields))
    return TypeSchema(layout, tuple(fields), tuple(offsets), tuple(widths))
