"""Introspection service.

An ``Introspector`` owns a configuration and a schema cache. Module-level
functions delegate to a process-default introspector; build a separate
``Introspector`` to use other tag keys or an isolated cache.

Example:
    >>> fs = extract_values(user, write=True)
    >>> fs.set_value("user_id", "u-2")
    True
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tagfields.config import IntrospectionConfig
from tagfields.resolver import FieldSet, FieldValueSet
from tagfields.resolver import resolve_by_name as _resolve_by_name
from tagfields.resolver import resolve_index as _resolve_index
from tagfields.schema import SchemaCache, SchemaVariant, TypeSchema, build_type_schema
from tagfields.tags import FieldPolicy
from tagfields.values import FieldValueRef, walk_values


class Introspector:
    """Computes, caches and joins field schemas and value references."""

    def __init__(
        self,
        config: IntrospectionConfig | None = None,
        cache: SchemaCache | None = None,
    ) -> None:
        self.config = config or IntrospectionConfig()
        self.cache = cache if cache is not None else SchemaCache()
        self._opaque_types = self.config.resolve_opaque_types()
        self._variant: SchemaVariant = (
            self.config.primary_tag_key,
            self.config.name_tag_key,
            self._opaque_types,
        )

    def type_schema(self, record_type: type) -> TypeSchema:
        """Cached ``TypeSchema`` of ``record_type``.

        Raises:
            TypeError: If ``record_type`` is not a record type, or composes
                itself
        """
        cached = self.cache.get(record_type, self._variant)
        if cached is not None:
            return cached
        return self._build(record_type, ())

    def _build(self, record_type: type, parents: tuple[type, ...]) -> TypeSchema:
        if record_type in parents:
            raise TypeError(f"{record_type.__qualname__} composes itself")
        cached = self.cache.get(record_type, self._variant)
        if cached is not None:
            return cached
        stack = parents + (record_type,)
        schema = build_type_schema(
            record_type,
            lambda sub: self._build(sub, stack),
            opaque_types=self._opaque_types,
            primary_key=self.config.primary_tag_key,
            name_key=self.config.name_tag_key,
        )
        return self.cache.load_or_store(record_type, schema, self._variant)

    def compute_schema(self, record_type: type) -> tuple[FieldPolicy, ...]:
        """Flattened field policies of ``record_type``."""
        return self.type_schema(record_type).fields

    def _walk(self, instance: Any, write: bool) -> list[FieldValueRef]:
        refs, _ = walk_values(
            instance,
            type(instance),
            self.type_schema,
            write=write,
            absent_slots=self.config.absent_slot_policy,
        )
        return refs

    def extract_values(self, instance: Any, write: bool = False) -> FieldSet:
        """Schema and value references of ``instance``.

        Args:
            instance: Record instance
            write: Allocate absent optional composed records, so every
                schema field gets a value reference

        Returns:
            FieldSet joining the type's schema with the instance's values
        """
        schema = self.compute_schema(type(instance))
        return FieldSet(schema, self._walk(instance, write))

    def fetch_field_values(self, instance: Any, write: bool = False) -> FieldValueSet:
        """Value references of ``instance``, each carrying its own policy."""
        return FieldValueSet(self._walk(instance, write))

    @staticmethod
    def resolve_index(schema: Sequence[FieldPolicy], name: str) -> tuple[int, bool]:
        return _resolve_index(schema, name)

    @staticmethod
    def resolve_by_name(
        schema: Sequence[FieldPolicy],
        values: Sequence[FieldValueRef],
        name: str,
    ) -> tuple[FieldValueRef | None, bool]:
        return _resolve_by_name(schema, values, name)


_default = Introspector()


def default_introspector() -> Introspector:
    return _default


def compute_schema(record_type: type) -> tuple[FieldPolicy, ...]:
    return _default.compute_schema(record_type)


def extract_values(instance: Any, write: bool = False) -> FieldSet:
    return _default.extract_values(instance, write)


def fetch_field_values(instance: Any, write: bool = False) -> FieldValueSet:
    return _default.fetch_field_values(instance, write)


def resolve_index(schema: Sequence[FieldPolicy], name: str) -> tuple[int, bool]:
    return _resolve_index(schema, name)


def resolve_by_name(
    schema: Sequence[FieldPolicy],
    values: Sequence[FieldValueRef],
    name: str,
) -> tuple[FieldValueRef | None, bool]:
    return _resolve_by_name(schema, values, name)
