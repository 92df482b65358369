"""Tag-driven field introspection for dataclasses and pydantic models.

Flattens a record type's fields, composed (embedded) records included, into
an ordered list of serialization policies, and joins that list with the live
field values of an instance so a marshaler can read and write fields by
their external name.
"""

from tagfields.config import IntrospectionConfig, load_config
from tagfields.introspector import (
    Introspector,
    compute_schema,
    default_introspector,
    extract_values,
    fetch_field_values,
    resolve_by_name,
    resolve_index,
)
from tagfields.naming import camel_split, capitalize, is_exported
from tagfields.records import ComposedKind, embedded, is_record_type, tagged
from tagfields.resolver import FieldSet, FieldValueSet
from tagfields.schema import SchemaCache, TypeSchema
from tagfields.tags import FieldPolicy, parse_field_policy, tag_map
from tagfields.values import AbsentSlotPolicy, FieldValueRef

__version__ = "0.1.0"

__all__ = [
    "AbsentSlotPolicy",
    "ComposedKind",
    "FieldPolicy",
    "FieldSet",
    "FieldValueRef",
    "FieldValueSet",
    "IntrospectionConfig",
    "Introspector",
    "SchemaCache",
    "TypeSchema",
    "camel_split",
    "capitalize",
    "compute_schema",
    "default_introspector",
    "embedded",
    "extract_values",
    "fetch_field_values",
    "is_exported",
    "is_record_type",
    "load_config",
    "parse_field_policy",
    "resolve_by_name",
    "resolve_index",
    "tag_map",
    "tagged",
]
