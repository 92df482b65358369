"""Record type model.

A record is a dataclass or a pydantic model. This module enumerates a
record's declared fields in declaration order and classifies composed
(embedded) fields once per type, so that the schema and value walkers never
have to inspect annotations during traversal.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel

from tagfields.naming import is_exported
from tagfields.tags import EMBEDDED_KEY, field_tags

logger = logging.getLogger(__name__)

# Well-known timestamp type, never expanded even when marked embedded.
TIMESTAMP_TYPES: tuple[type, ...] = (datetime,)

_ZERO_VALUES: dict[Any, Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    str: "",
    bytes: b"",
}


class ComposedKind(str, Enum):
    """How a declared field takes part in the flattened schema."""

    PLAIN = "plain"  # regular field, one schema slot
    VALUE = "value"  # embedded record, always spliced
    OPTIONAL = "optional"  # embedded Optional[record], may be absent
    OPAQUE = "opaque"  # embedded but not expandable, one schema slot


@dataclass(frozen=True)
class DeclaredField:
    """One exported field of a record type."""

    name: str
    kind: ComposedKind
    tags: Mapping[str, str]
    record_type: type | None = None

    @property
    def composed(self) -> bool:
        return self.kind in (ComposedKind.VALUE, ComposedKind.OPTIONAL)


@dataclass(frozen=True)
class RecordLayout:
    """Exported fields of a record type with composed kinds resolved."""

    record_type: type
    fields: tuple[DeclaredField, ...]


def is_record_type(obj: Any) -> bool:
    """Check whether ``obj`` is a dataclass or pydantic model class."""
    if not inspect.isclass(obj):
        return False
    return dataclasses.is_dataclass(obj) or issubclass(obj, BaseModel)


def embedded(record_type: type | None = None, *, optional: bool = False, **kwargs: Any) -> Any:
    """Declare a composed dataclass field.

    Args:
        record_type: Record class to build the default from. Required unless
            ``optional`` is set or a default is given.
        optional: Default to ``None``; annotate the field ``Optional[...]``.
        **kwargs: Passed to ``dataclasses.field``.

    Examples:
        >>> @dataclass
        ... class Meta:
        ...     created_by: str = ""
        >>> @dataclass
        ... class Doc:
        ...     meta: Meta = embedded(Meta)
        ...     extra: Meta | None = embedded(optional=True)
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[EMBEDDED_KEY] = True
    if "default" not in kwargs and "default_factory" not in kwargs:
        if optional:
            kwargs["default"] = None
        elif record_type is not None:
            kwargs["default_factory"] = record_type
    return dataclasses.field(metadata=metadata, **kwargs)


def tagged(tag: str, **kwargs: Any) -> Any:
    """Declare a dataclass field with a struct-style tag string.

    Examples:
        >>> @dataclass
        ... class User:
        ...     uid: str = tagged('json:"id,allowempty"', default="")
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata["tag"] = tag
    return dataclasses.field(metadata=metadata, **kwargs)


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Return (inner annotation, is_optional); inner is None for wide unions."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        optional = len(args) < len(get_args(annotation))
        if len(args) == 1:
            return args[0], optional
        return None, optional
    return annotation, False


def _composed_kind(annotation: Any, opaque_types: tuple[type, ...]) -> tuple[ComposedKind, type | None]:
    inner, optional = _unwrap_optional(annotation)
    if inner is None or get_origin(inner) is not None or not inspect.isclass(inner):
        return ComposedKind.OPAQUE, None
    if issubclass(inner, opaque_types) or not is_record_type(inner):
        return ComposedKind.OPAQUE, None
    if optional:
        return ComposedKind.OPTIONAL, inner
    return ComposedKind.VALUE, inner


def _type_hints(record_type: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(record_type)
    except (NameError, TypeError) as e:
        # Unresolvable forward references leave the raw annotations in place.
        logger.debug("Could not resolve annotations of %s: %s", record_type.__qualname__, e)
        return {}


def _iter_declared(record_type: type) -> typing.Iterator[tuple[str, Any, Mapping[str, Any]]]:
    """Yield (name, annotation, metadata) for every declared field."""
    if dataclasses.is_dataclass(record_type):
        hints = _type_hints(record_type)
        for f in dataclasses.fields(record_type):
            yield f.name, hints.get(f.name, f.type), f.metadata
        return
    for name, info in record_type.model_fields.items():
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        yield name, info.annotation, extra


def build_layout(
    record_type: type,
    opaque_types: tuple[type, ...] = TIMESTAMP_TYPES,
) -> RecordLayout:
    """Classify the exported fields of ``record_type``.

    Raises:
        TypeError: If ``record_type`` is not a dataclass or pydantic model
    """
    if not is_record_type(record_type):
        raise TypeError(f"{record_type!r} is not a dataclass or pydantic model")

    declared = []
    for name, annotation, metadata in _iter_declared(record_type):
        if not is_exported(name):
            continue
        kind, sub_type = ComposedKind.PLAIN, None
        if metadata and metadata.get(EMBEDDED_KEY):
            kind, sub_type = _composed_kind(annotation, opaque_types)
        declared.append(DeclaredField(name, kind, field_tags(metadata), sub_type))
    return RecordLayout(record_type, tuple(declared))


def zero_value(annotation: Any) -> Any:
    """Zero value for a field annotation: falsy scalars, empty containers,
    zero records, and None for anything optional or unknown."""
    inner, optional = _unwrap_optional(annotation)
    if optional or inner is None:
        return None
    if inner in _ZERO_VALUES:
        return _ZERO_VALUES[inner]
    origin = get_origin(inner)
    if origin in (list, dict, set, tuple):
        return origin()
    if inspect.isclass(inner) and issubclass(inner, Enum):
        return next(iter(inner), None)
    if is_record_type(inner):
        return new_record(inner)
    return None


def new_record(record_type: type) -> Any:
    """Allocate a record with every required field set to its zero value.

    Returns:
        The new instance, or None if the record refuses construction
    """
    if dataclasses.is_dataclass(record_type):
        hints = _type_hints(record_type)
        kwargs = {
            f.name: zero_value(hints.get(f.name, f.type))
            for f in dataclasses.fields(record_type)
            if f.init
            and f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        }
        try:
            return record_type(**kwargs)
        except (TypeError, ValueError) as e:
            logger.debug("Cannot allocate %s: %s", record_type.__qualname__, e)
            return None

    kwargs = {
        name: zero_value(info.annotation)
        for name, info in record_type.model_fields.items()
        if info.is_required()
    }
    return record_type.model_construct(**kwargs)
