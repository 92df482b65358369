"""Instance-level field value references.

The value walker visits an instance in the same order as the schema walker
and tags every reference with the schema index of the field it points at.
Absent optional composed records are elided from the value list, so the
list is a subsequence of the schema positions.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tagfields.records import DeclaredField, new_record
from tagfields.schema import TypeSchema
from tagfields.tags import FieldPolicy

logger = logging.getLogger(__name__)

_MISSING = object()


class AbsentSlotPolicy(str, Enum):
    """Schema slots reserved for an absent optional composed record."""

    SPAN = "span"  # the composed record's full schema width
    SINGLE = "single"  # exactly one slot


@dataclass(frozen=True)
class FieldValueRef:
    """Reference to one attribute of one live record instance."""

    owner: Any
    attr: str
    schema_index: int
    policy: FieldPolicy | None = None

    @property
    def readable(self) -> bool:
        return self.get(_MISSING) is not _MISSING

    @property
    def value(self) -> Any:
        return self.get()

    def get(self, default: Any = None) -> Any:
        """Read the attribute, or ``default`` when it cannot be read."""
        try:
            return getattr(self.owner, self.attr)
        except AttributeError:
            return default

    def set(self, value: Any) -> bool:
        """Write the attribute.

        Returns:
            False if the owner refuses the assignment (frozen record,
            failed validation)
        """
        try:
            setattr(self.owner, self.attr, value)
        except (AttributeError, TypeError, ValueError) as e:
            logger.debug("Cannot set %s.%s: %s", type(self.owner).__qualname__, self.attr, e)
            return False
        return True


def _materialize(owner: Any, decl: DeclaredField) -> Any:
    value = new_record(decl.record_type)
    if value is None:
        return None
    try:
        setattr(owner, decl.name, value)
    except (AttributeError, TypeError, ValueError) as e:
        logger.debug("Cannot materialize %s.%s: %s", type(owner).__qualname__, decl.name, e)
        return None
    return value


def walk_values(
    instance: Any,
    record_type: type,
    schema_of: Callable[[type], TypeSchema],
    write: bool = False,
    index: int = 0,
    absent_slots: AbsentSlotPolicy = AbsentSlotPolicy.SPAN,
) -> tuple[list[FieldValueRef], int]:
    """Collect value references of ``instance`` laid out as ``record_type``.

    Args:
        instance: Record instance to walk
        record_type: Declared type whose schema numbering is followed
        schema_of: Returns the (cached) schema of a record type
        write: Allocate absent composed records instead of skipping them
        index: Schema index of the first field of ``instance``
        absent_slots: Slots reserved for a skipped composed record

    Returns:
        Tuple of (value references, next schema index)
    """
    schema = schema_of(record_type)
    refs: list[FieldValueRef] = []

    for decl, offset, width in zip(schema.layout.fields, schema.offsets, schema.widths):
        if not decl.composed:
            refs.append(FieldValueRef(instance, decl.name, index, schema.fields[offset]))
            index += 1
            continue

        sub = getattr(instance, decl.name, None)
        if sub is None and write:
            sub = _materialize(instance, decl)
        if sub is None:
            index += width if absent_slots == AbsentSlotPolicy.SPAN else 1
            continue

        sub_refs, index = walk_values(sub, decl.record_type, schema_of, write, index, absent_slots)
        refs.extend(sub_refs)

    return refs, index
