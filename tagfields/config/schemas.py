"""Pydantic schemas for introspection configuration."""
from __future__ import annotations

import importlib

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tagfields.records import TIMESTAMP_TYPES
from tagfields.tags import DEFAULT_NAME_KEY, DEFAULT_PRIMARY_KEY
from tagfields.values import AbsentSlotPolicy


def import_dotted(path: str) -> object:
    """Import ``package.module.Name`` (or ``package.module:Name``)."""
    module_name, sep, attr = path.replace(":", ".").rpartition(".")
    if not sep or not module_name:
        raise ValueError(f"Not a dotted path: {path!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Cannot import {module_name!r}: {e}") from e
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ValueError(f"Module {module_name!r} has no attribute {attr!r}") from e


class IntrospectionConfig(BaseModel):
    """Settings shared by every schema computed through one introspector."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    primary_tag_key: str = Field(
        DEFAULT_PRIMARY_KEY, description="Tag key holding name,opt1,opt2,...", min_length=1
    )
    name_tag_key: str = Field(
        DEFAULT_NAME_KEY, description="Tag key overriding the external name", min_length=1
    )
    absent_slot_policy: AbsentSlotPolicy = Field(
        AbsentSlotPolicy.SPAN,
        description="Schema slots reserved for an absent optional composed record",
    )
    opaque_types: list[str] = Field(
        default_factory=list,
        description="Dotted paths of extra types never expanded when embedded",
    )

    @field_validator("opaque_types")
    @classmethod
    def opaque_types_must_be_classes(cls, v: list[str]) -> list[str]:
        """Validate each path imports to a class."""
        for path in v:
            if not isinstance(import_dotted(path), type):
                raise ValueError(f"Opaque type {path!r} is not a class")
        return v

    def resolve_opaque_types(self) -> tuple[type, ...]:
        """Timestamp types plus the configured extra opaque types."""
        extra = tuple(import_dotted(path) for path in self.opaque_types)
        return TIMESTAMP_TYPES + extra

    @classmethod
    def from_dict(cls, config_dict: dict) -> IntrospectionConfig:
        """Create config from dictionary."""
        return cls.model_validate(config_dict)
