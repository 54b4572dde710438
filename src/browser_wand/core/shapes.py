"""Expected payload shapes for structured model replies.

A shape tells the parser which opening character to look for and tells
truncation repair which fields to recover and what their empty defaults are.
"""

from __future__ import annotations

import dataclasses
import enum
from typing import Any


class FieldKind(str, enum.Enum):
    """Value kinds that truncation repair knows how to recover."""

    STRING = "string"
    STRING_ARRAY = "string_array"
    OBJECT_ARRAY = "object_array"
    OBJECT = "object"

    def empty(self) -> Any:
        """Return a fresh, type-appropriate empty default."""
        if self is FieldKind.STRING:
            return ""
        return {} if self is FieldKind.OBJECT else []


@dataclasses.dataclass(frozen=True, slots=True)
class FieldSpec:
    name: str
    kind: FieldKind = FieldKind.STRING


@dataclasses.dataclass(frozen=True, slots=True)
class ObjectShape:
    """A JSON object with a known set of fields."""

    fields: tuple[FieldSpec, ...]

    open_char = "{"

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def defaults(self) -> dict[str, Any]:
        return {f.name: f.kind.empty() for f in self.fields}


@dataclasses.dataclass(frozen=True, slots=True)
class ArrayShape:
    """A JSON array, optionally with a known item count."""

    expected_count: int | None = None

    open_char = "["


@dataclasses.dataclass(frozen=True, slots=True)
class TextShape:
    """Plain prose; only a wrapping code fence is removed."""


type Shape = ObjectShape | ArrayShape | TextShape

TEXT = TextShape()


def object_shape(*fields: str | tuple[str, FieldKind]) -> ObjectShape:
    """Build an `ObjectShape` from names (strings) or `(name, kind)` tuples."""
    specs = []
    for spec in fields:
        if isinstance(spec, str):
            specs.append(FieldSpec(spec))
        else:
            name, kind = spec
            specs.append(FieldSpec(name, kind))
    return ObjectShape(tuple(specs))


PRODUCT_SHAPE = object_shape("title", "price", "description", "url")

PRODUCT_SEARCH_SHAPE = object_shape(
    ("type", FieldKind.STRING),
    ("summary", FieldKind.STRING),
    ("products", FieldKind.OBJECT_ARRAY),
)

TIMELINE_SHAPE = object_shape(
    ("summary", FieldKind.STRING),
    ("background", FieldKind.STRING),
    ("timeline", FieldKind.OBJECT_ARRAY),
    ("keyPoints", FieldKind.STRING_ARRAY),
)

MODIFICATION_SHAPE = object_shape("javascript", "css", "explanation")
