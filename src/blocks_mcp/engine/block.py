"""
Pydantic model for content blocks.

A Block is one node of an authored content tree. Its fields fall into two
ownership regions:

- Mutable region (properties, actions): copied by the pipeline before any
  binding is written, so the processed block exclusively owns them.
- Shared region (children, meta): held by reference. Every processed copy of a
  source block points at the same children list and meta dict.

Wire format uses camelCase aliases (tagName, @type). Unknown tag-level
attributes such as responsiveStyles or code are kept as extra fields.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ELEMENT_TYPE = "@builder.io/sdk:Element"

MUTABLE_FIELDS = ("properties", "actions")
SHARED_FIELDS = ("children", "meta")


class Block(BaseModel):
    """A node of authored UI content."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str = Field(default=ELEMENT_TYPE, alias="@type")
    id: str | None = None
    tag_name: str | None = Field(default=None, alias="tagName")
    component: dict[str, Any] | None = Field(
        default=None, description="Component reference: {name, options}"
    )
    properties: dict[str, Any] = Field(default_factory=dict)
    actions: dict[str, Any] = Field(default_factory=dict)
    bindings: dict[str, str] = Field(
        default_factory=dict,
        description="Target path -> expression source, applied in insertion order",
    )
    children: list[Block] = Field(default_factory=list)
    meta: dict[str, Any] = Field(
        default_factory=dict, description="Editor bookkeeping, never evaluated"
    )

    @classmethod
    def field_for(cls, segment: str) -> str:
        """Map a path head (field name, alias, or extra key) to an attribute name."""
        if segment in cls.model_fields:
            return segment
        for name, info in cls.model_fields.items():
            if info.alias == segment:
                return name
        return segment

    def own_fields(self) -> dict[str, Any]:
        """Return every non-shared field (declared and extra) keyed by attribute name."""
        values = {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name not in SHARED_FIELDS
        }
        if self.model_extra:
            values.update(self.model_extra)
        return values

    def to_wire(self) -> dict[str, Any]:
        """Dump to wire JSON shape (camelCase aliases, no None values)."""
        return self.model_dump(by_alias=True, exclude_none=True)


def is_embedded_element(value: Any) -> bool:
    """True for values that are already-resolved structural elements."""
    if isinstance(value, Block):
        return True
    return isinstance(value, Mapping) and value.get("@type") == ELEMENT_TYPE


__all__ = ["Block", "ELEMENT_TYPE", "MUTABLE_FIELDS", "SHARED_FIELDS", "is_embedded_element"]
