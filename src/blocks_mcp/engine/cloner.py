"""
Structural cloning of blocks before bindings are written.

Both strategies give the clone fresh top-level ``properties`` and ``actions``
mappings and keep ``children`` and ``meta`` as the very same objects as the
source block.

- RECURSIVE: every other field is copied recursively. Recursion stops at
  embedded elements (pre-resolved fragments are returned untouched). Always
  safe, including for callers that cache processed blocks.
- SHALLOW: only the top-level properties/actions mappings are copied; nested
  containers stay shared with the source. Cheaper, but a nested binding write
  (``properties.style.color``) lands in the source block, so it is only valid
  when processed blocks are never reused. PipelineConfig enforces this.
"""

from enum import Enum
from typing import Any

from .block import MUTABLE_FIELDS, Block, is_embedded_element


class CloneStrategy(str, Enum):
    """How much of a block is copied before bindings are applied."""

    RECURSIVE = "recursive"
    SHALLOW = "shallow"


def deep_clone_with_conditions(value: Any) -> Any:
    """Recursively copy dicts, lists and tuples, leaving embedded elements shared."""
    if is_embedded_element(value):
        return value
    if isinstance(value, dict):
        return {key: deep_clone_with_conditions(item) for key, item in value.items()}
    if isinstance(value, list):
        return [deep_clone_with_conditions(item) for item in value]
    if isinstance(value, tuple):
        return tuple(deep_clone_with_conditions(item) for item in value)
    return value


def clone_block(block: Block, strategy: CloneStrategy = CloneStrategy.RECURSIVE) -> Block:
    """
    Copy a block's mutable region while sharing its children and meta.

    Args:
        block: Source block (never modified)
        strategy: Cloning strategy

    Returns:
        New Block; ``clone.children is block.children`` and
        ``clone.meta is block.meta``
    """
    if strategy == CloneStrategy.SHALLOW:
        updates: dict[str, Any] = {name: dict(getattr(block, name)) for name in MUTABLE_FIELDS}
    else:
        # Recursive copies of the properties/actions dicts are already fresh
        updates = {
            name: deep_clone_with_conditions(value) for name, value in block.own_fields().items()
        }

    return block.model_copy(update=updates)


__all__ = ["CloneStrategy", "clone_block", "deep_clone_with_conditions"]
