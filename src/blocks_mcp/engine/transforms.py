"""
Transform stage: schema normalization applied before bindings are evaluated.

Rules are applied in priority order so bindings always see the canonical
block shape. Every rule must be:
- Pure: returns a new Block (or the input when nothing changes), never mutates
- Total: accepts any Block
- Idempotent: apply(apply(b)) == apply(b)
- Region-preserving: ``children`` and ``meta`` keep their identity

Rule Types:
    - MIGRATION: Deprecated field or naming migrations
    - TARGET: Target-specific rewrites supplied through configuration

Example:
    class UppercaseTagRule(BlockTransformRule):
        rule_type = TransformRuleType.TARGET
        priority = 60

        def applies_to(self, block: Block) -> bool:
            return bool(block.tag_name) and block.tag_name != block.tag_name.upper()

        def apply(self, block: Block) -> Block:
            return block.model_copy(update={"tag_name": block.tag_name.upper()})

        @property
        def description(self) -> str:
            return "Upper-case tag names"
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from .block import Block


class TransformRuleType(Enum):
    """Types of block transform rules."""

    MIGRATION = "migration"  # Deprecated field migrations
    TARGET = "target"  # Target-specific rewrites


class BlockTransformRule(ABC):
    """Base class for block transform rules."""

    rule_type: TransformRuleType
    priority: int = 0  # Lower = applied first

    @abstractmethod
    def applies_to(self, block: Block) -> bool:
        """Check if the rule would change this block."""
        pass

    @abstractmethod
    def apply(self, block: Block) -> Block:
        """Return the rewritten block."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this rule does."""
        pass


class LegacyEventsRule(BlockTransformRule):
    """
    Merge the deprecated ``events`` attribute into ``actions``.

    Transforms: {"events": {"click": "..."}} → {"actions": {"click": "..."}}
    Existing actions win over legacy events with the same name.
    """

    rule_type = TransformRuleType.MIGRATION
    priority = 10

    def applies_to(self, block: Block) -> bool:
        return bool(block.model_extra) and "events" in block.model_extra

    def apply(self, block: Block) -> Block:
        extra = block.model_extra or {}
        events = extra.get("events")
        actions = dict(block.actions)
        if isinstance(events, dict):
            for name, handler in events.items():
                actions.setdefault(name, handler)

        copied = block.model_copy(update={"actions": actions})
        # model_copy shallow-copies the extras dict, so dropping the key leaves the source intact
        if copied.__pydantic_extra__ is not None:
            copied.__pydantic_extra__.pop("events", None)
        return copied

    @property
    def description(self) -> str:
        return "Move deprecated 'events' handlers into 'actions'"


class ComponentAliasRule(BlockTransformRule):
    """
    Rename deprecated component names.

    Transforms: component.name "Core:Text" → "Text"
    Alias targets must not themselves be aliases, which keeps the rule idempotent.
    """

    rule_type = TransformRuleType.MIGRATION
    priority = 20

    DEFAULT_ALIASES = {
        "Core:Text": "Text",
        "Core:Image": "Image",
        "Core:Button": "Button",
        "Core:Section": "Section",
        "Core:Columns": "Columns",
        "Raw:Img": "Image",
    }

    def __init__(self, aliases: dict[str, str] | None = None):
        self.aliases = dict(self.DEFAULT_ALIASES)
        if aliases:
            self.aliases.update(aliases)
        chained = set(self.aliases) & set(self.aliases.values())
        if chained:
            raise ValueError(f"Component aliases must not chain: {sorted(chained)}")

    def applies_to(self, block: Block) -> bool:
        component = block.component
        return isinstance(component, dict) and component.get("name") in self.aliases

    def apply(self, block: Block) -> Block:
        component = dict(block.component or {})
        component["name"] = self.aliases[component["name"]]
        return block.model_copy(update={"component": component})

    @property
    def description(self) -> str:
        return "Rename deprecated component names to their canonical form"


class BindingPathNormalizationRule(BlockTransformRule):
    """
    Normalize legacy binding target paths.

    Transforms:
        block.properties.text → properties.text
        options.text          → component.options.text
        style.color           → responsiveStyles.large.color

    When a legacy path and its canonical form are both present, the canonical
    binding is kept.
    """

    rule_type = TransformRuleType.MIGRATION
    priority = 30

    PREFIX_REWRITES = [
        ("block.", ""),
        ("options.", "component.options."),
        ("style.", "responsiveStyles.large."),
    ]

    def _normalize(self, path: str) -> str:
        # Repeat until stable: "block.block.x" needs two passes
        previous = None
        while previous != path:
            previous = path
            for legacy, canonical in self.PREFIX_REWRITES:
                if path.startswith(legacy):
                    path = canonical + path[len(legacy) :]
        return path

    def applies_to(self, block: Block) -> bool:
        return any(self._normalize(path) != path for path in block.bindings)

    def apply(self, block: Block) -> Block:
        bindings: dict[str, str] = {}
        for path, expression in block.bindings.items():
            canonical = self._normalize(path)
            if canonical != path and canonical in block.bindings:
                continue
            bindings[canonical] = expression
        return block.model_copy(update={"bindings": bindings})

    @property
    def description(self) -> str:
        return "Rewrite legacy binding paths (block., options., style.) to canonical fields"


def default_rules() -> list[BlockTransformRule]:
    """Migration rules every processor applies."""
    return [LegacyEventsRule(), ComponentAliasRule(), BindingPathNormalizationRule()]


class TransformStage:
    """
    Ordered list of transform rules.

    Example:
        stage = TransformStage()
        canonical = stage.transform(block)
        assert stage.transform(canonical) == canonical
    """

    def __init__(self, rules: list[BlockTransformRule] | None = None):
        """
        Initialize the stage.

        Args:
            rules: Rules to apply; defaults to default_rules()
        """
        selected = default_rules() if rules is None else rules
        self.rules = sorted(selected, key=lambda r: r.priority)

    def transform(self, block: Block) -> Block:
        """Apply every applicable rule in priority order."""
        for rule in self.rules:
            if rule.applies_to(block):
                block = rule.apply(block)
        return block

    def describe(self) -> list[dict[str, Any]]:
        """Rule summaries in application order."""
        return [
            {
                "name": type(rule).__name__,
                "type": rule.rule_type.value,
                "priority": rule.priority,
                "description": rule.description,
            }
            for rule in self.rules
        ]


__all__ = [
    "TransformRuleType",
    "BlockTransformRule",
    "LegacyEventsRule",
    "ComponentAliasRule",
    "BindingPathNormalizationRule",
    "TransformStage",
    "default_rules",
]
