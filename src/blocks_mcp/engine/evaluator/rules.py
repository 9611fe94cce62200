"""
Rule system for expression preprocessing.

Rules run in priority order over an expression source before it is compiled
by the evaluator backend. Each rule can:
1. Check if it applies to the current expression
2. Rewrite the expression
3. Reject it by raising ExpressionSecurityError

Security rules run first (priority 1-9), followed by syntax rules (10-49).

Example:
    class StripSemicolonRule(ExpressionRule):
        rule_type = RuleType.SYNTAX
        priority = 40

        def applies_to(self, context: RuleContext) -> bool:
            return context.expression.rstrip().endswith(";")

        def transform(self, context: RuleContext) -> RuleContext:
            context.expression = context.expression.rstrip().rstrip(";")
            return context

        @property
        def description(self) -> str:
            return "Drop trailing statement terminators"
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Single- or double-quoted string literal with backslash escapes
STRING_LITERAL = re.compile(r"""('(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")""")


def code_outside_strings(expression: str) -> str:
    """Return ``expression`` with every string literal removed."""
    return "".join(STRING_LITERAL.split(expression)[::2])


class RuleType(Enum):
    """Types of expression rules."""

    SYNTAX = "syntax"  # Expression syntax rewrites
    SECURITY = "security"  # Security validations


@dataclass
class RuleContext:
    """
    Context passed to rules for processing.

    Attributes:
        expression: Expression source being rewritten
        source: Expression source exactly as authored (for error messages)
        metadata: Rule-specific metadata
    """

    expression: str
    source: str
    metadata: dict[str, Any] = field(default_factory=dict)


class ExpressionRule(ABC):
    """Base class for expression preprocessing rules."""

    rule_type: RuleType
    priority: int = 0  # Lower = higher priority

    @abstractmethod
    def applies_to(self, context: RuleContext) -> bool:
        """Check if rule should be applied to this expression."""
        pass

    @abstractmethod
    def transform(self, context: RuleContext) -> RuleContext:
        """Apply the rewrite and return the (possibly modified) context."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this rule does."""
        pass


def apply_rules(rules: list[ExpressionRule], expression: str) -> RuleContext:
    """Run ``rules`` (already sorted by priority) over ``expression``."""
    context = RuleContext(expression=expression, source=expression)
    for rule in rules:
        if rule.applies_to(context):
            context = rule.transform(context)
    return context
