"""
Security rules for binding expressions.

Rules:
    - ForbiddenNamespaceRule: Block access to interpreter internals
"""

import re

from ..exceptions import ExpressionSecurityError
from .rules import ExpressionRule, RuleContext, RuleType, code_outside_strings


def _pattern_regex(pattern: str) -> re.Pattern[str]:
    if pattern.endswith("("):
        return re.compile(rf"\b{re.escape(pattern[:-1])}\s*\(")
    return re.compile(re.escape(pattern))


class ForbiddenNamespaceRule(ExpressionRule):
    """
    Block access to forbidden namespaces.

    The sandboxed environment already refuses unsafe attributes at runtime;
    this rule rejects obvious escapes before anything is compiled so the
    diagnostic names the offending pattern. Only code outside string
    literals is inspected, and call patterns match whole names.
    """

    rule_type = RuleType.SECURITY
    priority = 1

    FORBIDDEN_PATTERNS = [
        "__builtins__",
        "__import__",
        "__subclasses__",
        "__globals__",
        "__class__",
        "__mro__",
        "exec(",
        "eval(",
        "compile(",
        "open(",
    ]

    _MATCHERS = [(pattern, _pattern_regex(pattern)) for pattern in FORBIDDEN_PATTERNS]

    def _first_match(self, expression: str) -> str | None:
        code = code_outside_strings(expression)
        for pattern, regex in self._MATCHERS:
            if regex.search(code):
                return pattern
        return None

    def applies_to(self, context: RuleContext) -> bool:
        return self._first_match(context.expression) is not None

    def transform(self, context: RuleContext) -> RuleContext:
        pattern = self._first_match(context.expression)
        if pattern is not None:
            raise ExpressionSecurityError(context.source, pattern)
        return context

    @property
    def description(self) -> str:
        return "Prevent access to forbidden namespaces and functions"
