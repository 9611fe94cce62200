"""
Syntax rules that normalize authored expressions for Jinja2.

Rules:
    - TemplateMarkerRule: Unwrap a single {{ ... }} expression
    - JavaScriptLiteralRule: Translate editor-emitted JS operators and literals
"""

import re

from .rules import STRING_LITERAL, ExpressionRule, RuleContext, RuleType, code_outside_strings


class TemplateMarkerRule(ExpressionRule):
    """
    Unwrap a single-expression template.

    Transforms: {{ state.name }} → state.name
    """

    rule_type = RuleType.SYNTAX
    priority = 10

    def applies_to(self, context: RuleContext) -> bool:
        stripped = context.expression.strip()
        return (
            stripped.startswith("{{")
            and stripped.endswith("}}")
            and stripped.count("{{") == 1
            and stripped.count("}}") == 1
        )

    def transform(self, context: RuleContext) -> RuleContext:
        context.expression = context.expression.strip()[2:-2].strip()
        return context

    @property
    def description(self) -> str:
        return "Unwrap {{ ... }} around a single expression"


class JavaScriptLiteralRule(ExpressionRule):
    """
    Translate JavaScript operators and literals outside string literals.

    Transforms:
        a === b  → a == b
        a !== b  → a != b
        a && b   → a and b
        a || b   → a or b
        null, undefined → none
    """

    rule_type = RuleType.SYNTAX
    priority = 20

    REPLACEMENTS = [
        (re.compile(r"==="), "=="),
        (re.compile(r"!=="), "!="),
        (re.compile(r"\s*&&\s*"), " and "),
        (re.compile(r"\s*\|\|\s*"), " or "),
        (re.compile(r"\b(?:null|undefined)\b"), "none"),
    ]

    def applies_to(self, context: RuleContext) -> bool:
        code = code_outside_strings(context.expression)
        return any(pattern.search(code) for pattern, _ in self.REPLACEMENTS)

    def transform(self, context: RuleContext) -> RuleContext:
        parts = STRING_LITERAL.split(context.expression)
        # Even indexes are code, odd indexes are captured string literals
        for index in range(0, len(parts), 2):
            for pattern, replacement in self.REPLACEMENTS:
                parts[index] = pattern.sub(replacement, parts[index])
        context.expression = "".join(parts)
        return context

    @property
    def description(self) -> str:
        return "Convert JavaScript operators (===, &&, ||, null) to Jinja2 syntax"
