"""
Expression evaluator package.

Binding expressions are evaluated through the ExpressionEvaluator protocol so
the expression backend can be swapped without touching the pipeline. The
default backend combines preprocessing rules with Jinja2's sandboxed
expression compiler:

1. Security rules reject interpreter escapes
2. Syntax rules normalize authored expressions
3. Sandboxed compile_expression evaluates with type preservation

Public API:
    - ExpressionEvaluator: Protocol for evaluator backends
    - JinjaExpressionEvaluator: Default sandboxed backend
    - ExpressionRule: Base class for custom preprocessing rules
    - StateProxy: Merged local/root state view exposed as ``state``
"""

from .jinja_evaluator import ExpressionEvaluator, JinjaExpressionEvaluator
from .proxies import ProxyBase, StateProxy
from .rules import ExpressionRule, RuleContext, RuleType, apply_rules
from .security_rules import ForbiddenNamespaceRule
from .syntax_rules import JavaScriptLiteralRule, TemplateMarkerRule

__all__ = [
    "ExpressionEvaluator",
    "JinjaExpressionEvaluator",
    "ExpressionRule",
    "RuleType",
    "RuleContext",
    "apply_rules",
    "ForbiddenNamespaceRule",
    "TemplateMarkerRule",
    "JavaScriptLiteralRule",
    "ProxyBase",
    "StateProxy",
]
