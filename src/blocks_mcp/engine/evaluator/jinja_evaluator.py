"""
Sandboxed expression evaluator for block bindings.

Binding expressions are evaluated through a narrow capability interface so the
pipeline never depends on a particular expression language:

    evaluate(source, scope) -> value

JinjaExpressionEvaluator is the default backend. It runs each expression
through the preprocessing rules, compiles it with a sandboxed Jinja2
environment (type-preserving compile_expression, not template rendering) and
calls it with the scope as keyword arguments.

Example:
    evaluator = JinjaExpressionEvaluator()
    evaluator.evaluate("'hello ' + state.name", ctx.scope())  # "hello World"
"""

import json
from collections.abc import Callable, Mapping
from functools import lru_cache
from typing import Any, Protocol, runtime_checkable

from jinja2 import StrictUndefined, Undefined
from jinja2.sandbox import SandboxedEnvironment

from ..exceptions import ExpressionEvaluationError
from .rules import ExpressionRule, apply_rules
from .security_rules import ForbiddenNamespaceRule
from .syntax_rules import JavaScriptLiteralRule, TemplateMarkerRule


@runtime_checkable
class ExpressionEvaluator(Protocol):
    """Protocol for pluggable expression evaluators.

    Implementations must raise on failure (any exception type); the binding
    resolver turns failures into diagnostics and leaves the target unset.

    Example implementation:
        class LiteralEvaluator:
            def evaluate(self, source: str, scope: Mapping[str, Any]) -> Any:
                return ast.literal_eval(source)
    """

    def evaluate(self, source: str, scope: Mapping[str, Any]) -> Any:
        """Evaluate ``source`` against ``scope`` and return its value."""
        ...


class JinjaExpressionEvaluator:
    """
    Expression evaluator backed by a sandboxed Jinja2 environment.

    Pipeline per expression:
    1. Preprocessing rules (security first, then syntax)
    2. compile_expression (cached per transformed source)
    3. Call with scope names as keyword arguments
    4. Reject undefined results

    Compiled expressions are immutable and safe to share between threads.
    """

    def __init__(
        self,
        rules: list[ExpressionRule] | None = None,
        cache_size: int = 256,
    ):
        """
        Initialize the evaluator.

        Args:
            rules: Optional custom preprocessing rules (merged with defaults)
            cache_size: Number of compiled expressions to keep (0 disables caching)
        """
        self.rules = self._initialize_rules(rules)
        self.env = SandboxedEnvironment(undefined=StrictUndefined, autoescape=False)
        self._register_extensions()

        compile_fn: Callable[[str], Any] = self._compile
        if cache_size > 0:
            compile_fn = lru_cache(maxsize=cache_size)(compile_fn)
        self._compiled = compile_fn

    def _initialize_rules(self, custom_rules: list[ExpressionRule] | None) -> list[ExpressionRule]:
        default_rules: list[ExpressionRule] = [
            ForbiddenNamespaceRule(),
            TemplateMarkerRule(),
            JavaScriptLiteralRule(),
        ]
        return sorted(default_rules + (custom_rules or []), key=lambda r: r.priority)

    def _register_extensions(self) -> None:
        """Register filters and global helpers."""
        self.env.filters.update(
            {
                "tojson": json.dumps,
                "keys": lambda x: list(x.keys()) if isinstance(x, Mapping) else [],
                "values": lambda x: list(x.values()) if isinstance(x, Mapping) else [],
            }
        )
        self.env.globals.update(
            {
                "len": len,
                "int": int,
                "float": float,
                "str": str,
                "bool": bool,
                "get": self._get,
            }
        )

    @staticmethod
    def _get(obj: Any, key: int | str, default: Any = None) -> Any:
        """
        Safe accessor for mappings, sequences, and attributes.

        Examples:
            {{ get(state.items, 0, {}) }}
            {{ get(context, 'nonce', '') }}
        """
        try:
            if isinstance(key, int) and isinstance(obj, (list, tuple)):
                if -len(obj) <= key < len(obj):
                    return obj[key]
                return default
            if isinstance(obj, Mapping):
                return obj.get(key, default)
            try:
                return obj[key]
            except (TypeError, KeyError, IndexError):
                pass
            if isinstance(key, str) and not key.startswith("_"):
                return getattr(obj, key, default)
            return default
        except (TypeError, KeyError, IndexError, AttributeError):
            return default

    def _compile(self, expression: str) -> Any:
        return self.env.compile_expression(expression, undefined_to_none=False)

    def evaluate(self, source: str, scope: Mapping[str, Any]) -> Any:
        """
        Evaluate a binding expression.

        Args:
            source: Expression as authored (bare or wrapped in {{ }})
            scope: Names visible to the expression

        Returns:
            Evaluated value (type preserved)

        Raises:
            ExpressionSecurityError: If a preprocessing rule rejects the source
            ExpressionEvaluationError: If compilation or evaluation fails
        """
        transformed = apply_rules(self.rules, source).expression

        try:
            compiled = self._compiled(transformed)
            result = compiled(**scope)
        except Exception as e:
            raise ExpressionEvaluationError(source, str(e), cause=e) from e

        if isinstance(result, Undefined):
            raise ExpressionEvaluationError(source, "expression evaluated to an undefined value")

        return result


__all__ = ["ExpressionEvaluator", "JinjaExpressionEvaluator"]
