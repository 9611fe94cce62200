"""Tests for the sandboxed Jinja2 expression evaluator and its rules."""

from collections.abc import Mapping
from typing import Any

import pytest

from blocks_mcp.engine import (
    EvaluationContext,
    ExpressionEvaluationError,
    ExpressionEvaluator,
    ExpressionSecurityError,
    JinjaExpressionEvaluator,
)
from blocks_mcp.engine.evaluator import (
    ForbiddenNamespaceRule,
    JavaScriptLiteralRule,
    RuleContext,
    StateProxy,
    TemplateMarkerRule,
    apply_rules,
)


@pytest.fixture
def evaluator() -> JinjaExpressionEvaluator:
    return JinjaExpressionEvaluator()


@pytest.fixture
def scope(eval_context: EvaluationContext) -> dict[str, Any]:
    return eval_context.scope()


# -----------------------------------------------------------------------
# Evaluation
# -----------------------------------------------------------------------


class TestEvaluate:
    def test_string_concatenation(self, evaluator, scope) -> None:
        assert evaluator.evaluate("'hello ' + state.name", scope) == "hello World"

    def test_type_preserved(self, evaluator, scope) -> None:
        assert evaluator.evaluate("state.count * 2", scope) == 6
        assert evaluator.evaluate("state.items", scope) == ["a", "b"]
        assert evaluator.evaluate("state.count > 2", scope) is True

    def test_wrapped_expression(self, evaluator, scope) -> None:
        assert evaluator.evaluate("{{ state.name }}", scope) == "World"

    def test_local_state_shadows_root(self, evaluator) -> None:
        ctx = EvaluationContext(local_state={"name": "Local"}, root_state={"name": "Root"})
        scope = ctx.scope()

        assert evaluator.evaluate("state.name", scope) == "Local"
        assert evaluator.evaluate("root_state.name", scope) == "Root"

    def test_ambient_context_visible(self, evaluator, scope) -> None:
        assert evaluator.evaluate("context.nonce", scope) == "abc123"
        assert evaluator.evaluate("context.flags.beta", scope) is True

    def test_state_keys_win_over_mapping_methods(self, evaluator, scope) -> None:
        assert evaluator.evaluate("state.items | length", scope) == 2

    def test_get_helper(self, evaluator, scope) -> None:
        assert evaluator.evaluate("get(state.items, 5, 'none')", scope) == "none"
        assert evaluator.evaluate("get(state.user, 'role')", scope) == "admin"

    def test_javascript_operators(self, evaluator, scope) -> None:
        assert evaluator.evaluate("state.count === 3 && state.name !== null", scope) is True
        assert evaluator.evaluate("state.count === 4 || false", scope) is False

    def test_mutator_call(self, evaluator, scope, state_writes, root_state) -> None:
        evaluator.evaluate("set_state({'clicked': true})", scope)

        assert state_writes == [{"clicked": True}]
        assert root_state["clicked"] is True

    def test_cache_disabled(self, scope) -> None:
        evaluator = JinjaExpressionEvaluator(cache_size=0)
        assert evaluator.evaluate("state.count + 1", scope) == 4

    def test_forbidden_words_inside_strings_allowed(self, evaluator, scope) -> None:
        assert evaluator.evaluate("'Store open(9-5)'", scope) == "Store open(9-5)"
        assert evaluator.evaluate("'eval(' ~ state.name ~ ')'", scope) == "eval(World)"


class TestEvaluateFailures:
    def test_undefined_result_raises(self, evaluator, scope) -> None:
        with pytest.raises(ExpressionEvaluationError):
            evaluator.evaluate("state.missing", scope)

    def test_undefined_in_operation_raises(self, evaluator, scope) -> None:
        with pytest.raises(ExpressionEvaluationError) as exc_info:
            evaluator.evaluate("state.missing.deep + 1", scope)
        assert exc_info.value.expression == "state.missing.deep + 1"

    def test_syntax_error_raises(self, evaluator, scope) -> None:
        with pytest.raises(ExpressionEvaluationError):
            evaluator.evaluate("state.name +", scope)

    def test_runtime_error_raises(self, evaluator, scope) -> None:
        with pytest.raises(ExpressionEvaluationError) as exc_info:
            evaluator.evaluate("1 / 0", scope)
        assert isinstance(exc_info.value.cause, ZeroDivisionError)

    @pytest.mark.parametrize(
        "source",
        [
            "state.__class__",
            "''.__class__.__mro__",
            "__import__('os')",
            "open('/etc/passwd')",
            "open ('/etc/passwd')",
            "'safe' ~ eval('x')",
        ],
    )
    def test_forbidden_patterns(self, evaluator, scope, source: str) -> None:
        with pytest.raises(ExpressionSecurityError):
            evaluator.evaluate(source, scope)

    def test_read_only_context_rejects_mutation(self, evaluator) -> None:
        scope = EvaluationContext(root_state={}).scope()
        with pytest.raises(ExpressionEvaluationError):
            evaluator.evaluate("set_state({'a': 1})", scope)


# -----------------------------------------------------------------------
# Rules
# -----------------------------------------------------------------------


class TestSyntaxRules:
    def test_template_marker_rule(self) -> None:
        rule = TemplateMarkerRule()
        ctx = RuleContext(expression="  {{ a.b }} ", source="  {{ a.b }} ")

        assert rule.applies_to(ctx)
        assert rule.transform(ctx).expression == "a.b"

    def test_template_marker_rule_skips_templates(self) -> None:
        ctx = RuleContext(expression="{{ a }} and {{ b }}", source="")
        assert not TemplateMarkerRule().applies_to(ctx)

    def test_javascript_rule_leaves_string_literals(self) -> None:
        result = apply_rules([JavaScriptLiteralRule()], "state.x === 'a && b' || null")
        assert result.expression == "state.x == 'a && b' or none"

    def test_javascript_rule_not_applied_inside_strings_only(self) -> None:
        ctx = RuleContext(expression="'null && undefined'", source="")
        assert not JavaScriptLiteralRule().applies_to(ctx)

    def test_custom_rules_sorted_by_priority(self) -> None:
        evaluator = JinjaExpressionEvaluator(rules=[JavaScriptLiteralRule()])
        priorities = [rule.priority for rule in evaluator.rules]
        assert priorities == sorted(priorities)


class TestSecurityRules:
    @pytest.mark.parametrize(
        "expression",
        ["state.reopen(1)", "state.evaluate", "recompile_all(x)", "'Store open(9-5)'"],
    )
    def test_whole_names_outside_strings_only(self, expression: str) -> None:
        ctx = RuleContext(expression=expression, source=expression)
        assert not ForbiddenNamespaceRule().applies_to(ctx)

    def test_names_offending_pattern(self) -> None:
        ctx = RuleContext(expression="'open(' ~ exec (x)", source="src")
        with pytest.raises(ExpressionSecurityError) as exc_info:
            ForbiddenNamespaceRule().transform(ctx)
        assert exc_info.value.pattern == "exec("


class TestProtocol:
    def test_jinja_evaluator_satisfies_protocol(self) -> None:
        assert isinstance(JinjaExpressionEvaluator(), ExpressionEvaluator)

    def test_custom_evaluator_satisfies_protocol(self) -> None:
        class Constant:
            def evaluate(self, source: str, scope: Mapping[str, Any]) -> Any:
                return 42

        assert isinstance(Constant(), ExpressionEvaluator)


class TestStateProxy:
    def test_lookup_order(self) -> None:
        proxy = StateProxy({"a": 1}, {"a": 2, "b": 3})
        assert proxy["a"] == 1
        assert proxy.b == 3
        assert "b" in proxy
        assert list(proxy) == ["a", "b"]
        assert len(proxy) == 2

    def test_missing_key(self) -> None:
        proxy = StateProxy({}, {})
        with pytest.raises(KeyError):
            proxy["nope"]
        with pytest.raises(AttributeError):
            proxy.nope  # noqa: B018

    def test_read_only(self) -> None:
        proxy = StateProxy({}, {})
        with pytest.raises(AttributeError):
            proxy.x = 1  # type: ignore[misc]

    def test_views_are_live(self) -> None:
        root: dict[str, Any] = {}
        proxy = StateProxy({}, root)
        root["late"] = True
        assert proxy.late is True
