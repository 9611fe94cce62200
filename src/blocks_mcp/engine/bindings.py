"""
Binding resolution: evaluate a block's dynamic bindings onto a clone.

Failure policy:
- Evaluation failure: reported as BindingFailure(kind="evaluation"); the target
  path is left unset so the block keeps its pre-binding value.
- Structural anomaly: reported as BindingFailure(kind="structure"); the write
  is a no-op.

Neither case raises, and later bindings on the same block are still applied.
"""

from typing import Any

from .block import Block
from .cloner import CloneStrategy, clone_block
from .context import EvaluationContext
from .diagnostics import BindingFailure, DiagnosticSink, NullDiagnosticSink
from .evaluator import ExpressionEvaluator
from .exceptions import BindingPathError
from .paths import set_path


def resolve_bindings(
    block: Block,
    context: EvaluationContext,
    *,
    evaluator: ExpressionEvaluator,
    strategy: CloneStrategy = CloneStrategy.RECURSIVE,
    sink: DiagnosticSink | None = None,
) -> Block:
    """
    Apply every binding of ``block`` to a fresh clone.

    Args:
        block: Source block (never modified)
        context: Evaluation context (state, mutator, ambient data)
        evaluator: Expression evaluator capability
        strategy: Cloning strategy for the processed copy
        sink: Receiver for per-binding failures

    Returns:
        ``block`` itself when it has no bindings, otherwise the mutated clone
    """
    if not block.bindings:
        return block

    sink = sink or NullDiagnosticSink()
    copied = clone_block(block, strategy)
    scope = context.scope()

    # Iterate the source mapping: a binding may overwrite ``bindings`` on the clone
    for path, expression in block.bindings.items():
        try:
            value: Any = evaluator.evaluate(expression, scope)
        except Exception as e:
            sink.report(
                BindingFailure(
                    block_id=block.id,
                    path=path,
                    expression=expression,
                    kind="evaluation",
                    message=str(e),
                )
            )
            continue

        try:
            set_path(copied, path, value)
        except BindingPathError as e:
            sink.report(
                BindingFailure(
                    block_id=block.id,
                    path=path,
                    expression=expression,
                    kind="structure",
                    message=e.reason,
                )
            )

    return copied


__all__ = ["resolve_bindings"]
