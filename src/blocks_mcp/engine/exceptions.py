"""Block processing exceptions.

Exception Hierarchy:
    BlockProcessingError (base)
    ├── ExpressionEvaluationError (binding expression failed to evaluate)
    │   └── ExpressionSecurityError (expression touched a forbidden name)
    ├── BindingPathError (binding path malformed or not writable)
    └── PipelineConfigError (invalid pipeline configuration)

Only PipelineConfigError escapes to callers. The other errors are raised inside
the pipeline and converted into diagnostic records by the binding resolver, so a
single malformed block never aborts a render pass.
"""

from __future__ import annotations


class BlockProcessingError(Exception):
    """Base exception for all block processing errors."""

    pass


class ExpressionEvaluationError(BlockProcessingError):
    """
    A binding expression could not be evaluated.

    Attributes:
        expression: Expression source as authored on the block
        cause: Underlying exception raised by the evaluator backend
    """

    def __init__(self, expression: str, message: str, cause: BaseException | None = None):
        self.expression = expression
        self.cause = cause
        super().__init__(f"Failed to evaluate expression: {expression}\nError: {message}")

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"{self.__class__.__name__}(expression={self.expression!r})"


class ExpressionSecurityError(ExpressionEvaluationError):
    """Raised when an expression references a forbidden namespace or function."""

    def __init__(self, expression: str, pattern: str):
        self.pattern = pattern
        super().__init__(expression, f"Access to '{pattern}' is forbidden in expressions")


class BindingPathError(BlockProcessingError):
    """
    A binding target path cannot be applied to a block.

    Raised for malformed path syntax, writes into the shared region
    (children/meta), and traversal through non-container values.

    Attributes:
        path: Binding target path
        reason: Short description of the structural problem
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot apply binding path '{path}': {reason}")


class PipelineConfigError(BlockProcessingError):
    """Raised when a pipeline configuration violates a precondition."""

    pass


__all__ = [
    "BlockProcessingError",
    "ExpressionEvaluationError",
    "ExpressionSecurityError",
    "BindingPathError",
    "PipelineConfigError",
]
