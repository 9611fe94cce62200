"""Block processing engine.

Turns a raw content block plus an evaluation context into a fully resolved
block, without modifying the shared source tree.

Key Components:

- Block: Pydantic model of a content node (mutable region + shared region)
- EvaluationContext: State handle visible to binding expressions
- clone_block / CloneStrategy: Structural cloning that shares children and meta
- ExpressionEvaluator / JinjaExpressionEvaluator: Pluggable sandboxed evaluator
- resolve_bindings: Evaluates bindings onto a clone with per-binding isolation
- resolve_locale: Replaces localized values with the active locale's variant
- TransformStage: Ordered, idempotent schema migrations
- BlockProcessor: Orchestrates transform → bindings → localization
- PipelineConfig: Construction-time capabilities (clone strategy, locales)
- Diagnostics: Structured failure records delivered to an injected sink
"""

from .bindings import resolve_bindings
from .block import ELEMENT_TYPE, Block, is_embedded_element
from .cloner import CloneStrategy, clone_block, deep_clone_with_conditions
from .config import PipelineConfig
from .context import EvaluationContext
from .diagnostics import (
    BindingFailure,
    CollectingDiagnosticSink,
    DiagnosticSink,
    LocalizationMiss,
    LoggingDiagnosticSink,
    NullDiagnosticSink,
)
from .evaluator import ExpressionEvaluator, JinjaExpressionEvaluator
from .exceptions import (
    BindingPathError,
    BlockProcessingError,
    ExpressionEvaluationError,
    ExpressionSecurityError,
    PipelineConfigError,
)
from .load_result import LoadResult
from .loader import load_blocks_from_file, load_blocks_from_yaml, parse_blocks
from .localization import LOCALIZED_VALUE_TYPE, is_localized_value, resolve_locale
from .paths import get_path, parse_path, set_path
from .pipeline import BlockProcessor, process_block
from .transforms import BlockTransformRule, TransformRuleType, TransformStage

__all__ = [
    # Data model
    "Block",
    "ELEMENT_TYPE",
    "is_embedded_element",
    "EvaluationContext",
    # Pipeline stages
    "CloneStrategy",
    "clone_block",
    "deep_clone_with_conditions",
    "ExpressionEvaluator",
    "JinjaExpressionEvaluator",
    "resolve_bindings",
    "LOCALIZED_VALUE_TYPE",
    "is_localized_value",
    "resolve_locale",
    "BlockTransformRule",
    "TransformRuleType",
    "TransformStage",
    "BlockProcessor",
    "process_block",
    "PipelineConfig",
    # Paths
    "parse_path",
    "set_path",
    "get_path",
    # Diagnostics
    "BindingFailure",
    "LocalizationMiss",
    "DiagnosticSink",
    "LoggingDiagnosticSink",
    "CollectingDiagnosticSink",
    "NullDiagnosticSink",
    # Errors
    "BlockProcessingError",
    "ExpressionEvaluationError",
    "ExpressionSecurityError",
    "BindingPathError",
    "PipelineConfigError",
    # Loading
    "LoadResult",
    "parse_blocks",
    "load_blocks_from_yaml",
    "load_blocks_from_file",
]
