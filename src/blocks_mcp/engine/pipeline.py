"""
Block processing pipeline.

Sequence (order is mandatory):
    raw block
        ↓
    Transform Stage      (canonical field shape)
        ↓
    Binding Resolver     (clone once, evaluate each binding)
        ↓
    Localization         (bindings may produce localized values)
        ↓
    processed block → renderer

The processor holds only construction-time collaborators (config, evaluator,
transform rules, diagnostic sink). No state is kept between calls, so one
processor can serve concurrent renders of different blocks.

The pipeline does not descend into children; process_tree is the reference
consumer that processes every descendant independently.
"""

import threading

from .bindings import resolve_bindings
from .block import Block
from .config import PipelineConfig
from .context import EvaluationContext
from .diagnostics import DiagnosticSink, LoggingDiagnosticSink
from .evaluator import ExpressionEvaluator, JinjaExpressionEvaluator
from .localization import resolve_locale
from .transforms import BlockTransformRule, TransformStage, default_rules


class BlockProcessor:
    """
    Stateless block processor.

    Example:
        processor = BlockProcessor(PipelineConfig(default_locale="en"))
        ctx = EvaluationContext(root_state={"name": "World", "locale": "fr"})
        processed = processor.process(block, ctx)
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        evaluator: ExpressionEvaluator | None = None,
        sink: DiagnosticSink | None = None,
        extra_rules: list[BlockTransformRule] | None = None,
    ):
        """
        Initialize the processor.

        Args:
            config: Pipeline configuration (defaults to PipelineConfig())
            evaluator: Expression evaluator capability (defaults to sandboxed Jinja2)
            sink: Diagnostic sink (defaults to logging)
            extra_rules: Target-specific transform rules added to the defaults
        """
        self.config = config or PipelineConfig()
        self.evaluator = evaluator or JinjaExpressionEvaluator(
            cache_size=self.config.expression_cache_size
        )
        self.sink = sink or LoggingDiagnosticSink()
        self.transforms = TransformStage(default_rules() + (extra_rules or []))

    def transform(self, block: Block) -> Block:
        """Apply the transform stage only."""
        return self.transforms.transform(block)

    def resolve_bindings(self, block: Block, context: EvaluationContext) -> Block:
        """Apply bindings only (no transforms, no localization)."""
        return resolve_bindings(
            block,
            context,
            evaluator=self.evaluator,
            strategy=self.config.clone_strategy,
            sink=self.sink,
        )

    def resolve_locale(self, block: Block, locale: str | None) -> Block:
        """Apply localization only."""
        return resolve_locale(
            block,
            locale,
            default_locale=self.config.default_locale,
            sink=self.sink,
            max_depth=self.config.max_localization_depth,
        )

    def process(self, block: Block, context: EvaluationContext) -> Block:
        """
        Produce the fully resolved form of one block.

        Args:
            block: Raw block (never modified)
            context: Evaluation context for this render pass

        Returns:
            Processed block; ``children`` and ``meta`` are the source's own objects
        """
        processed = self.transform(block)
        processed = self.resolve_bindings(processed, context)
        return self.resolve_locale(processed, context.active_locale)

    def process_tree(self, block: Block, context: EvaluationContext) -> Block:
        """
        Process a block and all of its descendants, top-down.

        Each node goes through ``process`` on its own; the result is a new tree
        whose nodes have freshly built children lists. The source tree is left
        untouched.
        """
        processed = self.process(block, context)
        if not processed.children:
            return processed
        children = [self.process_tree(child, context) for child in processed.children]
        return processed.model_copy(update={"children": children})


_default_processor: BlockProcessor | None = None
_default_lock = threading.Lock()


def _get_default_processor() -> BlockProcessor:
    global _default_processor
    if _default_processor is None:
        with _default_lock:
            if _default_processor is None:
                _default_processor = BlockProcessor()
    return _default_processor


def process_block(block: Block, context: EvaluationContext) -> Block:
    """Process ``block`` with a shared default BlockProcessor."""
    return _get_default_processor().process(block, context)


__all__ = ["BlockProcessor", "process_block"]
