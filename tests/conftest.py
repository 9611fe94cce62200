"""Shared test configuration for blocks-mcp tests.

Provides:
- Block factory for compact test content
- Evaluation context with a recording root-state mutator
- Collecting diagnostic sink and a processor wired to it
"""

from collections.abc import Callable
from typing import Any

import pytest

from blocks_mcp.engine import (
    Block,
    BlockProcessor,
    CollectingDiagnosticSink,
    EvaluationContext,
    PipelineConfig,
)


@pytest.fixture
def make_block() -> Callable[..., Block]:
    """Factory for blocks with a shared children list and meta dict."""

    def _make(**fields: Any) -> Block:
        fields.setdefault("id", "block-1")
        fields.setdefault("children", [Block(id="child-1", properties={"text": "child"})])
        fields.setdefault("meta", {"editor": {"selected": True}})
        return Block(**fields)

    return _make


@pytest.fixture
def root_state() -> dict[str, Any]:
    return {"name": "World", "count": 3, "items": ["a", "b"], "user": {"role": "admin"}}


@pytest.fixture
def state_writes() -> list[Any]:
    """Values passed to the root-state mutator, in call order."""
    return []


@pytest.fixture
def eval_context(root_state: dict[str, Any], state_writes: list[Any]) -> EvaluationContext:
    # Plain function on purpose: the sandbox refuses to call Mock objects
    def set_state(update: Any) -> None:
        state_writes.append(update)
        root_state.update(update)

    return EvaluationContext(
        local_state={"index": 0},
        root_state=root_state,
        set_root_state=set_state,
        context={"nonce": "abc123", "flags": {"beta": True}},
    )


@pytest.fixture
def sink() -> CollectingDiagnosticSink:
    return CollectingDiagnosticSink()


@pytest.fixture
def processor(sink: CollectingDiagnosticSink) -> BlockProcessor:
    return BlockProcessor(PipelineConfig(default_locale="en"), sink=sink)
