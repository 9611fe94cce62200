"""MCP tool implementations for block processing.

Following official Anthropic MCP Python SDK patterns:
- Tool functions decorated with @mcp.tool()
- Flat parameter signatures with Annotated types for validation
- Clear docstrings (become tool descriptions)

Each tool parses its content argument (YAML or JSON), runs the pipeline with a
per-request CollectingDiagnosticSink and returns blocks in wire format together
with the collected diagnostics.
"""

from typing import Annotated, Any

from mcp.types import ToolAnnotations
from pydantic import Field

from .context import AppContext, AppContextType
from .engine import (
    CollectingDiagnosticSink,
    EvaluationContext,
    load_blocks_from_yaml,
)
from .server import mcp

ContentArg = Annotated[
    str,
    Field(
        description="Block, list of blocks, or content entry ({data: {blocks: [...]}}) "
        "as YAML or JSON",
        min_length=2,
        max_length=1_000_000,
    ),
]


def _failure(error: str) -> dict[str, Any]:
    return {"status": "failure", "error": error}


def process_content(
    app_ctx: AppContext,
    content: str,
    root_state: dict[str, Any] | None = None,
    local_state: dict[str, Any] | None = None,
    context: dict[str, Any] | None = None,
    locale: str | None = None,
    recursive: bool = True,
) -> dict[str, Any]:
    """Process every top-level block in ``content``.

    Root state writes made through ``set_state`` by binding expressions are
    merged into a request-local copy of ``root_state`` and returned.
    """
    load_result = load_blocks_from_yaml(content, source="<tool>")
    if not load_result.is_success:
        return _failure(load_result.error or "Failed to load content")

    state = dict(root_state or {})

    def set_state(update: Any) -> None:
        if not isinstance(update, dict):
            raise TypeError(f"set_state expects a mapping, got {type(update).__name__}")
        state.update(update)

    eval_context = EvaluationContext(
        local_state=local_state or {},
        root_state=state,
        set_root_state=set_state,
        context=context or {},
        locale=locale,
    )

    sink = CollectingDiagnosticSink()
    processor = app_ctx.create_processor(sink)
    process = processor.process_tree if recursive else processor.process

    blocks = [process(block, eval_context).to_wire() for block in load_result.unwrap()]
    return {
        "status": "success",
        "locale": eval_context.active_locale,
        "blocks": blocks,
        "root_state": state,
        "diagnostics": [record.model_dump() for record in sink.records],
    }


def localize_content(app_ctx: AppContext, content: str, locale: str | None) -> dict[str, Any]:
    """Resolve localized values only (no transforms, no bindings)."""
    load_result = load_blocks_from_yaml(content, source="<tool>")
    if not load_result.is_success:
        return _failure(load_result.error or "Failed to load content")

    sink = CollectingDiagnosticSink()
    processor = app_ctx.create_processor(sink)
    blocks = [processor.resolve_locale(block, locale).to_wire() for block in load_result.unwrap()]
    return {
        "status": "success",
        "locale": locale,
        "blocks": blocks,
        "diagnostics": [record.model_dump() for record in sink.records],
    }


def describe_transform_rules(app_ctx: AppContext) -> list[dict[str, Any]]:
    """Transform rules in the order the pipeline applies them."""
    return app_ctx.create_processor(CollectingDiagnosticSink()).transforms.describe()


# =============================================================================
# MCP Tools (following official SDK decorator pattern)
# =============================================================================


@mcp.tool(
    annotations=ToolAnnotations(
        title="Process Blocks",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,  # set_state writes only touch a request-local copy
        openWorldHint=False,
    )
)
async def process_blocks(
    content: ContentArg,
    root_state: Annotated[
        dict[str, Any] | None,
        Field(description="Page/app-level state visible as state.* and root_state.*"),
    ] = None,
    local_state: Annotated[
        dict[str, Any] | None,
        Field(description="Block-scoped state; shadows root_state in state.*"),
    ] = None,
    context: Annotated[
        dict[str, Any] | None,
        Field(description="Ambient render context (locale, nonce, flags)"),
    ] = None,
    locale: Annotated[
        str | None,
        Field(description="Active locale; defaults to context.locale or root_state.locale"),
    ] = None,
    recursive: Annotated[
        bool,
        Field(description="Also process every descendant block"),
    ] = True,
    *,
    ctx: AppContextType,
) -> dict[str, Any]:
    """Transform, evaluate bindings and localize blocks. Required: content."""
    if ctx is None:
        return _failure("Server context not available. Tool requires context to access resources.")

    app_ctx = ctx.request_context.lifespan_context
    return process_content(app_ctx, content, root_state, local_state, context, locale, recursive)


@mcp.tool(
    annotations=ToolAnnotations(
        title="Resolve Locale",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def resolve_locale(
    content: ContentArg,
    locale: Annotated[
        str | None,
        Field(description="Locale code; omit to resolve through the default variants"),
    ] = None,
    *,
    ctx: AppContextType,
) -> dict[str, Any]:
    """Replace localized values on blocks with one locale's variant. Required: content."""
    if ctx is None:
        return _failure("Server context not available. Tool requires context to access resources.")

    return localize_content(ctx.request_context.lifespan_context, content, locale)


@mcp.tool(
    annotations=ToolAnnotations(
        title="List Transform Rules",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def list_transform_rules(*, ctx: AppContextType) -> list[dict[str, Any]]:
    """List block transform rules in application order. No parameters."""
    return describe_transform_rules(ctx.request_context.lifespan_context)


__all__ = [
    "process_blocks",
    "resolve_locale",
    "list_transform_rules",
    "process_content",
    "localize_content",
    "describe_transform_rules",
]
