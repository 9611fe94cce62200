"""Shared context types for MCP server.

This module contains context types used across server and tools modules,
separated to avoid circular imports.
"""

from dataclasses import dataclass

from mcp.server.fastmcp import Context
from mcp.server.session import ServerSession

from .engine import BlockProcessor, DiagnosticSink, ExpressionEvaluator, PipelineConfig


@dataclass
class AppContext:
    """Application context containing shared resources for MCP tools.

    Created once during server startup. The evaluator (and its compiled
    expression cache) is shared; each tool call gets its own processor so
    diagnostics are collected per request.
    """

    config: PipelineConfig
    evaluator: ExpressionEvaluator

    def create_processor(self, sink: DiagnosticSink) -> BlockProcessor:
        """Create a BlockProcessor reporting to ``sink``.

        Returns:
            BlockProcessor sharing the server-wide config and evaluator
        """
        return BlockProcessor(config=self.config, evaluator=self.evaluator, sink=sink)


# Type alias for MCP tool context parameter
AppContextType = Context[ServerSession, AppContext]


__all__ = ["AppContext", "AppContextType"]
