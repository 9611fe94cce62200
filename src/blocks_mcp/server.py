"""FastMCP server initialization for blocks-mcp.

This module initializes the MCP server and manages shared resources via lifespan context.
All tool implementations are in the tools module.
"""

import logging
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from mcp.server.fastmcp import FastMCP

from .context import AppContext, AppContextType
from .engine import JinjaExpressionEvaluator, PipelineConfig

logger = logging.getLogger(__name__)

# =============================================================================
# Shared Resources and Lifespan Management
# =============================================================================


def create_app_context(config: PipelineConfig | None = None) -> AppContext:
    """Build the shared application context.

    Args:
        config: Pipeline configuration; read from BLOCKS_* variables when omitted

    Returns:
        AppContext with the configuration and a shared expression evaluator
    """
    config = config or PipelineConfig.from_env()
    evaluator = JinjaExpressionEvaluator(cache_size=config.expression_cache_size)
    return AppContext(config=config, evaluator=evaluator)


@asynccontextmanager
async def app_lifespan(_server: FastMCP) -> AsyncIterator[AppContext]:
    """Manage application lifecycle.

    Environment Variables:
        BLOCKS_CLONE_STRATEGY, BLOCKS_REUSES_PROCESSED_BLOCKS,
        BLOCKS_DEFAULT_LOCALE, BLOCKS_MAX_LOCALIZATION_DEPTH,
        BLOCKS_EXPRESSION_CACHE_SIZE (see engine.config)

    Args:
        _server: FastMCP server instance (unused, required by FastMCP signature)

    Yields:
        AppContext with initialized resources
    """
    logger.info("Initializing MCP server resources...")

    app_context = create_app_context()
    config = app_context.config
    logger.info(
        f"Pipeline config: clone_strategy={config.clone_strategy.value}, "
        f"reuses_processed_blocks={config.reuses_processed_blocks}, "
        f"default_locale={config.default_locale}"
    )

    try:
        yield app_context
    finally:
        # Nothing to release: the processor and evaluator hold no external resources
        logger.info("Shutting down MCP server...")


# Following Python MCP naming convention: {service}_mcp
mcp = FastMCP("blocks_mcp", lifespan=app_lifespan)


# =============================================================================
# Server Entry Point
# =============================================================================


def main() -> None:
    """Entry point for running the MCP server.

    Called via ``python -m blocks_mcp`` or the ``blocks-mcp`` console script.
    Defaults to stdio transport for MCP protocol communication.
    """
    valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    log_level_str = os.getenv("BLOCKS_LOG_LEVEL", "INFO").upper()

    if log_level_str not in valid_log_levels:
        print(
            f"Warning: Invalid BLOCKS_LOG_LEVEL '{log_level_str}'. "
            f"Valid levels: {', '.join(sorted(valid_log_levels))}. "
            "Using INFO.",
            file=sys.stderr,
        )
        log_level_str = "INFO"

    # Configure logging to stderr (MCP requirement)
    logging.basicConfig(
        level=getattr(logging, log_level_str),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    logger.info("Starting MCP server (press Ctrl+C to stop)...")

    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down gracefully...")
    except Exception as e:
        logger.exception(f"Server error: {e}")
        sys.exit(1)

    logger.info("Server shutdown complete")


__all__ = ["mcp", "main", "create_app_context", "AppContext", "AppContextType"]
