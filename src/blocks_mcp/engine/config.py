"""Pipeline configuration.

Capabilities that differ per rendering target are resolved once, when a
BlockProcessor is built, instead of being inspected on every call.

Environment Variables:
    BLOCKS_CLONE_STRATEGY: "recursive" (default) or "shallow"
    BLOCKS_REUSES_PROCESSED_BLOCKS: "true" (default) if the caller caches
        processed blocks across renders
    BLOCKS_DEFAULT_LOCALE: Fallback locale for localized values (default: unset)
    BLOCKS_MAX_LOCALIZATION_DEPTH: Nesting limit for localization (default: 500,
        range: 1-500, clamped automatically)
    BLOCKS_EXPRESSION_CACHE_SIZE: Compiled expression cache size (default: 256,
        0 disables caching)
"""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, Field, ValidationError, model_validator

from .cloner import CloneStrategy
from .exceptions import PipelineConfigError
from .localization import DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT

logger = logging.getLogger(__name__)


class PipelineConfig(BaseModel):
    """Construction-time settings for a BlockProcessor.

    The shallow cloning strategy writes nested binding values through to the
    source block, so it is only accepted from callers that reprocess every
    block from pristine content and never reuse a processed block. That
    precondition is enforced here rather than assumed per target.
    """

    model_config = {"extra": "forbid", "frozen": True}

    clone_strategy: CloneStrategy = Field(
        default=CloneStrategy.RECURSIVE,
        description="How blocks are copied before bindings are written",
    )
    reuses_processed_blocks: bool = Field(
        default=True,
        description="Whether the caller caches processed blocks across renders",
    )
    default_locale: str | None = Field(
        default=None,
        description="Locale used when the active locale has no variant",
    )
    max_localization_depth: int = Field(
        default=DEFAULT_MAX_DEPTH, ge=1, le=MAX_DEPTH_LIMIT
    )
    expression_cache_size: int = Field(default=256, ge=0)

    @model_validator(mode="after")
    def _check_clone_safety(self) -> PipelineConfig:
        if self.clone_strategy == CloneStrategy.SHALLOW and self.reuses_processed_blocks:
            raise ValueError(
                "Shallow cloning requires reuses_processed_blocks=False: nested binding "
                "writes reach the source block, which is unsafe when processed blocks "
                "are cached and reused"
            )
        return self

    @classmethod
    def create(cls, **settings: object) -> PipelineConfig:
        """Build a config, raising PipelineConfigError instead of ValidationError."""
        try:
            return cls.model_validate(settings)
        except ValidationError as e:
            raise PipelineConfigError(f"Invalid pipeline configuration: {e}") from e

    @classmethod
    def from_env(cls) -> PipelineConfig:
        """Build a config from BLOCKS_* environment variables.

        Malformed values fall back to defaults with a warning. An unsafe
        strategy combination still raises PipelineConfigError.
        """
        strategy_str = os.getenv("BLOCKS_CLONE_STRATEGY", "recursive").strip().lower()
        try:
            strategy = CloneStrategy(strategy_str)
        except ValueError:
            logger.warning(f"Invalid BLOCKS_CLONE_STRATEGY '{strategy_str}', using recursive")
            strategy = CloneStrategy.RECURSIVE

        reuses = os.getenv("BLOCKS_REUSES_PROCESSED_BLOCKS", "true").strip().lower() == "true"
        default_locale = os.getenv("BLOCKS_DEFAULT_LOCALE", "").strip() or None

        return cls.create(
            clone_strategy=strategy,
            reuses_processed_blocks=reuses,
            default_locale=default_locale,
            max_localization_depth=_int_env(
                "BLOCKS_MAX_LOCALIZATION_DEPTH", DEFAULT_MAX_DEPTH, 1, MAX_DEPTH_LIMIT
            ),
            expression_cache_size=_int_env("BLOCKS_EXPRESSION_CACHE_SIZE", 256, 0, 100000),
        )


def _int_env(name: str, default: int, low: int, high: int) -> int:
    try:
        value = int(os.getenv(name, str(default)))
        return max(low, min(high, value))
    except ValueError:
        logger.warning(f"Invalid {name}, using {default}")
        return default


__all__ = ["PipelineConfig"]
