"""Tests for PipelineConfig validation and environment loading."""

import logging

import pytest
from pydantic import ValidationError

from blocks_mcp.engine import CloneStrategy, PipelineConfig, PipelineConfigError
from blocks_mcp.engine.localization import MAX_DEPTH_LIMIT

ENV_VARS = [
    "BLOCKS_CLONE_STRATEGY",
    "BLOCKS_REUSES_PROCESSED_BLOCKS",
    "BLOCKS_DEFAULT_LOCALE",
    "BLOCKS_MAX_LOCALIZATION_DEPTH",
    "BLOCKS_EXPRESSION_CACHE_SIZE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestPipelineConfig:
    def test_defaults(self) -> None:
        config = PipelineConfig()

        assert config.clone_strategy == CloneStrategy.RECURSIVE
        assert config.reuses_processed_blocks is True
        assert config.default_locale is None
        assert config.max_localization_depth == 500
        assert config.expression_cache_size == 256

    def test_shallow_requires_no_reuse(self) -> None:
        with pytest.raises(ValidationError, match="reuses_processed_blocks=False"):
            PipelineConfig(clone_strategy=CloneStrategy.SHALLOW)

    def test_shallow_without_reuse_accepted(self) -> None:
        config = PipelineConfig(clone_strategy="shallow", reuses_processed_blocks=False)
        assert config.clone_strategy == CloneStrategy.SHALLOW

    def test_create_wraps_validation_errors(self) -> None:
        with pytest.raises(PipelineConfigError):
            PipelineConfig.create(clone_strategy="shallow")

        with pytest.raises(PipelineConfigError):
            PipelineConfig.create(max_localization_depth=0)

    def test_localization_depth_capped(self) -> None:
        config = PipelineConfig(max_localization_depth=MAX_DEPTH_LIMIT)
        assert config.max_localization_depth == 500
        with pytest.raises(ValidationError):
            PipelineConfig(max_localization_depth=MAX_DEPTH_LIMIT + 1)

    def test_unknown_setting_rejected(self) -> None:
        with pytest.raises(PipelineConfigError):
            PipelineConfig.create(cache_everything=True)

    def test_frozen(self) -> None:
        config = PipelineConfig()
        with pytest.raises(ValidationError):
            config.default_locale = "en"  # type: ignore[misc]


class TestFromEnv:
    def test_defaults_without_env(self) -> None:
        assert PipelineConfig.from_env() == PipelineConfig()

    def test_reads_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCKS_CLONE_STRATEGY", "SHALLOW")
        monkeypatch.setenv("BLOCKS_REUSES_PROCESSED_BLOCKS", "false")
        monkeypatch.setenv("BLOCKS_DEFAULT_LOCALE", " en ")
        monkeypatch.setenv("BLOCKS_MAX_LOCALIZATION_DEPTH", "64")
        monkeypatch.setenv("BLOCKS_EXPRESSION_CACHE_SIZE", "0")

        config = PipelineConfig.from_env()

        assert config.clone_strategy == CloneStrategy.SHALLOW
        assert config.reuses_processed_blocks is False
        assert config.default_locale == "en"
        assert config.max_localization_depth == 64
        assert config.expression_cache_size == 0

    @pytest.mark.parametrize(("raw", "expected"), [("0", 1), ("999999", 500), ("-5", 1)])
    def test_depth_clamped(self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: int) -> None:
        monkeypatch.setenv("BLOCKS_MAX_LOCALIZATION_DEPTH", raw)
        assert PipelineConfig.from_env().max_localization_depth == expected

    def test_invalid_values_fall_back(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.setenv("BLOCKS_CLONE_STRATEGY", "sometimes")
        monkeypatch.setenv("BLOCKS_EXPRESSION_CACHE_SIZE", "lots")

        with caplog.at_level(logging.WARNING):
            config = PipelineConfig.from_env()

        assert config.clone_strategy == CloneStrategy.RECURSIVE
        assert config.expression_cache_size == 256
        assert "BLOCKS_CLONE_STRATEGY" in caplog.text
        assert "BLOCKS_EXPRESSION_CACHE_SIZE" in caplog.text

    def test_unsafe_combination_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCKS_CLONE_STRATEGY", "shallow")
        with pytest.raises(PipelineConfigError):
            PipelineConfig.from_env()
