"""
Structured diagnostics emitted by the block pipeline.

The pipeline never logs and never raises for per-binding problems. Instead it
hands a record to an injected DiagnosticSink:

- BindingFailure: a binding expression failed (kind="evaluation") or its
  target path could not be written (kind="structure")
- LocalizationMiss: a localized value had no variant for the active locale,
  or localized values were found while no locale was active

Sinks:
- LoggingDiagnosticSink: forwards records to the standard logging module
- CollectingDiagnosticSink: keeps records in memory (tool responses, tests)
- NullDiagnosticSink: discards records
"""

import logging
import threading
from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

MissKind = Literal["missing_variant", "missing_locale", "depth_exceeded"]


class BindingFailure(BaseModel):
    """A single binding that could not be applied."""

    block_id: str | None = Field(default=None, description="Id of the block being processed")
    path: str = Field(description="Binding target path")
    expression: str = Field(description="Expression source as authored")
    kind: Literal["evaluation", "structure"]
    message: str

    def summary(self) -> str:
        return f"[{self.kind}] block={self.block_id} path={self.path}: {self.message}"


class LocalizationMiss(BaseModel):
    """A localized value that fell back past the active locale."""

    block_id: str | None = None
    path: str = Field(description="Dotted location of the localized value")
    locale: str | None = Field(description="Active locale (None when no locale was set)")
    kind: MissKind = "missing_variant"
    message: str

    def summary(self) -> str:
        return f"[{self.kind}] block={self.block_id} path={self.path}: {self.message}"


DiagnosticRecord = BindingFailure | LocalizationMiss


@runtime_checkable
class DiagnosticSink(Protocol):
    """Receiver for pipeline diagnostics. Must not raise."""

    def report(self, record: DiagnosticRecord) -> None: ...


class LoggingDiagnosticSink:
    """Forward diagnostics to a logger at WARNING (misses at DEBUG)."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def report(self, record: DiagnosticRecord) -> None:
        if isinstance(record, LocalizationMiss) and record.kind == "missing_variant":
            self.log.debug(f"Localization fallback {record.summary()}")
            return
        self.log.warning(f"Block processing issue {record.summary()}")


class CollectingDiagnosticSink:
    """Keep diagnostics in memory. Safe to share between threads."""

    def __init__(self) -> None:
        self._records: list[DiagnosticRecord] = []
        self._lock = threading.Lock()

    def report(self, record: DiagnosticRecord) -> None:
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> list[DiagnosticRecord]:
        with self._lock:
            return list(self._records)

    @property
    def binding_failures(self) -> list[BindingFailure]:
        return [r for r in self.records if isinstance(r, BindingFailure)]

    @property
    def localization_misses(self) -> list[LocalizationMiss]:
        return [r for r in self.records if isinstance(r, LocalizationMiss)]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


class NullDiagnosticSink:
    """Discard all diagnostics."""

    def report(self, record: DiagnosticRecord) -> None:
        return None


__all__ = [
    "BindingFailure",
    "LocalizationMiss",
    "MissKind",
    "DiagnosticRecord",
    "DiagnosticSink",
    "LoggingDiagnosticSink",
    "CollectingDiagnosticSink",
    "NullDiagnosticSink",
]
