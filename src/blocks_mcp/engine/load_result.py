"""LoadResult for safe block loading.

Error monad used by the loader layer so file and parse problems are returned
as values instead of raised. The processing pipeline itself does not use it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class LoadStatus(str, Enum):
    """Status of a loading operation."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class LoadResult(Generic[T]):  # noqa: UP046
    """
    Outcome of a load operation.

    Usage:
        result = load_blocks_from_file(path)
        if result.is_success:
            blocks = result.value
        else:
            print(f"Load error: {result.error}")
    """

    status: LoadStatus
    value: T | None = None
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.status == LoadStatus.SUCCESS and self.value is None:
            raise ValueError("Success result must have a value")
        if self.status == LoadStatus.FAILED and not self.error:
            raise ValueError("Failed result must have an error message")

    @property
    def is_success(self) -> bool:
        return self.status == LoadStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status == LoadStatus.FAILED

    @classmethod
    def success(cls, value: T, metadata: dict[str, Any] | None = None) -> "LoadResult[T]":
        return cls(status=LoadStatus.SUCCESS, value=value, metadata=metadata or {})

    @classmethod
    def failure(cls, error: str, metadata: dict[str, Any] | None = None) -> "LoadResult[T]":
        return cls(status=LoadStatus.FAILED, error=error, metadata=metadata or {})

    def __bool__(self) -> bool:
        return self.is_success

    def unwrap(self) -> T:
        """Get value or raise ValueError if the load failed."""
        if not self.is_success or self.value is None:
            raise ValueError(f"Cannot unwrap failed result: {self.error}")
        return self.value
