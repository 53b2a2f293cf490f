"""LoadResult for plan loading and structured-file I/O.

Failures here are expected values (missing file, bad YAML) rather than action
failures. Actions convert a failed LoadResult into an ActionFailure at the
point they consume it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class LoadStatus(str, Enum):
    """Status of a load/parse/write operation."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadResult(Generic[T]):  # noqa: UP046
    """
    Result of a load/parse/write operation.

    Usage:
        parsed = parse_file(path, ContentType.YAML)
        if parsed.is_success:
            data = parsed.value
        else:
            print(f"Load error: {parsed.error}")
    """

    status: LoadStatus
    value: T | None = None
    error: str | None = None

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
    def success(cls, value: T) -> "LoadResult[T]":
        return cls(status=LoadStatus.SUCCESS, value=value)

    @classmethod
    def failure(cls, error: str) -> "LoadResult[T]":
        return cls(status=LoadStatus.FAILED, error=error)

    def __bool__(self) -> bool:
        return self.is_success

    def unwrap(self) -> T:
        """Get the value, or raise ValueError for a failed result."""
        if not self.is_success or self.value is None:
            raise ValueError(f"Cannot unwrap failed result: {self.error}")
        return self.value


__all__ = ["LoadResult", "LoadStatus"]
