"""Explicit success/failure results for storage-backed operations."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A storage operation that completed."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap_or(self, default: T) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class StorageError:
    """A storage operation that failed.

    Args:
        operation: Name of the failing operation (e.g. ``"lookup"``).
        cause: The underlying exception.
    """

    operation: str
    cause: BaseException

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap_or(self, default: T) -> T:
        return default

    def __str__(self) -> str:
        return f"{self.operation} failed: {self.cause}"
