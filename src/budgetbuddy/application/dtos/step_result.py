"""Structured results returned by pipeline operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from budgetbuddy.domain.shared.exceptions import DomainException, ErrorCode

T = TypeVar("T")


@dataclass(frozen=True)
class ErrorInfo:
    """Failure description safe to show to the user."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(cls, error: DomainException) -> ErrorInfo:
        return cls(code=error.code, message=error.message, details=dict(error.details))

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """Outcome of one pipeline step: a value or an error, never both."""

    success: bool
    value: T | None = None
    error: ErrorInfo | None = None

    @classmethod
    def ok(cls, value: T) -> StepResult[T]:
        return cls(success=True, value=value)

    @classmethod
    def failure(cls, error: ErrorInfo) -> StepResult[T]:
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        """Return the value, raising RuntimeError on a failed step."""
        if not self.success:
            msg = f"Step failed: {self.error.message if self.error else 'unknown error'}"
            raise RuntimeError(msg)
        return self.value  # type: ignore[return-value]
