"""
Result type returned by every public service operation.

Services raise typed errors (services/errors.py) internally and convert them
at their boundary, so command handlers and the webhook never need try/except
around expected failures.

Usage:
    return Result.ok(receipt)
    return Result.fail("Contest is closed", code=error_codes.CONTEST_CLOSED)
    return Result.from_error(exc)

    result = bet_service.place_bet(caller, contest_id, numbers)
    if not result:
        print(f"[{result.error_code}] {result.error}")
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from services.errors import BolaoError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a service call.

    Attributes:
        success: Whether the operation succeeded
        value: The return value if successful
        error: Human readable error message if failed
        error_code: Error code from services.error_codes if failed
    """

    success: bool
    value: T | None = None
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def ok(cls, value: T | None = None) -> "Result[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str, code: str | None = None) -> "Result[T]":
        return cls(success=False, error=error, error_code=code)

    @classmethod
    def from_error(cls, exc: "BolaoError") -> "Result[T]":
        """Build a failed result from a typed service error."""
        return cls(success=False, error=str(exc), error_code=exc.code)

    def __bool__(self) -> bool:
        return self.success

    def unwrap(self) -> T:
        """
        Get the value, raising ValueError if the result is a failure.

        Raises:
            ValueError: If the result is a failure
        """
        if not self.success:
            raise ValueError(f"Cannot unwrap failed result: {self.error}")
        return self.value  # type: ignore

    def unwrap_or(self, default: T) -> T:
        return self.value if self.success else default  # type: ignore
