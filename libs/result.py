"""Result type used by use cases to return either a value or an Error.

Use cases never raise for expected business failures; they return
``Return.err(Error(...))`` and let the caller map the error code.
"""

from enum import Enum
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel, field_validator

T = TypeVar("T")


class Error(BaseModel):
    """Structured error carried by a failed Result"""

    code: str
    message: str
    reason: Optional[str] = None

    @field_validator("code", mode="before")
    @classmethod
    def unwrap_enum(cls, v):
        if isinstance(v, Enum):
            return v.value
        return v


class Result(Generic[T]):
    __slots__ = ("_value", "_error")

    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        self._value = value
        self._error = error

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise ValueError(f"Result is an error: {self._error.code}")
        return self._value

    @property
    def error(self) -> Optional[Error]:
        return self._error

    def __repr__(self) -> str:
        if self.is_ok():
            return f"Result.ok({self._value!r})"
        return f"Result.err({self._error!r})"


class Return:
    """Constructors for Result"""

    @staticmethod
    def ok(value: Optional[T] = None) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result:
        return Result(error=error)
