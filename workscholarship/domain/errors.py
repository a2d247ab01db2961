from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DUPLICATE_CYCLE = "DUPLICATE_CYCLE"
    CYCLE_NOT_FOUND = "CYCLE_NOT_FOUND"
    INVALID_CLONE_SOURCE = "INVALID_CLONE_SOURCE"
    NOT_IN_CONFIGURATION = "NOT_IN_CONFIGURATION"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    # гейты переходов
    NO_LOCATIONS = "NO_LOCATIONS"
    NO_SCHOLARSHIPS = "NO_SCHOLARSHIPS"
    RENEWALS_PENDING = "RENEWALS_PENDING"
    PENDING_SHIFTS = "PENDING_SHIFTS"
    MISSING_LOGBOOKS = "MISSING_LOGBOOKS"
    CYCLE_NOT_ENDED = "CYCLE_NOT_ENDED"
    CYCLE_CLOSED = "CYCLE_CLOSED"
    INVALID_DATE = "INVALID_DATE"


_SNAKE_RE = re.compile(r"([a-z0-9])([A-Z])")


def to_upper_snake(name: str) -> str:
    """NoLocations -> NO_LOCATIONS"""
    return _SNAKE_RE.sub(r"\1_\2", name).upper()


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True)
class Error:
    code: ErrorCode
    message: str
    details: Tuple[FieldError, ...] = ()

    @classmethod
    def validation(cls, details: Tuple[FieldError, ...], message: str = "Входные данные не прошли проверку.") -> Error:
        return cls(ErrorCode.VALIDATION_ERROR, message, tuple(details))


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Итог операции ядра: либо значение, либо Error со стабильным кодом.
    Исключениями через границу use case пробрасываются только сбои хранилища.
    """
    value: Optional[T] = None
    error: Optional[Error] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def code(self) -> Optional[ErrorCode]:
        return self.error.code if self.error else None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, code: ErrorCode, message: str) -> Result[T]:
        return cls(error=Error(code, message))

    @classmethod
    def from_error(cls, error: Error) -> Result[T]:
        return cls(error=error)
