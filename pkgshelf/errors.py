from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    """Why an extraction step produced nothing."""
    NOT_FOUND = "not_found"        # expected, non-fatal
    IO_ERROR = "io_error"          # logged, aborts the current file


class ConfigurationError(Exception):
    """Missing or invalid configuration. Fatal at startup."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class CatalogError(OSError):
    """A persisted catalog document could not be read or written."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def found(cls, value: Any) -> "Outcome":
        return cls(value=value)

    @classmethod
    def not_found(cls, detail: str = "") -> "Outcome":
        return cls(error=ErrorKind.NOT_FOUND, detail=detail)

    @classmethod
    def io_error(cls, exc: BaseException) -> "Outcome":
        return cls(error=ErrorKind.IO_ERROR, detail=f"{type(exc).__name__}: {exc}")
