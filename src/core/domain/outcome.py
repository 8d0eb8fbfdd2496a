"""Typed per-item result of a fan-out operation.

An `Outcome` is either a value or an error kind plus a message. Callers can
tell "skipped: no identifier" apart from "skipped: fetch failed" instead of
collapsing both into a bare `None`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    FETCH = "fetch"
    EXTRACTION = "extraction"
    MISSING_IDENTIFIER = "missing_identifier"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: T | None = None
    error: ErrorKind | None = None
    message: str | None = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: str | None = None) -> "Outcome[T]":
        return cls(error=error, message=message)

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or_none(self) -> T | None:
        return self.value if self.ok else None
