"""Result types shared by every core operation.

Core operations never raise across the package boundary. They return an
``Outcome`` carrying either a value or a ``CoreError`` whose ``kind`` the
presentation layer maps to user-facing text.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

T = TypeVar("T")

ErrorKind = Literal[
    "already_active",
    "no_active_session",
    "no_active_event",
    "invalid_range",
    "not_eligible",
    "duplicate_submission",
    "duplicate_attendee",
    "not_found",
    "no_tie",
    "invalid_config_key",
    "invalid_config_value",
    "invalid_payload",
    "duplicate_record",
    "not_privileged",
    "unknown_command",
]


@dataclass(frozen=True)
class CoreError:
    """A recoverable, caller-visible failure."""

    kind: ErrorKind
    # Machine-readable token, e.g. a field name or "history:3".
    detail: str | None = None


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Success flag plus either a result value or an error."""

    ok: bool
    value: T | None = None
    error: CoreError | None = None

    @classmethod
    def success(cls, value: T | None = None) -> "Outcome[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, detail: str | None = None) -> "Outcome[T]":
        return cls(ok=False, error=CoreError(kind=kind, detail=detail))

    @property
    def error_kind(self) -> ErrorKind | None:
        return self.error.kind if self.error is not None else None
