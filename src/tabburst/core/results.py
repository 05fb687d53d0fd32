"""
core/results.py — Per-step result type shared by every engine component.

A step either succeeds or fails with an explicit :class:`ErrorKind`.  The
kind is decided once, where the step is implemented, instead of being implied
by whether an exception escapes:

  - ``FATAL``        the whole run aborts (exit 1)
  - ``RECOVERABLE``  the tab is marked unsuccessful and the run continues
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tabburst.core.exception import SetupError


class ErrorKind(str, Enum):
    FATAL = "fatal"
    RECOVERABLE = "recoverable"


@dataclass(frozen=True)
class StepResult:
    """Outcome of one engine step."""

    ok: bool
    kind: ErrorKind | None = None
    reason: str = ""
    detail: str = ""

    @classmethod
    def success(cls, reason: str = "") -> StepResult:
        return cls(ok=True, reason=reason)

    @classmethod
    def fatal(cls, reason: str, detail: str = "") -> StepResult:
        return cls(ok=False, kind=ErrorKind.FATAL, reason=reason, detail=detail)

    @classmethod
    def recoverable(cls, reason: str, detail: str = "") -> StepResult:
        return cls(ok=False, kind=ErrorKind.RECOVERABLE, reason=reason, detail=detail)

    @property
    def is_fatal(self) -> bool:
        return self.kind is ErrorKind.FATAL

    def raise_if_fatal(self) -> StepResult:
        """Raise SetupError for a fatal result; return self otherwise."""
        if self.is_fatal:
            raise SetupError(self.detail or self.reason, reason=self.reason)
        return self

    def __bool__(self) -> bool:
        return self.ok
