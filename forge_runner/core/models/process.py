"""
Process result models — what a runner hands back.

Streamed runs produce a ``ProcessResult``: output has already been
forwarded, only the exit code is kept. Buffered runs produce a
``CapturedOutput`` that the caller parses.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of a streamed run."""

    exit_code: int = 0


@dataclass(frozen=True)
class CapturedOutput:
    """Outcome of a buffered run."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0
