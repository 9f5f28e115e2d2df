"""
Runner base — the contract between workflows and child processes.

Workflows only talk to external tools through this interface, never
by spawning processes directly. That keeps the cargo/forge sequence
testable with ``MockProcessRunner``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from forge_runner.core.models.process import CapturedOutput, ProcessResult


class Runner(ABC):
    """Abstract base class for process runners.

    To create a new runner:
        1. Subclass Runner
        2. Implement run and capture
    """

    @abstractmethod
    async def run(
        self,
        command: str,
        args: Sequence[Any] = (),
        *,
        cwd: str | None = None,
    ) -> ProcessResult:
        """Run to completion with output forwarded live.

        MUST raise ``ProcessExecutionError`` for a non-zero exit code.
        """

    @abstractmethod
    async def capture(
        self,
        command: str,
        args: Sequence[Any] = (),
        *,
        cwd: str | None = None,
    ) -> CapturedOutput:
        """Run to completion with output buffered and returned."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
