"""
Mock process runner — universal test double for process execution.

Used in mock mode to simulate cargo and forge without touching the
system. Configurable to return success, failure, or canned output per
command prefix.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import IO, Any, Sequence

from forge_runner.adapters.base import Runner
from forge_runner.adapters.shell.process import (
    ProcessExecutionError,
    _binary_stream,
    _write_chunk,
)
from forge_runner.core.models.process import CapturedOutput, ProcessResult


@dataclass
class MockCall:
    """One recorded invocation."""

    command: str
    args: list[str] = field(default_factory=list)
    cwd: str | None = None
    captured: bool = False

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]

    @property
    def line(self) -> str:
        return " ".join(self.argv)


class MockProcessRunner(Runner):
    """Drop-in replacement for ``ProcessRunner``.

    Responses are keyed by command-line prefix: ``"forge test"`` matches
    any ``forge test ...`` invocation. The longest matching key wins.
    By default every command succeeds with empty output.
    """

    def __init__(
        self,
        echo: bool = False,
        stdout: IO[Any] | None = None,
        stderr: IO[Any] | None = None,
    ):
        self._echo = echo
        self._stdout = stdout
        self._stderr = stderr
        self._exit_codes: dict[str, int] = {}
        self._outputs: dict[str, CapturedOutput] = {}
        self._streams: dict[str, tuple[bytes, bytes]] = {}
        self._call_log: list[MockCall] = []

    @property
    def call_log(self) -> list[MockCall]:
        """All invocations this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def commands(self) -> list[str]:
        """Command lines in call order."""
        return [call.line for call in self._call_log]

    def set_exit_code(self, prefix: str, exit_code: int) -> None:
        """Make streamed runs matching ``prefix`` exit with ``exit_code``."""
        self._exit_codes[prefix] = exit_code

    def set_failure(self, prefix: str, exit_code: int = 1) -> None:
        self.set_exit_code(prefix, exit_code)

    def set_output(
        self,
        prefix: str,
        stdout: str = "",
        exit_code: int = 0,
        stderr: str = "",
    ) -> None:
        """Canned result for captured runs matching ``prefix``."""
        self._outputs[prefix] = CapturedOutput(
            exit_code=exit_code, stdout=stdout, stderr=stderr,
        )

    def set_stream(self, prefix: str, stdout: bytes = b"", stderr: bytes = b"") -> None:
        """Bytes forwarded to the output targets when ``prefix`` runs."""
        self._streams[prefix] = (stdout, stderr)

    def reset(self) -> None:
        """Clear call log and configured responses."""
        self._call_log.clear()
        self._exit_codes.clear()
        self._outputs.clear()
        self._streams.clear()

    @staticmethod
    def _match(table: dict[str, Any], line: str) -> Any:
        for prefix in sorted(table, key=len, reverse=True):
            if line == prefix or line.startswith(prefix + " "):
                return table[prefix]
        return None

    def _targets(self) -> tuple[IO[Any], IO[Any]]:
        out = self._stdout if self._stdout is not None else _binary_stream(sys.stdout)
        err = self._stderr if self._stderr is not None else _binary_stream(sys.stderr)
        return out, err

    async def run(
        self,
        command: str,
        args: Sequence[Any] = (),
        *,
        cwd: str | None = None,
    ) -> ProcessResult:
        call = MockCall(command=command, args=[str(a) for a in args], cwd=cwd)
        self._call_log.append(call)

        out, err = self._targets()
        if self._echo:
            _write_chunk(out, f"[mock] {call.line}\n".encode())
        streamed = self._match(self._streams, call.line)
        if streamed:
            if streamed[0]:
                _write_chunk(out, streamed[0])
            if streamed[1]:
                _write_chunk(err, streamed[1])

        exit_code = self._match(self._exit_codes, call.line) or 0
        if exit_code != 0:
            raise ProcessExecutionError(command, call.args, exit_code)
        return ProcessResult(exit_code=0)

    async def capture(
        self,
        command: str,
        args: Sequence[Any] = (),
        *,
        cwd: str | None = None,
    ) -> CapturedOutput:
        call = MockCall(
            command=command, args=[str(a) for a in args], cwd=cwd, captured=True,
        )
        self._call_log.append(call)

        canned = self._match(self._outputs, call.line)
        if canned is not None:
            return canned
        return CapturedOutput(exit_code=0)
