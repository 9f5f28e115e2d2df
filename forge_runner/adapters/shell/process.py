"""
Process runner — launch external commands and stream their output.

This is the SINGLE PLACE where child processes are spawned. Every
step of every workflow (cargo queries, cargo installs, artifact
cleanup, forge clean, forge test) goes through ``ProcessRunner``.

Two modes:
    run()      — forward stdout/stderr live to the caller's streams,
                 fail on non-zero exit.
    capture()  — buffer stdout/stderr for parsing, never fail on exit code.
"""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import io
import logging
import sys
from typing import IO, Any, Sequence

from forge_runner.adapters.base import Runner
from forge_runner.core.models.process import CapturedOutput, ProcessResult

logger = logging.getLogger(__name__)

# Exit code reported when a command cannot be launched at all
COMMAND_NOT_FOUND = 127

_CHUNK_SIZE = 4096

_Utf8Decoder = codecs.getincrementaldecoder("utf-8")


class ProcessExecutionError(Exception):
    """A spawned command exited with a non-zero code."""

    def __init__(
        self,
        command: str,
        args: Sequence[str] = (),
        exit_code: int = 1,
        reason: str = "",
    ):
        self.command = command
        self.args_list = list(args)
        self.exit_code = exit_code
        self.reason = reason
        message = f"Process exited with error code {exit_code}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args_list]


def _binary_stream(stream: Any) -> Any:
    """Prefer the underlying byte buffer of a text stream."""
    return getattr(stream, "buffer", stream)


def _write_chunk(
    target: IO[Any], chunk: bytes, decoder: codecs.IncrementalDecoder | None = None,
) -> None:
    """Write raw bytes, or decoded text when ``target`` is a text stream.

    Pass the same ``decoder`` for every chunk of one stream so that a
    character split across two chunks is decoded whole.
    """
    if isinstance(target, io.TextIOBase):
        if decoder is None:
            target.write(chunk.decode("utf-8", errors="replace"))
        else:
            target.write(decoder.decode(chunk))
    else:
        target.write(chunk)
    target.flush()


async def _pump(reader: asyncio.StreamReader | None, target: IO[Any]) -> None:
    """Copy a child stream into ``target`` chunk by chunk until EOF."""
    if reader is None:
        return
    decoder = _Utf8Decoder(errors="replace")
    while True:
        chunk = await reader.read(_CHUNK_SIZE)
        if not chunk:
            break
        _write_chunk(target, chunk, decoder)
    if isinstance(target, io.TextIOBase):
        target.write(decoder.decode(b"", final=True))
        target.flush()


class ProcessRunner(Runner):
    """Spawn commands with asyncio and forward their output.

    Args:
        stdout: Where child stdout is forwarded. Defaults to the byte
            buffer of ``sys.stdout``, resolved at call time so that
            redirected streams (pytest, click's CliRunner) are honoured.
        stderr: Same, for child stderr.
    """

    def __init__(self, stdout: IO[Any] | None = None, stderr: IO[Any] | None = None):
        self._stdout = stdout
        self._stderr = stderr

    def _targets(self) -> tuple[IO[Any], IO[Any]]:
        out = self._stdout if self._stdout is not None else _binary_stream(sys.stdout)
        err = self._stderr if self._stderr is not None else _binary_stream(sys.stderr)
        return out, err

    async def _spawn(
        self, argv: list[str], cwd: str | None,
    ) -> asyncio.subprocess.Process:
        try:
            return await asyncio.create_subprocess_exec(
                *argv,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.debug("Cannot launch %s: %s", argv[0], e)
            raise ProcessExecutionError(
                argv[0], argv[1:], COMMAND_NOT_FOUND, reason=str(e),
            ) from e

    async def run(
        self,
        command: str,
        args: Sequence[Any] = (),
        *,
        cwd: str | None = None,
    ) -> ProcessResult:
        """Run a command to completion, streaming its output.

        Raises:
            ProcessExecutionError: on any non-zero exit code, or if the
                command cannot be launched (exit code 127).
        """
        argv = [command, *(str(a) for a in args)]
        logger.debug("Executing: %s (cwd=%s)", " ".join(argv), cwd or ".")

        proc = await self._spawn(argv, cwd)
        out, err = self._targets()
        try:
            await asyncio.gather(_pump(proc.stdout, out), _pump(proc.stderr, err))
        except BaseException:
            # Nothing drains the pipes any more; the child could block forever
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            raise
        exit_code = await proc.wait()

        if exit_code != 0:
            logger.debug("%s exited with code %d", command, exit_code)
            raise ProcessExecutionError(command, argv[1:], exit_code)
        return ProcessResult(exit_code=exit_code)

    async def capture(
        self,
        command: str,
        args: Sequence[Any] = (),
        *,
        cwd: str | None = None,
    ) -> CapturedOutput:
        """Run a command and buffer its output instead of forwarding it.

        The exit code is returned, not raised; only a launch failure raises.
        """
        argv = [command, *(str(a) for a in args)]
        logger.debug("Querying: %s (cwd=%s)", " ".join(argv), cwd or ".")

        proc = await self._spawn(argv, cwd)
        stdout, stderr = await proc.communicate()
        return CapturedOutput(
            exit_code=proc.returncode if proc.returncode is not None else 0,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
