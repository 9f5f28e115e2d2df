"""Adapters — process bindings for external tools.

Public re-exports for convenient access.
"""

from forge_runner.adapters.base import Runner
from forge_runner.adapters.mock import MockProcessRunner
from forge_runner.adapters.shell.process import ProcessExecutionError, ProcessRunner

__all__ = [
    "MockProcessRunner",
    "ProcessExecutionError",
    "ProcessRunner",
    "Runner",
]
