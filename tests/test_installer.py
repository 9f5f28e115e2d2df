"""
Tests for forge installation — cargo command construction and propagation.
"""

import asyncio

import pytest

from forge_runner.adapters.mock import MockProcessRunner
from forge_runner.adapters.shell.process import ProcessExecutionError
from forge_runner.core.services.forge.installer import (
    FOUNDRY_GIT_URL,
    install_command,
    install_forge,
)


class TestInstallCommand:
    def test_default(self):
        assert install_command("ecdafc5") == [
            "cargo", "install",
            "--git", FOUNDRY_GIT_URL,
            "--bin", "forge",
            "--locked",
            "--rev", "ecdafc5",
        ]

    def test_force_flag_last(self):
        cmd = install_command("abc123", force=True)
        assert cmd[-1] == "--force"
        assert cmd[cmd.index("--rev") + 1] == "abc123"

    def test_no_force_flag_by_default(self):
        assert "--force" not in install_command("abc123")


class TestInstallForge:
    def test_streams_through_runner(self, mock_runner: MockProcessRunner):
        asyncio.run(install_forge("ecdafc5", runner=mock_runner, cwd="/proj"))
        assert mock_runner.call_count == 1
        call = mock_runner.call_log[0]
        assert not call.captured
        assert call.argv == install_command("ecdafc5")
        assert call.cwd == "/proj"

    def test_force(self, mock_runner: MockProcessRunner):
        asyncio.run(install_forge("ecdafc5", force=True, runner=mock_runner))
        assert mock_runner.call_log[0].args[-1] == "--force"

    def test_failure_propagates_unchanged(self, mock_runner: MockProcessRunner):
        mock_runner.set_failure("cargo install", exit_code=101)
        with pytest.raises(ProcessExecutionError) as exc:
            asyncio.run(install_forge("bad-rev", runner=mock_runner))
        assert exc.value.exit_code == 101

    def test_single_attempt(self, mock_runner: MockProcessRunner):
        mock_runner.set_failure("cargo install")
        with pytest.raises(ProcessExecutionError):
            asyncio.run(install_forge("bad-rev", runner=mock_runner))
        assert mock_runner.call_count == 1
