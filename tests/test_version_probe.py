"""
Tests for forge detection — list parsing and the cargo query.
"""

import asyncio

import pytest

from forge_runner.adapters.mock import MockProcessRunner
from forge_runner.core.services.forge.version_probe import (
    InstalledBinaryRecord,
    QueryError,
    forge_status,
    get_installed_revision,
    is_revision_installed,
    parse_install_list,
    parse_installed_revision,
    revision_matches,
)

# Orphan name line before the real entry
INTERLEAVED_OUTPUT = "cargo\nv0.1\nforge\nfoundry-cli abcdef\nforge\n"


# ── Pure parsing ────────────────────────────────────────────────────


class TestParseInstalledRevision:
    def test_real_cargo_output(self, cargo_list_output):
        assert parse_installed_revision(cargo_list_output) == (
            "foundry-cliv0.1.0(https://github.com/gakonst/foundry?rev=ecdafc5#ecdafc55):"
        )

    def test_interleaved_output(self):
        assert parse_installed_revision(INTERLEAVED_OUTPUT) == "foundry-cliabcdef"

    def test_no_forge_line(self):
        output = "cargo-audit v0.17.0:\n    cargo-audit\n"
        assert parse_installed_revision(output) is None

    def test_empty_output(self):
        assert parse_installed_revision("") is None

    def test_forge_without_provenance_before_it(self):
        assert parse_installed_revision("forge\nfoundry-cli abcdef\n") is None

    def test_unattributed_first_name_line_is_skipped(self):
        output = "forge\nfoundry-cli v0.1.0 (rev=ecdafc5):\n    forge\n"
        assert parse_installed_revision(output) == "foundry-cliv0.1.0(rev=ecdafc5):"

    def test_other_package_providing_forge(self):
        output = "my-fork v0.2.0 (/home/me/forge):\n    forge\n"
        assert parse_installed_revision(output) is None

    def test_nearest_provenance_wins(self):
        output = (
            "foundry-cli v0.0.1 (old):\n"
            "    cast\n"
            "foundry-cli v0.1.0 (new):\n"
            "    forge\n"
        )
        assert parse_installed_revision(output) == "foundry-cliv0.1.0(new):"

    def test_name_must_match_exactly(self):
        output = "foundry-cli v0.1.0 (x):\n    forge-fmt\n"
        assert parse_installed_revision(output) is None

    def test_all_whitespace_removed(self):
        output = "foundry-cli\tv0.1.0 (abc)\r\n\t forge \r\n"
        assert parse_installed_revision(output) == "foundry-cliv0.1.0(abc)"

    def test_last_line_kept_without_trailing_newline(self):
        assert parse_installed_revision("foundry-cli abc:\n    forge") == "foundry-cliabc:"

    def test_custom_binary_and_package(self):
        output = "ripgrep v13.0.0:\n    rg\n"
        assert parse_installed_revision(output, binary="rg", source_package="ripgrep") == (
            "ripgrepv13.0.0:"
        )


class TestParseInstallList:
    def test_records(self, cargo_list_output):
        records = parse_install_list(cargo_list_output)
        assert InstalledBinaryRecord(
            name="forge",
            source_package="foundry-cli",
            revision_or_path="https://github.com/gakonst/foundry?rev=ecdafc5#ecdafc55",
        ) in records
        assert InstalledBinaryRecord(
            name="rg", source_package="ripgrep", revision_or_path="v13.0.0",
        ) in records
        assert len(records) == 4

    def test_binaries_before_any_header_skipped(self):
        assert parse_install_list("    forge\n") == []

    def test_empty(self):
        assert parse_install_list("") == []


class TestRevisionMatches:
    def test_case_insensitive(self):
        assert revision_matches("foundry-cliabcdef", "ABCDEF")

    def test_short_prefix(self):
        assert revision_matches("foundry-cli(...?rev=ecdafc5#ecdafc55):", "ecdafc5")

    def test_mismatch(self):
        assert not revision_matches("foundry-cliabcdef", "999999")

    def test_absent(self):
        assert not revision_matches(None, "abcdef")


# ── Query via runner ────────────────────────────────────────────────


def _runner_with_list(output: str, exit_code: int = 0, stderr: str = "") -> MockProcessRunner:
    runner = MockProcessRunner()
    runner.set_output("cargo install --list", stdout=output, exit_code=exit_code, stderr=stderr)
    return runner


class TestGetInstalledRevision:
    def test_returns_stripped_line(self):
        runner = _runner_with_list(INTERLEAVED_OUTPUT)
        assert asyncio.run(get_installed_revision(runner)) == "foundry-cliabcdef"
        assert runner.call_log[0].captured
        assert runner.commands == ["cargo install --list"]

    def test_absent(self):
        runner = _runner_with_list("ripgrep v13.0.0:\n    rg\n")
        assert asyncio.run(get_installed_revision(runner)) is None

    def test_query_failure_is_hard_error(self):
        runner = _runner_with_list("", exit_code=101, stderr="error: no such command")
        with pytest.raises(QueryError, match="exit 101"):
            asyncio.run(get_installed_revision(runner))

    def test_cargo_missing_is_hard_error(self):
        class _NoCargo(MockProcessRunner):
            async def capture(self, command, args=(), *, cwd=None):
                from forge_runner.adapters.shell.process import ProcessExecutionError

                raise ProcessExecutionError(command, list(args), 127)

        with pytest.raises(QueryError):
            asyncio.run(get_installed_revision(_NoCargo()))

    def test_cwd_passed_through(self):
        runner = _runner_with_list("")
        asyncio.run(get_installed_revision(runner, cwd="/work"))
        assert runner.call_log[0].cwd == "/work"


class TestIsRevisionInstalled:
    def test_matching_revision(self):
        runner = _runner_with_list(INTERLEAVED_OUTPUT)
        assert asyncio.run(is_revision_installed("abcdef", runner)) is True

    def test_uppercase_target(self):
        runner = _runner_with_list(INTERLEAVED_OUTPUT)
        assert asyncio.run(is_revision_installed("ABCDEF", runner)) is True

    def test_other_revision(self):
        runner = _runner_with_list(INTERLEAVED_OUTPUT)
        assert asyncio.run(is_revision_installed("999999", runner)) is False

    def test_nothing_installed(self):
        runner = _runner_with_list("")
        assert asyncio.run(is_revision_installed("abcdef", runner)) is False


class TestForgeStatus:
    def test_up_to_date(self, cargo_list_output):
        runner = _runner_with_list(cargo_list_output)
        result = asyncio.run(forge_status("ecdafc5", runner))
        assert result["up_to_date"] is True
        assert result["configured"] == "ecdafc5"
        assert [b["name"] for b in result["binaries"]] == ["cast", "forge"]

    def test_not_installed(self):
        runner = _runner_with_list("")
        result = asyncio.run(forge_status("ecdafc5", runner))
        assert result["installed"] is None
        assert result["up_to_date"] is False
        assert result["binaries"] == []
