"""
Forge detection — which foundry revision is installed, if any.

Read-only probe over ``cargo install --list``. The output lists each
installed crate on a header line, followed by one indented line per
binary it provides::

    foundry-cli v0.1.0 (https://github.com/gakonst/foundry?rev=ecdafc5#ecdafc55):
        forge

so the provenance of a binary is found by scanning backward from its
name line. The parsing is kept in pure functions so it can be tested
without cargo.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from forge_runner.adapters.base import Runner
from forge_runner.adapters.shell.process import ProcessExecutionError, ProcessRunner

logger = logging.getLogger(__name__)

FORGE_BINARY = "forge"
FOUNDRY_SOURCE_PACKAGE = "foundry-cli"

LIST_COMMAND: list[str] = ["cargo", "install", "--list"]

_WHITESPACE = re.compile(r"\s+")
_HEADER = re.compile(r"^(?P<package>\S+)\s+(?P<version>\S+?)(?:\s+\((?P<source>[^)]*)\))?:$")


class QueryError(Exception):
    """The installed-binaries query could not be completed."""


@dataclass(frozen=True)
class InstalledBinaryRecord:
    """One binary reported by ``cargo install --list``."""

    name: str
    source_package: str
    revision_or_path: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "source_package": self.source_package,
            "revision_or_path": self.revision_or_path,
        }


# ── Parsing ─────────────────────────────────────────────────────


def _normalised_lines(output: str) -> list[str]:
    lines = output.split("\n")
    if lines and lines[-1] == "":
        lines = lines[:-1]
    return [_WHITESPACE.sub("", line) for line in lines]


def parse_installed_revision(
    output: str,
    *,
    binary: str = FORGE_BINARY,
    source_package: str = FOUNDRY_SOURCE_PACKAGE,
) -> str | None:
    """Extract the provenance line of ``binary`` from list output.

    All whitespace is removed from every line. Each line equal to
    ``binary`` is considered in order; from its position the lines are
    scanned backward and the first one containing ``source_package`` is
    returned. None when no name line has a provenance line before it.

    Stopping at the first name line would return None as soon as that
    line is unattributed, even when a later name line has a provenance
    line above it; see the interleaved case in the tests.
    """
    lines = _normalised_lines(output)

    for idx, line in enumerate(lines):
        if line != binary:
            continue
        for back in range(idx, -1, -1):
            if source_package in lines[back]:
                return lines[back]

    return None


def parse_install_list(output: str) -> list[InstalledBinaryRecord]:
    """Structured view of ``cargo install --list`` output.

    Binary lines that appear before any package header are skipped.
    """
    records: list[InstalledBinaryRecord] = []
    package = ""
    origin = ""

    for raw in output.splitlines():
        if not raw.strip():
            continue
        if raw[:1].isspace():
            if package:
                records.append(InstalledBinaryRecord(
                    name=raw.strip(),
                    source_package=package,
                    revision_or_path=origin,
                ))
            continue
        match = _HEADER.match(raw.strip())
        if match:
            package = match.group("package")
            origin = match.group("source") or match.group("version")
        else:
            package, origin = "", ""

    return records


def revision_matches(installed: str | None, target: str) -> bool:
    """Case-insensitive substring match; accepts short hash prefixes."""
    return installed is not None and target.lower() in installed.lower()


# ── Probing ─────────────────────────────────────────────────────


async def list_installed(runner: Runner | None = None, *, cwd: str | None = None) -> str:
    """Raw ``cargo install --list`` output.

    Raises:
        QueryError: If cargo cannot be launched or exits non-zero.
    """
    runner = runner or ProcessRunner()
    try:
        result = await runner.capture(LIST_COMMAND[0], LIST_COMMAND[1:], cwd=cwd)
    except ProcessExecutionError as e:
        raise QueryError(f"Cannot query installed binaries: {e}") from e

    if not result.ok:
        stderr = result.stderr.strip()
        raise QueryError(
            f"'{' '.join(LIST_COMMAND)}' failed (exit {result.exit_code})"
            + (f": {stderr}" if stderr else "")
        )
    return result.stdout


async def get_installed_revision(
    runner: Runner | None = None, *, cwd: str | None = None,
) -> str | None:
    """The installed forge provenance line, or None if forge is absent."""
    output = await list_installed(runner, cwd=cwd)
    revision = parse_installed_revision(output)
    logger.debug("Installed forge: %s", revision or "(none)")
    return revision


async def is_revision_installed(
    target_revision: str,
    runner: Runner | None = None,
    *,
    cwd: str | None = None,
) -> bool:
    """Whether the installed forge was built from ``target_revision``."""
    installed = await get_installed_revision(runner, cwd=cwd)
    return revision_matches(installed, target_revision)


async def forge_status(
    target_revision: str,
    runner: Runner | None = None,
    *,
    cwd: str | None = None,
) -> dict:
    """Configured vs installed forge, plus every foundry binary cargo knows.

    Returns:
        ``{"configured": "...", "installed": "..." | None, "up_to_date": bool,
        "binaries": [...]}``
    """
    output = await list_installed(runner, cwd=cwd)
    installed = parse_installed_revision(output)
    binaries = [
        r.to_dict() for r in parse_install_list(output)
        if r.source_package == FOUNDRY_SOURCE_PACKAGE
    ]
    return {
        "configured": target_revision,
        "installed": installed,
        "up_to_date": revision_matches(installed, target_revision),
        "binaries": binaries,
    }
