"""
Forge installation — build a pinned foundry revision from source.

``cargo install --git`` handles download → compile → install to
``~/.cargo/bin/`` in one step. A single attempt is made; retrying is
the caller's decision.
"""

from __future__ import annotations

import logging

from forge_runner.adapters.base import Runner
from forge_runner.adapters.shell.process import ProcessRunner
from forge_runner.core.services.forge.version_probe import FORGE_BINARY

logger = logging.getLogger(__name__)

FOUNDRY_GIT_URL = "https://github.com/gakonst/foundry"


def install_command(revision: str, force: bool = False) -> list[str]:
    """The cargo command line that installs forge at ``revision``."""
    cmd = [
        "cargo", "install",
        "--git", FOUNDRY_GIT_URL,
        "--bin", FORGE_BINARY,
        "--locked",
        "--rev", revision,
    ]
    if force:
        cmd.append("--force")
    return cmd


async def install_forge(
    revision: str,
    force: bool = False,
    runner: Runner | None = None,
    *,
    cwd: str | None = None,
) -> None:
    """Install forge from ``revision``, streaming cargo's output.

    Raises:
        ProcessExecutionError: If cargo exits non-zero (propagated as is).
    """
    runner = runner or ProcessRunner()
    cmd = install_command(revision, force=force)
    logger.info("Installing forge (version=%s, force=%s)", revision, force)
    await runner.run(cmd[0], cmd[1:], cwd=cwd)
