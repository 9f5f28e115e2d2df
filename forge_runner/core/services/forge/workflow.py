"""
Forge workflows — the two user-facing operations.

    ensure_and_test   probe → [install] → rm artifacts → forge clean → forge test
    force_install     cargo install --force at the configured revision

Steps run strictly one after another; each awaits process exit before
the next starts. Child output is streamed by the runner regardless of
outcome.

Failure policy
──────────────
An install failure inside ``ensure_and_test`` is logged and the run
continues against whatever forge is on PATH. Failures of the cleanup,
clean or test steps abort the remaining steps. With ``best_effort``
(the default) they are logged as a warning and recorded on the report
instead of raised, so the caller never sees an exception. Pass
``best_effort=False`` to get the exception. A failing probe
(``QueryError``) always propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from forge_runner.adapters.base import Runner
from forge_runner.adapters.shell.process import ProcessRunner
from forge_runner.core.models.config import ToolConfig
from forge_runner.core.services.forge.installer import install_forge
from forge_runner.core.services.forge.version_probe import (
    FORGE_BINARY,
    is_revision_installed,
)

logger = logging.getLogger(__name__)

# Hardhat's own artifact directory, cleared before every run
HARDHAT_ARTIFACTS_DIR = "hardhat-artifacts"
# Where forge writes its artifacts, kept apart from hardhat's
FORGE_ARTIFACTS_DIR = "forge-artifacts"


def cleanup_command() -> list[str]:
    return ["rm", "-rf", HARDHAT_ARTIFACTS_DIR]


def forge_clean_command() -> list[str]:
    return [FORGE_BINARY, "clean"]


def forge_test_command(verbosity: int) -> list[str]:
    """``forge test`` in hardhat mode with the given verbosity."""
    return [
        FORGE_BINARY, "test",
        "--hardhat",
        "--force",
        "--out", FORGE_ARTIFACTS_DIR,
        "--verbosity", str(verbosity),
    ]


@dataclass
class WorkflowReport:
    """What happened during one workflow invocation."""

    operation: str
    version: str
    installed_before: bool | None = None
    install_attempted: bool = False
    install_ok: bool | None = None
    install_error: str | None = None
    steps_completed: list[str] = field(default_factory=list)
    failed_step: str | None = None
    exit_code: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return {
            "operation": self.operation,
            "version": self.version,
            "ok": self.ok,
            "installed_before": self.installed_before,
            "install_attempted": self.install_attempted,
            "install_ok": self.install_ok,
            "install_error": self.install_error,
            "steps_completed": list(self.steps_completed),
            "failed_step": self.failed_step,
            "exit_code": self.exit_code,
            "error": self.error,
        }


async def check_and_install(
    config: ToolConfig,
    runner: Runner | None = None,
    *,
    cwd: str | None = None,
    report: WorkflowReport | None = None,
) -> bool:
    """Install the configured forge revision if it is missing.

    Returns:
        True if the revision is (now) installed, False if the install
        was attempted and failed. Install errors are logged, not raised.

    Raises:
        QueryError: If the installed revision cannot be determined.
    """
    runner = runner or ProcessRunner()
    installed = await is_revision_installed(config.version, runner, cwd=cwd)
    if report is not None:
        report.installed_before = installed
    if installed:
        logger.info("forge %s already installed", config.version)
        return True

    if report is not None:
        report.install_attempted = True
    try:
        await install_forge(config.version, runner=runner, cwd=cwd)
    except Exception as e:
        logger.error(
            "An error occurred while installing forge (version=%s); "
            "installation failed: %s",
            config.version, e,
        )
        if report is not None:
            report.install_ok = False
            report.install_error = str(e)
        return False

    logger.info("Installed forge (version=%s)", config.version)
    if report is not None:
        report.install_ok = True
    return True


async def ensure_and_test(
    config: ToolConfig,
    runner: Runner | None = None,
    *,
    cwd: str | None = None,
    best_effort: bool = True,
) -> WorkflowReport:
    """Make sure forge is installed, then run a clean test cycle."""
    runner = runner or ProcessRunner()
    report = WorkflowReport(operation="forge-test", version=config.version)

    await check_and_install(config, runner, cwd=cwd, report=report)

    steps = [
        ("cleanup", cleanup_command()),
        ("clean", forge_clean_command()),
        ("test", forge_test_command(config.verbosity)),
    ]
    step = ""
    try:
        for step, cmd in steps:
            await runner.run(cmd[0], cmd[1:], cwd=cwd)
            report.steps_completed.append(step)
    except Exception as e:
        report.failed_step = step
        report.exit_code = getattr(e, "exit_code", None)
        report.error = str(e)
        if not best_effort:
            raise
        logger.warning("forge test run stopped at '%s': %s", step, e)

    return report


async def force_install(
    config: ToolConfig,
    runner: Runner | None = None,
    *,
    cwd: str | None = None,
    best_effort: bool = True,
) -> WorkflowReport:
    """Reinstall the configured forge revision unconditionally."""
    runner = runner or ProcessRunner()
    report = WorkflowReport(
        operation="forge-install", version=config.version, install_attempted=True,
    )

    logger.info("Force installing forge (version=%s)", config.version)
    try:
        await install_forge(config.version, force=True, runner=runner, cwd=cwd)
    except Exception as e:
        exit_code = getattr(e, "exit_code", None)
        logger.error(
            "An error occurred while installing forge (version=%s, exit code=%s): %s",
            config.version, exit_code, e,
        )
        report.install_ok = False
        report.install_error = str(e)
        report.failed_step = "install"
        report.exit_code = exit_code
        report.error = str(e)
        if not best_effort:
            raise
        return report

    logger.info("Force installed forge (version=%s)", config.version)
    report.install_ok = True
    report.steps_completed.append("install")
    return report
