"""
Domain models for forge-runner.

    from forge_runner.core.models import ToolConfig, ProcessResult
"""

from forge_runner.core.models.config import (
    DEFAULT_FORGE_VERSION,
    DEFAULT_VERBOSITY,
    ForgeUserConfig,
    ToolConfig,
)
from forge_runner.core.models.process import CapturedOutput, ProcessResult

__all__ = [
    "CapturedOutput",
    "DEFAULT_FORGE_VERSION",
    "DEFAULT_VERBOSITY",
    "ForgeUserConfig",
    "ProcessResult",
    "ToolConfig",
]
