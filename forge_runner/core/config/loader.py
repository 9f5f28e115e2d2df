"""
Configuration loader — reads the ``forge:`` section of project.yml.

Resolution is split in two so it can be tested without touching disk:

    resolve_config(mapping)  pure: user mapping → ToolConfig with defaults
    load_config(path)        I/O: find + read YAML, then resolve
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from forge_runner.core.models.config import (
    DEFAULT_FORGE_VERSION,
    DEFAULT_VERBOSITY,
    ForgeUserConfig,
    ToolConfig,
)

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "project.yml"

# Top-level key holding forge settings
CONFIG_SECTION = "forge"


class ConfigError(Exception):
    """Raised when forge configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for project.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to project.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def resolve_config(
    user_config: Mapping[str, Any] | ForgeUserConfig | None = None,
) -> ToolConfig:
    """Apply defaults to a user configuration.

    Accepts the whole host mapping (``{"forge": {...}}``), an already
    parsed ``ForgeUserConfig``, or None. An empty ``version`` counts as
    absent; a ``verbosity`` of 0 is kept.

    Raises:
        ConfigError: If the ``forge`` section has the wrong shape or types.
    """
    if isinstance(user_config, ForgeUserConfig):
        section = user_config
    else:
        raw = (user_config or {}).get(CONFIG_SECTION) or {}
        if not isinstance(raw, Mapping):
            raise ConfigError(
                f"Expected a mapping under '{CONFIG_SECTION}', got {type(raw).__name__}"
            )
        try:
            section = ForgeUserConfig.model_validate(dict(raw))
        except ValidationError as e:
            raise ConfigError(f"Invalid forge configuration: {e}") from e

    return ToolConfig(
        version=section.version or DEFAULT_FORGE_VERSION,
        verbosity=(
            section.verbosity if section.verbosity is not None else DEFAULT_VERBOSITY
        ),
    )


def with_overrides(
    config: ToolConfig,
    version: str | None = None,
    verbosity: int | None = None,
) -> ToolConfig:
    """Return a copy of ``config`` with command-line overrides applied."""
    data = config.model_dump()
    if version:
        data["version"] = version
    if verbosity is not None:
        data["verbosity"] = verbosity
    try:
        return ToolConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid override: {e}") from e


def load_config(path: Path | None = None) -> ToolConfig:
    """Load and resolve forge configuration.

    Args:
        path: Explicit path to project.yml. If None, searches upward and
            falls back to defaults when nothing is found.

    Returns:
        Resolved ToolConfig.

    Raises:
        ConfigError: If an explicit file is missing, or any file found
            is unreadable or invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found, using default forge settings", CONFIG_FILE)
            return resolve_config(None)
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading forge config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    config = resolve_config(data)
    logger.info("Loaded forge config (version=%s, verbosity=%d)", config.version, config.verbosity)
    return config


def project_root(config_path: Path | None) -> Path:
    """Directory commands run in: the config file's parent, or cwd."""
    return config_path.parent.resolve() if config_path else Path.cwd()
