"""
Forge configuration models.

``ForgeUserConfig`` is what a user writes under the ``forge:`` key of
project.yml; every field is optional. ``ToolConfig`` is the resolved,
immutable view a workflow runs with.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Pinned foundry revision installed when none is configured
DEFAULT_FORGE_VERSION = "ecdafc5"
DEFAULT_VERBOSITY = 3


class ForgeUserConfig(BaseModel):
    """The ``forge:`` section as declared by the user."""

    version: str | None = None          # git revision or tag
    verbosity: int | None = Field(default=None, ge=0)

    @field_validator("version", mode="before")
    @classmethod
    def _revision_as_text(cls, value: object) -> object:
        # YAML reads an all-digit short hash such as 1234567 as an int
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class ToolConfig(BaseModel):
    """Resolved forge settings for one invocation."""

    model_config = ConfigDict(frozen=True)

    version: str = DEFAULT_FORGE_VERSION
    verbosity: int = Field(default=DEFAULT_VERBOSITY, ge=0)
