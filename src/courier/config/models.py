"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, courier.toml only contains overrides.
An application with explicit registration needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- courier.toml sections ---


class RegistryConfig(BaseModel):
    """[registry] section."""

    model_config = {"frozen": True}

    modules: list[str] = Field(default_factory=list)
    packages: list[str] = Field(default_factory=list)


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str | None = None


class PipelineConfig(BaseModel):
    """[pipeline] section — built-in behaviors registered ahead of user behaviors."""

    model_config = {"frozen": True}

    logging: bool = True
    tracing: bool = False
    validate_responses: bool = False
    strict_validation: bool = True
