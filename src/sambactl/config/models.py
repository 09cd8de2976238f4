"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, sambactl.toml only contains
overrides. A fresh install needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ToolConfig(BaseModel):
    """[tool] section."""

    model_config = {"frozen": True}

    binary: str = "samba-tool"
    elevation: list[str] = Field(default_factory=lambda: ["sudo", "-n"])


class ExecutorConfig(BaseModel):
    """[executor] section."""

    model_config = {"frozen": True}

    superuser: bool = True
    timeout: float = Field(default=30.0, gt=0)
    max_arg_length: int = Field(default=1000, ge=1)


class RetryConfig(BaseModel):
    """[retry] section — policy for read-only calls."""

    model_config = {"frozen": True}

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=1.0, ge=0)
    backoff_factor: float = Field(default=2.0, ge=1)
    jitter: float = Field(default=0.0, ge=0, le=1)

