"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``SAMBACTL_*`` prefix
  3. TOML file    — see :func:`find_config`
  4. Code defaults — baked into the section models

The TOML file is located by :func:`find_config`: an explicit path
(``--config`` or ``$SAMBACTL_CONFIG``), else the nearest ``sambactl.toml``
above the working directory, else the system-wide file beside ``smb.conf``.
"""

from __future__ import annotations

import os
import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from sambactl.config.models import ExecutorConfig, RetryConfig, ToolConfig

CONFIG_FILENAME = "sambactl.toml"
CONFIG_ENV_VAR = "SAMBACTL_CONFIG"
SYSTEM_CONFIG = Path("/etc/samba/sambactl.toml")


def _explicit(path: str, origin: str) -> Path:
    p = Path(path)
    if not p.is_file():
        raise click.ClickException(f"Config file from {origin} not found: {p}")
    return p


def find_config(start: Path | None = None, *, system: Path | None = None) -> Path | None:
    """Locate the ``sambactl.toml`` to load, or None to run on defaults.

    ``$SAMBACTL_CONFIG`` wins and must name an existing file. Otherwise the
    nearest ``sambactl.toml`` from *start* (default: cwd) up to the root is
    used, then *system* if given and present.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return _explicit(env_path, CONFIG_ENV_VAR)

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    if system is not None and system.is_file():
        return system
    return None


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Top-level keys and ``[tool]``/``[executor]``/``[retry]`` tables from TOML."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class SambaSettings(BaseSettings):
    """Unified settings for the sambactl CLI and the invocation core.

    Merges CLI flags, environment variables, TOML config sections,
    and code-baked defaults into a single frozen object.  Stored on the
    CLI's ``AppContext`` and handed to :class:`SambaTool`.

    Attributes:
        config_path: The TOML file that was loaded, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "SAMBACTL_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    tool: ToolConfig = Field(default_factory=ToolConfig)
    executor: ExecutorConfig = Field(default_factory=ExecutorConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start_dir: Path | None = None,
        **cli_flags: Any,
    ) -> SambaSettings:
        """Construct settings from CLI invocation.

        Uses the explicit *config_path* (which must exist) or
        :func:`find_config` from *start_dir*, and merges CLI flags as
        highest-priority overrides. Flags passed as ``None`` are treated as "not given".
        """
        if config_path:
            toml_path: Path | None = _explicit(config_path, "--config")
        else:
            toml_path = find_config(start_dir, system=SYSTEM_CONFIG)

        overrides = {key: value for key, value in cli_flags.items() if value is not None}

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **overrides)
        finally:
            _tls.toml_path = None
