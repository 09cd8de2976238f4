"""SambaTool — the inbound interface of the invocation core.

Callers hand :meth:`SambaTool.execute` an argument vector and get back the
tool's standard output, or a :class:`SambaToolError` whose ``error`` is a
classified :class:`TypedError`.  Nothing else escapes: process faults are
converted here, so callers never see raw stderr text.

The instance only holds frozen settings and the spawn callable, so one
instance can serve any number of concurrent invocations.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from collections.abc import Awaitable, Mapping, Sequence
from typing import Protocol

from pydantic import BaseModel, Field

from sambactl.config.settings import SambaSettings
from sambactl.domain.arguments import OptionValue, build_command, redact_args, sanitize
from sambactl.domain.errors import ErrorKind, SambaToolError, TypedError, timeout_error
from sambactl.infrastructure.process import (
    ProcessError,
    ProcessExitError,
    ProcessTimeoutError,
    spawn,
)
from sambactl.services.classifier import classify
from sambactl.services.retry import RetryOptions, with_retry
from sambactl.services.telemetry import trace_span

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"(\d+\.\d+\.\d+)")

CONNECTION_TEST_TIMEOUT = 5.0


class Spawner(Protocol):
    """Signature of the outbound spawn primitive."""

    def __call__(
        self,
        argv: Sequence[str],
        *,
        timeout: float,
        input: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> Awaitable[str]: ...


class CommandOptions(BaseModel):
    """Per-invocation options. Unset fields fall back to the executor defaults."""

    model_config = {"frozen": True}

    superuser: bool | None = None
    timeout: float | None = Field(default=None, gt=0)
    input: str | None = None
    env: dict[str, str] = Field(default_factory=dict)
    retry: RetryOptions | None = None


class ToolVersion(BaseModel):
    """Parsed ``samba-tool --version`` output."""

    model_config = {"frozen": True}

    version: str
    features: list[str] = Field(default_factory=list)


def _is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


class SambaTool:
    """Sanitize, elevate, spawn, classify and optionally retry.

    Usage::

        tool = SambaTool(settings)
        text = await tool.execute(tool.build("group", "list"))
        names = parse_simple_list(text)
    """

    def __init__(self, settings: SambaSettings | None = None, *, spawner: Spawner = spawn) -> None:
        self._settings = settings or SambaSettings()
        self._spawn = spawner

    @property
    def settings(self) -> SambaSettings:
        return self._settings

    def build(
        self,
        tool: str,
        action: str,
        args: Sequence[str] = (),
        options: Mapping[str, OptionValue] | None = None,
    ) -> list[str]:
        """:func:`build_command` using the configured samba-tool binary."""
        return build_command(tool, action, args, options, binary=self._settings.tool.binary)

    def default_retry(self) -> RetryOptions:
        """The configured retry policy, for callers that opt in."""
        cfg = self._settings.retry
        return RetryOptions(
            max_attempts=cfg.max_attempts,
            base_delay=cfg.base_delay,
            backoff_factor=cfg.backoff_factor,
            jitter=cfg.jitter,
        )

    async def execute(self, args: Sequence[str], options: CommandOptions | None = None) -> str:
        """Run one invocation and return its standard output.

        Raises:
            SambaToolError: Validation failures from the sanitizer, timeouts,
                and classified tool failures.
        """
        opts = options or CommandOptions()
        executor_cfg = self._settings.executor
        superuser = executor_cfg.superuser if opts.superuser is None else opts.superuser
        timeout = opts.timeout or executor_cfg.timeout
        operation = " ".join(redact_args(args))

        argv = sanitize(args, max_length=executor_cfg.max_arg_length)
        if superuser and not _is_root():
            argv = [*self._settings.tool.elevation, *argv]

        async def attempt() -> str:
            return await self._run_once(argv, operation, timeout=timeout, opts=opts)

        if opts.retry is not None:
            return await with_retry(attempt, opts.retry, label=operation)
        return await attempt()

    def execute_sync(self, args: Sequence[str], options: CommandOptions | None = None) -> str:
        """Blocking wrapper around :meth:`execute` for synchronous callers."""
        return asyncio.run(self.execute(args, options))

    async def _run_once(
        self,
        argv: list[str],
        operation: str,
        *,
        timeout: float,
        opts: CommandOptions,
    ) -> str:
        logger.debug("exec %s (timeout=%ss)", operation, timeout)
        try:
            with trace_span("spawn", operation=operation):
                output = await self._spawn(argv, timeout=timeout, input=opts.input, env=opts.env)
        except ProcessTimeoutError as exc:
            raise timeout_error(operation, timeout) from exc
        except ProcessExitError as exc:
            error = classify(exc.output, operation, extra={"exit_status": exc.returncode})
            raise SambaToolError(error) from exc
        except ProcessError as exc:
            error = classify(exc.output, operation, extra={"spawn_failed": True})
            raise SambaToolError(error) from exc
        return output or ""

    # ------------------------------------------------------------------
    # Health checks
    # ------------------------------------------------------------------

    async def get_version(self) -> ToolVersion:
        """Report the samba-tool version and the ``HAVE_*`` build features."""
        binary = self._settings.tool.binary
        try:
            output = await self.execute([binary, "--version"])
        except SambaToolError as exc:
            raise SambaToolError(
                TypedError.of(
                    ErrorKind.GENERIC,
                    "Failed to get Samba version",
                    code="VERSION_ERROR",
                    details={"cause": exc.error.to_dict()},
                )
            ) from exc

        lines = output.split("\n")
        match = _VERSION_RE.search(lines[0]) if lines else None
        features = [line.strip() for line in lines[1:] if "HAVE_" in line]
        return ToolVersion(version=match.group(1) if match else "unknown", features=features)

    async def test_connection(self, host: str = "127.0.0.1") -> bool:
        """True when ``samba-tool domain info <host>`` succeeds quickly."""
        try:
            await self.execute(
                self.build("domain", "info", [host]),
                CommandOptions(timeout=CONNECTION_TEST_TIMEOUT),
            )
        except SambaToolError as exc:
            logger.debug("connection test to %s failed: %s", host, exc)
            return False
        return True

    async def command_exists(self, name: str) -> bool:
        """True when *name* resolves on ``PATH`` (checked with ``which``)."""
        try:
            await self.execute(["which", name], CommandOptions(superuser=False))
        except SambaToolError:
            return False
        return True

