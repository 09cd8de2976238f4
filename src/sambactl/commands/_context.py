"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy executor initialization, a bridge
from Click's synchronous callbacks into the async services, and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any

import click

from sambactl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from sambactl.config.settings import SambaSettings
    from sambactl.services.directory import DirectoryService
    from sambactl.services.executor import SambaTool
    from sambactl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  The executor is lazily
    initialized on first use so ``--help`` and ``--version`` never touch
    the executor stack.
    """

    def __init__(self, settings: SambaSettings) -> None:
        self.settings = settings
        self._tool: SambaTool | None = None

        # Configure structured logging
        from sambactl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        # Enable telemetry context var when verbose
        if settings.verbose:
            from sambactl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def tool(self) -> SambaTool:
        """The samba-tool executor (created lazily on first access)."""
        if self._tool is None:
            from sambactl.services.executor import SambaTool

            self._tool = SambaTool(self.settings)
        return self._tool

    @property
    def directory(self) -> DirectoryService:
        from sambactl.services.directory import DirectoryService

        return DirectoryService(self.tool)

    def run(self, coro: Coroutine[Any, Any, ServiceResult]) -> None:
        """Drive an async service call to completion and emit its result."""
        self.emit(asyncio.run(coro))

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
