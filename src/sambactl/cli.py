"""Root CLI group for sambactl with global flags and command registration."""

from __future__ import annotations

import click

from sambactl import __version__
from sambactl.commands import register_commands
from sambactl.commands._base import SambaGroup
from sambactl.commands._context import AppContext
from sambactl.config.settings import SambaSettings


@click.group(cls=SambaGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="sambactl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--no-superuser",
    is_flag=True,
    help="Run samba-tool without privilege elevation.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds before an invocation is aborted.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    no_superuser: bool,
    timeout: float | None,
) -> None:
    """sambactl — Samba AD DC administration via samba-tool."""
    ctx.ensure_object(dict)
    settings = SambaSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    executor_overrides: dict[str, object] = {}
    if no_superuser:
        executor_overrides["superuser"] = False
    if timeout is not None:
        executor_overrides["timeout"] = timeout
    if executor_overrides:
        settings = settings.model_copy(
            update={"executor": settings.executor.model_copy(update=executor_overrides)}
        )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
