"""Command: domain controller reachability check."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from sambactl.commands._base import SambaCommand

if TYPE_CHECKING:
    from sambactl.commands._context import AppContext


@click.command(
    cls=SambaCommand,
    examples="""\
  sambactl ping
  sambactl ping dc1.example.com""",
)
@click.argument("host", default="127.0.0.1")
@click.pass_obj
def ping(app: AppContext, host: str) -> None:
    """Check that the domain controller at HOST answers."""
    app.run(app.directory.ping(host))
