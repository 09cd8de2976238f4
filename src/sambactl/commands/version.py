"""Command: report the samba-tool version."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from sambactl.commands._base import SambaCommand

if TYPE_CHECKING:
    from sambactl.commands._context import AppContext


@click.command(
    cls=SambaCommand,
    examples="""\
  sambactl version
  sambactl -v version
  sambactl --json version""",
)
@click.pass_obj
def version(app: AppContext) -> None:
    """Show the installed samba-tool version."""
    app.run(app.directory.version())
