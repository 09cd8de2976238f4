"""Command: list the members of a group."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from sambactl.commands._base import SambaCommand

if TYPE_CHECKING:
    from sambactl.commands._context import AppContext


@click.command(
    cls=SambaCommand,
    examples="""\
  sambactl members "Domain Admins"
  sambactl -q members staff""",
)
@click.argument("group")
@click.pass_obj
def members(app: AppContext, group: str) -> None:
    """List the members of GROUP."""
    app.run(app.directory.group_members(group))
