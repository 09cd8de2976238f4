"""Command: show the attributes of one directory object."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from sambactl.commands._base import SambaCommand
from sambactl.services.directory import SHOWABLE_KINDS

if TYPE_CHECKING:
    from sambactl.commands._context import AppContext


@click.command(
    cls=SambaCommand,
    examples="""\
  sambactl show user alice
  sambactl --json show group Administrators""",
)
@click.argument("kind", type=click.Choice(SHOWABLE_KINDS))
@click.argument("name")
@click.pass_obj
def show(app: AppContext, kind: str, name: str) -> None:
    """Show the attributes of object NAME of KIND."""
    app.run(app.directory.show_object(kind, name))
