"""Command: list directory objects by kind."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from sambactl.commands._base import SambaCommand
from sambactl.services.directory import LISTABLE_KINDS

if TYPE_CHECKING:
    from sambactl.commands._context import AppContext


@click.command(
    "list",
    cls=SambaCommand,
    examples="""\
  sambactl list user
  sambactl -q list group
  sambactl --json list computer""",
)
@click.argument("kind", type=click.Choice(LISTABLE_KINDS))
@click.pass_obj
def list_cmd(app: AppContext, kind: str) -> None:
    """List every object of KIND."""
    app.run(app.directory.list_objects(kind))
