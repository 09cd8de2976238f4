"""Command: show FSMO role owners."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from sambactl.commands._base import SambaCommand

if TYPE_CHECKING:
    from sambactl.commands._context import AppContext


@click.command(cls=SambaCommand, examples="  sambactl fsmo\n  sambactl --json fsmo")
@click.pass_obj
def fsmo(app: AppContext) -> None:
    """Show which domain controller owns each FSMO role."""
    app.run(app.directory.fsmo_roles())
