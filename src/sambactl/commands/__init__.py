"""Subcommand modules for sambactl.

Provides register_commands() which uses deferred imports to keep
``sambactl --help`` fast as the codebase grows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from sambactl.commands.fsmo import fsmo
    from sambactl.commands.list_cmd import list_cmd
    from sambactl.commands.members import members
    from sambactl.commands.ping import ping
    from sambactl.commands.show import show
    from sambactl.commands.version import version

    cli.add_command(version)
    cli.add_command(ping)
    cli.add_command(list_cmd)
    cli.add_command(show)
    cli.add_command(members)
    cli.add_command(fsmo)
