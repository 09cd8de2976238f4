"""Click command and group classes that carry usage examples.

``examples=`` on a command adds an eager ``--examples`` flag that prints the
examples and exits before any argument is validated, so ``sambactl show
--examples`` works without KIND or NAME.  The help text gains a one-line
pointer to the flag instead of the examples themselves.
"""

from __future__ import annotations

import textwrap
from typing import Any

import click

EXAMPLES_HINT = "Run with --examples for sample invocations."


class _ExamplesMixin:
    examples: str | None

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        if examples:
            examples = textwrap.dedent(examples).strip("\n")
            kwargs.setdefault("epilog", EXAMPLES_HINT)
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(  # type: ignore[attr-defined]
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._show_examples,
                    help="Show usage examples and exit.",
                )
            )

    def _show_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing or not self.examples:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(textwrap.indent(self.examples, "  "))
        ctx.exit(0)


class SambaCommand(_ExamplesMixin, click.Command):
    pass


class SambaGroup(_ExamplesMixin, click.Group):
    """Root group; subcommands default to :class:`SambaCommand`."""

    command_class = SambaCommand
