"""Click command classes for ctdata.

Every ``export``/``import`` command carries worked invocations (paths,
``--text`` strings, stdin pipes) that would crowd ``--help``. They are
passed as ``examples=`` and shown only on ``--examples``.
"""

from __future__ import annotations

from typing import Any

import click


class _ExamplesMixin:
    """Adds the ``examples=`` keyword and the eager ``--examples`` flag."""

    params: list[click.Parameter]

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples.rstrip() if examples else None
        if self.examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._show_examples,
                    help="Show usage examples.",
                )
            )

    def _show_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        # Completion parses every option; don't exit mid-completion.
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(self.examples)
        ctx.exit(0)


class CtCommand(_ExamplesMixin, click.Command):
    pass


class CtGroup(_ExamplesMixin, click.Group):
    """Group for the ``export``/``import`` source subcommands."""

    command_class = CtCommand
