"""Subcommand modules for ctdata.

register_commands() imports command modules lazily so ``ctdata --help``
stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the export and import groups on the root CLI group."""
    from ctdata.commands.export import export
    from ctdata.commands.import_cmd import import_cmd

    cli.add_command(export)
    cli.add_command(import_cmd)
