"""Command group: import a signed artifact into the store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from ctdata.commands._base import CtCommand, CtGroup
from ctdata.domain.types import ExportSource

if TYPE_CHECKING:
    from ctdata.commands._context import AppContext

_IMPORT_EXAMPLES = """\
  ctdata import library monsters.ctdata
  ctdata import library --text "3f9a...e1.gaZzb3VyY2Wn..."
  pbpaste | ctdata import combat -
  ctdata import library monsters.ctdata --dry-run"""

_DESCRIPTIONS = {
    ExportSource.LIBRARY: "Merge a library artifact into the creature library.",
    ExportSource.COMBAT: "Merge a combat artifact into the current encounter.",
}


@click.group("import", cls=CtGroup, examples=_IMPORT_EXAMPLES)
def import_cmd() -> None:
    """Import an artifact. Existing records with the same id are overwritten."""


def _import_command(source: ExportSource) -> click.Command:
    @click.command(
        name=str(source),
        cls=CtCommand,
        help=_DESCRIPTIONS[source],
        examples=f"""\
  ctdata import {source} {source}.ctdata
  ctdata import {source} - < {source}.txt
  ctdata import {source} {source}.ctdata --dry-run""",
    )
    @click.argument(
        "file",
        required=False,
        type=click.Path(dir_okay=False, allow_dash=True, path_type=Path),
    )
    @click.option("--text", "text", default=None, help="Text artifact passed inline.")
    @click.option(
        "--dry-run",
        is_flag=True,
        help="Decode, verify and validate without writing anything.",
    )
    @click.pass_obj
    def command(app: AppContext, file: Path | None, text: str | None, dry_run: bool) -> None:
        if (file is None) == (text is None):
            msg = "Provide exactly one of FILE or --text."
            raise click.UsageError(msg)

        service = app.import_service()
        if text is not None:
            app.emit(service.import_text(text, source, dry_run=dry_run))
        elif str(file) == "-":
            with click.open_file("-") as stream:
                piped = stream.read()
            app.emit(service.import_text(piped, source, dry_run=dry_run))
        else:
            app.emit(service.import_file(file, source, dry_run=dry_run))

    return command


for _source in ExportSource:
    import_cmd.add_command(_import_command(_source))
