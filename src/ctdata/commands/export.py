"""Command group: export library or combat state as a signed artifact."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from ctdata.commands._base import CtCommand, CtGroup
from ctdata.domain.types import ExportSource

if TYPE_CHECKING:
    from ctdata.commands._context import AppContext

_EXPORT_EXAMPLES = """\
  ctdata export library                     # text artifact on stdout
  ctdata export library --output monsters   # writes monsters.ctdata
  ctdata export combat --output fight.ctdata
  ctdata --json export combat"""

_DESCRIPTIONS = {
    ExportSource.LIBRARY: "Export the creature library (categories and creatures).",
    ExportSource.COMBAT: "Export the current encounter (counters and combatants).",
}


@click.group(cls=CtGroup, examples=_EXPORT_EXAMPLES)
def export() -> None:
    """Export state as a tamper-evident artifact."""


def with_extension(path: Path, extension: str) -> Path:
    """Append *extension* when *path* has no suffix of its own."""
    return path if path.suffix else path.with_name(path.name + extension)


def _export_command(source: ExportSource) -> click.Command:
    @click.command(
        name=str(source),
        cls=CtCommand,
        help=_DESCRIPTIONS[source],
        examples=f"""\
  ctdata export {source}
  ctdata export {source} --output backup/{source}.ctdata
  ctdata -q export {source} > {source}.txt""",
    )
    @click.option(
        "-o",
        "--output",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Write a file artifact instead of printing a text artifact.",
    )
    @click.pass_obj
    def command(app: AppContext, output: Path | None) -> None:
        service = app.export_service()
        if output is None:
            app.emit(service.export_text(source))
        else:
            target = with_extension(output, app.settings.exchange.file_extension)
            app.emit(service.export_file(source, target))

    return command


for _source in ExportSource:
    export.add_command(_export_command(_source))
