"""Root CLI group for ctdata with global flags and command registration."""

from __future__ import annotations

import click

from ctdata import __version__
from ctdata.commands import register_commands
from ctdata.commands._base import CtGroup
from ctdata.commands._context import AppContext
from ctdata.config.settings import CtSettings

_CLI_EXAMPLES = """\
  ctdata export library --output monsters.ctdata
  ctdata import library monsters.ctdata
  ctdata -v import combat --text "<mac>.<base64>" --dry-run
  CTDATA_EXCHANGE__SIGNING_KEY=shared-secret ctdata export combat"""


@click.group(cls=CtGroup, invoke_without_command=True, examples=_CLI_EXAMPLES)
@click.version_option(version=__version__, prog_name="ctdata")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logs.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """Export and import combat tracker data."""
    settings = CtSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
