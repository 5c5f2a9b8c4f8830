"""AppContext — shared Click context for all commands.

Created once by the root group and handed to subcommands via
``@click.pass_obj``. The store and pipeline are built lazily so
``--help`` and ``--examples`` never touch the database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ctdata.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from ctdata.config.settings import CtSettings
    from ctdata.exchange.pipeline import ExchangePipeline
    from ctdata.infrastructure.store import SqlRecordStore
    from ctdata.plugins.manager import PluginManager
    from ctdata.services.export import ExportService
    from ctdata.services.importer import ImportService
    from ctdata.services.result import ServiceResult


class AppContext:
    """Settings plus lazily constructed store, pipeline and plugins."""

    def __init__(self, settings: CtSettings) -> None:
        self.settings = settings
        self._store: SqlRecordStore | None = None
        self._pipeline: ExchangePipeline | None = None
        self._plugins: PluginManager | None = None

        from ctdata.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def store(self) -> SqlRecordStore:
        """The SQLite record store (opened on first access)."""
        if self._store is None:
            from ctdata.infrastructure.database.engine import init_database
            from ctdata.infrastructure.store import SqlRecordStore

            self._store = SqlRecordStore(init_database(self.settings.root, self.settings.store))
        return self._store

    @property
    def pipeline(self) -> ExchangePipeline:
        """Exchange pipeline keyed from ``[exchange] signing_key``."""
        if self._pipeline is None:
            from ctdata.exchange import ExchangePipeline, IntegritySigner, SettingsKeyProvider

            self._pipeline = ExchangePipeline(IntegritySigner(SettingsKeyProvider(self.settings)))
        return self._pipeline

    @property
    def plugins(self) -> PluginManager:
        """Plugin manager with entry-point plugins loaded."""
        if self._plugins is None:
            from ctdata.plugins.manager import PluginManager

            self._plugins = PluginManager()
            self._plugins.discover_and_load()
        return self._plugins

    def export_service(self) -> ExportService:
        from ctdata.services.export import ExportService

        return ExportService(self.store, self.pipeline, self.plugins)

    def import_service(self) -> ImportService:
        from ctdata.services.importer import ImportService

        return ImportService(self.store, self.pipeline, self.plugins)

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout. Warnings go to stderr so piped artifacts stay clean.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
