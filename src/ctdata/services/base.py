"""BaseService — shared construction and plugin dispatch.

Services receive their collaborators at construction: a
:class:`~ctdata.infrastructure.store.RecordStore`, an
:class:`~ctdata.exchange.pipeline.ExchangePipeline`, and optionally a
:class:`~ctdata.plugins.manager.PluginManager`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ctdata.domain.schemas import known_sources
from ctdata.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from ctdata.exchange.pipeline import ExchangePipeline
    from ctdata.infrastructure.store import RecordStore
    from ctdata.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class BaseService:
    """Base for the export and import services."""

    def __init__(
        self,
        store: RecordStore,
        pipeline: ExchangePipeline,
        plugins: PluginManager | None = None,
    ) -> None:
        self._store = store
        self._pipeline = pipeline
        self._plugins = plugins

    @staticmethod
    def _unknown_source(op: str, source: str) -> ServiceResult | None:
        """Failure result when *source* has no registered schema, else None."""
        sources = known_sources()
        if source in sources:
            return None
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(
                code="UNKNOWN_SOURCE",
                message=f"Unknown source {source!r}. Expected one of: {', '.join(sources)}",
            ),
        )

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Call plugin hook *hook_name*. No-op without a plugin manager.

        Plugin failures are warnings, never errors.
        """
        if self._plugins is None:
            return
        try:
            getattr(self._plugins.hook, hook_name)(**payload)
        except Exception:
            logger.debug("Plugin hook %s failed", hook_name, exc_info=True)
            warnings.append(f"Plugin hook {hook_name} failed")
