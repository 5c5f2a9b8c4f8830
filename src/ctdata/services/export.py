"""ExportService — snapshot the store and seal it as a text or file artifact.

Artifacts are built fresh on every call. Two exports of the same store
are not byte-identical but decode to equal documents.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING

from ctdata.domain.errors import ExchangeError, SourceMismatchError
from ctdata.domain.schemas import load_state, schema_for, source_of
from ctdata.services.base import BaseService
from ctdata.services.merge import STORE_ERRORS
from ctdata.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from pathlib import Path

    from ctdata.domain.schemas import ExchangeState

logger = logging.getLogger(__name__)


class ExportService(BaseService):
    """Export library or combat state."""

    def snapshot(self, source: str) -> ExchangeState:
        """Read every collection *source* spans and validate it into a state.

        Raises:
            KeyError: Unknown *source*.
            ValidationError: The stored records are malformed.
        """
        model = schema_for(source)
        records = {name: self._store.read_all(name) for name in model.COLLECTIONS}
        return load_state(source, records)

    def export_text(self, source: str, state: ExchangeState | None = None) -> ServiceResult:
        """Build a clipboard-safe text artifact.

        Exports the current store unless an explicit *state* is given.
        """
        op = "export_text"
        if (failure := self._unknown_source(op, source)) is not None:
            return failure

        resolved = self._resolve_state(op, source, state)
        if isinstance(resolved, ServiceResult):
            return resolved
        try:
            content = self._pipeline.export_text(source, resolved)
        except ExchangeError as exc:
            return ServiceResult(ok=False, op=op, error=ServiceError.from_exception(exc))

        warnings: list[str] = []
        self._dispatch_event(
            "post_export",
            {"source": source, "artifact": "text", "size": len(content)},
            warnings,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={"source": source, "content": content, "size": len(content)},
            warnings=warnings,
        )

    def export_file(
        self,
        source: str,
        path: Path,
        state: ExchangeState | None = None,
    ) -> ServiceResult:
        """Write a file artifact to *path*, creating parent directories."""
        op = "export_file"
        if (failure := self._unknown_source(op, source)) is not None:
            return failure

        resolved = self._resolve_state(op, source, state)
        if isinstance(resolved, ServiceResult):
            return resolved
        try:
            payload = self._pipeline.export_bytes(source, resolved)
        except ExchangeError as exc:
            return ServiceResult(ok=False, op=op, error=ServiceError.from_exception(exc))

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(payload)
        except OSError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="WRITE_FAILED",
                    message=f"Could not write {path}: {exc}",
                    detail={"output_file": str(path)},
                ),
            )

        warnings: list[str] = []
        self._dispatch_event(
            "post_export",
            {"source": source, "artifact": "file", "size": len(payload)},
            warnings,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={"source": source, "output_file": str(path), "size": len(payload)},
            warnings=warnings,
        )

    async def aexport_text(
        self, source: str, state: ExchangeState | None = None
    ) -> ServiceResult:
        """:meth:`export_text` on a worker thread."""
        return await asyncio.to_thread(self.export_text, source, state)

    # ── Internals ─────────────────────────────────────────────────────

    def _resolve_state(
        self,
        op: str,
        source: str,
        state: ExchangeState | None,
    ) -> ExchangeState | ServiceResult:
        """The state to seal under *source*, or the failure result.

        An explicit *state* must belong to *source*; the tag is fixed here
        and an importer trusts it.
        """
        if state is not None:
            try:
                actual = source_of(state)
            except KeyError:
                actual = type(state).__name__
            if actual != source:
                exc = SourceMismatchError(expected=source, actual=actual)
                return ServiceResult(ok=False, op=op, error=ServiceError.from_exception(exc))
            return state

        try:
            return self.snapshot(source)
        except ExchangeError as exc:
            return ServiceResult(ok=False, op=op, error=ServiceError.from_exception(exc))
        except (*STORE_ERRORS, json.JSONDecodeError) as exc:
            logger.info("snapshot_failed", extra={"source": source, "error": str(exc)})
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="READ_FAILED",
                    message=f"Could not read {source} data from the store: {exc}",
                    detail={"source": source},
                ),
            )
