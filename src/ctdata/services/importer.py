"""ImportService — drive an artifact through the import state machine.

Stages::

    idle → decoding → verifying → source_checking → validating → merging → committed

Any stage may end in ``rejected``; the rejection kind names the failure
(decode, integrity, source_mismatch, schema, storage) and the attempt
keeps a human-readable reason. Only ``committed`` fires ``post_import``.
A storage rejection is retryable: :meth:`ImportService.commit` re-runs the
merge for an already-validated state without decoding again.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ctdata.domain.errors import DecodeError, ExchangeError, MergeError
from ctdata.domain.schemas import LibraryState, source_of
from ctdata.domain.types import ImportStage, RejectionKind
from ctdata.exchange.transport import FILE_MAGIC
from ctdata.services.base import BaseService
from ctdata.services.merge import STORE_ERRORS, MergeEngine
from ctdata.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from pathlib import Path

    from ctdata.domain.schemas import ExchangeState

logger = logging.getLogger(__name__)


@dataclass
class ImportAttempt:
    """Stage trail and outcome of one import."""

    source: str
    stages: list[ImportStage] = field(default_factory=lambda: [ImportStage.IDLE])
    kind: RejectionKind | None = None
    reason: str | None = None

    @property
    def stage(self) -> ImportStage:
        return self.stages[-1]

    @property
    def committed(self) -> bool:
        return self.stage is ImportStage.COMMITTED

    def enter(self, stage: ImportStage) -> None:
        """Record a transition; usable as the pipeline's stage observer."""
        self.stages.append(stage)
        logger.debug("import_stage", extra={"source": self.source, "stage": str(stage)})

    def reject(self, exc: ExchangeError) -> ImportStage:
        """Terminate with *exc*. Returns the stage the failure happened in."""
        failed_at = self.stage
        self.kind = exc.kind
        self.reason = exc.message
        self.stages.append(ImportStage.REJECTED)
        logger.info(
            "import_rejected",
            extra={
                "source": self.source,
                "stage": str(failed_at),
                "kind": str(exc.kind),
                "reason": exc.message,
            },
        )
        return failed_at

    def trail(self) -> list[str]:
        return [str(s) for s in self.stages]


class ImportService(BaseService):
    """Import library or combat artifacts into the store."""

    def import_text(
        self,
        text: str,
        expected_source: str,
        *,
        dry_run: bool = False,
    ) -> ServiceResult:
        """Import a ``<mac>.<base64>`` text artifact.

        With *dry_run* the artifact is fully checked and validated but
        nothing is written.
        """
        op = "import_text"
        if (failure := self._unknown_source(op, expected_source)) is not None:
            return failure

        attempt = ImportAttempt(expected_source)
        try:
            state = self._pipeline.open_text(text, expected_source, observer=attempt.enter)
        except ExchangeError as exc:
            return self._rejected(op, attempt, exc)
        return self._complete(op, attempt, state, dry_run=dry_run)

    def import_bytes(
        self,
        data: bytes,
        expected_source: str,
        *,
        dry_run: bool = False,
    ) -> ServiceResult:
        """Import a binary file artifact already read into memory."""
        op = "import_bytes"
        if (failure := self._unknown_source(op, expected_source)) is not None:
            return failure

        attempt = ImportAttempt(expected_source)
        try:
            state = self._pipeline.open_bytes(data, expected_source, observer=attempt.enter)
        except ExchangeError as exc:
            return self._rejected(op, attempt, exc)
        return self._complete(op, attempt, state, dry_run=dry_run)

    def import_file(
        self,
        path: Path,
        expected_source: str,
        *,
        dry_run: bool = False,
    ) -> ServiceResult:
        """Import an artifact from *path*.

        Files starting with the binary magic are read as file artifacts;
        anything else is treated as a saved text artifact.
        """
        op = "import_file"
        try:
            data = path.read_bytes()
        except OSError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="READ_FAILED",
                    message=f"Could not read {path}: {exc}",
                    detail={"input_file": str(path)},
                ),
            )

        if data.startswith(FILE_MAGIC):
            return self.import_bytes(data, expected_source, dry_run=dry_run)
        try:
            text = data.decode("ascii")
        except UnicodeDecodeError:
            if (failure := self._unknown_source(op, expected_source)) is not None:
                return failure
            attempt = ImportAttempt(expected_source)
            attempt.enter(ImportStage.DECODING)
            msg = f"{path.name} is neither a file artifact nor a text artifact"
            return self._rejected(op, attempt, DecodeError(msg))
        return self.import_text(text, expected_source, dry_run=dry_run)

    def commit(self, state: ExchangeState) -> ServiceResult:
        """Merge an already-validated *state*.

        This is the retry path after a retryable storage rejection: the
        artifact does not need to be decoded or verified again.
        """
        attempt = ImportAttempt(source_of(state))
        attempt.enter(ImportStage.VALIDATING)
        return self._complete("commit", attempt, state, dry_run=False)

    # ── Async wrappers ────────────────────────────────────────────────

    async def aimport_text(
        self, text: str, expected_source: str, *, dry_run: bool = False
    ) -> ServiceResult:
        """:meth:`import_text` on a worker thread."""
        return await asyncio.to_thread(self.import_text, text, expected_source, dry_run=dry_run)

    async def aimport_bytes(
        self, data: bytes, expected_source: str, *, dry_run: bool = False
    ) -> ServiceResult:
        """:meth:`import_bytes` on a worker thread."""
        return await asyncio.to_thread(self.import_bytes, data, expected_source, dry_run=dry_run)

    # ── Internals ─────────────────────────────────────────────────────

    def _complete(
        self,
        op: str,
        attempt: ImportAttempt,
        state: ExchangeState,
        *,
        dry_run: bool,
    ) -> ServiceResult:
        if not dry_run:
            attempt.enter(ImportStage.MERGING)
        try:
            warnings = self._reference_warnings(state)
            report = None if dry_run else MergeEngine(self._store).apply(state)
        except MergeError as exc:
            return self._rejected(op, attempt, exc)

        data: dict[str, Any] = {
            "source": attempt.source,
            "stage": str(attempt.stage),
            "state": state.to_wire(),
            "merge": None,
            "dry_run": dry_run,
        }
        if report is None:
            return ServiceResult(
                ok=True,
                op=op,
                data=data,
                warnings=warnings,
                meta={"stages": attempt.trail()},
            )

        attempt.enter(ImportStage.COMMITTED)

        self._dispatch_event(
            "post_import",
            {
                "source": attempt.source,
                "inserted": report.total_inserted,
                "updated": report.total_updated,
            },
            warnings,
        )
        data["stage"] = str(attempt.stage)
        data["merge"] = report.to_dict()
        return ServiceResult(
            ok=True,
            op=op,
            data=data,
            warnings=warnings,
            meta={"stages": attempt.trail()},
        )

    def _rejected(self, op: str, attempt: ImportAttempt, exc: ExchangeError) -> ServiceResult:
        failed_at = attempt.reject(exc)
        return ServiceResult(
            ok=False,
            op=op,
            data={"source": attempt.source, "stage": str(attempt.stage)},
            error=ServiceError.from_exception(exc, stage=str(failed_at)),
            meta={"stages": attempt.trail()},
        )

    def _reference_warnings(self, state: ExchangeState) -> list[str]:
        """Flag creature category ids that resolve nowhere.

        Dangling ids are never a rejection, but an unreadable store is.

        Raises:
            MergeError: The existing category ids could not be read.
        """
        if not isinstance(state, LibraryState):
            return []
        try:
            known = self._store.read_ids("categories")
        except STORE_ERRORS as exc:
            msg = f"Could not read existing categories: {exc}"
            raise MergeError(msg) from exc
        dangling = state.dangling_category_ids(known)
        if not dangling:
            return []
        return [f"Creatures reference unknown categories: {', '.join(dangling)}"]
