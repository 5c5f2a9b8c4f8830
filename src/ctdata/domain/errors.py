"""Exchange error taxonomy.

Every failure on the export/import path raises a subclass of
:class:`ExchangeError`. Each class carries a stable ``code`` for the
service layer and a ``retryable`` flag. Only :class:`MergeError` is
retryable: the others are deterministic for a given artifact.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from ctdata.domain.types import RejectionKind


class ExchangeError(Exception):
    """Base class for all exchange pipeline failures."""

    code: ClassVar[str] = "EXCHANGE_FAILED"
    kind: ClassVar[RejectionKind | None] = None
    retryable: ClassVar[bool] = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def detail(self) -> dict[str, Any]:
        """Structured detail for ``ServiceError.detail``."""
        return {}


class DecodeError(ExchangeError):
    """Malformed, truncated, or unrecognised artifact bytes."""

    code = "DECODE_FAILED"
    kind = RejectionKind.DECODE


class EncodeError(ExchangeError):
    """A document holds values the binary codec cannot represent."""

    code = "ENCODE_FAILED"


class IntegrityError(ExchangeError):
    """The artifact's MAC does not match its body."""

    code = "INTEGRITY_FAILED"
    kind = RejectionKind.INTEGRITY


class SourceMismatchError(ExchangeError):
    """The artifact belongs to a different domain than the caller expects."""

    code = "SOURCE_MISMATCH"
    kind = RejectionKind.SOURCE_MISMATCH

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            f"This is a {actual!r} export, but a {expected!r} export was expected."
        )
        self.expected = expected
        self.actual = actual

    @property
    def detail(self) -> dict[str, Any]:
        return {"expected": self.expected, "actual": self.actual}


@dataclass(frozen=True)
class FieldIssue:
    """One schema violation: dotted field path plus reason."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ValidationError(ExchangeError):
    """Decoded payload does not match the schema for its source."""

    code = "VALIDATION_FAILED"
    kind = RejectionKind.SCHEMA

    def __init__(self, issues: list[FieldIssue]) -> None:
        summary = "; ".join(str(issue) for issue in issues) or "Invalid data format."
        super().__init__(summary)
        self.issues = issues

    @property
    def detail(self) -> dict[str, Any]:
        return {"issues": [{"path": i.path, "message": i.message} for i in self.issues]}


class MergeError(ExchangeError):
    """Storage failed while committing a validated payload.

    The transaction was rolled back; resubmitting the same validated
    state is safe.
    """

    code = "MERGE_FAILED"
    kind = RejectionKind.STORAGE
    retryable = True
