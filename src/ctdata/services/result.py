"""ServiceResult and ServiceError, what every service operation returns.

Library code raises :class:`~ctdata.domain.errors.ExchangeError`
subclasses; services catch them at the operation boundary and hand the
CLI (or any embedding caller) one of these instead.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ctdata.domain.errors import ExchangeError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: ExchangeError, **extra: Any) -> ServiceError:
        """Carry the error's code, message and retry flag; *extra* goes into ``detail``."""
        detail: dict[str, Any] = {
            **extra,
            "kind": str(exc.kind) if exc.kind is not None else None,
            "retryable": exc.retryable,
            **exc.detail,
        }
        return cls(code=exc.code, message=exc.message, detail=detail)


class ServiceResult(BaseModel):
    """Return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"import_text"``).
        data: Operation-specific payload.
        warnings: Non-fatal issues (dangling references, plugin failures).
        error: Structured error if ``ok`` is False.
        meta: Optional metadata, e.g. the import stage trail.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @property
    def retryable(self) -> bool:
        """True when the failure was transient and the same input may be resubmitted."""
        return bool(self.error and self.error.detail.get("retryable"))
