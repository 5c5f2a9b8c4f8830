"""Tests for ServiceResult and ServiceError."""

from __future__ import annotations

import json

import pytest

from ctdata.domain.errors import (
    DecodeError,
    FieldIssue,
    MergeError,
    SourceMismatchError,
    ValidationError,
)
from ctdata.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="export_text", data={"size": 10})
        assert result.ok is True
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None
        assert result.retryable is False

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="import_text", meta={"stages": ["idle"]})
        parsed = json.loads(result.model_dump_json())
        assert parsed["op"] == "import_text"
        assert parsed["meta"]["stages"] == ["idle"]

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="test")
        with pytest.raises(Exception):
            result.ok = False  # type: ignore[misc]


class TestServiceErrorFromException:
    def test_decode_error(self) -> None:
        error = ServiceError.from_exception(DecodeError("bad bytes"), stage="decoding")
        assert error.code == "DECODE_FAILED"
        assert error.message == "bad bytes"
        assert error.detail == {"stage": "decoding", "kind": "decode", "retryable": False}

    def test_source_mismatch_carries_tags(self) -> None:
        error = ServiceError.from_exception(SourceMismatchError("library", "combat"))
        assert error.detail["expected"] == "library"
        assert error.detail["actual"] == "combat"
        assert "combat" in error.message

    def test_validation_issues(self) -> None:
        exc = ValidationError([FieldIssue("creatures.0.hp", "too small")])
        error = ServiceError.from_exception(exc)
        assert error.message == "creatures.0.hp: too small"
        assert error.detail["issues"] == [{"path": "creatures.0.hp", "message": "too small"}]

    def test_merge_error_retryable(self) -> None:
        error = ServiceError.from_exception(MergeError("disk full"))
        result = ServiceResult(ok=False, op="import_text", error=error)
        assert result.retryable is True
        assert error.detail["kind"] == "storage"
