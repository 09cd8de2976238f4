"""Tests for ServiceResult and ServiceError."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from sambactl.domain.errors import ErrorKind, SambaToolError, TypedError
from sambactl.services.base import BaseService
from sambactl.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_defaults(self) -> None:
        result = ServiceResult(ok=True, op="list_objects", data={"items": []})
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="x")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]

    def test_json_round_trip(self) -> None:
        result = ServiceResult(
            ok=False,
            op="show_object",
            error=ServiceError(code="NOT_FOUND", message="gone", detail={"name": "x"}),
        )
        payload = json.loads(result.model_dump_json())
        assert payload["ok"] is False
        assert payload["error"] == {"code": "NOT_FOUND", "message": "gone", "detail": {"name": "x"}}


class TestServiceError:
    def test_from_typed_carries_full_payload(self) -> None:
        typed = TypedError.of(ErrorKind.CONFLICT, "exists", details={"name": "admins"})
        error = ServiceError.from_typed(typed)
        assert error.code == "CONFLICT"
        assert error.message == "exists"
        assert error.detail["kind"] == "conflict"
        assert error.detail["status_code"] == 409
        assert error.detail["details"] == {"name": "admins"}


class TestBaseService:
    def test_failure_helper(self) -> None:
        exc = SambaToolError(TypedError.of(ErrorKind.TIMEOUT, "slow"))
        result = BaseService._failure("fsmo_roles", exc, attempts=3)
        assert not result.ok
        assert result.op == "fsmo_roles"
        assert result.error is not None
        assert result.error.code == "TIMEOUT_ERROR"
        assert result.meta == {"attempts": 3}

    def test_failure_without_meta(self) -> None:
        exc = SambaToolError(TypedError.of(ErrorKind.GENERIC, "x"))
        assert BaseService._failure("op", exc).meta is None
