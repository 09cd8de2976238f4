"""ServiceResult and ServiceError — the contract between services and the CLI.

INVARIANT: Service-layer methods return ServiceResult; they never let a
SambaToolError escape. The CLI and any future interface consume this type.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from sambactl.domain.errors import TypedError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_typed(cls, error: TypedError) -> ServiceError:
        """Wrap a classified error; the full payload lands in ``detail``."""
        return cls(code=error.code, message=error.message, detail=error.to_dict())


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"list_objects"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, counts, etc.).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
