"""Closed error taxonomy for samba-tool invocations.

Every failure that leaves the core is a :class:`TypedError` wrapped in a
single exception type, :class:`SambaToolError`.  Callers dispatch on
``exc.error.kind`` rather than on exception subclasses, so adding a kind
means touching the exhaustive ``match`` blocks below and nothing else.

INVARIANT: Network and timeout errors are retryable. Any error carrying a
5xx-equivalent ``status_code`` is retryable. Nothing else is.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, assert_never

from pydantic import BaseModel, Field


class ErrorKind(StrEnum):
    """The eight failure categories a caller can observe."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NETWORK = "network"
    TIMEOUT = "timeout"
    GENERIC = "generic"


def default_code(kind: ErrorKind) -> str:
    """Machine code used when a rule does not supply one."""
    match kind:
        case ErrorKind.VALIDATION:
            return "VALIDATION_ERROR"
        case ErrorKind.CONFLICT:
            return "CONFLICT"
        case ErrorKind.NOT_FOUND:
            return "NOT_FOUND"
        case ErrorKind.AUTHENTICATION:
            return "AUTH_ERROR"
        case ErrorKind.AUTHORIZATION:
            return "AUTHORIZATION_ERROR"
        case ErrorKind.NETWORK:
            return "NETWORK_ERROR"
        case ErrorKind.TIMEOUT:
            return "TIMEOUT_ERROR"
        case ErrorKind.GENERIC:
            return "SAMBA_ERROR"
        case _:
            assert_never(kind)


def default_status(kind: ErrorKind) -> int | None:
    """HTTP-style status hint for a kind (``None`` when there is no analogue)."""
    match kind:
        case ErrorKind.VALIDATION:
            return 400
        case ErrorKind.CONFLICT:
            return 409
        case ErrorKind.NOT_FOUND:
            return 404
        case ErrorKind.AUTHENTICATION:
            return 401
        case ErrorKind.AUTHORIZATION:
            return 403
        case ErrorKind.NETWORK | ErrorKind.TIMEOUT | ErrorKind.GENERIC:
            return None
        case _:
            assert_never(kind)


class TypedError(BaseModel):
    """Structured, serializable failure payload.

    Attributes:
        kind: Closed category of the failure.
        message: Human-readable text suitable for display.
        code: Stable machine code (e.g. ``"CONFLICT"``).
        details: Captured fields plus the raw tool output under ``"output"``.
        status_code: Optional HTTP-style status hint.
    """

    model_config = {"frozen": True}

    kind: ErrorKind
    message: str
    code: str
    details: dict[str, Any] = Field(default_factory=dict)
    status_code: int | None = None

    @classmethod
    def of(
        cls,
        kind: ErrorKind,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
    ) -> TypedError:
        """Build an error filling ``code`` and ``status_code`` from the kind's defaults."""
        return cls(
            kind=kind,
            message=message,
            code=code or default_code(kind),
            details=details or {},
            status_code=status_code if status_code is not None else default_status(kind),
        )

    @property
    def retryable(self) -> bool:
        """Whether re-running the same invocation is judged safe and likely to help."""
        if self.status_code is not None and self.status_code >= 500:
            return True
        match self.kind:
            case ErrorKind.NETWORK | ErrorKind.TIMEOUT:
                return True
            case (
                ErrorKind.VALIDATION
                | ErrorKind.CONFLICT
                | ErrorKind.NOT_FOUND
                | ErrorKind.AUTHENTICATION
                | ErrorKind.AUTHORIZATION
                | ErrorKind.GENERIC
            ):
                return False
            case _:
                assert_never(self.kind)

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible payload for logs and telemetry."""
        return self.model_dump(mode="json")


class SambaToolError(Exception):
    """The only exception type that crosses the core boundary."""

    def __init__(self, error: TypedError) -> None:
        super().__init__(error.message)
        self.error = error

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def retryable(self) -> bool:
        return self.error.retryable

    def __repr__(self) -> str:
        return f"SambaToolError(kind={self.error.kind.value!r}, code={self.error.code!r})"


def validation_error(
    message: str,
    *,
    code: str | None = None,
    details: dict[str, Any] | None = None,
) -> SambaToolError:
    """Shortcut for the error raised by local input checks."""
    return SambaToolError(
        TypedError.of(ErrorKind.VALIDATION, message, code=code, details=details)
    )


def timeout_error(operation: str, timeout: float) -> SambaToolError:
    """Error for an invocation that exceeded its wall-clock deadline."""
    return SambaToolError(
        TypedError.of(
            ErrorKind.TIMEOUT,
            f"Operation '{operation}' timed out after {timeout:g}s",
            details={"operation": operation, "timeout": timeout},
        )
    )
