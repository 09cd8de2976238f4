"""Samba-tool failure classification.

Maps raw failure text onto the closed :class:`ErrorKind` taxonomy with an
ordered rule list. Matching is case-insensitive and first-match-wins, so
rule order is part of the contract:

1. Object-specific rules (``user/group/computer ... already exists`` and
   ``... not found``) come first because they capture the object name and
   are the most specific signatures.
2. Password complexity precedes the generic validation rule so it keeps
   its ``password`` field.
3. Access-denied, then connection failures, then credential failures.
4. The broad syntax rule and the raw ``NT_STATUS_*`` rules come last.

The tool's wording is not a stable contract. Rules stay conservative: an
unknown message becomes ``generic`` rather than a guessed category, and every
generic fallback is logged with its raw text so format drift shows up.

INVARIANT: ``classify`` never raises.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from sambactl.domain.errors import ErrorKind, SambaToolError, TypedError

log = structlog.get_logger(__name__)

ErrorBuilder = Callable[[re.Match[str]], TypedError]


@dataclass(frozen=True)
class ErrorRule:
    """One pattern → TypedError mapping."""

    name: str
    pattern: re.Pattern[str]
    build: ErrorBuilder = field(repr=False)

    @classmethod
    def compile(cls, name: str, pattern: str, build: ErrorBuilder) -> ErrorRule:
        return cls(name=name, pattern=re.compile(pattern, re.IGNORECASE), build=build)


def _exists(resource: str) -> ErrorBuilder:
    def build(match: re.Match[str]) -> TypedError:
        name = match.group(1)
        return TypedError.of(
            ErrorKind.CONFLICT,
            f"{resource} '{name}' already exists",
            details={"resource": resource, "name": name},
        )

    return build


def _not_found(resource: str) -> ErrorBuilder:
    def build(match: re.Match[str]) -> TypedError:
        name = match.group(1)
        return TypedError.of(
            ErrorKind.NOT_FOUND,
            f"{resource} with id '{name}' not found",
            details={"resource": resource, "name": name},
        )

    return build


def _fixed(
    kind: ErrorKind,
    message: str,
    *,
    details: dict[str, Any] | None = None,
) -> ErrorBuilder:
    def build(_match: re.Match[str]) -> TypedError:
        return TypedError.of(kind, message, details=dict(details or {}))

    return build


DEFAULT_RULES: tuple[ErrorRule, ...] = (
    ErrorRule.compile("user_exists", r"user '(.+?)' already exists", _exists("User")),
    ErrorRule.compile("user_not_found", r"user '(.+?)' not found", _not_found("User")),
    ErrorRule.compile("group_exists", r"group '(.+?)' already exists", _exists("Group")),
    ErrorRule.compile("group_not_found", r"group '(.+?)' not found", _not_found("Group")),
    ErrorRule.compile("computer_exists", r"computer '(.+?)' already exists", _exists("Computer")),
    ErrorRule.compile(
        "computer_not_found", r"computer '(.+?)' not found", _not_found("Computer")
    ),
    ErrorRule.compile(
        "invalid_password",
        r"password does not meet complexity requirements",
        _fixed(
            ErrorKind.VALIDATION,
            "Password does not meet complexity requirements",
            details={"field": "password"},
        ),
    ),
    ErrorRule.compile(
        "access_denied",
        r"access denied|insufficient privileges",
        _fixed(ErrorKind.AUTHORIZATION, "Insufficient privileges to perform this operation"),
    ),
    ErrorRule.compile(
        "dc_unreachable",
        r"failed to connect|connection refused",
        _fixed(ErrorKind.NETWORK, "Unable to connect to domain controller"),
    ),
    ErrorRule.compile(
        "invalid_credentials",
        r"invalid credentials|authentication failed",
        _fixed(ErrorKind.AUTHENTICATION, "Invalid credentials provided"),
    ),
    ErrorRule.compile(
        "syntax_error",
        r"invalid syntax|malformed",
        _fixed(ErrorKind.VALIDATION, "Invalid syntax in command parameters"),
    ),
    ErrorRule.compile(
        "nt_status_timeout",
        r"NT_STATUS_IO_TIMEOUT",
        _fixed(ErrorKind.TIMEOUT, "Domain controller did not answer in time"),
    ),
    ErrorRule.compile(
        "nt_status_logon_failure",
        r"NT_STATUS_LOGON_FAILURE",
        _fixed(ErrorKind.AUTHENTICATION, "Invalid credentials provided"),
    ),
)


def _with_context(
    error: TypedError,
    *,
    operation: str | None,
    output: str,
    rule: str | None,
    extra: dict[str, Any] | None,
) -> TypedError:
    details = {**error.details, **(extra or {})}
    details["operation"] = operation
    details["output"] = output
    if rule is not None:
        details["rule"] = rule
    return error.model_copy(update={"details": details})


def classify(
    raw: str,
    operation: str | None = None,
    *,
    rules: Sequence[ErrorRule] = DEFAULT_RULES,
    extra: dict[str, Any] | None = None,
) -> TypedError:
    """Classify raw failure text into a :class:`TypedError`.

    Args:
        raw: stderr (or equivalent) of the failed invocation.
        operation: Human-readable description of what was attempted.
        rules: Ordered rule list; the first match wins.
        extra: Additional fields merged into ``details`` (exit status, ...).
    """
    text = raw or ""
    for rule in rules:
        match = rule.pattern.search(text)
        if match is None:
            continue
        try:
            error = rule.build(match)
        except Exception:
            log.warning("classifier.rule_failed", rule=rule.name, exc_info=True)
            break
        return _with_context(error, operation=operation, output=text, rule=rule.name, extra=extra)

    log.warning("classifier.fallback", operation=operation, output=text)
    generic = TypedError.of(
        ErrorKind.GENERIC,
        f"Operation failed: {text.strip() or 'Unknown error'}",
    )
    return _with_context(generic, operation=operation, output=text, rule=None, extra=extra)


def to_typed_error(exc: BaseException, operation: str | None = None) -> TypedError:
    """Normalize any exception into a :class:`TypedError`.

    A :class:`SambaToolError` passes through unchanged. Anything else is an
    internal fault and becomes a generic ``UNKNOWN_ERROR``.
    """
    if isinstance(exc, SambaToolError):
        return exc.error
    return TypedError.of(
        ErrorKind.GENERIC,
        str(exc) or type(exc).__name__,
        code="UNKNOWN_ERROR",
        details={"operation": operation, "exception": type(exc).__name__},
    )
