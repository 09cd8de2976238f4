"""Argument vector sanitization and samba-tool command construction.

The sanitizer strips process-control metacharacters instead of escaping
them. It is a second line of defense: the executor never goes through a
shell, so stripping only has to catch values that would be dangerous if a
caller ever joined the vector into a single command string.

INVARIANT: ``sanitize`` never mutates its input.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from sambactl.domain.errors import validation_error

DEFAULT_BINARY = "samba-tool"
MAX_ARG_LENGTH = 1000
METACHARACTERS = ";&|`$(){}[]<>"

_META_RE = re.compile(r"[;&|`$(){}\[\]<>]")

REDACTED = "***"
SECRET_FLAGS = frozenset(
    {"--password", "--newpassword", "--adminpass", "--machinepass", "--krbtgtpass"}
)
_CREDENTIAL_FLAGS = frozenset({"-U", "--username"})

OptionValue = str | bool | None


def strip_metacharacters(arg: str) -> str:
    """Remove every character of :data:`METACHARACTERS` from *arg*."""
    return _META_RE.sub("", arg)


def sanitize(args: Sequence[str], *, max_length: int = MAX_ARG_LENGTH) -> list[str]:
    """Return a cleaned copy of *args*.

    Raises:
        SambaToolError: kind ``validation`` / code ``INVALID_INPUT`` when the
            vector is empty, an argument contains a NUL byte, or a cleaned
            argument is longer than *max_length*.
    """
    if not args:
        raise validation_error(
            "Command has no arguments", code="INVALID_INPUT", details={"length": 0}
        )

    cleaned: list[str] = []
    for index, arg in enumerate(args):
        value = strip_metacharacters(str(arg))
        if "\x00" in value:
            raise validation_error(
                "Command argument contains a NUL byte",
                code="INVALID_INPUT",
                details={"index": index},
            )
        if len(value) > max_length:
            raise validation_error(
                "Command argument too long",
                code="INVALID_INPUT",
                details={"index": index, "length": len(value), "max_length": max_length},
            )
        cleaned.append(value)
    return cleaned


def _mask_credential(value: str) -> str:
    user, sep, _password = value.partition("%")
    return f"{user}%{REDACTED}" if sep else value


def redact_args(args: Sequence[str]) -> list[str]:
    """Copy of *args* safe to log: secret flag values become ``***``.

    Covers ``--password value``, ``--password=value`` and the ``user%password``
    form of ``-U``/``--username``.

    Examples:
        >>> redact_args(["samba-tool", "user", "setpassword", "bob", "--newpassword", "S3cret!"])
        ['samba-tool', 'user', 'setpassword', 'bob', '--newpassword', '***']
        >>> redact_args(["-U", "admin%hunter2", "--adminpass=x"])
        ['-U', 'admin%***', '--adminpass=***']
    """
    redacted: list[str] = []
    previous = ""
    for arg in map(str, args):
        flag, sep, value = arg.partition("=")
        if previous in SECRET_FLAGS:
            arg = REDACTED
        elif previous in _CREDENTIAL_FLAGS:
            arg = _mask_credential(arg)
        elif sep and flag in SECRET_FLAGS:
            arg = f"{flag}={REDACTED}"
        elif sep and flag in _CREDENTIAL_FLAGS:
            arg = f"{flag}={_mask_credential(value)}"
        redacted.append(arg)
        previous = "" if sep else flag
    return redacted


def build_command(
    tool: str,
    action: str,
    args: Sequence[str] = (),
    options: Mapping[str, OptionValue] | None = None,
    *,
    binary: str = DEFAULT_BINARY,
) -> list[str]:
    """Assemble ``binary tool action [args] [--flag value]*``.

    Flags follow the mapping's insertion order. ``True`` becomes a bare
    ``--flag``; a non-empty string becomes ``--flag value``; ``False``,
    ``None`` and ``""`` are dropped.

    Examples:
        >>> build_command("user", "list")
        ['samba-tool', 'user', 'list']
        >>> build_command("group", "add", ["admins"], {"description": "Ops", "special": True})
        ['samba-tool', 'group', 'add', 'admins', '--description', 'Ops', '--special']
    """
    command = [binary, tool, action, *args]
    for key, value in (options or {}).items():
        if value is True:
            command.append(f"--{key}")
        elif isinstance(value, str) and value:
            command.extend([f"--{key}", value])
    return command
