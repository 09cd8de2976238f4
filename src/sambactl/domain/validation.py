"""Input checks and small directory-name helpers used by callers.

These run before an argument vector is built, so bad input is reported
as a validation error instead of surfacing later as tool output.
"""

from __future__ import annotations

import re
import secrets
from collections.abc import Iterable, Mapping
from typing import Any

from sambactl.domain.errors import validation_error

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9._-]{1,64}$")
COMPUTER_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9-]{1,15}$")
GROUP_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9 ._-]{1,64}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_LOWER = "abcdefghijklmnopqrstuvwxyz"
_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_DIGITS = "0123456789"
_SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
_STRENGTH_SYMBOLS = "@$!%*?&"


def validate_required(data: Mapping[str, Any], fields: Iterable[str]) -> None:
    """Raise a validation error listing every missing or blank field."""
    missing = [
        name
        for name in fields
        if not data.get(name) or (isinstance(data[name], str) and not data[name].strip())
    ]
    if missing:
        raise validation_error(
            f"Missing required fields: {', '.join(missing)}",
            details={"missing_fields": missing},
        )


def is_valid_username(name: str) -> bool:
    """sAMAccountName-style: 1-64 of letters, digits, ``.``, ``_``, ``-``."""
    return USERNAME_PATTERN.match(name) is not None


def is_valid_computer_name(name: str) -> bool:
    """NetBIOS name: 1-15 of letters, digits, hyphen; no leading/trailing hyphen."""
    return (
        COMPUTER_NAME_PATTERN.match(name) is not None
        and not name.startswith("-")
        and not name.endswith("-")
    )


def is_valid_group_name(name: str) -> bool:
    return GROUP_NAME_PATTERN.match(name) is not None


def is_valid_email(address: str) -> bool:
    return EMAIL_PATTERN.match(address) is not None


def escape_ldap(value: str) -> str:
    """Escape a value for use inside an LDAP search filter (RFC 4515)."""
    return (
        value.replace("\\", "\\\\")
        .replace("*", "\\*")
        .replace("(", "\\(")
        .replace(")", "\\)")
        .replace("\0", "\\00")
    )


def parse_dn(dn: str) -> dict[str, list[str]]:
    """Split a distinguished name into ``{rdn_type: [values...]}``.

    Keys are lower-cased; repeated types (``dc=example,dc=com``) keep order.

    Examples:
        >>> parse_dn("CN=alice,OU=Staff,DC=example,DC=com")
        {'cn': ['alice'], 'ou': ['Staff'], 'dc': ['example', 'com']}
    """
    components: dict[str, list[str]] = {}
    for part in dn.split(","):
        key, sep, value = part.strip().partition("=")
        key = key.strip().lower()
        value = value.strip()
        if sep and key and value:
            components.setdefault(key, []).append(value)
    return components


def generate_password(length: int = 12, *, include_symbols: bool = True) -> str:
    """Random password with at least one character from each class."""
    pools = [_LOWER, _UPPER, _DIGITS]
    if include_symbols:
        pools.append(_SYMBOLS)
    alphabet = "".join(pools)

    chars = [secrets.choice(pool) for pool in pools]
    chars.extend(secrets.choice(alphabet) for _ in range(length - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def check_password_strength(password: str) -> dict[str, Any]:
    """Score a password 0-7 against the AD complexity heuristics."""
    feedback: list[str] = []
    score = 0

    checks = [
        (len(password) >= 8, "Use at least 8 characters"),
        (re.search(r"[a-z]", password) is not None, "Include lowercase letters"),
        (re.search(r"[A-Z]", password) is not None, "Include uppercase letters"),
        (re.search(r"\d", password) is not None, "Include numbers"),
        (
            any(ch in _STRENGTH_SYMBOLS for ch in password),
            f"Include special characters ({_STRENGTH_SYMBOLS})",
        ),
    ]
    for passed, hint in checks:
        if passed:
            score += 1
        else:
            feedback.append(hint)

    if len(password) >= 12:
        score += 1
    if len(password) >= 12 and all(passed for passed, _ in checks[1:]):
        score += 1

    return {"score": score, "feedback": feedback, "is_strong": score >= 5}
