"""Text-to-record parsers for samba-tool output.

All functions are pure and tolerant: malformed lines are skipped or padded,
never raised on.  Empty input always yields an empty collection.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any, Generic, TypeVar, overload

T = TypeVar("T")

Row = dict[str, str]

_GENERALIZED_TIME = re.compile(r"^(\d{14})(?:\.\d+)?Z$")
_NEVER = {"", "never", "0"}


@dataclass(frozen=True)
class ParseSpec(Generic[T]):
    """How raw text becomes a sequence of domain records.

    Attributes:
        parser: Maps one non-blank line to a record, or ``None`` to skip it.
        filter: Optional predicate applied to each parsed record.
        transform: Optional whole-list post-processing (sorting, dedup, ...).
    """

    parser: Callable[[str], T | None]
    filter: Callable[[T], bool] | None = None
    transform: Callable[[list[T]], list[T]] | None = None


def _lines(text: str) -> list[str]:
    return [line for line in text.split("\n") if line.strip()]


def parse_output(text: str, spec: ParseSpec[T]) -> list[T]:
    """Run each non-blank line of *text* through *spec*."""
    items = [item for item in map(spec.parser, _lines(text or "")) if item is not None]
    if spec.filter is not None:
        items = [item for item in items if spec.filter(item)]
    if spec.transform is not None:
        items = spec.transform(items)
    return items


def parse_simple_list(
    text: str,
    transform: Callable[[str], str] | None = None,
) -> list[str]:
    """One entity per line: trimmed, blank lines dropped."""
    items = [line.strip() for line in (text or "").split("\n")]
    items = [item for item in items if item]
    if transform is not None:
        items = [transform(item) for item in items]
    return items


@overload
def parse_tabulated(text: str, headers: Sequence[str]) -> list[Row]: ...


@overload
def parse_tabulated(
    text: str, headers: Sequence[str], mapper: Callable[[Row], T]
) -> list[T]: ...


def parse_tabulated(
    text: str,
    headers: Sequence[str],
    mapper: Callable[[Row], Any] | None = None,
) -> list[Any]:
    """Tab-delimited rows mapped positionally onto *headers*.

    The first line is the tool's own header and is discarded. Short rows
    get ``""`` for missing columns; extra fields are ignored. Falsy mapper
    results are dropped.

    Examples:
        >>> parse_tabulated("Name\\tType\\nalice\\tUser", ["Name", "Type"])
        [{'Name': 'alice', 'Type': 'User'}]
    """
    lines = (text or "").strip().split("\n")
    if len(lines) <= 1:
        return []

    results: list[Any] = []
    for line in lines[1:]:
        values = [value.strip() for value in line.split("\t")]
        row = {
            header: values[index] if index < len(values) else ""
            for index, header in enumerate(headers)
        }
        item = mapper(row) if mapper is not None else row
        if item:
            results.append(item)
    return results


@overload
def parse_key_value(text: str) -> dict[str, str]: ...


@overload
def parse_key_value(text: str, *, multi: bool) -> dict[str, Any]: ...


def parse_key_value(text: str, *, multi: bool = False) -> dict[str, Any]:
    """Build a sparse dict from ``key: value`` lines.

    Each line is split at its first colon, so values may contain colons
    (DNs, timestamps). Duplicate keys are last-write-wins unless *multi* is
    set, in which case every key maps to the list of its values in order.
    """
    result: dict[str, Any] = {}
    for line in (text or "").split("\n"):
        key, sep, value = line.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        value = value.strip()
        if multi:
            result.setdefault(key, []).append(value)
        else:
            result[key] = value
    return result


def parse_date(text: str | None) -> datetime | None:
    """Parse a samba date, returning ``None`` for "never" and garbage.

    Accepts ISO-8601 and LDAP generalized time (``20240131120000.0Z``).
    """
    value = (text or "").strip()
    if value.lower() in _NEVER:
        return None
    match = _GENERALIZED_TIME.match(value)
    if match:
        return datetime.strptime(match.group(1), "%Y%m%d%H%M%S").replace(tzinfo=UTC)
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def format_date(value: date) -> str:
    """Format a date the way samba-tool expects it (``YYYY-MM-DD``)."""
    return value.strftime("%Y-%m-%d")
