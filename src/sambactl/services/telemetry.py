"""Timing spans for ``--verbose``.

A service method decorated with :func:`traced` opens a root span, and each
samba-tool invocation inside it adds a ``spawn`` child via
:func:`trace_span`.  The finished tree is attached to the returned
ServiceResult as ``meta["telemetry"]``.  With telemetry off both helpers
cost a single ContextVar lookup.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec

import structlog

from sambactl.services.result import ServiceResult

log = structlog.get_logger(__name__)

_enabled: ContextVar[bool] = ContextVar("sambactl_telemetry", default=False)
_active: ContextVar[Span | None] = ContextVar("sambactl_active_span", default=None)


@dataclass
class Span:
    """One timed step; ``elapsed_ms`` is None until :meth:`finish`."""

    name: str
    annotations: dict[str, Any] = field(default_factory=dict)
    children: list[Span] = field(default_factory=list)
    started: float = field(default_factory=time.perf_counter)
    elapsed_ms: float | None = None

    def finish(self) -> None:
        self.elapsed_ms = (time.perf_counter() - self.started) * 1000

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "duration_ms": round(self.elapsed_ms or 0.0, 2),
        }
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@contextmanager
def trace_span(name: str, **annotations: Any) -> Iterator[Span | None]:
    """Time a step under the active span; yields None outside a traced call."""
    parent = _active.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    span = Span(name, annotations)
    parent.children.append(span)
    token = _active.set(span)
    try:
        yield span
    finally:
        span.finish()
        _active.reset(token)


_P = ParamSpec("_P")


def traced(
    func: Callable[_P, Awaitable[ServiceResult]],
) -> Callable[_P, Awaitable[ServiceResult]]:
    """Attach a span tree to the ServiceResult of an async service method."""

    @functools.wraps(func)
    async def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> ServiceResult:
        if not _enabled.get():
            return await func(*args, **kwargs)

        span = Span(func.__qualname__)
        token = _active.set(span)
        try:
            result = await func(*args, **kwargs)
        finally:
            span.finish()
            _active.reset(token)
            log.debug(
                "span.complete",
                span_name=span.name,
                duration_ms=round(span.elapsed_ms or 0.0, 2),
                spawns=len(span.children),
            )

        meta = {**(result.meta or {}), "telemetry": span.to_dict()}
        return result.model_copy(update={"meta": meta})

    return wrapper


def enable_telemetry() -> None:
    """Turn span collection on for the current context (``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)
