"""structlog setup for the CLI.

Everything goes to stderr so stdout stays parseable under ``--json``.
Console lines by default, JSON lines with ``--log-json``.  Secrets never
reach the handler: :func:`redact_secrets` runs on both structlog events
and records from plain ``logging`` loggers.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

from sambactl.domain.arguments import REDACTED, redact_args

# Loggers outside the sambactl tree that asyncio subprocess handling can emit on.
QUIET_LOGGERS = ("asyncio", "concurrent.futures")

# Event keys whose values are always replaced.
SECRET_KEYS = frozenset({"password", "newpassword", "adminpass", "secret", "credentials"})

# Event keys that carry a rendered samba-tool command line.
_COMMAND_KEYS = ("operation", "argv", "event")


def redact_secrets(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask password values in event fields and in logged command lines."""
    for key in list(event_dict):
        if key.lower() in SECRET_KEYS:
            event_dict[key] = REDACTED
    for key in _COMMAND_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str) and "-" in value:
            event_dict[key] = " ".join(redact_args(value.split(" ")))
        elif isinstance(value, list | tuple):
            event_dict[key] = redact_args(value)
    return event_dict


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


class _SambaHandler(logging.StreamHandler):
    """Marker type so a second configure call replaces only our own handler."""


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    ``verbose`` lowers the ``sambactl`` tree to DEBUG (spawned pids,
    retry attempts, span timings); otherwise only warnings show.  Loggers
    in :data:`QUIET_LOGGERS` stay at WARNING either way.
    """
    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
    ]

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = _SambaHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, _SambaHandler)]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("sambactl").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
