"""BaseService — abstract foundation for sambactl read services.

Every service receives a :class:`SambaTool` at construction time and
turns its typed failures into failed :class:`ServiceResult` objects.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sambactl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from sambactl.domain.errors import SambaToolError
    from sambactl.services.executor import SambaTool

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class DirectoryService(BaseService):
            async def list_objects(self, kind: str) -> ServiceResult:
                try:
                    text = await self._tool.execute(...)
                except SambaToolError as exc:
                    return self._failure("list_objects", exc)
                ...
    """

    def __init__(self, tool: SambaTool) -> None:
        self._tool = tool

    @staticmethod
    def _failure(op: str, exc: SambaToolError, **meta: Any) -> ServiceResult:
        """Failed result carrying the classified error payload."""
        logger.debug("%s failed: %s [%s]", op, exc.error.message, exc.error.code)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError.from_typed(exc.error),
            meta=meta or None,
        )
