"""DirectoryService — read-only directory queries over samba-tool.

Read-only surfaces, all safe to retry because none of them mutates the
directory:
- list_objects: names of every user/group/computer/contact/OU
- show_object: attributes of one object
- group_members: members of one group
- fsmo_roles: current FSMO role owners
- version / ping: tool and domain controller health checks
"""

from __future__ import annotations

from typing import Any

from sambactl.domain.errors import SambaToolError, validation_error
from sambactl.domain.parsers import parse_key_value, parse_simple_list
from sambactl.domain.validation import validate_required
from sambactl.services.base import BaseService
from sambactl.services.executor import CommandOptions
from sambactl.services.result import ServiceError, ServiceResult
from sambactl.services.telemetry import traced

LISTABLE_KINDS: tuple[str, ...] = ("user", "group", "computer", "contact", "ou")
SHOWABLE_KINDS: tuple[str, ...] = ("user", "group", "computer", "contact")


def _collapse(attributes: dict[str, list[str]]) -> dict[str, Any]:
    """Single-valued attributes become scalars; multi-valued stay lists."""
    return {key: values[0] if len(values) == 1 else values for key, values in attributes.items()}


class DirectoryService(BaseService):
    """Read-only queries against the domain controller."""

    def _read_options(self) -> CommandOptions:
        return CommandOptions(retry=self._tool.default_retry())

    @traced
    async def list_objects(self, kind: str) -> ServiceResult:
        """List the names of every object of *kind*."""
        op = "list_objects"
        try:
            if kind not in LISTABLE_KINDS:
                raise validation_error(
                    f"Unknown object kind '{kind}'",
                    details={"kind": kind, "allowed": list(LISTABLE_KINDS)},
                )
            text = await self._tool.execute(self._tool.build(kind, "list"), self._read_options())
        except SambaToolError as exc:
            return self._failure(op, exc)

        items = sorted(parse_simple_list(text), key=str.lower)
        return ServiceResult(
            ok=True,
            op=op,
            data={"kind": kind, "items": items, "count": len(items)},
        )

    @traced
    async def show_object(self, kind: str, name: str) -> ServiceResult:
        """Attributes of one object, parsed from ``<kind> show <name>``."""
        op = "show_object"
        try:
            validate_required({"kind": kind, "name": name}, ["kind", "name"])
            if kind not in SHOWABLE_KINDS:
                raise validation_error(
                    f"Cannot show objects of kind '{kind}'",
                    details={"kind": kind, "allowed": list(SHOWABLE_KINDS)},
                )
            text = await self._tool.execute(
                self._tool.build(kind, "show", [name]), self._read_options()
            )
        except SambaToolError as exc:
            return self._failure(op, exc)

        attributes = _collapse(parse_key_value(text, multi=True))
        return ServiceResult(
            ok=True,
            op=op,
            data={"kind": kind, "name": name, "attributes": attributes},
        )

    @traced
    async def group_members(self, group: str) -> ServiceResult:
        """Member names of *group*."""
        op = "group_members"
        try:
            validate_required({"group": group}, ["group"])
            text = await self._tool.execute(
                self._tool.build("group", "listmembers", [group]), self._read_options()
            )
        except SambaToolError as exc:
            return self._failure(op, exc)

        items = parse_simple_list(text)
        return ServiceResult(
            ok=True,
            op=op,
            data={"group": group, "items": items, "count": len(items)},
        )

    @traced
    async def fsmo_roles(self) -> ServiceResult:
        """Current owner of each FSMO role."""
        op = "fsmo_roles"
        try:
            text = await self._tool.execute(self._tool.build("fsmo", "show"), self._read_options())
        except SambaToolError as exc:
            return self._failure(op, exc)

        roles = parse_key_value(text)
        return ServiceResult(ok=True, op=op, data={"roles": roles})

    @traced
    async def version(self) -> ServiceResult:
        """samba-tool version and build features."""
        op = "version"
        try:
            info = await self._tool.get_version()
        except SambaToolError as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data=info.model_dump())

    @traced
    async def ping(self, host: str = "127.0.0.1") -> ServiceResult:
        """Check that the domain controller at *host* answers."""
        op = "ping"
        reachable = await self._tool.test_connection(host)
        data = {"host": host, "reachable": reachable}
        if reachable:
            return ServiceResult(ok=True, op=op, data=data)
        return ServiceResult(
            ok=False,
            op=op,
            data=data,
            error=ServiceError(
                code="UNREACHABLE",
                message=f"Domain controller {host} did not answer",
                detail=data,
            ),
        )
