"""
FastAPI gates built on the permission resolver.
"""
from typing import Annotated, List
from fastapi import Depends

from shepherd.core.exceptions import PermissionDenied
from shepherd.features.members.dependencies import get_current_member
from shepherd.features.members.models import Member
from shepherd.features.permissions.resolver import allow, allow_any
from shepherd.features.roles.dependencies import get_role_table
from shepherd.features.roles.table import RoleTable
from shepherd.utils import get_logger


log = get_logger(__name__)


def require_permission(module: str, action: str = "read"):
    """
    FastAPI dependency to require a module/action grant.

    Usage:
        @router.post("/attendance")
        async def mark_attendance(
            member: Member = Depends(require_permission("attendance", "create"))
        ):
            ...

    Raises:
        PermissionDenied: if the member's role lacks the grant
    """
    async def permission_dependency(
        member: Annotated[Member, Depends(get_current_member)],
        table: Annotated[RoleTable, Depends(get_role_table)]
    ) -> Member:
        if not allow(table, member.role, module, action):
            log.info(f"Member {member.id} ({member.role}) denied {action} on {module}")
            raise PermissionDenied(f"Permission denied: {action} on {module}")
        return member

    return permission_dependency


def require_any_permission(permissions: List[tuple[str, str]]):
    """
    FastAPI dependency to require ANY of the given (module, action) grants.
    """
    async def permission_dependency(
        member: Annotated[Member, Depends(get_current_member)],
        table: Annotated[RoleTable, Depends(get_role_table)]
    ) -> Member:
        if not allow_any(table, member.role, permissions):
            raise PermissionDenied(f"Permission denied: requires one of {permissions}")
        return member

    return permission_dependency


async def require_root(
    member: Annotated[Member, Depends(get_current_member)],
    table: Annotated[RoleTable, Depends(get_role_table)]
) -> Member:
    """Require the organization's maximum-rank role."""
    if not table.is_root(member.role):
        raise PermissionDenied(f"Only the {table.root.display_name} role may do this")
    return member
