"""
Permission check API routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends

from shepherd.features.members.dependencies import get_current_member
from shepherd.features.members.models import Member
from shepherd.features.permissions.resolver import allow, effective_permissions
from shepherd.features.permissions.schemas import (
    PermissionCheckRequest,
    PermissionCheckResponse,
    MyPermissionsResponse,
)
from shepherd.features.roles.defaults import MODULES
from shepherd.features.roles.dependencies import get_role_table
from shepherd.features.roles.table import RoleTable


router = APIRouter()


@router.post("/check", response_model=PermissionCheckResponse)
async def check_permission(
    check_request: PermissionCheckRequest,
    member: Annotated[Member, Depends(get_current_member)],
    table: Annotated[RoleTable, Depends(get_role_table)]
):
    """Check if the caller's role may perform an action on a module."""
    allowed = allow(table, member.role, check_request.module, check_request.action)
    return PermissionCheckResponse(
        allowed=allowed,
        role=member.role,
        reason=None if allowed else "Permission denied"
    )


@router.get("/me", response_model=MyPermissionsResponse)
async def my_permissions(
    member: Annotated[Member, Depends(get_current_member)],
    table: Annotated[RoleTable, Depends(get_role_table)]
):
    """List every module/action the caller's role is granted."""
    definition = table.get(member.role)
    return MyPermissionsResponse(
        role=member.role,
        display_name=definition.display_name if definition else None,
        rank=definition.rank if definition else None,
        is_root=table.is_root(member.role),
        permissions=effective_permissions(table, member.role, MODULES),
    )
