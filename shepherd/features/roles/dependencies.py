"""
Role table dependencies.

The base table is loaded once in the application lifespan and kept on
``app.state``; routes receive the caller's tenant table through get_role_table.
"""
from typing import Annotated
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shepherd.core.database.engine import get_db
from shepherd.features.members.dependencies import get_current_member
from shepherd.features.members.models import Member
from shepherd.features.roles.repository import get_tenant_role_table, load_base_role_table
from shepherd.features.roles.table import RoleTable


def get_base_role_table(request: Request) -> RoleTable:
    table = getattr(request.app.state, "role_table", None)
    if table is None:
        table = load_base_role_table()
        request.app.state.role_table = table
    return table


async def get_role_table(
    base: Annotated[RoleTable, Depends(get_base_role_table)],
    member: Annotated[Member, Depends(get_current_member)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> RoleTable:
    """Effective role table for the calling member's organization."""
    return await get_tenant_role_table(db, base, member.organization_id)
