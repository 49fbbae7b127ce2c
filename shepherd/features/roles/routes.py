"""
Role table API routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from shepherd.core.database.engine import get_db
from shepherd.core.exceptions import RoleTableError
from shepherd.features.audit import recorder
from shepherd.features.audit.models import AuditKind
from shepherd.features.members.dependencies import get_current_member
from shepherd.features.members.models import Member
from shepherd.features.permissions.dependencies import require_root
from shepherd.features.roles.dependencies import get_base_role_table, get_role_table
from shepherd.features.roles.models import OrganizationRole
from shepherd.features.roles.repository import apply_overrides, get_organization_overrides
from shepherd.features.roles.schemas import RoleOverrideRequest, RoleResponse, RoleTableResponse
from shepherd.features.roles.table import RoleTable, normalize_role
from shepherd.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


@router.get("/", response_model=RoleTableResponse)
async def get_roles(
    _member: Annotated[Member, Depends(get_current_member)],
    table: Annotated[RoleTable, Depends(get_role_table)]
):
    """Effective role table of the caller's organization, lowest rank first."""
    return RoleTableResponse(
        version=table.version,
        root=table.root.name,
        roles=[RoleResponse.from_definition(definition, table) for definition in table.ladder()],
    )


@router.put("/{name}", response_model=RoleResponse)
async def override_role(
    name: str,
    override: RoleOverrideRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_member: Annotated[Member, Depends(require_root)],
    base: Annotated[RoleTable, Depends(get_base_role_table)]
):
    """
    Store an organization override for one role (root only).

    The merged table is validated before anything is written, so an override
    that would leave the organization without a single root role is rejected.
    """
    role_name = normalize_role(name)
    if role_name is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role name")

    org_id = current_member.organization_id
    rows = await get_organization_overrides(db, org_id)
    existing = next((row for row in rows if row.name == role_name), None)
    if existing is None and base.get(role_name) is None and override.rank is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A new role needs a rank")

    candidate = OrganizationRole(
        organization_id=org_id,
        name=role_name,
        rank=override.rank,
        display_name=override.display_name,
        description=override.description,
        permissions=override.permissions,
    )
    try:
        table = apply_overrides(base, org_id, [row for row in rows if row is not existing] + [candidate])
    except RoleTableError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    old_value = existing.as_config() if existing else None
    if existing is None:
        db.add(candidate)
    else:
        existing.rank = override.rank
        existing.display_name = override.display_name
        existing.description = override.description
        existing.permissions = override.permissions

    await recorder.record(
        db,
        performed_by=current_member,
        subject=None,
        change=recorder.AuditChange(
            kind=AuditKind.ROLE_OVERRIDE.value,
            target=role_name,
            old_value=old_value,
            new_value=candidate.as_config(),
        ),
    )
    await db.commit()
    log.info(f"Role '{role_name}' overridden in {org_id} by {current_member.id}")

    return RoleResponse.from_definition(table.get(role_name), table)
