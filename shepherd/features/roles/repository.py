"""
Loading the effective role table.

The base table is read once at startup; a tenant's table is the base table
with that organization's OrganizationRole rows laid over it.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shepherd.core import config
from shepherd.features.roles.defaults import default_role_table
from shepherd.features.roles.models import OrganizationRole
from shepherd.features.roles.table import RoleTable, load_role_table_file, override_definition
from shepherd.utils import get_logger


log = get_logger(__name__)


def load_base_role_table() -> RoleTable:
    """Role table from ROLE_TABLE_PATH when set, otherwise the built-in ladder."""
    if config.ROLE_TABLE_PATH:
        return load_role_table_file(config.ROLE_TABLE_PATH)
    table = default_role_table()
    log.info(f"Using built-in role table with roles {table.names()}")
    return table


async def get_organization_overrides(db: AsyncSession, organization_id: str) -> list[OrganizationRole]:
    result = await db.execute(
        select(OrganizationRole)
        .where(OrganizationRole.organization_id == organization_id)
        .order_by(OrganizationRole.name)
    )
    return list(result.scalars().all())


def apply_overrides(base: RoleTable, organization_id: str, rows: list[OrganizationRole]) -> RoleTable:
    """
    Lay tenant override rows over the base table.

    Raises:
        RoleTableError: if the merged table breaks the single-root invariant
    """
    if not rows:
        return base
    overrides = [override_definition(base.get(row.name), row.name, row.as_config()) for row in rows]
    return base.with_overrides(overrides, version=f"{base.version}+{organization_id}")


async def get_tenant_role_table(db: AsyncSession, base: RoleTable, organization_id: str | None) -> RoleTable:
    """Effective role table for one organization."""
    if not organization_id:
        return base
    rows = await get_organization_overrides(db, organization_id)
    return apply_overrides(base, organization_id, rows)
