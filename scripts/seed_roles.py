"""
Seed script to populate a demo organization and its role rows.

Run this script after database initialization to create:
- A demo organization
- One OrganizationRole row per built-in role (editable per tenant)
- A pastor member bound to an identity-provider user id

Usage:
    SEED_PASTOR_ID=<appwrite user id> SEED_PASTOR_EMAIL=pastor@example.org \
        uv run python -m scripts.seed_roles
"""
import asyncio
import os
from datetime import datetime, timezone
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shepherd.core.database.engine import get_db, init_db
from shepherd.features.members.models import Member
from shepherd.features.organizations.models import Organization
from shepherd.features.roles.defaults import DEFAULT_ROLES
from shepherd.features.roles.models import OrganizationRole
from shepherd.utils import get_logger


log = get_logger(__name__)

DEMO_ORGANIZATION = os.getenv("SEED_ORGANIZATION", "Grace Community Church")
PASTOR_ID = os.getenv("SEED_PASTOR_ID", "demo-pastor")
PASTOR_EMAIL = os.getenv("SEED_PASTOR_EMAIL", "pastor@example.org")


async def seed_organization(db: AsyncSession) -> Organization:
    result = await db.execute(select(Organization).where(Organization.name == DEMO_ORGANIZATION))
    organization = result.scalars().first()
    if organization:
        log.debug(f"Organization '{DEMO_ORGANIZATION}' already exists, skipping")
        return organization

    organization = Organization(name=DEMO_ORGANIZATION)
    db.add(organization)
    await db.flush()
    log.info(f"Created organization '{DEMO_ORGANIZATION}' ({organization.id})")
    return organization


async def seed_roles(db: AsyncSession, organization: Organization) -> None:
    """Create one OrganizationRole row per built-in role."""
    log.info("Creating organization role rows...")
    for role_name, role_config in DEFAULT_ROLES.items():
        stmt = select(OrganizationRole).where(
            OrganizationRole.organization_id == organization.id,
            OrganizationRole.name == role_name,
        )
        result = await db.execute(stmt)
        if result.scalars().first():
            log.debug(f"Role '{role_name}' already exists, skipping")
            continue

        db.add(OrganizationRole(
            organization_id=organization.id,
            name=role_name,
            rank=role_config["rank"],
            display_name=role_config["display_name"],
            description=role_config.get("description"),
            permissions=role_config["permissions"],
        ))
        log.info(f"Created role '{role_name}' with {len(role_config['permissions'])} grants")


async def seed_pastor(db: AsyncSession, organization: Organization) -> None:
    result = await db.execute(select(Member).where(Member.appwrite_id == PASTOR_ID))
    if result.scalars().first():
        log.debug(f"Member for '{PASTOR_ID}' already exists, skipping")
        return
    db.add(Member(
        organization_id=organization.id,
        appwrite_id=PASTOR_ID,
        email=PASTOR_EMAIL,
        full_name="Demo Pastor",
        role="pastor",
        joined_at=datetime.now(timezone.utc),
    ))
    log.info(f"Created pastor member for '{PASTOR_ID}'")


async def main():
    """Main function to seed the demo organization."""
    log.info("Starting role seeding...")

    # Initialize database tables first
    log.info("Initializing database tables...")
    await init_db()

    # Get database session
    async for db in get_db():
        try:
            organization = await seed_organization(db)
            await seed_roles(db, organization)
            await seed_pastor(db, organization)
            await db.commit()
            log.info("Role seeding completed successfully!")
        except Exception as e:
            log.error(f"Error seeding roles: {e}", exc_info=True)
            await db.rollback()
            raise

        break  # Only use first session


if __name__ == "__main__":
    asyncio.run(main())
