"""
Database engine configuration and session management.

Current: SQLite (async with aiosqlite)
Future: PostgreSQL (switch to asyncpg by changing DATABASE_URL only)
"""
from collections.abc import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from shepherd.core import config

# NullPool for SQLite to avoid connection pool issues
engine = create_async_engine(
    config.SQLALCHEMY_DATABASE_URL,
    poolclass=NullPool if config.SQLALCHEMY_DATABASE_URL.startswith("sqlite") else None,
    echo=False,
    future=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database sessions.

    Usage in FastAPI routes:
        @router.get("/members")
        async def list_members(db: AsyncSession = Depends(get_db)):
            result = await db.execute(select(Member))
            return result.scalars().all()
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def register_models() -> None:
    """Import every model module so its tables are attached to Base.metadata."""
    from shepherd.features.organizations.models import Organization  # noqa: F401
    from shepherd.features.members.models import Member  # noqa: F401
    from shepherd.features.roles.models import OrganizationRole  # noqa: F401
    from shepherd.features.activity.models import AttendanceRecord, MinistryActivity  # noqa: F401
    from shepherd.features.audit.models import AuditEntry  # noqa: F401


async def init_db(target: AsyncEngine | None = None) -> None:
    """
    Initialize database tables.
    Called on application startup and by the seed script.
    """
    from shepherd.core.database.base import Base

    register_models()

    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
