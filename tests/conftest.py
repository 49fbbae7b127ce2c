"""Shared fixtures: in-memory database, seeded organization and API client."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shepherd.core.database.engine import get_db, init_db
from shepherd.features.members.models import Member
from shepherd.features.organizations.models import Organization
from shepherd.features.roles.defaults import default_role_table
from shepherd.main import app

NOW = datetime(2025, 7, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def role_table():
    return default_role_table()


@pytest_asyncio.fixture
async def engine():
    """Per-test in-memory SQLite engine with all tables created."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def organization(db: AsyncSession) -> Organization:
    org = Organization(name="Grace Community Church")
    db.add(org)
    await db.commit()
    return org


@pytest.fixture
def make_member(db: AsyncSession, organization: Organization):
    """Factory that inserts a member; tenure is counted back from NOW."""

    async def _make(
        role: str,
        *,
        days: int | None = 0,
        name: str | None = None,
        organization_id: str | None = None,
        is_active: bool = True,
    ) -> Member:
        name = name or f"{role.title()} {_make.counter}"
        _make.counter += 1
        member = Member(
            organization_id=organization_id or organization.id,
            appwrite_id=f"idp-{name.lower().replace(' ', '-')}",
            email=f"{name.lower().replace(' ', '.')}@example.org",
            full_name=name,
            role=role,
            joined_at=NOW - timedelta(days=days) if days is not None else None,
            is_active=is_active,
        )
        db.add(member)
        await db.commit()
        return member

    _make.counter = 1
    return _make


def bearer(member: Member) -> dict[str, str]:
    """Authorization header carrying the member's identity-provider id."""
    token = jwt.encode(
        {"userId": member.appwrite_id, "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        "identity-provider-signing-key-for-tests",
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(session_factory, role_table):
    """API client bound to the in-memory database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.state.role_table = role_table
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    return bearer
