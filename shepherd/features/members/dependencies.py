"""
FastAPI dependencies for resolving the calling member.
"""
from typing import Annotated
from datetime import datetime, timezone
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shepherd.core.database.engine import get_db
from shepherd.features.members.auth import subject_from_token
from shepherd.features.members.models import Member
from shepherd.utils import get_logger


log = get_logger(__name__)
security = HTTPBearer()


async def get_current_member(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Member:
    """
    Get the calling member from the bearer token.

    This dependency:
    1. Reads the identity provider's user id from the JWT
    2. Looks up the member registered for that id
    3. Updates last_login_at

    Usage:
        @router.get("/me")
        async def get_me(member: Member = Depends(get_current_member)):
            return member
    """
    subject = subject_from_token(credentials.credentials)

    result = await db.execute(select(Member).where(Member.appwrite_id == subject))
    member = result.scalar_one_or_none()

    if member is None:
        log.info(f"No member registered for identity {subject}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Member is not registered with any organization",
        )

    if not member.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Member account is deactivated",
        )

    member.last_login_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(member)
    return member


def get_authorization_header(request: Request) -> str:
    """
    Extract authorization header for rate limiting.
    Used with slowapi Limiter.
    """
    auth = request.headers.get("Authorization", "")
    return auth or "anonymous"
