import secrets
from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from config import ApplicationConfig

ACCESS_TOKEN = "access"
MAGIC_LINK_TOKEN = "magic_link"


def generate_jwt(user_id: UUID, email: str) -> str:
    """
    Generate JWT access token

    Args:
        user_id: Identity user UUID (also the profile ID)
        email: Email the session was established for

    Returns:
        JWT token string (HS256, ACCESS_TOKEN_MINUTES expiry)
    """
    return create_token(
        {"user_id": str(user_id), "email": email},
        ACCESS_TOKEN,
        timedelta(minutes=ApplicationConfig.ACCESS_TOKEN_MINUTES),
    )


def generate_magic_link_token(email: str, nonce: str) -> str:
    """Single-use sign-in token; ``nonce`` identifies it for redemption"""
    return create_token(
        {"email": email, "nonce": nonce},
        MAGIC_LINK_TOKEN,
        timedelta(minutes=ApplicationConfig.MAGIC_LINK_MINUTES),
    )


def create_token(claims: dict, purpose: str, expires_delta: timedelta) -> str:
    now = datetime.now(UTC)
    payload = {
        **claims,
        "purpose": purpose,
        "exp": now + expires_delta,
        "iat": now,
        "jti": secrets.token_hex(16),
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm="HS256")


def verify_jwt(token: str, purpose: str = ACCESS_TOKEN) -> Optional[dict]:
    """
    Verify and decode JWT token

    Args:
        token: JWT token string
        purpose: Expected token purpose; a magic-link token is not an access token

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        payload = jwt.decode(
            token, ApplicationConfig.JWT_SECRET, algorithms=["HS256"]
        )
    except JWTError:
        return None
    if payload.get("purpose") != purpose:
        return None
    return payload
