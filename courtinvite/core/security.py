# courtinvite/core/security.py
"""
Token helpers.

Host tokens come from the hosted auth provider; we only verify them. Guest
tokens are issued here so an anonymous visitor's RSVP can be tied to a
stable key that a client cannot simply make up. The two kinds use different
keys and audiences, and each decoder refuses the other kind.
"""

import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from courtinvite.core.config import settings

ALGORITHM = "HS256"
GUEST_TOKEN_TYPE = "guest"


def decode_access_token(token: str) -> dict:
    """Decode a bearer token issued by the auth provider. Raises JWTError."""
    payload = jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        options={"require_aud": True, "require_exp": True},
    )
    if payload.get("typ") == GUEST_TOKEN_TYPE:
        raise JWTError("Guest tokens cannot be used as access tokens")
    return payload


def create_guest_token(guest_id: str | None = None) -> tuple[str, str]:
    """
    Issue a signed guest token.

    Returns:
        Tuple of (token, guest_id)
    """
    guest_id = guest_id or secrets.token_hex(16)
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {
            "sub": guest_id,
            "typ": GUEST_TOKEN_TYPE,
            "aud": settings.GUEST_TOKEN_AUDIENCE,
            "iat": now,
            "exp": now + timedelta(days=settings.GUEST_TOKEN_TTL_DAYS),
        },
        settings.GUEST_TOKEN_SECRET,
        algorithm=ALGORITHM,
    )
    return token, guest_id


def verify_guest_token(token: str) -> str | None:
    """Return the guest id carried by a valid guest token, else None."""
    try:
        payload = jwt.decode(
            token,
            settings.GUEST_TOKEN_SECRET,
            algorithms=[ALGORITHM],
            audience=settings.GUEST_TOKEN_AUDIENCE,
            options={"require_aud": True},
        )
    except JWTError:
        return None
    if payload.get("typ") != GUEST_TOKEN_TYPE or not payload.get("sub"):
        return None
    return payload["sub"]
