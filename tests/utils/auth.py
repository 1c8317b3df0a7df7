from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt

from courtinvite.core.config import settings


def create_user_token(user_id: str = "host_1", email: Optional[str] = "host1@example.com") -> str:
    """
    Issues a JWT shaped like the ones the hosted auth provider hands out.
    """
    payload = {
        "sub": user_id,
        "aud": settings.JWT_AUDIENCE,
        "exp": int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp()),
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def get_user_authentication_headers(
    user_id: str = "host_1", email: Optional[str] = "host1@example.com"
) -> dict[str, str]:
    """
    Generates a valid JWT token and authentication headers for a test user.
    """
    return {"Authorization": f"Bearer {create_user_token(user_id, email)}"}


def get_guest_headers(guest_token: str) -> dict[str, str]:
    return {"X-Guest-Token": guest_token}
