# courtinvite/api/deps.py
from typing import Generator, Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader, OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from courtinvite.core.config import settings
from courtinvite.core.security import decode_access_token
from courtinvite.core.storage import ObjectStorage, get_storage
from courtinvite.db.session import SessionLocal
from courtinvite.schemas.token import TokenPayload
from courtinvite.services.identity import VisitorIdentity, resolve_identity


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Tokens come from the auth provider; tokenUrl only feeds the OpenAPI docs.
host_bearer = OAuth2PasswordBearer(tokenUrl="token")
host_bearer_optional = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)

guest_token_header = APIKeyHeader(name="X-Guest-Token", auto_error=False)
internal_key_header = APIKeyHeader(name="X-Internal-Api-Key", auto_error=False)


def _decode_host(token: str) -> TokenPayload:
    return TokenPayload(**decode_access_token(token))


def get_current_user(token: str = Depends(host_bearer)) -> TokenPayload:
    """Signed-in host, or 401."""
    try:
        return _decode_host(token)
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired access token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user_optional(
    token: Optional[str] = Depends(host_bearer_optional),
) -> Optional[TokenPayload]:
    if not token:
        return None
    try:
        return _decode_host(token)
    except (JWTError, ValueError):
        # Public pages still render for a visitor with a stale session.
        return None


def get_visitor_identity(
    user: Optional[TokenPayload] = Depends(get_current_user_optional),
    guest_token: Optional[str] = Security(guest_token_header),
) -> Optional[VisitorIdentity]:
    """Who is looking at an invite page, if we can tell. Never mints a token."""
    return resolve_identity(user, guest_token)


def get_rsvp_identity(
    user: Optional[TokenPayload] = Depends(get_current_user_optional),
    guest_token: Optional[str] = Security(guest_token_header),
) -> VisitorIdentity:
    """Identity for an RSVP write; a first-time guest gets a new token."""
    return resolve_identity(user, guest_token, issue_if_missing=True)


def get_object_storage() -> ObjectStorage:
    return get_storage()


def get_internal_api_key(api_key: Optional[str] = Security(internal_key_header)) -> str:
    if not api_key or api_key != settings.INTERNAL_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Internal endpoints need a valid X-Internal-Api-Key",
        )
    return api_key
