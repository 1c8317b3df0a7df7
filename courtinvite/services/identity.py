# courtinvite/services/identity.py
"""
Resolve who is visiting an invite page.

A visitor is either a signed-in user (bearer token from the auth provider) or
an anonymous guest holding a guest token we issued. Either way they map to one
stable participant key, so repeat RSVPs land on the same row.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from courtinvite.core.errors import InvalidGuestTokenError
from courtinvite.core.security import create_guest_token, verify_guest_token
from courtinvite.schemas.token import TokenPayload

logger = logging.getLogger(__name__)

USER_KEY_PREFIX = "user:"
GUEST_KEY_PREFIX = "guest:"


@dataclass(frozen=True)
class VisitorIdentity:
    key: str
    user_id: Optional[str] = None
    guest_id: Optional[str] = None
    # Set when a guest token was minted for this request
    issued_token: Optional[str] = None

    @property
    def is_guest(self) -> bool:
        return self.user_id is None


def resolve_identity(
    user: Optional[TokenPayload],
    guest_token: Optional[str],
    *,
    issue_if_missing: bool = False,
) -> Optional[VisitorIdentity]:
    """
    Map request credentials to a participant key.

    A signed-in user always wins over a guest token. A guest token that fails
    verification raises InvalidGuestTokenError instead of being ignored, so a
    tampered token can never fall through to a freshly issued identity.

    Returns None when there are no credentials and issue_if_missing is False.
    """
    if user is not None:
        return VisitorIdentity(key=f"{USER_KEY_PREFIX}{user.sub}", user_id=user.sub)

    if guest_token:
        guest_id = verify_guest_token(guest_token)
        if guest_id is None:
            logger.warning("Rejected invalid guest token")
            raise InvalidGuestTokenError()
        return VisitorIdentity(key=f"{GUEST_KEY_PREFIX}{guest_id}", guest_id=guest_id)

    if not issue_if_missing:
        return None

    token, guest_id = create_guest_token()
    return VisitorIdentity(
        key=f"{GUEST_KEY_PREFIX}{guest_id}", guest_id=guest_id, issued_token=token
    )
