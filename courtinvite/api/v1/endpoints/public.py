# courtinvite/api/v1/endpoints/public.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from courtinvite.api import deps
from courtinvite.schemas.participant import PublicSessionView
from courtinvite.services.identity import VisitorIdentity
from courtinvite.services.public_view import build_public_view, find_public_session

router = APIRouter(tags=["Public"])


# Declared before the slug route, which would otherwise swallow "/s/{id}"
@router.get("/public/s/{session_id}", response_model=PublicSessionView)
def get_public_session_by_id(
    session_id: str,
    db: Session = Depends(deps.get_db),
    identity: Optional[VisitorIdentity] = Depends(deps.get_visitor_identity),
):
    """
    Legacy invite link. Clients should redirect to `share_url`.
    """
    session_obj = find_public_session(db, session_id=session_id)
    return build_public_view(db, session_obj, identity)


@router.get("/public/{host_slug}/{public_code}", response_model=PublicSessionView)
def get_public_session(
    host_slug: str,
    public_code: str,
    db: Session = Depends(deps.get_db),
    identity: Optional[VisitorIdentity] = Depends(deps.get_visitor_identity),
):
    """
    Invite page data: session details, who's in, the waitlist, and the
    viewer's own RSVP when a guest or bearer token is sent.

    A stale host slug still resolves; `share_url` carries the current one.
    """
    session_obj = find_public_session(db, public_code=public_code, host_slug=host_slug)
    return build_public_view(db, session_obj, identity)
