# courtinvite/api/v1/endpoints/rsvp.py
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from courtinvite.api import deps
from courtinvite.constants.rsvp import ParticipantStatus
from courtinvite.core.config import settings
from courtinvite.core.errors import NotFoundError
from courtinvite.core.limiter import limiter
from courtinvite.crud.crud_participant import participant_crud
from courtinvite.schemas.participant import (
    PullOutRequest,
    RsvpRequest,
    RsvpResponse,
    RsvpStatusResponse,
)
from courtinvite.services.identity import VisitorIdentity
from courtinvite.services.public_view import find_public_session

router = APIRouter(tags=["RSVP"])


def _rsvp_response(participant, identity: VisitorIdentity) -> RsvpResponse:
    return RsvpResponse(
        participant_id=participant.id,
        status=participant.status,
        waitlisted=participant.status == ParticipantStatus.WAITLISTED,
        guest_token=identity.issued_token,
    )


@router.post("/rsvp/{public_code}/join", response_model=RsvpResponse)
@limiter.limit(settings.RSVP_RATE_LIMIT)
def join_session(
    public_code: str,
    rsvp_in: RsvpRequest,
    request: Request,
    db: Session = Depends(deps.get_db),
    identity: VisitorIdentity = Depends(deps.get_rsvp_identity),
):
    """
    Join a session.

    Lands as `confirmed` while seats remain, `waitlisted` when full and the
    waitlist is on. First-time guests receive `guest_token`; send it back as
    `X-Guest-Token` on later requests.

    **Errors**:
    - 400 INVALID_NAME
    - 404 SESSION_NOT_FOUND
    - 409 SESSION_NOT_OPEN, CAPACITY_EXCEEDED
    """
    session_obj = find_public_session(db, public_code=public_code)
    participant = participant_crud.join(
        db,
        session_id=session_obj.id,
        guest_key=identity.key,
        name=rsvp_in.name,
        phone=rsvp_in.phone,
        is_host=identity.user_id is not None and identity.user_id == session_obj.host_id,
    )
    return _rsvp_response(participant, identity)


@router.post("/rsvp/{public_code}/decline", response_model=RsvpResponse)
@limiter.limit(settings.RSVP_RATE_LIMIT)
def decline_session(
    public_code: str,
    rsvp_in: RsvpRequest,
    request: Request,
    db: Session = Depends(deps.get_db),
    identity: VisitorIdentity = Depends(deps.get_rsvp_identity),
):
    """Decline a session. Declining again is a no-op."""
    session_obj = find_public_session(db, public_code=public_code)
    participant = participant_crud.decline(
        db,
        session_id=session_obj.id,
        guest_key=identity.key,
        name=rsvp_in.name,
        phone=rsvp_in.phone,
        is_host=identity.user_id is not None and identity.user_id == session_obj.host_id,
    )
    return _rsvp_response(participant, identity)


@router.post("/rsvp/{public_code}/pull-out", response_model=RsvpResponse)
@limiter.limit(settings.RSVP_RATE_LIMIT)
def pull_out_of_session(
    public_code: str,
    pull_out_in: PullOutRequest,
    request: Request,
    db: Session = Depends(deps.get_db),
    identity: Optional[VisitorIdentity] = Depends(deps.get_visitor_identity),
):
    """Give up a confirmed seat with an optional note for the host."""
    session_obj = find_public_session(db, public_code=public_code)
    if identity is None:
        # No guest token and not signed in
        raise NotFoundError("You have not RSVP'd to this session")

    participant = participant_crud.pull_out(
        db,
        session_id=session_obj.id,
        guest_key=identity.key,
        reason=pull_out_in.reason,
    )
    return _rsvp_response(participant, identity)


@router.get("/rsvp/{public_code}/me", response_model=RsvpStatusResponse)
def get_my_rsvp(
    public_code: str,
    db: Session = Depends(deps.get_db),
    identity: Optional[VisitorIdentity] = Depends(deps.get_visitor_identity),
):
    """The caller's own RSVP status for a session, if any."""
    session_obj = find_public_session(db, public_code=public_code)
    if identity is None:
        return RsvpStatusResponse()

    participant = participant_crud.get_by_guest_key(
        db, session_id=session_obj.id, guest_key=identity.key
    )
    if participant is None:
        return RsvpStatusResponse()
    return RsvpStatusResponse(status=participant.status, display_name=participant.display_name)
