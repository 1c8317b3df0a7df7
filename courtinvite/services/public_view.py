# courtinvite/services/public_view.py
"""
Build the public invite page payload for a session.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from courtinvite.constants.rsvp import ParticipantStatus, SessionStatus
from courtinvite.core.errors import SessionNotFoundError
from courtinvite.crud.crud_participant import participant_crud
from courtinvite.crud.crud_session import session_crud
from courtinvite.models.session import Session as SessionModel
from courtinvite.schemas.participant import PublicParticipant, PublicSessionView
from courtinvite.services.identity import VisitorIdentity
from courtinvite.utils.invite_url import canonical_url

logger = logging.getLogger(__name__)


def find_public_session(
    db: Session,
    *,
    public_code: Optional[str] = None,
    session_id: Optional[str] = None,
    host_slug: Optional[str] = None,
) -> SessionModel:
    """
    Look a session up by public code (or by id for legacy links).

    The host slug in the URL is not checked: it changes whenever the host
    renames, and the code alone identifies the session. Only open and closed
    sessions are visible.

    Raises:
        SessionNotFoundError: No visible session matches
    """
    if public_code:
        session_obj = session_crud.get_by_public_code(db, public_code=public_code)
    elif session_id:
        session_obj = session_crud.get(db, session_id)
    else:
        session_obj = None

    if not session_obj or session_obj.status not in SessionStatus.publicly_visible():
        raise SessionNotFoundError()

    if host_slug and session_obj.host_slug and host_slug != session_obj.host_slug:
        logger.debug(
            f"Host slug {host_slug!r} does not match session {session_obj.id}; resolving by code"
        )
    return session_obj


def build_public_view(
    db: Session,
    session_obj: SessionModel,
    identity: Optional[VisitorIdentity] = None,
) -> PublicSessionView:
    confirmed = participant_crud.list_by_status(
        db, session_id=session_obj.id, status=ParticipantStatus.CONFIRMED
    )
    waitlisted = participant_crud.list_by_status(
        db, session_id=session_obj.id, status=ParticipantStatus.WAITLISTED
    )

    spots_left = None
    if session_obj.capacity is not None:
        spots_left = max(0, session_obj.capacity - len(confirmed))

    viewer = None
    if identity is not None:
        viewer = participant_crud.get_by_guest_key(
            db, session_id=session_obj.id, guest_key=identity.key
        )

    return PublicSessionView(
        id=session_obj.id,
        title=session_obj.title,
        description=session_obj.description,
        location=session_obj.location,
        map_url=session_obj.map_url,
        sport=session_obj.sport,
        court_numbers=session_obj.court_numbers,
        start_at=session_obj.start_at,
        end_at=session_obj.end_at,
        status=session_obj.status,
        host_name=session_obj.host_name,
        host_slug=session_obj.host_slug,
        public_code=session_obj.public_code,
        cover_url=session_obj.cover_url,
        price=session_obj.price,
        currency=session_obj.currency,
        payment_bank_name=session_obj.payment_bank_name,
        payment_account_number=session_obj.payment_account_number,
        payment_account_name=session_obj.payment_account_name,
        payment_notes=session_obj.payment_notes,
        capacity=session_obj.capacity,
        waitlist_enabled=session_obj.waitlist_enabled,
        confirmed_count=len(confirmed),
        waitlisted_count=len(waitlisted),
        spots_left=spots_left,
        is_full=spots_left == 0,
        participants=[PublicParticipant.model_validate(p) for p in confirmed],
        waitlist=[PublicParticipant.model_validate(p) for p in waitlisted],
        viewer_status=viewer.status if viewer else None,
        viewer_display_name=viewer.display_name if viewer else None,
        share_url=canonical_url(session_obj),
    )
