# courtinvite/api/v1/endpoints/session_hosts.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from courtinvite.api import deps
from courtinvite.crud.crud_session import session_crud
from courtinvite.crud.crud_session_host import session_host_crud
from courtinvite.schemas.session_host import (
    CoHostInvite,
    LinkInvitesResponse,
    SessionHost as SessionHostSchema,
)
from courtinvite.schemas.token import TokenPayload

router = APIRouter(tags=["Co-hosts"])


@router.get("/host/sessions/{session_id}/hosts", response_model=List[SessionHostSchema])
def list_hosts(
    session_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    return session_host_crud.list_for_session(db, session_id=session_id)


@router.post(
    "/host/sessions/{session_id}/hosts",
    response_model=SessionHostSchema,
    status_code=status.HTTP_201_CREATED,
)
def invite_host(
    session_id: str,
    invite_in: CoHostInvite,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Invite a co-host by email. They get access once they sign in with that
    address. Owner only.
    """
    session_obj = session_crud.get_for_host(
        db, session_id=session_id, user_id=current_user.sub, owner_only=True
    )
    return session_host_crud.invite(
        db, session=session_obj, email=invite_in.email, invited_by=current_user.sub
    )


@router.delete(
    "/host/sessions/{session_id}/hosts/{host_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def remove_host(
    session_id: str,
    host_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    session_crud.get_for_host(
        db, session_id=session_id, user_id=current_user.sub, owner_only=True
    )
    session_host_crud.remove(db, session_id=session_id, host_id=host_id)


@router.post("/host/invites/link", response_model=LinkInvitesResponse)
def link_invites(
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Claim pending co-host invites sent to the caller's email. The front end
    calls this after every sign-in.
    """
    linked = session_host_crud.link_pending_invites(
        db, email=current_user.email, user_id=current_user.sub
    )
    return LinkInvitesResponse(linked_count=linked)
