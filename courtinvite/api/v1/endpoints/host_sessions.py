# courtinvite/api/v1/endpoints/host_sessions.py
import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from courtinvite.api import deps
from courtinvite.constants.rsvp import MAX_LIVE_SESSIONS
from courtinvite.core.storage import COVER_IMAGE_PREFIX, ObjectStorage, public_url_for
from courtinvite.crud.crud_participant import participant_crud
from courtinvite.crud.crud_session import session_crud
from courtinvite.schemas.participant import PullOutListResponse
from courtinvite.schemas.session import (
    CoverUploadRequest,
    CoverUploadResponse,
    CoverUrlUpdate,
    LiveSessionsResponse,
    PublishResponse,
    Session as SessionSchema,
    SessionAnalytics,
    SessionCreate,
    SessionUpdate,
    WaitlistToggle,
)
from courtinvite.schemas.token import TokenPayload
from courtinvite.utils.invite_url import canonical_url, host_edit_url, share_url

router = APIRouter(tags=["Host Sessions"])

_COVER_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


@router.post(
    "/host/sessions",
    response_model=SessionSchema,
    status_code=status.HTTP_201_CREATED,
)
def create_session(
    session_in: SessionCreate,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Create a new session as an unpublished draft."""
    return session_crud.create_with_host(
        db, obj_in=session_in, host_id=current_user.sub, host_email=current_user.email
    )


@router.get("/host/sessions", response_model=List[SessionSchema])
def list_sessions(
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Sessions the caller owns or co-hosts."""
    return session_crud.get_multi_by_host(db, user_id=current_user.sub)


@router.get("/host/sessions/live", response_model=LiveSessionsResponse)
def list_live_sessions(
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    The caller's live invites and whether another publish is allowed.
    """
    live = session_crud.list_live(db, host_id=current_user.sub)
    return LiveSessionsResponse(
        sessions=live,
        count=len(live),
        max_live=MAX_LIVE_SESSIONS,
        can_publish=len(live) < MAX_LIVE_SESSIONS,
    )


@router.get("/host/sessions/{session_id}", response_model=SessionSchema)
def get_session(
    session_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    return session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)


@router.patch("/host/sessions/{session_id}", response_model=SessionSchema)
def update_session(
    session_id: str,
    session_in: SessionUpdate,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Edit a session. Live sessions stay live."""
    session_obj = session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    return session_crud.update(db, db_obj=session_obj, obj_in=session_in)


@router.post("/host/sessions/{session_id}/publish", response_model=PublishResponse)
def publish_session(
    session_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Publish a session and get its share link.

    **Errors**:
    - 403: Only the owner can publish
    - 409 LIMIT_REACHED: Already at the live-session limit
    """
    session_obj = session_crud.get_for_host(
        db, session_id=session_id, user_id=current_user.sub, owner_only=True
    )
    session_obj = session_crud.publish(db, db_obj=session_obj)
    return PublishResponse(
        session_id=session_obj.id,
        public_code=session_obj.public_code,
        host_slug=session_obj.host_slug,
        share_url=share_url(session_obj.host_slug, session_obj.public_code),
        edit_url=host_edit_url(session_obj.id, "preview"),
    )


@router.post("/host/sessions/{session_id}/unpublish")
def unpublish_session(
    session_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Take a live session down. The session and its RSVPs are deleted; a
    session that is not live is left alone.
    """
    session_obj = session_crud.get_for_host(
        db, session_id=session_id, user_id=current_user.sub, owner_only=True
    )
    deleted = session_crud.unpublish(db, db_obj=session_obj)
    return {"ok": True, "deleted": deleted}


@router.post("/host/sessions/{session_id}/close", response_model=SessionSchema)
def close_session(
    session_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Stop accepting RSVPs. The invite page stays readable."""
    session_obj = session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    return session_crud.close(db, db_obj=session_obj)


@router.put("/host/sessions/{session_id}/waitlist", response_model=SessionSchema)
def set_waitlist(
    session_id: str,
    toggle_in: WaitlistToggle,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    session_obj = session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    return session_crud.set_waitlist_enabled(db, db_obj=session_obj, enabled=toggle_in.enabled)


@router.post("/host/sessions/{session_id}/cover-upload", response_model=CoverUploadResponse)
def request_cover_upload(
    session_id: str,
    upload_in: CoverUploadRequest,
    db: Session = Depends(deps.get_db),
    storage: ObjectStorage = Depends(deps.get_object_storage),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Get a pre-signed POST for uploading a cover image straight to storage.
    Save `object_url` on the session with PUT /cover once the upload is done.
    """
    session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    ext = _COVER_EXTENSIONS[upload_in.content_type]
    object_name = f"{COVER_IMAGE_PREFIX}/{session_id}/{uuid.uuid4().hex}.{ext}"
    presigned = storage.generate_presigned_post(object_name, upload_in.content_type)
    return CoverUploadResponse(
        url=presigned["url"],
        fields=presigned["fields"],
        object_url=public_url_for(object_name),
    )


@router.put("/host/sessions/{session_id}/cover", response_model=SessionSchema)
def set_cover(
    session_id: str,
    cover_in: CoverUrlUpdate,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    session_obj = session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    return session_crud.set_cover_url(db, db_obj=session_obj, cover_url=cover_in.cover_url)


@router.get("/host/sessions/{session_id}/analytics", response_model=SessionAnalytics)
def get_session_analytics(
    session_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Attendance and payment overview for the host dashboard."""
    session_obj = session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    stats = session_crud.analytics(db, db_obj=session_obj)
    return SessionAnalytics(
        session_id=session_obj.id,
        title=session_obj.title,
        status=session_obj.status,
        sport=session_obj.sport,
        start_at=session_obj.start_at,
        location=session_obj.location,
        host_name=session_obj.host_name,
        host_slug=session_obj.host_slug,
        public_code=session_obj.public_code,
        share_url=canonical_url(session_obj) if session_obj.public_code else None,
        waitlist_enabled=session_obj.waitlist_enabled,
        price_per_person=session_obj.price,
        **stats,
    )


@router.delete(
    "/host/sessions/{session_id}/participants/{participant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def remove_participant(
    session_id: str,
    participant_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Remove a participant. The next person on the waitlist takes a freed seat."""
    session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    participant_crud.remove(db, session_id=session_id, participant_id=participant_id)


@router.get("/host/sessions/{session_id}/pull-outs", response_model=PullOutListResponse)
def list_pull_outs(
    session_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Pull-outs the host has not acknowledged yet."""
    session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    pull_outs = participant_crud.list_unseen_pull_outs(db, session_id=session_id)
    return PullOutListResponse(pull_outs=pull_outs)


@router.post("/host/sessions/{session_id}/pull-outs/seen")
def mark_pull_outs_seen(
    session_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    marked = participant_crud.mark_pull_outs_seen(db, session_id=session_id)
    return {"ok": True, "marked": marked}
