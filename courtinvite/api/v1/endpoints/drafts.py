# courtinvite/api/v1/endpoints/drafts.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from courtinvite.api import deps
from courtinvite.constants.rsvp import MAX_DRAFTS
from courtinvite.crud.crud_draft import draft_crud
from courtinvite.schemas.draft import (
    Draft,
    DraftListResponse,
    DraftOverwrite,
    DraftSave,
    DraftSaveResponse,
    DraftSummary,
)
from courtinvite.schemas.token import TokenPayload

router = APIRouter(tags=["Drafts"])


@router.get("/host/drafts", response_model=DraftListResponse)
def list_drafts(
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    drafts = draft_crud.list_for_user(db, user_id=current_user.sub)
    return DraftListResponse(
        drafts=[
            DraftSummary.model_validate(draft).model_copy(update={"is_live": is_live})
            for draft, is_live in drafts
        ],
        max_drafts=MAX_DRAFTS,
    )


@router.post(
    "/host/drafts",
    response_model=DraftSaveResponse,
    status_code=status.HTTP_201_CREATED,
)
def save_draft(
    draft_in: DraftSave,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Save the editor state as a new draft.

    **Errors**:
    - 400 INVALID_NAME: Blank draft name
    - 409 LIMIT_REACHED: Already holding the maximum number of drafts
    """
    draft = draft_crud.save_new(
        db,
        user_id=current_user.sub,
        name=draft_in.name,
        data=draft_in.data,
        source_session_id=draft_in.source_session_id,
    )
    return DraftSaveResponse(draft=Draft.model_validate(draft))


@router.get("/host/drafts/{draft_id}", response_model=Draft)
def get_draft(
    draft_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    return draft_crud.get_for_user(db, draft_id=draft_id, user_id=current_user.sub)


@router.put("/host/drafts/{draft_id}", response_model=DraftSaveResponse)
def overwrite_draft(
    draft_id: str,
    draft_in: DraftOverwrite,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Replace an existing draft. Works even when at the draft limit."""
    draft = draft_crud.get_for_user(db, draft_id=draft_id, user_id=current_user.sub)
    draft = draft_crud.overwrite(db, draft=draft, data=draft_in.data, name=draft_in.name)
    return DraftSaveResponse(draft=Draft.model_validate(draft))


@router.delete("/host/drafts/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_draft(
    draft_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    draft = draft_crud.get_for_user(db, draft_id=draft_id, user_id=current_user.sub)
    draft_crud.remove(db, draft=draft)
