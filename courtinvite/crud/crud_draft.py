# courtinvite/crud/crud_draft.py
"""
CRUD operations for saved session drafts.

New drafts are written with a single INSERT ... SELECT whose WHERE clause
checks the user's draft count. The statement runs under the user's owner
lock, so on Postgres a concurrent save waits and then counts the committed
row.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging
import uuid

from sqlalchemy import JSON, DateTime, String, and_, func, insert, literal, select
from sqlalchemy.orm import Session, aliased

from .base import lock_owner
from courtinvite.constants.rsvp import MAX_DRAFTS, SessionStatus
from courtinvite.core.errors import InvalidNameError, LimitReachedError, NotFoundError
from courtinvite.models.draft import SessionDraft
from courtinvite.models.session import Session as SessionModel, utcnow

logger = logging.getLogger(__name__)

MAX_DRAFT_NAME_LENGTH = 120


def _clean_draft_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidNameError("Draft name is required")
    if len(cleaned) > MAX_DRAFT_NAME_LENGTH:
        raise InvalidNameError(
            f"Draft name must be {MAX_DRAFT_NAME_LENGTH} characters or fewer"
        )
    return cleaned


class CRUDDraft:
    """CRUD operations for SessionDraft."""

    def get_for_user(self, db: Session, *, draft_id: str, user_id: str) -> SessionDraft:
        draft = db.query(SessionDraft).filter(
            and_(SessionDraft.id == draft_id, SessionDraft.user_id == user_id)
        ).first()
        if not draft:
            raise NotFoundError("Draft not found")
        return draft

    def list_for_user(self, db: Session, *, user_id: str) -> List[Tuple[SessionDraft, bool]]:
        """
        The user's drafts, most recently updated first.

        Returns:
            List of (draft, is_live) where is_live means the draft's source
            session is currently published
        """
        rows = (
            db.query(SessionDraft, SessionModel.status)
            .outerjoin(SessionModel, SessionModel.id == SessionDraft.source_session_id)
            .filter(SessionDraft.user_id == user_id)
            .order_by(SessionDraft.updated_at.desc())
            .all()
        )
        return [(draft, status == SessionStatus.OPEN) for draft, status in rows]

    def count_for_user(self, db: Session, *, user_id: str) -> int:
        return db.query(func.count(SessionDraft.id)).filter(
            SessionDraft.user_id == user_id
        ).scalar() or 0

    def save_new(
        self,
        db: Session,
        *,
        user_id: str,
        name: str,
        data: Dict[str, Any],
        source_session_id: Optional[str] = None,
    ) -> SessionDraft:
        """
        Save a new draft if the user is under MAX_DRAFTS.

        Raises:
            InvalidNameError: Blank name
            NotFoundError: source_session_id is not one of the user's sessions
            LimitReachedError: The user already has MAX_DRAFTS drafts
        """
        name = _clean_draft_name(name)

        if source_session_id is not None:
            owned = db.query(SessionModel.id).filter(
                and_(SessionModel.id == source_session_id, SessionModel.host_id == user_id)
            ).first()
            if not owned:
                raise NotFoundError("Source session not found")

        draft_id = f"drf_{uuid.uuid4().hex[:12]}"
        now = utcnow()

        existing = aliased(SessionDraft)
        draft_count = (
            select(func.count(existing.id))
            .where(existing.user_id == user_id)
            .scalar_subquery()
        )
        guarded_row = select(
            literal(draft_id, String),
            literal(user_id, String),
            literal(name, String),
            literal(data, JSON),
            literal(source_session_id, String),
            literal(now, DateTime(timezone=True)),
            literal(now, DateTime(timezone=True)),
        ).where(draft_count < MAX_DRAFTS)

        stmt = insert(SessionDraft).from_select(
            ["id", "user_id", "name", "data", "source_session_id", "created_at", "updated_at"],
            guarded_row,
        )

        try:
            lock_owner(db, "drafts", user_id)
            result = db.execute(stmt)
            if result.rowcount == 0:
                db.rollback()
                logger.info(f"Draft save blocked for user {user_id}: draft limit reached")
                raise LimitReachedError(
                    f"You can save at most {MAX_DRAFTS} drafts. "
                    "Delete or overwrite one to save a new draft.",
                    details={"max_drafts": MAX_DRAFTS},
                )
            db.commit()
        except LimitReachedError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to save draft for user {user_id}: {str(e)}",
                exc_info=True,
                extra={"user_id": user_id},
            )
            db.rollback()
            raise

        logger.info(f"Draft {draft_id} saved for user {user_id}")
        return db.get(SessionDraft, draft_id)

    def overwrite(
        self,
        db: Session,
        *,
        draft: SessionDraft,
        data: Dict[str, Any],
        name: Optional[str] = None,
    ) -> SessionDraft:
        """Replace a draft's contents in place. Does not count against the cap."""
        if name is not None:
            draft.name = _clean_draft_name(name)
        draft.data = data
        draft.updated_at = utcnow()
        db.commit()
        db.refresh(draft)
        return draft

    def remove(self, db: Session, *, draft: SessionDraft) -> None:
        draft_id = draft.id
        db.delete(draft)
        db.commit()
        logger.info(f"Draft {draft_id} deleted")


draft_crud = CRUDDraft()
