# courtinvite/models/draft.py
import uuid
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.sql import func

from courtinvite.db.base_class import Base
from courtinvite.models.session import utcnow


class SessionDraft(Base):
    """
    A saved, unpublished copy of the session editor state.

    Capped at MAX_DRAFTS per user. source_session_id links a draft to the
    session it was saved from; the link is cleared if that session is deleted.
    """
    __tablename__ = "session_drafts"

    id = Column(String, primary_key=True, default=lambda: f"drf_{uuid.uuid4().hex[:12]}")
    user_id = Column(String, nullable=False, index=True)
    name = Column(String(120), nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    source_session_id = Column(
        String, ForeignKey("sessions.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    __table_args__ = (
        Index("ix_session_drafts_user_updated", "user_id", "updated_at"),
    )
