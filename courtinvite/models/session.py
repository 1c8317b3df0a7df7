# courtinvite/models/session.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Numeric,
    String,
    Text,
    Integer,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from courtinvite.db.base_class import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Session(Base):
    """
    A hosted sports session and its invite page.

    Lifecycle: draft -> open (published, has a public_code) -> closed.
    Open sessions are hard-deleted 48 hours after they end.
    """
    __tablename__ = "sessions"

    id = Column(
        String, primary_key=True, default=lambda: f"ses_{uuid.uuid4().hex[:12]}"
    )
    host_id = Column(String, nullable=False, index=True)
    host_name = Column(String(120), nullable=True)
    host_slug = Column(String(120), nullable=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(300), nullable=True)
    map_url = Column(String(2048), nullable=True)
    sport = Column(String(20), nullable=False, server_default="badminton")
    court_numbers = Column(String(100), nullable=True)

    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=True)

    # NULL capacity means unlimited
    capacity = Column(Integer, nullable=True)
    price = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(3), nullable=True)
    cover_url = Column(String(2048), nullable=True)

    # Payment instructions shown to guests
    payment_bank_name = Column(String(120), nullable=True)
    payment_account_number = Column(String(64), nullable=True)
    payment_account_name = Column(String(120), nullable=True)
    payment_notes = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, server_default="draft")
    public_code = Column(String(16), nullable=True, unique=True, index=True)
    waitlist_enabled = Column(Boolean, nullable=False, server_default=text("true"), default=True)

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

    # Relationships (rows go away with the session)
    participants = relationship(
        "Participant",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Participant.created_at",
    )
    payment_proofs = relationship(
        "PaymentProof",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    hosts = relationship(
        "SessionHost",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("capacity IS NULL OR capacity >= 1", name="check_session_capacity_positive"),
        Index("ix_sessions_host_status", "host_id", "status"),
        Index("ix_sessions_status_start_end", "status", "start_at", "end_at"),
    )
