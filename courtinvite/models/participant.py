# courtinvite/models/participant.py
"""
Participant model: one RSVP record per (session, visitor key).
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text, UniqueConstraint, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from courtinvite.db.base_class import Base
from courtinvite.models.session import utcnow


class Participant(Base):
    __tablename__ = "participants"

    id = Column(String, primary_key=True, default=lambda: f"par_{uuid.uuid4().hex[:12]}")
    session_id = Column(
        String, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    display_name = Column(String(80), nullable=False)
    contact_phone = Column(String(32), nullable=True)
    status = Column(String(20), nullable=False, server_default="confirmed")  # confirmed, cancelled, waitlisted, pulled_out

    # "guest:<id>" for token-holding guests, "user:<sub>" for signed-in users
    guest_key = Column(String(128), nullable=False)
    is_host = Column(Boolean, nullable=False, server_default=text("false"), default=False)

    pull_out_reason = Column(Text, nullable=True)
    pull_out_seen = Column(Boolean, nullable=False, server_default=text("false"), default=False)

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

    session = relationship("Session", back_populates="participants")
    payment_proofs = relationship(
        "PaymentProof",
        back_populates="participant",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("session_id", "guest_key", name="unique_session_guest_key"),
        Index("ix_participants_session_status", "session_id", "status"),
    )
