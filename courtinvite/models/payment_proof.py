# courtinvite/models/payment_proof.py
import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from courtinvite.db.base_class import Base
from courtinvite.models.session import utcnow


class PaymentProof(Base):
    """
    Proof-of-payment record for a participant.

    Uploaded proofs start as pending_review. Cash payments recorded by the
    host are approved rows without an image.
    """
    __tablename__ = "payment_proofs"

    id = Column(String, primary_key=True, default=lambda: f"pay_{uuid.uuid4().hex[:12]}")
    session_id = Column(
        String, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    participant_id = Column(
        String, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    proof_image_url = Column(String(2048), nullable=True)
    amount = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(3), nullable=True)
    payment_status = Column(String(20), nullable=False, server_default="pending_review")

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    processed_at = Column(DateTime(timezone=True), nullable=True)

    session = relationship("Session", back_populates="payment_proofs")
    participant = relationship("Participant", back_populates="payment_proofs")

    __table_args__ = (
        Index("ix_payment_proofs_session_status", "session_id", "payment_status"),
    )
