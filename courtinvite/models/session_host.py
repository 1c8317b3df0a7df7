# courtinvite/models/session_host.py
import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from courtinvite.db.base_class import Base
from courtinvite.models.session import utcnow


class SessionHost(Base):
    """
    Access control row for a session: one owner plus any invited co-hosts.

    user_id stays NULL until the invitee signs in with the invited email.
    The owner row may lack an email when the auth token carried none.
    """
    __tablename__ = "session_hosts"

    id = Column(String, primary_key=True, default=lambda: f"shost_{uuid.uuid4().hex[:12]}")
    session_id = Column(
        String, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email = Column(String(320), nullable=True, index=True)
    user_id = Column(String, nullable=True, index=True)
    role = Column(String(10), nullable=False)  # owner, host
    invited_by = Column(String, nullable=True)
    invited_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    accepted_at = Column(DateTime(timezone=True), nullable=True)

    session = relationship("Session", back_populates="hosts")

    __table_args__ = (
        UniqueConstraint("session_id", "email", name="unique_session_host_email"),
    )
