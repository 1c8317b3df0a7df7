# courtinvite/crud/crud_session_host.py
"""
CRUD operations for session hosts (owner plus invited co-hosts).
"""

import logging
from typing import List, Optional

from sqlalchemy import and_, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from courtinvite.constants.rsvp import HostRole
from courtinvite.core.errors import ConflictError, NotFoundError
from courtinvite.models.session import Session as SessionModel, utcnow
from courtinvite.models.session_host import SessionHost

logger = logging.getLogger(__name__)


def _normalize_email(email: Optional[str]) -> Optional[str]:
    return email.strip().lower() if email else None


class CRUDSessionHost:
    """CRUD operations for SessionHost."""

    def add_owner(
        self,
        db: Session,
        *,
        session_id: str,
        user_id: str,
        email: Optional[str],
    ) -> SessionHost:
        """Stage the owner row. The caller commits together with the session."""
        now = utcnow()
        owner = SessionHost(
            session_id=session_id,
            email=_normalize_email(email),
            user_id=user_id,
            role=HostRole.OWNER,
            invited_by=user_id,
            invited_at=now,
            accepted_at=now,
        )
        db.add(owner)
        return owner

    def get_role(self, db: Session, *, session_id: str, user_id: str) -> Optional[str]:
        """Return the user's role on the session, or None without access."""
        row = db.query(SessionHost.role).filter(
            and_(
                SessionHost.session_id == session_id,
                SessionHost.user_id == user_id,
            )
        ).first()
        return row[0] if row else None

    def list_for_session(self, db: Session, *, session_id: str) -> List[SessionHost]:
        return db.query(SessionHost).filter(
            SessionHost.session_id == session_id
        ).order_by(SessionHost.invited_at.asc()).all()

    def list_session_ids_for_user(self, db: Session, *, user_id: str) -> List[str]:
        rows = db.query(SessionHost.session_id).filter(
            SessionHost.user_id == user_id
        ).all()
        return [row[0] for row in rows]

    def invite(
        self,
        db: Session,
        *,
        session: SessionModel,
        email: str,
        invited_by: str,
    ) -> SessionHost:
        """
        Invite a co-host by email.

        Raises:
            ConflictError: If the email already has host access to the session
        """
        email = _normalize_email(email)
        try:
            host = SessionHost(
                session_id=session.id,
                email=email,
                role=HostRole.HOST,
                invited_by=invited_by,
            )
            db.add(host)
            db.commit()
            db.refresh(host)
        except IntegrityError:
            db.rollback()
            raise ConflictError(f"{email} is already a host of this session")
        except Exception as e:
            logger.error(
                f"Failed to invite co-host to session {session.id}: {str(e)}",
                exc_info=True,
                extra={"session_id": session.id},
            )
            db.rollback()
            raise

        logger.info(f"Co-host invited to session {session.id}")
        return host

    def remove(self, db: Session, *, session_id: str, host_id: str) -> None:
        host = db.query(SessionHost).filter(
            and_(SessionHost.id == host_id, SessionHost.session_id == session_id)
        ).first()
        if not host:
            raise NotFoundError("Co-host not found")
        if host.role == HostRole.OWNER:
            raise ConflictError("The session owner cannot be removed")
        db.delete(host)
        db.commit()
        logger.info(f"Co-host {host_id} removed from session {session_id}")

    def link_pending_invites(self, db: Session, *, email: Optional[str], user_id: str) -> int:
        """
        Attach every unaccepted invite for this email to the signed-in user.

        Returns:
            Number of invites linked
        """
        email = _normalize_email(email)
        if not email:
            return 0

        try:
            result = db.execute(
                update(SessionHost)
                .where(
                    func.lower(SessionHost.email) == email,
                    SessionHost.user_id.is_(None),
                )
                .values(user_id=user_id, accepted_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            db.commit()
        except Exception as e:
            logger.error(
                f"Failed to link host invites for user {user_id}: {str(e)}",
                exc_info=True,
                extra={"user_id": user_id},
            )
            db.rollback()
            raise

        if result.rowcount:
            logger.info(f"Linked {result.rowcount} host invite(s) to user {user_id}")
        return result.rowcount


session_host_crud = CRUDSessionHost()
