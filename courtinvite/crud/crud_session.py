# courtinvite/crud/crud_session.py
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional
import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from .base import CRUDBase, lock_owner
from courtinvite.constants.rsvp import (
    HostRole,
    MAX_LIVE_SESSIONS,
    ParticipantStatus,
    SESSION_EXPIRY_GRACE_HOURS,
    SessionStatus,
)
from courtinvite.core.errors import (
    AppError,
    ConflictError,
    InvalidInputError,
    LimitReachedError,
    PermissionDeniedError,
    SessionNotFoundError,
)
from courtinvite.crud.crud_participant import participant_crud
from courtinvite.crud.crud_payment_proof import payment_proof_crud
from courtinvite.crud.crud_session_host import session_host_crud
from courtinvite.models.session import Session as SessionModel, utcnow
from courtinvite.schemas.session import SessionCreate, SessionUpdate
from courtinvite.utils.short_code import generate_public_code, normalize_public_code
from courtinvite.utils.slug import to_slug
from courtinvite.utils.timeutils import as_utc

logger = logging.getLogger(__name__)

MAX_PUBLIC_CODE_ATTEMPTS = 10


class CRUDSession(CRUDBase[SessionModel, SessionCreate, SessionUpdate]):
    def get_by_public_code(self, db: Session, *, public_code: str) -> Optional[SessionModel]:
        return db.query(self.model).filter(
            self.model.public_code == normalize_public_code(public_code)
        ).first()

    def get_for_host(
        self,
        db: Session,
        *,
        session_id: str,
        user_id: str,
        owner_only: bool = False,
    ) -> SessionModel:
        """
        Load a session the user can manage.

        Raises:
            SessionNotFoundError: Unknown session
            PermissionDeniedError: The user is not a host, or not the owner
                                   when owner_only is set
        """
        session_obj = self.get(db, session_id)
        if not session_obj:
            raise SessionNotFoundError()

        if session_obj.host_id == user_id:
            return session_obj

        role = session_host_crud.get_role(db, session_id=session_id, user_id=user_id)
        if role is None or (owner_only and role != HostRole.OWNER):
            raise PermissionDeniedError()
        return session_obj

    def get_multi_by_host(self, db: Session, *, user_id: str) -> List[SessionModel]:
        """Sessions the user owns or co-hosts, newest start first."""
        co_hosted = session_host_crud.list_session_ids_for_user(db, user_id=user_id)
        return db.query(self.model).filter(
            (self.model.host_id == user_id) | (self.model.id.in_(co_hosted))
        ).order_by(self.model.start_at.desc()).all()

    def create_with_host(
        self,
        db: Session,
        *,
        obj_in: SessionCreate,
        host_id: str,
        host_email: Optional[str] = None,
    ) -> SessionModel:
        """Create a draft session and its owner row in one transaction."""
        obj_in_data = obj_in.model_dump()
        try:
            db_obj = self.model(
                **obj_in_data,
                host_id=host_id,
                host_slug=to_slug(obj_in.host_name),
                status=SessionStatus.DRAFT,
            )
            db.add(db_obj)
            db.flush()
            session_host_crud.add_owner(
                db, session_id=db_obj.id, user_id=host_id, email=host_email
            )
            db.commit()
            db.refresh(db_obj)
        except Exception as e:
            logger.error(
                f"Failed to create session for host {host_id}: {str(e)}",
                exc_info=True,
                extra={"host_id": host_id},
            )
            db.rollback()
            raise

        logger.info(f"Draft session {db_obj.id} created by host {host_id}")
        return db_obj

    def update(self, db: Session, *, db_obj: SessionModel, obj_in: SessionUpdate) -> SessionModel:
        """
        Edit a session. A live session stays live while it is edited.

        On an open session the row is locked for the edit, capacity may not
        drop below the confirmed count, and seats opened by a larger capacity
        or a re-enabled waitlist go to waitlisted guests, oldest first.

        Raises:
            InvalidInputError: The edit would put end_at before start_at
            ConflictError: New capacity is below the confirmed count
        """
        update_data = obj_in.model_dump(exclude_unset=True)
        if "host_name" in update_data:
            update_data["host_slug"] = to_slug(update_data["host_name"])

        start_at = update_data.get("start_at", db_obj.start_at)
        end_at = update_data.get("end_at", db_obj.end_at)
        if end_at is not None and as_utc(end_at) < as_utc(start_at):
            raise InvalidInputError(
                "end_at must not be before start_at",
                details={"start_at": as_utc(start_at).isoformat()},
            )

        if db_obj.status != SessionStatus.OPEN:
            return super().update(db, db_obj=db_obj, obj_in=update_data)
        return self._update_live(db, db_obj=db_obj, update_data=update_data)

    def _update_live(self, db: Session, *, db_obj: SessionModel, update_data: dict) -> SessionModel:
        session_id = db_obj.id
        try:
            db.query(SessionModel).filter(
                SessionModel.id == session_id
            ).with_for_update().first()

            new_capacity = update_data.get("capacity", db_obj.capacity)
            if "capacity" in update_data and new_capacity is not None:
                confirmed = participant_crud.count_confirmed(db, session_id=session_id)
                if new_capacity < confirmed:
                    raise ConflictError(
                        f"{confirmed} players are confirmed. Remove players before "
                        f"lowering capacity to {new_capacity}.",
                        details={"capacity": new_capacity, "confirmed": confirmed},
                    )

            for field, value in update_data.items():
                setattr(db_obj, field, value)

            promoted = participant_crud.fill_from_waitlist(db, session_obj=db_obj)
            db.commit()
            db.refresh(db_obj)

        except AppError:
            db.rollback()
            raise
        except Exception as e:
            logger.error(
                f"Failed to update live session {session_id}: {str(e)}",
                exc_info=True,
                extra={"session_id": session_id},
            )
            db.rollback()
            raise

        if promoted:
            logger.info(
                f"Session {session_id} edit promoted {len(promoted)} waitlisted participant(s)",
                extra={"session_id": session_id},
            )
        return db_obj

    def count_live(self, db: Session, *, host_id: str) -> int:
        return db.query(func.count(self.model.id)).filter(
            self.model.host_id == host_id,
            self.model.status == SessionStatus.OPEN,
        ).scalar() or 0

    def list_live(self, db: Session, *, host_id: str) -> List[SessionModel]:
        return db.query(self.model).filter(
            self.model.host_id == host_id,
            self.model.status == SessionStatus.OPEN,
        ).order_by(self.model.start_at.asc()).all()

    def publish(self, db: Session, *, db_obj: SessionModel) -> SessionModel:
        """
        Open a session for RSVPs under a public code.

        The live-session cap is checked inside the UPDATE itself: the row is
        only written while the host has fewer than MAX_LIVE_SESSIONS other open
        sessions. Each attempt first takes the host's owner lock, so on
        Postgres a concurrent publish waits and then counts the committed row.

        Raises:
            LimitReachedError: The host already has the maximum live sessions
        """
        if db_obj.status == SessionStatus.OPEN and db_obj.public_code:
            return db_obj

        session_id = db_obj.id
        host_id = db_obj.host_id
        host_slug = to_slug(db_obj.host_name)

        other = aliased(SessionModel)
        other_live = (
            select(func.count(other.id))
            .where(
                other.host_id == host_id,
                other.status == SessionStatus.OPEN,
                other.id != session_id,
            )
            .scalar_subquery()
        )

        for attempt in range(MAX_PUBLIC_CODE_ATTEMPTS):
            public_code = db_obj.public_code or generate_public_code()
            stmt = (
                update(SessionModel)
                .where(SessionModel.id == session_id, other_live < MAX_LIVE_SESSIONS)
                .values(
                    status=SessionStatus.OPEN,
                    public_code=public_code,
                    host_slug=host_slug,
                    updated_at=utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
            try:
                lock_owner(db, "live_sessions", host_id)
                result = db.execute(stmt)
                if result.rowcount == 0:
                    db.rollback()
                    logger.info(f"Publish blocked for host {host_id}: live session limit reached")
                    raise LimitReachedError(
                        f"You can have at most {MAX_LIVE_SESSIONS} live sessions. "
                        "Unpublish one before publishing another.",
                        details={"max_live": MAX_LIVE_SESSIONS},
                    )
                db.commit()
                break
            except IntegrityError:
                # Public code collision; try a fresh one
                db.rollback()
                logger.warning(
                    f"Public code collision publishing session {session_id} (attempt {attempt + 1})"
                )
        else:
            raise RuntimeError(
                f"Could not allocate a public code after {MAX_PUBLIC_CODE_ATTEMPTS} attempts"
            )

        db.refresh(db_obj)
        logger.info(
            f"Session {session_id} published with code {db_obj.public_code}",
            extra={"session_id": session_id, "host_id": host_id},
        )
        return db_obj

    def unpublish(self, db: Session, *, db_obj: SessionModel) -> bool:
        """
        Delete a live session and everything hanging off it.

        Returns:
            True if the session was deleted, False if it was not live
        """
        if db_obj.status != SessionStatus.OPEN:
            return False

        session_id = db_obj.id
        try:
            db.delete(db_obj)
            db.commit()
        except Exception as e:
            logger.error(
                f"Failed to unpublish session {session_id}: {str(e)}",
                exc_info=True,
                extra={"session_id": session_id},
            )
            db.rollback()
            raise

        logger.info(f"Session {session_id} unpublished and deleted")
        return True

    def close(self, db: Session, *, db_obj: SessionModel) -> SessionModel:
        return super().update(db, db_obj=db_obj, obj_in={"status": SessionStatus.CLOSED})

    def set_waitlist_enabled(self, db: Session, *, db_obj: SessionModel, enabled: bool) -> SessionModel:
        return self.update(db, db_obj=db_obj, obj_in=SessionUpdate(waitlist_enabled=enabled))

    def set_cover_url(self, db: Session, *, db_obj: SessionModel, cover_url: Optional[str]) -> SessionModel:
        return super().update(db, db_obj=db_obj, obj_in={"cover_url": cover_url})

    def expire_ended_sessions(self, db: Session, *, now: Optional[datetime] = None) -> int:
        """
        Delete open sessions that ended more than the grace period ago.

        A session without an end time is treated as ending at its start.
        Participants, payment proofs and host rows go with it (ON DELETE CASCADE).

        Returns:
            Number of sessions deleted
        """
        now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
        cutoff = now - timedelta(hours=SESSION_EXPIRY_GRACE_HOURS)

        try:
            result = db.execute(
                delete(SessionModel)
                .where(
                    SessionModel.status == SessionStatus.OPEN,
                    func.coalesce(SessionModel.end_at, SessionModel.start_at) <= cutoff,
                )
                .execution_options(synchronize_session=False)
            )
            db.commit()
        except Exception as e:
            logger.error(f"Failed to expire ended sessions: {str(e)}", exc_info=True)
            db.rollback()
            raise

        return result.rowcount

    def analytics(self, db: Session, *, db_obj: SessionModel) -> dict:
        """Attendance and payment numbers for the host dashboard."""
        session_id = db_obj.id
        accepted_list = participant_crud.list_by_status(
            db, session_id=session_id, status=ParticipantStatus.CONFIRMED
        )
        declined_list = participant_crud.list_by_status(
            db, session_id=session_id, status=ParticipantStatus.CANCELLED
        )
        waitlist = participant_crud.list_by_status(
            db, session_id=session_id, status=ParticipantStatus.WAITLISTED
        )
        pulled_out = participant_crud.count_by_status(
            db, session_id=session_id, status=ParticipantStatus.PULLED_OUT
        )

        accepted = len(accepted_list)
        declined = len(declined_list)
        unanswered = (
            max(0, db_obj.capacity - accepted - declined) if db_obj.capacity is not None else 0
        )

        payment_stats = payment_proof_crud.stats(db, session_id=session_id)
        price = db_obj.price if db_obj.price is not None else Decimal("0")

        return {
            "attendance": {
                "accepted": accepted,
                "declined": declined,
                "waitlisted": len(waitlist),
                "pulled_out": pulled_out,
                "capacity": db_obj.capacity,
                "unanswered": unanswered,
            },
            "payments": {
                "collected": payment_stats["collected"],
                "total": price * accepted,
                "received_count": payment_stats["received_count"],
                "pending_count": payment_stats["pending_count"],
                "confirmed_count": payment_stats["confirmed_count"],
            },
            "accepted_list": accepted_list,
            "declined_list": declined_list,
            "waitlist": waitlist,
        }


session_crud = CRUDSession(SessionModel)
