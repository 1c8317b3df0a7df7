# courtinvite/crud/crud_participant.py
"""
CRUD operations for session participants.

Every RSVP write locks the session row first so the confirmed count read for
the admission decision cannot change before the write commits. Whenever a
confirmed seat is released the oldest waitlisted participant is promoted in
the same transaction.
"""

from typing import List, Optional
import logging

from sqlalchemy import and_, func, update
from sqlalchemy.orm import Session

from courtinvite.constants.rsvp import ParticipantStatus, RsvpAction, SessionStatus
from courtinvite.core.errors import (
    AppError,
    CapacityExceededError,
    ConflictError,
    NotFoundError,
    SessionNotFoundError,
    SessionNotOpenError,
)
from courtinvite.models.participant import Participant
from courtinvite.models.session import Session as SessionModel, utcnow
from courtinvite.services.admission import decide_admission
from courtinvite.utils.validators import clean_phone, validate_display_name

logger = logging.getLogger(__name__)


class CRUDParticipant:
    """CRUD operations for Participant."""

    def get(self, db: Session, *, session_id: str, participant_id: str) -> Optional[Participant]:
        return db.query(Participant).filter(
            and_(
                Participant.id == participant_id,
                Participant.session_id == session_id,
            )
        ).first()

    def get_by_guest_key(
        self,
        db: Session,
        *,
        session_id: str,
        guest_key: str,
    ) -> Optional[Participant]:
        """Get a visitor's participant row for a session (any status)."""
        return db.query(Participant).filter(
            and_(
                Participant.session_id == session_id,
                Participant.guest_key == guest_key,
            )
        ).first()

    def count_by_status(self, db: Session, *, session_id: str, status: str) -> int:
        return db.query(func.count(Participant.id)).filter(
            and_(
                Participant.session_id == session_id,
                Participant.status == status,
            )
        ).scalar() or 0

    def count_confirmed(self, db: Session, *, session_id: str) -> int:
        """Count confirmed participants for a session."""
        return self.count_by_status(
            db, session_id=session_id, status=ParticipantStatus.CONFIRMED
        )

    def list_by_status(
        self,
        db: Session,
        *,
        session_id: str,
        status: str,
    ) -> List[Participant]:
        """Participants with the given status, oldest first."""
        return db.query(Participant).filter(
            and_(
                Participant.session_id == session_id,
                Participant.status == status,
            )
        ).order_by(Participant.created_at.asc(), Participant.id.asc()).all()

    def _lock_open_session(self, db: Session, session_id: str) -> SessionModel:
        # SELECT FOR UPDATE serializes concurrent RSVPs for the same session
        session_obj = db.query(SessionModel).filter(
            SessionModel.id == session_id
        ).with_for_update().first()

        if not session_obj:
            raise SessionNotFoundError()
        if session_obj.status != SessionStatus.OPEN:
            raise SessionNotOpenError(session_obj.status)
        return session_obj

    def _promote_next(self, db: Session, *, session_obj: SessionModel) -> Optional[Participant]:
        """
        Move the oldest waitlisted participant into a free seat.

        Must run inside the transaction holding the session row lock.
        """
        if not session_obj.waitlist_enabled:
            return None

        db.flush()
        if session_obj.capacity is not None:
            confirmed = self.count_confirmed(db, session_id=session_obj.id)
            if confirmed >= session_obj.capacity:
                return None

        next_up = db.query(Participant).filter(
            and_(
                Participant.session_id == session_obj.id,
                Participant.status == ParticipantStatus.WAITLISTED,
            )
        ).order_by(Participant.created_at.asc(), Participant.id.asc()).first()

        if next_up is None:
            return None

        next_up.status = ParticipantStatus.CONFIRMED
        logger.info(
            f"Promoted participant {next_up.id} from waitlist for session {session_obj.id}",
            extra={"session_id": session_obj.id, "participant_id": next_up.id},
        )
        return next_up

    def fill_from_waitlist(self, db: Session, *, session_obj: SessionModel) -> List[Participant]:
        """
        Promote waitlisted participants, oldest first, until the session is full.

        Must run inside the transaction holding the session row lock.
        """
        promoted = []
        while True:
            next_up = self._promote_next(db, session_obj=session_obj)
            if next_up is None:
                return promoted
            promoted.append(next_up)

    def respond(
        self,
        db: Session,
        *,
        session_id: str,
        guest_key: str,
        action: str,
        name: str,
        phone: Optional[str] = None,
        is_host: bool = False,
    ) -> Participant:
        """
        Record a join or decline for a visitor.

        The participant row is upserted by (session_id, guest_key), so repeat
        RSVPs from the same visitor always update one row.

        Raises:
            InvalidNameError: Blank or over-long name
            SessionNotFoundError: Unknown session
            SessionNotOpenError: Session is not accepting RSVPs
            CapacityExceededError: Session is full and the waitlist is off
        """
        display_name = validate_display_name(name)
        phone = clean_phone(phone)

        try:
            session_obj = self._lock_open_session(db, session_id)

            participant = self.get_by_guest_key(
                db, session_id=session_id, guest_key=guest_key
            )
            previous_status = participant.status if participant else None
            confirmed_count = self.count_confirmed(db, session_id=session_id)

            decision = decide_admission(
                action=action,
                current_status=previous_status,
                capacity=session_obj.capacity,
                confirmed_count=confirmed_count,
                waitlist_enabled=session_obj.waitlist_enabled,
            )

            if decision.rejected:
                logger.info(
                    f"RSVP rejected for session {session_id} at capacity "
                    f"({confirmed_count}/{session_obj.capacity})"
                )
                raise CapacityExceededError(
                    details={"capacity": session_obj.capacity, "confirmed": confirmed_count}
                )

            if participant is None:
                participant = Participant(
                    session_id=session_id,
                    guest_key=guest_key,
                    display_name=display_name,
                    contact_phone=phone,
                    status=decision.status,
                    is_host=is_host,
                )
                db.add(participant)
            else:
                participant.display_name = display_name
                if phone is not None:
                    participant.contact_phone = phone
                # Re-entering the queue goes to the back of it
                if (
                    decision.status == ParticipantStatus.WAITLISTED
                    and previous_status != ParticipantStatus.WAITLISTED
                ):
                    participant.created_at = utcnow()
                participant.status = decision.status

            if (
                previous_status == ParticipantStatus.CONFIRMED
                and decision.status != ParticipantStatus.CONFIRMED
            ):
                self._promote_next(db, session_obj=session_obj)

            db.commit()
            db.refresh(participant)

        except AppError:
            db.rollback()
            raise
        except Exception as e:
            logger.error(
                f"Failed to record RSVP for session {session_id}: {str(e)}",
                exc_info=True,
                extra={"session_id": session_id, "action": action},
            )
            db.rollback()
            raise

        logger.info(
            f"RSVP {action} recorded for session {session_id}: {participant.status}",
            extra={"session_id": session_id, "participant_id": participant.id},
        )
        return participant

    def join(self, db: Session, *, session_id: str, guest_key: str, name: str,
             phone: Optional[str] = None, is_host: bool = False) -> Participant:
        return self.respond(
            db, session_id=session_id, guest_key=guest_key, action=RsvpAction.JOIN,
            name=name, phone=phone, is_host=is_host,
        )

    def decline(self, db: Session, *, session_id: str, guest_key: str, name: str,
                phone: Optional[str] = None, is_host: bool = False) -> Participant:
        return self.respond(
            db, session_id=session_id, guest_key=guest_key, action=RsvpAction.DECLINE,
            name=name, phone=phone, is_host=is_host,
        )

    def pull_out(
        self,
        db: Session,
        *,
        session_id: str,
        guest_key: str,
        reason: Optional[str] = None,
    ) -> Participant:
        """
        Give up a confirmed seat, leaving a note for the host.

        Raises:
            NotFoundError: The visitor has not RSVP'd
            ConflictError: The visitor is not confirmed
        """
        try:
            session_obj = self._lock_open_session(db, session_id)
            participant = self.get_by_guest_key(
                db, session_id=session_id, guest_key=guest_key
            )
            if participant is None:
                raise NotFoundError("You have not RSVP'd to this session")
            if participant.status != ParticipantStatus.CONFIRMED:
                raise ConflictError("Only confirmed participants can pull out")

            participant.status = ParticipantStatus.PULLED_OUT
            participant.pull_out_reason = (reason or "").strip() or None
            participant.pull_out_seen = False

            self._promote_next(db, session_obj=session_obj)
            db.commit()
            db.refresh(participant)

        except AppError:
            db.rollback()
            raise
        except Exception as e:
            logger.error(
                f"Failed to pull out of session {session_id}: {str(e)}",
                exc_info=True,
                extra={"session_id": session_id},
            )
            db.rollback()
            raise

        logger.info(f"Participant {participant.id} pulled out of session {session_id}")
        return participant

    def remove(self, db: Session, *, session_id: str, participant_id: str) -> None:
        """Host removal of a participant row. Frees the seat if it was confirmed."""
        try:
            session_obj = db.query(SessionModel).filter(
                SessionModel.id == session_id
            ).with_for_update().first()
            if not session_obj:
                raise SessionNotFoundError()

            participant = self.get(db, session_id=session_id, participant_id=participant_id)
            if participant is None:
                raise NotFoundError("Participant not found")

            was_confirmed = participant.status == ParticipantStatus.CONFIRMED
            db.delete(participant)
            if was_confirmed:
                self._promote_next(db, session_obj=session_obj)
            db.commit()

        except AppError:
            db.rollback()
            raise
        except Exception as e:
            logger.error(
                f"Failed to remove participant {participant_id}: {str(e)}",
                exc_info=True,
                extra={"session_id": session_id, "participant_id": participant_id},
            )
            db.rollback()
            raise

        logger.info(f"Participant {participant_id} removed from session {session_id}")

    def list_unseen_pull_outs(self, db: Session, *, session_id: str) -> List[Participant]:
        return db.query(Participant).filter(
            and_(
                Participant.session_id == session_id,
                Participant.status == ParticipantStatus.PULLED_OUT,
                Participant.pull_out_seen.is_(False),
            )
        ).order_by(Participant.updated_at.asc()).all()

    def mark_pull_outs_seen(self, db: Session, *, session_id: str) -> int:
        result = db.execute(
            update(Participant)
            .where(
                Participant.session_id == session_id,
                Participant.status == ParticipantStatus.PULLED_OUT,
                Participant.pull_out_seen.is_(False),
            )
            .values(pull_out_seen=True)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        return result.rowcount


participant_crud = CRUDParticipant()
