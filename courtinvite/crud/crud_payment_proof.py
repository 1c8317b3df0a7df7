# courtinvite/crud/crud_payment_proof.py
"""
CRUD operations for payment proofs.

Guests upload a screenshot of their transfer; the host reviews it. Cash
payments are recorded by the host directly as approved rows with no image.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional
import logging

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from courtinvite.constants.rsvp import ParticipantStatus, PaymentStatus
from courtinvite.core.errors import ConflictError, NotFoundError, PermissionDeniedError
from courtinvite.core.storage import ObjectStorage, PAYMENT_PROOF_PREFIX
from courtinvite.models.participant import Participant
from courtinvite.models.payment_proof import PaymentProof
from courtinvite.models.session import utcnow

logger = logging.getLogger(__name__)


class CRUDPaymentProof:
    """CRUD operations for PaymentProof."""

    def get(self, db: Session, *, session_id: str, proof_id: str) -> Optional[PaymentProof]:
        return db.query(PaymentProof).filter(
            and_(
                PaymentProof.id == proof_id,
                PaymentProof.session_id == session_id,
            )
        ).first()

    def submit(
        self,
        db: Session,
        storage: ObjectStorage,
        *,
        participant: Participant,
        body: bytes,
        content_type: str,
        extension: str,
        amount: Optional[Decimal] = None,
        currency: Optional[str] = None,
    ) -> PaymentProof:
        """
        Store a proof image and create a pending_review row for it.

        If the row cannot be written the uploaded object is removed again.

        Raises:
            PermissionDeniedError: The participant is not confirmed
            StorageError: The upload failed
        """
        if participant.status != ParticipantStatus.CONFIRMED:
            raise PermissionDeniedError("Only confirmed participants can upload a payment proof")

        session_id = participant.session_id
        timestamp = int(datetime.now(timezone.utc).timestamp() * 1000)
        object_name = (
            f"{PAYMENT_PROOF_PREFIX}/{session_id}/{participant.id}/{timestamp}.{extension}"
        )

        image_url = storage.upload_bytes(object_name, body, content_type)

        try:
            proof = PaymentProof(
                session_id=session_id,
                participant_id=participant.id,
                proof_image_url=image_url,
                amount=amount,
                currency=currency,
                payment_status=PaymentStatus.PENDING_REVIEW,
            )
            db.add(proof)
            db.commit()
            db.refresh(proof)
        except Exception as e:
            logger.error(
                f"Failed to save payment proof for participant {participant.id}: {str(e)}",
                exc_info=True,
                extra={"session_id": session_id, "participant_id": participant.id},
            )
            db.rollback()
            storage.delete(object_name)
            raise

        logger.info(
            f"Payment proof {proof.id} uploaded for session {session_id}",
            extra={"session_id": session_id, "participant_id": participant.id},
        )
        return proof

    def list_latest_for_session(self, db: Session, *, session_id: str) -> List[dict]:
        """One entry per confirmed, non-host participant with their latest proof."""
        participants = db.query(Participant).filter(
            and_(
                Participant.session_id == session_id,
                Participant.status == ParticipantStatus.CONFIRMED,
                Participant.is_host.is_(False),
            )
        ).order_by(Participant.created_at.asc()).all()

        proofs = db.query(PaymentProof).filter(
            PaymentProof.session_id == session_id
        ).order_by(PaymentProof.created_at.desc(), PaymentProof.id.desc()).all()

        latest: Dict[str, PaymentProof] = {}
        for proof in proofs:
            latest.setdefault(proof.participant_id, proof)

        uploads = []
        for participant in participants:
            proof = latest.get(participant.id)
            uploads.append({
                "id": proof.id if proof else None,
                "participant_id": participant.id,
                "participant_name": participant.display_name,
                "proof_image_url": proof.proof_image_url if proof else None,
                "payment_status": proof.payment_status if proof else None,
                "created_at": proof.created_at if proof else None,
                "amount": proof.amount if proof else None,
                "currency": proof.currency if proof else None,
                "has_proof": bool(proof and proof.proof_image_url),
            })
        return uploads

    def set_status(
        self,
        db: Session,
        *,
        session_id: str,
        proof_id: str,
        status: str,
    ) -> PaymentProof:
        """Approve or reject a proof. Repeating the same decision is a no-op."""
        proof = self.get(db, session_id=session_id, proof_id=proof_id)
        if not proof:
            raise NotFoundError("Payment proof not found")

        if proof.payment_status == status:
            return proof

        proof.payment_status = status
        proof.processed_at = utcnow()
        db.commit()
        db.refresh(proof)

        logger.info(f"Payment proof {proof_id} marked {status}", extra={"session_id": session_id})
        return proof

    def mark_cash_paid(
        self,
        db: Session,
        *,
        session_id: str,
        participant_id: str,
        amount: Optional[Decimal] = None,
        currency: Optional[str] = None,
    ) -> PaymentProof:
        """
        Record a cash payment as an approved proof without an image.

        Raises:
            NotFoundError: The participant is not in this session
            ConflictError: The participant already has an approved payment
        """
        participant = db.query(Participant).filter(
            and_(
                Participant.id == participant_id,
                Participant.session_id == session_id,
            )
        ).first()
        if not participant:
            raise NotFoundError("Participant not found")

        already_paid = db.query(PaymentProof.id).filter(
            and_(
                PaymentProof.participant_id == participant_id,
                PaymentProof.payment_status == PaymentStatus.APPROVED,
            )
        ).first()
        if already_paid:
            raise ConflictError("Payment already approved for this participant")

        now = utcnow()
        proof = PaymentProof(
            session_id=session_id,
            participant_id=participant_id,
            proof_image_url=None,
            amount=amount,
            currency=currency,
            payment_status=PaymentStatus.APPROVED,
            created_at=now,
            processed_at=now,
        )
        db.add(proof)
        db.commit()
        db.refresh(proof)

        logger.info(f"Cash payment recorded for participant {participant_id}")
        return proof

    def stats(self, db: Session, *, session_id: str) -> dict:
        """
        Payment counts per participant plus the approved total.

        received counts participants with a pending or approved proof,
        pending those awaiting review, confirmed those approved.
        """
        def _participants_with(*statuses: str) -> int:
            return db.query(func.count(func.distinct(PaymentProof.participant_id))).filter(
                PaymentProof.session_id == session_id,
                PaymentProof.payment_status.in_(statuses),
            ).scalar() or 0

        collected = db.query(func.sum(PaymentProof.amount)).filter(
            PaymentProof.session_id == session_id,
            PaymentProof.payment_status == PaymentStatus.APPROVED,
        ).scalar()

        return {
            "received_count": _participants_with(
                PaymentStatus.PENDING_REVIEW, PaymentStatus.APPROVED
            ),
            "pending_count": _participants_with(PaymentStatus.PENDING_REVIEW),
            "confirmed_count": _participants_with(PaymentStatus.APPROVED),
            "collected": Decimal(str(collected)) if collected is not None else Decimal("0"),
        }


payment_proof_crud = CRUDPaymentProof()
