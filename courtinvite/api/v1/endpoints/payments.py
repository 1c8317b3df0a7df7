# courtinvite/api/v1/endpoints/payments.py
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from courtinvite.api import deps
from courtinvite.constants.rsvp import PaymentStatus
from courtinvite.core.config import settings
from courtinvite.core.errors import NotFoundError
from courtinvite.core.limiter import limiter
from courtinvite.core.storage import ObjectStorage
from courtinvite.crud.crud_participant import participant_crud
from courtinvite.crud.crud_payment_proof import payment_proof_crud
from courtinvite.crud.crud_session import session_crud
from courtinvite.schemas.payment import (
    CashPaymentRequest,
    PaymentProof as PaymentProofSchema,
    PaymentProofSubmit,
    PaymentProofSubmitResponse,
    PaymentUploadsResponse,
)
from courtinvite.schemas.token import TokenPayload
from courtinvite.services.identity import VisitorIdentity
from courtinvite.services.public_view import find_public_session
from courtinvite.utils.validators import decode_base64_image

router = APIRouter(tags=["Payments"])


@router.post(
    "/rsvp/{public_code}/payment-proof",
    response_model=PaymentProofSubmitResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.RSVP_RATE_LIMIT)
def submit_payment_proof(
    public_code: str,
    proof_in: PaymentProofSubmit,
    request: Request,
    db: Session = Depends(deps.get_db),
    storage: ObjectStorage = Depends(deps.get_object_storage),
    identity: Optional[VisitorIdentity] = Depends(deps.get_visitor_identity),
):
    """
    Upload a transfer screenshot for review by the host.

    **Errors**:
    - 400 INVALID_IMAGE
    - 403: Caller is not a confirmed participant
    - 502 STORAGE_ERROR
    """
    session_obj = find_public_session(db, public_code=public_code)
    participant = None
    if identity is not None:
        participant = participant_crud.get_by_guest_key(
            db, session_id=session_obj.id, guest_key=identity.key
        )
    if participant is None:
        raise NotFoundError("You have not RSVP'd to this session")

    body, content_type, ext = decode_base64_image(proof_in.file_data, proof_in.file_name)
    proof = payment_proof_crud.submit(
        db,
        storage,
        participant=participant,
        body=body,
        content_type=content_type,
        extension=ext,
        amount=proof_in.amount if proof_in.amount is not None else session_obj.price,
        currency=proof_in.currency or session_obj.currency,
    )
    return PaymentProofSubmitResponse(payment_proof_id=proof.id)


@router.get("/host/sessions/{session_id}/payments", response_model=PaymentUploadsResponse)
def list_payment_uploads(
    session_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Each confirmed guest with their most recent payment proof."""
    session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    uploads = payment_proof_crud.list_latest_for_session(db, session_id=session_id)
    return PaymentUploadsResponse(uploads=uploads)


@router.post(
    "/host/sessions/{session_id}/payments/{proof_id}/approve",
    response_model=PaymentProofSchema,
)
def approve_payment(
    session_id: str,
    proof_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    return payment_proof_crud.set_status(
        db, session_id=session_id, proof_id=proof_id, status=PaymentStatus.APPROVED
    )


@router.post(
    "/host/sessions/{session_id}/payments/{proof_id}/reject",
    response_model=PaymentProofSchema,
)
def reject_payment(
    session_id: str,
    proof_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    return payment_proof_crud.set_status(
        db, session_id=session_id, proof_id=proof_id, status=PaymentStatus.REJECTED
    )


@router.post(
    "/host/sessions/{session_id}/participants/{participant_id}/cash-payment",
    response_model=PaymentProofSchema,
    status_code=status.HTTP_201_CREATED,
)
def mark_cash_payment(
    session_id: str,
    participant_id: str,
    cash_in: CashPaymentRequest,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Record that a participant paid in cash."""
    session_obj = session_crud.get_for_host(db, session_id=session_id, user_id=current_user.sub)
    return payment_proof_crud.mark_cash_paid(
        db,
        session_id=session_id,
        participant_id=participant_id,
        amount=cash_in.amount if cash_in.amount is not None else session_obj.price,
        currency=cash_in.currency or session_obj.currency,
    )
