from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from courtinvite.constants.rsvp import PaymentStatus
from courtinvite.core.errors import ConflictError, NotFoundError, PermissionDeniedError
from courtinvite.crud.crud_participant import participant_crud
from courtinvite.crud.crud_payment_proof import payment_proof_crud
from courtinvite.models.payment_proof import PaymentProof
from tests.utils.session import create_random_session, fill_session

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def _submit(db: Session, storage, participant):
    return payment_proof_crud.submit(
        db,
        storage,
        participant=participant,
        body=PNG_BYTES,
        content_type="image/png",
        extension="png",
        amount=Decimal("12.50"),
        currency="SGD",
    )


def test_submit_uploads_image_and_creates_pending_proof(db_session: Session, mock_storage):
    session_obj = create_random_session(db_session)
    participant = fill_session(db_session, session_obj, 1)[0]

    proof = _submit(db_session, mock_storage, participant)

    assert proof.payment_status == PaymentStatus.PENDING_REVIEW
    assert proof.participant_id == participant.id
    object_name = mock_storage.upload_bytes.call_args.args[0]
    assert object_name.startswith(f"payment-proofs/{session_obj.id}/{participant.id}/")
    assert object_name.endswith(".png")
    assert proof.proof_image_url == f"https://cdn.courtinvite.test/{object_name}"


def test_only_confirmed_participants_can_submit(db_session: Session, mock_storage):
    session_obj = create_random_session(db_session)
    declined = participant_crud.decline(db_session, session_id=session_obj.id, guest_key="guest:a", name="Sam")

    with pytest.raises(PermissionDeniedError):
        _submit(db_session, mock_storage, declined)

    mock_storage.upload_bytes.assert_not_called()


def test_failed_insert_removes_uploaded_object(db_session: Session, mock_storage, monkeypatch):
    session_obj = create_random_session(db_session)
    participant = fill_session(db_session, session_obj, 1)[0]
    participant_id = participant.id
    monkeypatch.setattr(db_session, "commit", MagicMock(side_effect=SQLAlchemyError("disk full")))

    with pytest.raises(SQLAlchemyError):
        _submit(db_session, mock_storage, participant)

    object_name = mock_storage.upload_bytes.call_args.args[0]
    mock_storage.delete.assert_called_once_with(object_name)
    monkeypatch.undo()
    assert db_session.query(PaymentProof).filter(PaymentProof.participant_id == participant_id).count() == 0


def test_latest_list_shows_newest_proof_per_participant(db_session: Session, mock_storage):
    session_obj = create_random_session(db_session)
    paid, unpaid = fill_session(db_session, session_obj, 2)
    _submit(db_session, mock_storage, paid)
    newest = _submit(db_session, mock_storage, paid)

    uploads = payment_proof_crud.list_latest_for_session(db_session, session_id=session_obj.id)

    assert [u["participant_name"] for u in uploads] == ["Player guest0", "Player guest1"]
    assert uploads[0]["id"] == newest.id
    assert uploads[0]["has_proof"] is True
    assert uploads[1]["id"] is None
    assert uploads[1]["has_proof"] is False


def test_host_participants_are_left_out_of_payments(db_session: Session):
    session_obj = create_random_session(db_session)
    participant_crud.join(db_session, session_id=session_obj.id, guest_key="user:host_1", name="Alex", is_host=True)

    assert payment_proof_crud.list_latest_for_session(db_session, session_id=session_obj.id) == []


def test_approve_is_idempotent(db_session: Session, mock_storage):
    session_obj = create_random_session(db_session)
    participant = fill_session(db_session, session_obj, 1)[0]
    proof = _submit(db_session, mock_storage, participant)

    approved = payment_proof_crud.set_status(
        db_session, session_id=session_obj.id, proof_id=proof.id, status=PaymentStatus.APPROVED
    )
    processed_at = approved.processed_at
    again = payment_proof_crud.set_status(
        db_session, session_id=session_obj.id, proof_id=proof.id, status=PaymentStatus.APPROVED
    )

    assert again.payment_status == PaymentStatus.APPROVED
    assert again.processed_at == processed_at


def test_set_status_of_unknown_proof(db_session: Session):
    session_obj = create_random_session(db_session)
    with pytest.raises(NotFoundError):
        payment_proof_crud.set_status(
            db_session, session_id=session_obj.id, proof_id="missing", status=PaymentStatus.REJECTED
        )


def test_cash_payment_is_recorded_once(db_session: Session):
    session_obj = create_random_session(db_session)
    participant = fill_session(db_session, session_obj, 1)[0]

    proof = payment_proof_crud.mark_cash_paid(
        db_session, session_id=session_obj.id, participant_id=participant.id, amount=Decimal("12.50")
    )

    assert proof.payment_status == PaymentStatus.APPROVED
    assert proof.proof_image_url is None
    with pytest.raises(ConflictError):
        payment_proof_crud.mark_cash_paid(
            db_session, session_id=session_obj.id, participant_id=participant.id
        )


def test_stats_count_participants_not_uploads(db_session: Session, mock_storage):
    session_obj = create_random_session(db_session)
    first, second, third = fill_session(db_session, session_obj, 3)
    _submit(db_session, mock_storage, first)
    _submit(db_session, mock_storage, first)
    proof = _submit(db_session, mock_storage, second)
    payment_proof_crud.set_status(
        db_session, session_id=session_obj.id, proof_id=proof.id, status=PaymentStatus.APPROVED
    )
    payment_proof_crud.mark_cash_paid(
        db_session, session_id=session_obj.id, participant_id=third.id, amount=Decimal("10.00")
    )

    stats = payment_proof_crud.stats(db_session, session_id=session_obj.id)

    assert stats["received_count"] == 3
    assert stats["pending_count"] == 1
    assert stats["confirmed_count"] == 2
    assert stats["collected"] == Decimal("22.50")
