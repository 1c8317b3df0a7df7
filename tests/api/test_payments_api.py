import base64

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tests.utils.auth import get_guest_headers, get_user_authentication_headers
from tests.utils.session import create_random_session

API = "/api/v1"

PNG_B64 = base64.b64encode(b"\x89PNG\r\n\x1a\n" + b"\x00" * 32).decode()


def _join(client: TestClient, session_obj, name: str = "Sam") -> dict:
    return client.post(f"{API}/rsvp/{session_obj.public_code}/join", json={"name": name}).json()


def _upload(client: TestClient, session_obj, guest_token: str, **overrides):
    payload = {"file_data": f"data:image/png;base64,{PNG_B64}", "file_name": "receipt.png"}
    payload.update(overrides)
    return client.post(
        f"{API}/rsvp/{session_obj.public_code}/payment-proof",
        json=payload,
        headers=get_guest_headers(guest_token),
    )


def test_confirmed_guest_uploads_proof(client: TestClient, db_session: Session, mock_storage):
    session_obj = create_random_session(db_session)
    joined = _join(client, session_obj)

    response = _upload(client, session_obj, joined["guest_token"])

    assert response.status_code == 201
    assert response.json()["payment_proof_id"]
    object_name, body, content_type = mock_storage.upload_bytes.call_args.args
    assert content_type == "image/png"
    assert body.startswith(b"\x89PNG")

    uploads = client.get(
        f"{API}/host/sessions/{session_obj.id}/payments", headers=get_user_authentication_headers()
    ).json()["uploads"]
    assert len(uploads) == 1
    assert uploads[0]["payment_status"] == "pending_review"
    assert uploads[0]["amount"] == "12.50"
    assert uploads[0]["proof_image_url"] == f"https://cdn.courtinvite.test/{object_name}"


def test_invalid_image_is_rejected(client: TestClient, db_session: Session, mock_storage):
    session_obj = create_random_session(db_session)
    joined = _join(client, session_obj)

    response = _upload(client, session_obj, joined["guest_token"], file_data="%%%", file_name="receipt.png")

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_IMAGE"
    mock_storage.upload_bytes.assert_not_called()


def test_waitlisted_guest_cannot_upload(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session, capacity=1)
    _join(client, session_obj, "Sam")
    waiting = _join(client, session_obj, "Kim")

    response = _upload(client, session_obj, waiting["guest_token"])

    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


def test_upload_without_rsvp_is_not_found(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)

    response = client.post(
        f"{API}/rsvp/{session_obj.public_code}/payment-proof",
        json={"file_data": PNG_B64, "file_name": "receipt.png"},
    )

    assert response.status_code == 404


def test_host_approves_and_rejects(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)
    joined = _join(client, session_obj)
    proof_id = _upload(client, session_obj, joined["guest_token"]).json()["payment_proof_id"]
    headers = get_user_authentication_headers()

    approved = client.post(
        f"{API}/host/sessions/{session_obj.id}/payments/{proof_id}/approve", headers=headers
    )
    approved_again = client.post(
        f"{API}/host/sessions/{session_obj.id}/payments/{proof_id}/approve", headers=headers
    )
    rejected = client.post(
        f"{API}/host/sessions/{session_obj.id}/payments/{proof_id}/reject", headers=headers
    )

    assert approved.json()["payment_status"] == "approved"
    assert approved_again.status_code == 200
    assert approved_again.json()["processed_at"] == approved.json()["processed_at"]
    assert rejected.json()["payment_status"] == "rejected"


def test_guests_cannot_review_payments(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)

    response = client.get(
        f"{API}/host/sessions/{session_obj.id}/payments", headers=get_user_authentication_headers("guest")
    )

    assert response.status_code == 403


def test_cash_payment_uses_session_price(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)
    joined = _join(client, session_obj)
    headers = get_user_authentication_headers()
    url = f"{API}/host/sessions/{session_obj.id}/participants/{joined['participant_id']}/cash-payment"

    first = client.post(url, json={}, headers=headers)
    second = client.post(url, json={}, headers=headers)

    assert first.status_code == 201
    assert first.json()["payment_status"] == "approved"
    assert first.json()["amount"] == "12.50"
    assert first.json()["currency"] == "SGD"
    assert second.status_code == 409
    assert second.json()["code"] == "CONFLICT"
