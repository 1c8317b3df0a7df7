from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from courtinvite.constants.rsvp import ParticipantStatus
from courtinvite.crud.crud_participant import participant_crud
from courtinvite.crud.crud_session import session_crud
from tests.utils.auth import get_guest_headers, get_user_authentication_headers
from tests.utils.session import create_random_session, fill_session

API = "/api/v1"


def test_first_rsvp_issues_guest_token(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)

    response = client.post(f"{API}/rsvp/{session_obj.public_code}/join", json={"name": "Sam"})

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["status"] == "confirmed"
    assert data["waitlisted"] is False
    assert data["guest_token"]


def test_guest_token_ties_repeat_rsvps_to_one_row(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)
    first = client.post(f"{API}/rsvp/{session_obj.public_code}/join", json={"name": "Sam"}).json()
    headers = get_guest_headers(first["guest_token"])

    second = client.post(
        f"{API}/rsvp/{session_obj.public_code}/decline", json={"name": "Sam"}, headers=headers
    )

    assert second.status_code == 200
    data = second.json()
    assert data["participant_id"] == first["participant_id"]
    assert data["status"] == "cancelled"
    # Token is only returned when it was just issued
    assert data["guest_token"] is None


def test_public_code_is_case_insensitive(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)

    response = client.post(f"{API}/rsvp/{session_obj.public_code.lower()}/join", json={"name": "Sam"})

    assert response.status_code == 200


def test_full_session_returns_capacity_error(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session, capacity=2, waitlist_enabled=False)
    fill_session(db_session, session_obj, 2)

    response = client.post(f"{API}/rsvp/{session_obj.public_code}/join", json={"name": "Late"})

    assert response.status_code == 409
    data = response.json()
    assert data == {
        "ok": False,
        "error": "Session is full",
        "code": "CAPACITY_EXCEEDED",
        "details": {"capacity": 2, "confirmed": 2},
    }


def test_full_session_with_waitlist_queues_guest(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session, capacity=1, waitlist_enabled=True)
    fill_session(db_session, session_obj, 1)

    response = client.post(f"{API}/rsvp/{session_obj.public_code}/join", json={"name": "Late"})

    assert response.status_code == 200
    assert response.json()["status"] == "waitlisted"
    assert response.json()["waitlisted"] is True


def test_blank_name_returns_invalid_name(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)

    response = client.post(f"{API}/rsvp/{session_obj.public_code}/join", json={"name": "  "})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_NAME"


def test_unknown_code_returns_not_found(client: TestClient):
    response = client.post(f"{API}/rsvp/ZZZZZZZZ/join", json={"name": "Sam"})

    assert response.status_code == 404
    assert response.json()["code"] == "SESSION_NOT_FOUND"


def test_closed_session_rejects_rsvp(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)
    session_crud.close(db_session, db_obj=session_obj)

    response = client.post(f"{API}/rsvp/{session_obj.public_code}/join", json={"name": "Sam"})

    assert response.status_code == 409
    assert response.json()["code"] == "SESSION_NOT_OPEN"


def test_forged_guest_token_is_rejected(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)

    response = client.post(
        f"{API}/rsvp/{session_obj.public_code}/join",
        json={"name": "Sam"},
        headers=get_guest_headers("not-a-token"),
    )

    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_GUEST_TOKEN"


def test_signed_in_host_rsvp_is_flagged(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)

    response = client.post(
        f"{API}/rsvp/{session_obj.public_code}/join",
        json={"name": "Alex"},
        headers=get_user_authentication_headers("host_1"),
    )

    assert response.status_code == 200
    assert response.json()["guest_token"] is None
    participant = participant_crud.get_by_guest_key(db_session, session_id=session_obj.id, guest_key="user:host_1")
    assert participant.is_host is True


def test_pull_out_promotes_waitlist(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session, capacity=1, waitlist_enabled=True)
    seated = client.post(f"{API}/rsvp/{session_obj.public_code}/join", json={"name": "Sam"}).json()
    waiting = client.post(f"{API}/rsvp/{session_obj.public_code}/join", json={"name": "Kim"}).json()
    assert waiting["status"] == "waitlisted"

    response = client.post(
        f"{API}/rsvp/{session_obj.public_code}/pull-out",
        json={"reason": "Work ran late"},
        headers=get_guest_headers(seated["guest_token"]),
    )

    assert response.status_code == 200
    assert response.json()["status"] == "pulled_out"
    promoted = participant_crud.get(db_session, session_id=session_obj.id, participant_id=waiting["participant_id"])
    db_session.refresh(promoted)
    assert promoted.status == ParticipantStatus.CONFIRMED


def test_pull_out_without_identity_is_not_found(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)

    response = client.post(f"{API}/rsvp/{session_obj.public_code}/pull-out", json={})

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_my_rsvp_status(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)
    joined = client.post(f"{API}/rsvp/{session_obj.public_code}/join", json={"name": "Sam"}).json()

    mine = client.get(
        f"{API}/rsvp/{session_obj.public_code}/me", headers=get_guest_headers(joined["guest_token"])
    )
    anonymous = client.get(f"{API}/rsvp/{session_obj.public_code}/me")

    assert mine.json() == {"ok": True, "status": "confirmed", "display_name": "Sam"}
    assert anonymous.json() == {"ok": True, "status": None, "display_name": None}


def test_guest_token_cannot_act_as_host(client: TestClient, db_session: Session):
    session_obj = create_random_session(db_session)
    guest_token = client.post(
        f"{API}/rsvp/{session_obj.public_code}/join", json={"name": "Sam"}
    ).json()["guest_token"]
    bearer = {"Authorization": f"Bearer {guest_token}"}

    created = client.post(
        f"{API}/host/sessions",
        json={"title": "Sneaky", "start_at": "2030-05-07T19:00:00+00:00"},
        headers=bearer,
    )
    drafts = client.get(f"{API}/host/drafts", headers=bearer)

    assert created.status_code == 401
    assert drafts.status_code == 401
