import pytest
from sqlalchemy.orm import Session

from courtinvite.constants.rsvp import HostRole
from courtinvite.core.errors import ConflictError, NotFoundError
from courtinvite.crud.crud_session import session_crud
from courtinvite.crud.crud_session_host import session_host_crud
from tests.utils.session import create_random_session


def test_invite_stores_normalized_email(db_session: Session):
    session_obj = create_random_session(db_session)

    host = session_host_crud.invite(
        db_session, session=session_obj, email="  Casey@Example.COM ", invited_by="host_1"
    )

    assert host.email == "casey@example.com"
    assert host.role == HostRole.HOST
    assert host.user_id is None
    assert host.accepted_at is None


def test_inviting_same_email_twice_conflicts(db_session: Session):
    session_obj = create_random_session(db_session)
    session_host_crud.invite(db_session, session=session_obj, email="casey@example.com", invited_by="host_1")

    with pytest.raises(ConflictError):
        session_host_crud.invite(db_session, session=session_obj, email="CASEY@example.com", invited_by="host_1")


def test_link_pending_invites_across_sessions(db_session: Session):
    first = create_random_session(db_session)
    second = create_random_session(db_session)
    session_host_crud.invite(db_session, session=first, email="casey@example.com", invited_by="host_1")
    session_host_crud.invite(db_session, session=second, email="casey@example.com", invited_by="host_1")

    linked = session_host_crud.link_pending_invites(db_session, email="Casey@example.com", user_id="casey")

    assert linked == 2
    assert session_host_crud.get_role(db_session, session_id=first.id, user_id="casey") == HostRole.HOST
    assert sorted(session_host_crud.list_session_ids_for_user(db_session, user_id="casey")) == sorted(
        [first.id, second.id]
    )
    # Already linked invites are not claimed twice
    assert session_host_crud.link_pending_invites(db_session, email="casey@example.com", user_id="other") == 0


def test_link_without_email_is_noop(db_session: Session):
    assert session_host_crud.link_pending_invites(db_session, email=None, user_id="casey") == 0


def test_co_hosted_sessions_show_in_host_list(db_session: Session):
    session_obj = create_random_session(db_session, host_id="host_2")
    create_random_session(db_session, host_id="host_3")
    session_host_crud.invite(db_session, session=session_obj, email="casey@example.com", invited_by="host_2")
    session_host_crud.link_pending_invites(db_session, email="casey@example.com", user_id="casey")

    sessions = session_crud.get_multi_by_host(db_session, user_id="casey")

    assert [s.id for s in sessions] == [session_obj.id]


def test_owner_cannot_be_removed(db_session: Session):
    session_obj = create_random_session(db_session)
    owner = session_host_crud.list_for_session(db_session, session_id=session_obj.id)[0]

    with pytest.raises(ConflictError):
        session_host_crud.remove(db_session, session_id=session_obj.id, host_id=owner.id)


def test_remove_co_host(db_session: Session):
    session_obj = create_random_session(db_session)
    host = session_host_crud.invite(db_session, session=session_obj, email="casey@example.com", invited_by="host_1")
    host_id = host.id

    session_host_crud.remove(db_session, session_id=session_obj.id, host_id=host_id)

    assert [h.role for h in session_host_crud.list_for_session(db_session, session_id=session_obj.id)] == [
        HostRole.OWNER
    ]
    with pytest.raises(NotFoundError):
        session_host_crud.remove(db_session, session_id=session_obj.id, host_id=host_id)
