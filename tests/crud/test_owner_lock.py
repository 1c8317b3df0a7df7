from unittest.mock import MagicMock

from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Session

from courtinvite.crud import crud_draft, crud_session
from courtinvite.crud.base import lock_owner
from courtinvite.crud.crud_draft import draft_crud
from courtinvite.crud.crud_session import session_crud
from tests.utils.session import create_random_session


def _db_for(dialect_name: str) -> MagicMock:
    db = MagicMock()
    db.get_bind.return_value.dialect.name = dialect_name
    return db


def test_postgres_takes_transaction_advisory_lock():
    db = _db_for("postgresql")

    lock_owner(db, "drafts", "host_1")

    stmt = db.execute.call_args.args[0]
    sql = str(stmt.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))
    assert "pg_advisory_xact_lock(hashtext('drafts:host_1'))" in sql


def test_other_dialects_take_no_lock():
    db = _db_for("sqlite")

    lock_owner(db, "drafts", "host_1")

    db.execute.assert_not_called()


def test_draft_save_locks_the_owner(db_session: Session, monkeypatch):
    spy = MagicMock(wraps=lock_owner)
    monkeypatch.setattr(crud_draft, "lock_owner", spy)

    draft_crud.save_new(db_session, user_id="host_1", name="Template", data={})

    spy.assert_called_once_with(db_session, "drafts", "host_1")


def test_publish_locks_the_host(db_session: Session, monkeypatch):
    session_obj = create_random_session(db_session, publish=False)
    spy = MagicMock(wraps=lock_owner)
    monkeypatch.setattr(crud_session, "lock_owner", spy)

    session_crud.publish(db_session, db_obj=session_obj)

    spy.assert_called_once_with(db_session, "live_sessions", "host_1")
