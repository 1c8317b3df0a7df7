from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from courtinvite.crud.crud_participant import participant_crud
from courtinvite.crud.crud_session import session_crud
from courtinvite.models.session import Session as SessionModel
from courtinvite.schemas.session import SessionCreate


def create_random_session(
    db: Session,
    *,
    host_id: str = "host_1",
    host_name: str = "Alex Tan",
    capacity: Optional[int] = 4,
    waitlist_enabled: bool = True,
    price: Optional[Decimal] = Decimal("12.50"),
    start_at: Optional[datetime] = None,
    end_at: Optional[datetime] = None,
    publish: bool = True,
) -> SessionModel:
    """
    Creates a dummy session for testing purposes, published by default.
    """
    start_at = start_at or datetime.now(timezone.utc) + timedelta(days=1)
    session_in = SessionCreate(
        title="Friday Night Doubles",
        start_at=start_at,
        end_at=end_at,
        location="Sports Hall 2",
        capacity=capacity,
        price=price,
        currency="SGD" if price is not None else None,
        host_name=host_name,
        waitlist_enabled=waitlist_enabled,
    )
    session_obj = session_crud.create_with_host(
        db, obj_in=session_in, host_id=host_id, host_email=f"{host_id}@example.com"
    )
    if publish:
        session_obj = session_crud.publish(db, db_obj=session_obj)
    return session_obj


def fill_session(db: Session, session_obj: SessionModel, count: int, prefix: str = "guest"):
    """Joins `count` distinct guests and returns their participant rows."""
    return [
        participant_crud.join(
            db,
            session_id=session_obj.id,
            guest_key=f"guest:{prefix}{i}",
            name=f"Player {prefix}{i}",
        )
        for i in range(count)
    ]
