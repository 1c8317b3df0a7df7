# courtinvite/background_tasks/cleanup_tasks.py
"""
Background task for removing sessions that are long over.

Runs every CLEANUP_INTERVAL_MINUTES from the in-process scheduler, and can
also be triggered by an external cron through the internal cleanup endpoint.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from courtinvite.crud.crud_session import session_crud
from courtinvite.db.session import SessionLocal

logger = logging.getLogger(__name__)


def expire_ended_sessions(now: Optional[datetime] = None) -> int:
    """
    Background task: delete open sessions that ended 48+ hours ago.

    Opens its own database session since it runs outside any request.

    Returns:
        Number of sessions deleted
    """
    now = now or datetime.now(timezone.utc)
    db = SessionLocal()

    try:
        removed = session_crud.expire_ended_sessions(db, now=now)
        if removed:
            logger.info(f"Expired {removed} ended session(s)")
        else:
            logger.debug("No ended sessions to expire")
        return removed

    except Exception as e:
        logger.error(f"Error in expire_ended_sessions task: {str(e)}", exc_info=True)
        raise

    finally:
        db.close()
