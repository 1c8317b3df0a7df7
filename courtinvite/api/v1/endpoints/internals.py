# courtinvite/api/v1/endpoints/internals.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from courtinvite.api import deps
from courtinvite.crud.crud_session import session_crud
from courtinvite.scheduler import get_scheduler_status
from courtinvite.schemas.session import CleanupResult

router = APIRouter(tags=["Internal"])


@router.post("/internal/cleanup", response_model=CleanupResult)
def run_cleanup(
    db: Session = Depends(deps.get_db),
    api_key: str = Depends(deps.get_internal_api_key),
):
    """
    Delete open sessions that ended more than 48 hours ago.

    Same job the in-process scheduler runs; exposed for external cron.
    """
    removed = session_crud.expire_ended_sessions(db)
    return CleanupResult(removed=removed, message=f"Removed {removed} expired session(s)")


@router.get("/internal/scheduler")
def scheduler_status(api_key: str = Depends(deps.get_internal_api_key)):
    return get_scheduler_status()
