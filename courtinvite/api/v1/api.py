# courtinvite/api/v1/api.py

from fastapi import APIRouter
from courtinvite.api.v1.endpoints import (
    public,
    rsvp,
    host_sessions,
    drafts,
    payments,
    session_hosts,
    internals,
)

# Each router declares full paths under /api/v1.
api_router = APIRouter()

api_router.include_router(public.router)
api_router.include_router(rsvp.router)
api_router.include_router(host_sessions.router)
api_router.include_router(drafts.router)
api_router.include_router(payments.router)
api_router.include_router(session_hosts.router)
api_router.include_router(internals.router)
