# courtinvite/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from courtinvite.api.v1.api import api_router
from courtinvite.core.config import settings
from courtinvite.core.errors import AppError, app_error_handler, database_error_handler
from courtinvite.core.limiter import limiter
from courtinvite.scheduler import init_scheduler, shutdown_scheduler

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    if settings.SCHEDULER_ENABLED:
        init_scheduler()
    yield
    logger.info("Application shutting down...")
    if settings.SCHEDULER_ENABLED:
        shutdown_scheduler()


app = FastAPI(
    title="CourtInvite API",
    version="1.0.0",
    description="""
        **CourtInvite**

        Invite pages and RSVPs for casual court-sport sessions.

        ## Features

        * **Invites**: Publish a session and share a short link
        * **RSVPs**: Guests join or decline without an account; full sessions fill a waitlist
        * **Drafts**: Save up to two session drafts
        * **Payments**: Guests upload transfer proofs, hosts review them
        * **Co-hosts**: Share session management by email invite

        ## Authentication

        Host endpoints require a JWT via the `Authorization: Bearer <token>` header.
        Guests are identified by the `X-Guest-Token` header returned on their first RSVP.
        """,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(SQLAlchemyError, database_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "CourtInvite API is running"}
