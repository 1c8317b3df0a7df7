from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from courtinvite.core.config import settings


def enable_sqlite_foreign_keys(engine) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection."""

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(database_url: str):
    # SQLite is only used for local development; FastAPI serves sync
    # endpoints from a threadpool, so the connection must be shareable.
    if database_url.startswith("sqlite"):
        sqlite_engine = create_engine(
            database_url, connect_args={"check_same_thread": False}
        )
        enable_sqlite_foreign_keys(sqlite_engine)
        return sqlite_engine
    return create_engine(database_url, pool_pre_ping=True)


# pool_pre_ping drops connections the server closed while idle.
engine = build_engine(settings.DATABASE_URL)

# One Session per request, handed out by get_db().
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
