"""Database engine and session for SQLite (dev) / PostgreSQL (prod)."""
from collections.abc import Callable, Generator
import os

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from utils.config import DATABASE_URL

# Runtime safety: when TESTING=true, never use production DB.
if os.environ.get("TESTING") == "true":
    url = DATABASE_URL
    if "pinpoint.db" in url or (":memory:" not in url and "test" not in url.lower().split("?")[0]):
        raise RuntimeError(
            "Tests must not run against production. Set TESTING_DATABASE_URL to sqlite:///:memory: "
            "(or another test URL containing :memory: or 'test')."
        )

SessionFactory = Callable[[], Session]


def build_engine(database_url: str):
    """Create an engine; SQLite gets cross-thread access and foreign keys."""
    connect_args = {"check_same_thread": False} if "sqlite" in database_url else {}
    engine_kw = {"connect_args": connect_args, "echo": False}
    # In-memory SQLite: use one connection so all sessions share the same DB.
    if "sqlite" in database_url and ":memory:" in database_url:
        engine_kw["poolclass"] = StaticPool
    engine = create_engine(database_url, **engine_kw)

    if "sqlite" in database_url:

        @event.listens_for(engine, "connect")
        def _sqlite_fk(dbapi_conn, connection_record):
            dbapi_conn.execute("PRAGMA foreign_keys=ON")

    return engine


_engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: yield a DB session and close after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> SessionFactory:
    """FastAPI dependency: session factory for handlers that open one session per concurrent read."""
    return SessionLocal
