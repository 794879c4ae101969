# Set test environment before any application or db imports.
import os

os.environ["TESTING"] = "true"
os.environ["TESTING_DATABASE_URL"] = "sqlite:///:memory:"

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.orm import Session, sessionmaker

from db import SessionLocal, build_engine, get_db, get_session_factory
from main import app
from models import Base
from models.folder import Folder, FolderFollow, FolderLocation, FolderOwner  # noqa: F401 - register with Base
from models.location import Location  # noqa: F401
from models.location_edit import LocationEdit  # noqa: F401
from models.post import Post, PostSaveAttempt  # noqa: F401
from models.saved_location import SavedLocation  # noqa: F401
from models.user import User, UserSession  # noqa: F401
from repositories.user_repository import create_session, create_user


def _get_engine():
    """Engine used by the app (in-memory when TESTING=true)."""
    return SessionLocal.kw["bind"]


def _use_explicit_sqlite_transactions(eng) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINT release never commits the test transaction."""
    @event.listens_for(eng, "connect")
    def _disable_pysqlite_begin(dbapi_conn, connection_record):
        dbapi_conn.isolation_level = None

    @event.listens_for(eng, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def engine():
    """One in-memory engine per test run; create tables once."""
    eng = _get_engine()
    _use_explicit_sqlite_transactions(eng)
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture
def db_session(engine):
    """Function-scoped session; each test runs in a transaction that is rolled back."""
    connection = engine.connect()
    trans = connection.begin()
    session = Session(bind=connection)
    session.begin_nested()
    try:
        yield session
    finally:
        session.close()
        if trans.is_active:
            trans.rollback()
        connection.close()


@pytest.fixture
def session_factory(tmp_path):
    """
    Session factory on a fresh file-backed SQLite DB.
    The resolver and saved view open one session per concurrent read, which the
    single-connection in-memory engine cannot serve.
    """
    eng = build_engine(f"sqlite:///{tmp_path / 'test_pinpoint.db'}")
    Base.metadata.create_all(eng)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=eng)
    try:
        yield factory
    finally:
        eng.dispose()


@pytest.fixture
def db(session_factory):
    """Session on the session_factory DB, for arranging data the code under test reads back."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def _override_get_db(factory):
    """Return a generator dependency yielding a session from factory."""
    def override():
        session = factory()
        try:
            yield session
        finally:
            session.close()
    return override


@pytest.fixture
def client(session_factory):
    """API test client on the session_factory DB; overrides cleared on teardown."""
    app.dependency_overrides[get_db] = _override_get_db(session_factory)
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


def make_viewer(session: Session, username: str) -> SimpleNamespace:
    """Create a user with a live session; returns id, token and auth headers."""
    user = create_user(session, username)
    user_session = create_session(session, user.id)
    return SimpleNamespace(
        id=user.id,
        token=user_session.token,
        headers={"Authorization": f"Bearer {user_session.token}"},
    )


@pytest.fixture
def viewer(db):
    """Signed-in user on the session_factory DB."""
    return make_viewer(db, "viewer")


@pytest.fixture
def viewer_factory(db):
    """Create more signed-in users on the session_factory DB."""
    return lambda username: make_viewer(db, username)


def pytest_sessionfinish(session, exitstatus):
    """Remove any temporary test DB files created during the run (e.g. under /tmp)."""
    import glob
    for pattern in ["/tmp/test_*.db", "test_*.db"]:
        for path in glob.glob(pattern):
            try:
                os.remove(path)
            except OSError:
                pass
