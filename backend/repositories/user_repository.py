"""User repository: minimal users and bearer-token sessions."""
import uuid
from datetime import timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from models import utcnow
from models.user import User, UserSession

SESSION_TTL = timedelta(days=30)


def create_user(session: Session, username: str) -> User:
    user = User(username=username)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def create_session(session: Session, user_id: int, ttl: timedelta = SESSION_TTL) -> UserSession:
    """Issue a new session token for the user."""
    user_session = UserSession(token=str(uuid.uuid4()), user_id=user_id, expires_at=utcnow() + ttl)
    session.add(user_session)
    session.commit()
    session.refresh(user_session)
    return user_session


def verify_session_token(session: Session, token: str) -> Optional[int]:
    """Return the user id for an unexpired session token, else None."""
    if not token:
        return None
    # Compared in SQL: SQLite hands back naive datetimes.
    return session.execute(
        select(UserSession.user_id)
        .where(UserSession.token == token)
        .where(UserSession.expires_at > utcnow())
    ).scalar_one_or_none()
