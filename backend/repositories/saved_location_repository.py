"""Saved-location repository: idempotent save and listing of a user's personal saved list."""
from sqlalchemy import select
from sqlalchemy.orm import Session

from models import utcnow
from models.saved_location import SavedLocation
from repositories.upsert import dialect_insert


def save_location(session: Session, user_id: int, location_id: int, *, commit: bool = True) -> None:
    """Mark a location as saved for a user; saving twice is a no-op."""
    stmt = dialect_insert(session, SavedLocation).values(
        user_id=user_id,
        location_id=location_id,
        created_at=utcnow(),
    )
    session.execute(stmt.on_conflict_do_nothing(index_elements=["user_id", "location_id"]))
    if commit:
        session.commit()


def is_location_saved(session: Session, user_id: int, location_id: int) -> bool:
    return session.get(SavedLocation, (user_id, location_id)) is not None


def list_saved_location_ids(session: Session, user_id: int) -> list[int]:
    """Return ids of the user's saved locations, most recently saved first."""
    result = session.execute(
        select(SavedLocation.location_id)
        .where(SavedLocation.user_id == user_id)
        .order_by(SavedLocation.created_at.desc(), SavedLocation.location_id.desc())
    )
    return list(result.scalars().all())
