"""Location edit repository: per-user overrides, upserted by (user_id, location_id)."""
from typing import Any, Optional

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from models import utcnow
from models.location_edit import EDITABLE_FIELDS, LocationEdit
from repositories.upsert import dialect_insert


def get_location_edit(session: Session, user_id: int, location_id: int) -> Optional[LocationEdit]:
    """Return the user's edit for a location or None."""
    return session.get(LocationEdit, (user_id, location_id))


def upsert_location_edit(
    session: Session,
    user_id: int,
    location_id: int,
    fields: dict[str, Any],
    *,
    commit: bool = True,
) -> LocationEdit:
    """
    Insert or update the user's edit for a location.
    Only keys present in fields are written; other overrides keep their stored value.
    Unknown keys raise ValueError.
    """
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")
    now = utcnow()
    stmt = dialect_insert(session, LocationEdit).values(
        user_id=user_id,
        location_id=location_id,
        created_at=now,
        last_updated=now,
        **fields,
    )
    # The Point type must be applied on UPDATE too, so reference the excluded row.
    set_ = {name: stmt.excluded[name] for name in fields}
    set_["last_updated"] = now
    session.execute(
        stmt.on_conflict_do_update(index_elements=["user_id", "location_id"], set_=set_)
    )
    if commit:
        session.commit()
    edit = get_location_edit(session, user_id, location_id)
    session.refresh(edit)
    return edit


def list_edits_by_user(session: Session, user_id: int) -> list[LocationEdit]:
    """Return all edits the user has made."""
    result = session.execute(select(LocationEdit).where(LocationEdit.user_id == user_id))
    return list(result.scalars().all())


def list_edits_for_pairs(session: Session, pairs: set[tuple[int, int]]) -> list[LocationEdit]:
    """Return the edits for the given (user_id, location_id) pairs in one query."""
    if not pairs:
        return []
    user_ids = {user_id for user_id, _ in pairs}
    location_ids = {location_id for _, location_id in pairs}
    result = session.execute(
        select(LocationEdit).where(
            and_(LocationEdit.user_id.in_(user_ids), LocationEdit.location_id.in_(location_ids))
        )
    )
    # The IN x IN prefilter may match pairs that were not asked for.
    return [edit for edit in result.scalars().all() if (edit.user_id, edit.location_id) in pairs]
