"""Integration tests: location edit upserts."""
import pytest

from repositories.location_edit_repository import (
    get_location_edit,
    list_edits_by_user,
    list_edits_for_pairs,
    upsert_location_edit,
)
from repositories.location_repository import create_location
from repositories.user_repository import create_user

pytestmark = pytest.mark.integration


def _loc(db_session, title="L"):
    loc, _ = create_location(db_session, title=title, emoji="📍", coordinates=(1.0, 2.0), is_valid_location=True)
    return loc


def test_upsert_creates_then_updates_partially(db_session):
    """Second upsert changes only the given fields and bumps last_updated."""
    user = create_user(db_session, "editor")
    loc = _loc(db_session)
    first = upsert_location_edit(db_session, user.id, loc.id, {"title": "Mine", "coordinates": (3.0, 4.0)})
    assert first.title == "Mine"
    assert first.coordinates == (3.0, 4.0)
    first_updated = first.last_updated

    second = upsert_location_edit(db_session, user.id, loc.id, {"emoji": "🌮"})
    assert second.title == "Mine"
    assert second.emoji == "🌮"
    assert second.coordinates == (3.0, 4.0)
    assert second.last_updated >= first_updated
    assert len(list_edits_by_user(db_session, user.id)) == 1


def test_upsert_explicit_none_clears_override(db_session):
    """Passing None resets an override to the canonical value."""
    user = create_user(db_session, "editor2")
    loc = _loc(db_session)
    upsert_location_edit(db_session, user.id, loc.id, {"title": "Mine"})
    edit = upsert_location_edit(db_session, user.id, loc.id, {"title": None})
    assert edit.title is None


def test_upsert_rejects_unknown_fields(db_session):
    """Only editable columns are accepted."""
    user = create_user(db_session, "editor3")
    loc = _loc(db_session)
    with pytest.raises(ValueError):
        upsert_location_edit(db_session, user.id, loc.id, {"recommendable": True})
    assert get_location_edit(db_session, user.id, loc.id) is None


def test_list_edits_for_pairs_filters_exact_pairs(db_session):
    """Only the requested (user, location) pairs are returned."""
    u1 = create_user(db_session, "owner1")
    u2 = create_user(db_session, "owner2")
    a = _loc(db_session, "A")
    b = _loc(db_session, "B")
    upsert_location_edit(db_session, u1.id, a.id, {"title": "u1-a"})
    upsert_location_edit(db_session, u2.id, b.id, {"title": "u2-b"})
    upsert_location_edit(db_session, u1.id, b.id, {"title": "u1-b"})
    edits = list_edits_for_pairs(db_session, {(u1.id, a.id), (u2.id, b.id)})
    assert sorted(e.title for e in edits) == ["u1-a", "u2-b"]
    assert list_edits_for_pairs(db_session, set()) == []
