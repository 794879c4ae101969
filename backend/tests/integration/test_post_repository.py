"""Integration tests: posts, saved marks and share attempts."""
import pytest
from sqlalchemy import select

from models.post import PostSaveAttempt
from repositories.location_repository import create_location
from repositories.post_repository import (
    create_post,
    latest_posts_by_location,
    list_location_ids_posted_by,
    list_posts_for_location,
    record_save_attempt,
)
from repositories.saved_location_repository import is_location_saved, list_saved_location_ids, save_location
from repositories.user_repository import create_user

pytestmark = pytest.mark.integration


def _loc(db_session, title):
    loc, _ = create_location(db_session, title=title, emoji="📍", coordinates=(1.0, 2.0), is_valid_location=True)
    return loc


def test_posts_listed_newest_first(db_session):
    """Posts for a location come back newest first."""
    user = create_user(db_session, "poster")
    loc = _loc(db_session, "L")
    first = create_post(db_session, url="https://a.com/1", posted_by=user.id, location_id=loc.id)
    second = create_post(db_session, url="https://a.com/2", posted_by=user.id, location_id=loc.id)
    assert [p.id for p in list_posts_for_location(db_session, loc.id)] == [second.id, first.id]


def test_latest_post_per_location(db_session):
    """One query returns the most recent post of each location."""
    user = create_user(db_session, "poster2")
    a = _loc(db_session, "A")
    b = _loc(db_session, "B")
    c = _loc(db_session, "C")
    create_post(db_session, url="https://a.com/old", posted_by=user.id, location_id=a.id)
    a_new = create_post(db_session, url="https://a.com/new", posted_by=user.id, location_id=a.id)
    b_only = create_post(db_session, url="https://b.com/1", posted_by=None, location_id=b.id)
    latest = latest_posts_by_location(db_session, [a.id, b.id, c.id])
    assert latest[a.id].id == a_new.id
    assert latest[b.id].id == b_only.id
    assert c.id not in latest
    assert latest_posts_by_location(db_session, []) == {}


def test_location_ids_posted_by(db_session):
    """Distinct location ids the user posted to."""
    user = create_user(db_session, "poster3")
    a = _loc(db_session, "A")
    create_post(db_session, url="https://a.com/1", posted_by=user.id, location_id=a.id)
    create_post(db_session, url="https://a.com/2", posted_by=user.id, location_id=a.id)
    assert list_location_ids_posted_by(db_session, user.id) == [a.id]


def test_save_location_is_idempotent(db_session):
    """Saving the same location twice leaves one mark."""
    user = create_user(db_session, "saver")
    a = _loc(db_session, "A")
    b = _loc(db_session, "B")
    save_location(db_session, user.id, a.id)
    save_location(db_session, user.id, a.id)
    save_location(db_session, user.id, b.id)
    assert sorted(list_saved_location_ids(db_session, user.id)) == sorted([a.id, b.id])
    assert is_location_saved(db_session, user.id, a.id) is True


def test_record_save_attempt(db_session):
    """Share attempts are logged even without a user."""
    attempt = record_save_attempt(db_session, request_id="req-1", url="https://x.com", session_token=None)
    row = db_session.execute(select(PostSaveAttempt).where(PostSaveAttempt.id == attempt.id)).scalar_one()
    assert row.request_id == "req-1"
    assert row.user_id is None
