"""Location repository: get, create-or-reuse by place id, nearby recommendations."""
import logging
from typing import Optional

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from models.location import Location
from models.post import Post
from repositories.upsert import dialect_insert
from utils.geo import haversine_km

LOG = logging.getLogger(__name__)


def get_location(session: Session, location_id: int) -> Optional[Location]:
    """Return a location by id or None."""
    return session.get(Location, location_id)


def get_location_by_place_id(session: Session, google_place_id: str) -> Optional[Location]:
    """Return the location for a Google place id or None."""
    return session.execute(
        select(Location).where(Location.google_place_id == google_place_id)
    ).scalar_one_or_none()


def list_locations_by_ids(session: Session, location_ids: list[int]) -> list[Location]:
    """Return locations for the given ids (missing ids are skipped), ordered by id."""
    if not location_ids:
        return []
    result = session.execute(
        select(Location).where(Location.id.in_(location_ids)).order_by(Location.id)
    )
    return list(result.scalars().all())


def create_location(
    session: Session,
    *,
    title: str,
    emoji: str,
    coordinates: tuple[float, float],
    is_valid_location: bool,
    google_place_id: Optional[str] = None,
    description: Optional[str] = None,
    website_url: Optional[str] = None,
    phone_number: Optional[str] = None,
    address: Optional[str] = None,
    commit: bool = True,
) -> tuple[Location, bool]:
    """
    Insert a location and return (location, created).

    The unique constraint on google_place_id decides concurrent inserts: the loser's
    INSERT ... ON CONFLICT DO NOTHING writes no row and the winner's row is returned with
    created=False. The insert joins the caller's transaction, so a later failure in the
    same transaction rolls it back. recommendable always starts False.
    """
    stmt = dialect_insert(session, Location).values(
        google_place_id=google_place_id,
        title=title,
        description=description,
        emoji=emoji,
        coordinates=coordinates,
        is_valid_location=is_valid_location,
        recommendable=False,
        website_url=website_url,
        phone_number=phone_number,
        address=address,
    )
    if google_place_id is not None:
        stmt = stmt.on_conflict_do_nothing(index_elements=["google_place_id"])
    location_id = session.execute(stmt.returning(Location.id)).scalar_one_or_none()
    if location_id is None:
        existing = get_location_by_place_id(session, google_place_id)
        if existing is None:
            raise LookupError(f"location for place {google_place_id!r} conflicted but cannot be read")
        LOG.info("Location for place %s already exists; reusing id=%s", google_place_id, existing.id)
        return existing, False
    if commit:
        session.commit()
    return session.get(Location, location_id), True


def list_nearby_recommendations(
    session: Session,
    viewer_id: int,
    latitude: float,
    longitude: float,
    *,
    radius_km: float = 10.0,
    limit: int = 20,
    include_unrecommendable: bool = False,
) -> list[tuple[Location, float]]:
    """
    Valid locations with at least one post within radius_km, nearest first (newest first on ties).
    Locations the viewer has posted to are never recommended to them.
    """
    posted_by_viewer = select(Post.location_id).where(Post.posted_by == viewer_id)
    query = (
        select(Location)
        .where(Location.is_valid_location.is_(True))
        .where(exists().where(Post.location_id == Location.id))
        .where(Location.id.not_in(posted_by_viewer))
    )
    if not include_unrecommendable:
        query = query.where(Location.recommendable.is_(True))
    candidates = session.execute(query).scalars().all()

    in_range: list[tuple[Location, float]] = []
    for loc in candidates:
        distance = haversine_km((latitude, longitude), loc.coordinates)
        if distance <= radius_km:
            in_range.append((loc, distance))
    in_range.sort(key=lambda pair: (pair[1], -pair[0].created_at.timestamp()))
    return in_range[:limit]
