"""Post repository: create, list by location, latest post per location, save attempts."""
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from models.post import Post, PostSaveAttempt


def create_post(
    session: Session,
    *,
    url: str,
    posted_by: Optional[int],
    location_id: int,
    commit: bool = True,
) -> Post:
    """Create a post attributed to a location."""
    post = Post(url=url, posted_by=posted_by, location_id=location_id)
    session.add(post)
    session.flush()
    if commit:
        session.commit()
        session.refresh(post)
    return post


def list_posts_for_location(session: Session, location_id: int) -> list[Post]:
    """Return all posts for a location, newest first."""
    result = session.execute(
        select(Post)
        .where(Post.location_id == location_id)
        .order_by(Post.posted_at.desc(), Post.id.desc())
    )
    return list(result.scalars().all())


def latest_posts_by_location(session: Session, location_ids: list[int]) -> dict[int, Post]:
    """Return {location_id: most recent post} for the given locations in one query."""
    if not location_ids:
        return {}
    ranked = (
        select(
            Post.id.label("post_id"),
            func.row_number()
            .over(partition_by=Post.location_id, order_by=(Post.posted_at.desc(), Post.id.desc()))
            .label("rank"),
        )
        .where(Post.location_id.in_(location_ids))
        .subquery()
    )
    latest_ids = select(ranked.c.post_id).where(ranked.c.rank == 1)
    result = session.execute(select(Post).where(Post.id.in_(latest_ids)))
    return {post.location_id: post for post in result.scalars().all()}


def list_location_ids_posted_by(session: Session, user_id: int) -> list[int]:
    """Return ids of locations the user has posted to."""
    result = session.execute(
        select(Post.location_id).where(Post.posted_by == user_id).distinct()
    )
    return list(result.scalars().all())


def record_save_attempt(
    session: Session,
    *,
    request_id: str,
    url: Optional[str],
    session_token: Optional[str],
    user_id: Optional[int] = None,
) -> PostSaveAttempt:
    """Log a share attempt before auth and resolution run."""
    attempt = PostSaveAttempt(request_id=request_id, url=url, session_token=session_token, user_id=user_id)
    session.add(attempt)
    session.commit()
    session.refresh(attempt)
    return attempt
