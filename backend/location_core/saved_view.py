"""Three-scope saved view: personal (with uncategorised), shared and followed folders."""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from db import SessionFactory
from location_core.overlay import latest_edit_per_location, merge_location
from location_core.storage import run_in_session
from location_core.types import FolderInfo, LocationEditView, LocationView, PostView, SavedRow, SavedView
from repositories import folder_repository, location_edit_repository
from repositories.location_repository import list_locations_by_ids
from repositories.post_repository import latest_posts_by_location, list_location_ids_posted_by
from repositories.saved_location_repository import list_saved_location_ids

LOG = logging.getLogger(__name__)

UNCATEGORISED = "uncategorised"


def _viewer_edits(session: Session, viewer_id: int) -> dict[int, LocationEditView]:
    return {
        edit.location_id: LocationEditView.from_model(edit)
        for edit in location_edit_repository.list_edits_by_user(session, viewer_id)
    }


def _folder_infos(session: Session, folder_ids: list[int]) -> dict[int, FolderInfo]:
    owners = folder_repository.list_folder_owner_ids(session, folder_ids)
    return {
        folder.id: FolderInfo(
            id=folder.id,
            name=folder.name,
            color=folder.color,
            creator_id=folder.creator_id,
            owner_ids=owners.get(folder.id, []),
        )
        for folder in folder_repository.list_folders(session, folder_ids)
    }


def _locations(session: Session, location_ids: list[int]) -> dict[int, LocationView]:
    return {loc.id: LocationView.from_model(loc) for loc in list_locations_by_ids(session, location_ids)}


def _top_posts(session: Session, location_ids: list[int]) -> dict[int, PostView]:
    return {
        location_id: PostView.from_model(post)
        for location_id, post in latest_posts_by_location(session, location_ids).items()
    }


def _owner_edits(session: Session, pairs: set[tuple[int, int]]) -> list[LocationEditView]:
    return [LocationEditView.from_model(e) for e in location_edit_repository.list_edits_for_pairs(session, pairs)]


def uncategorised_location_ids(
    saved_ids: Iterable[int],
    posted_ids: Iterable[int],
    personal_folder_location_ids: set[int],
    other_folder_location_ids: set[int],
) -> list[int]:
    """
    Saved or posted-to locations not reachable through a visible folder.
    Locations the viewer posted to are hidden only by the viewer's own folders.
    Order: saved marks first (most recent first), then posted-to locations.
    """
    posted = set(posted_ids)
    hidden = personal_folder_location_ids | (other_folder_location_ids - posted)
    result: list[int] = []
    seen: set[int] = set()
    for location_id in list(saved_ids) + list(posted_ids):
        if location_id in hidden or location_id in seen:
            continue
        seen.add(location_id)
        result.append(location_id)
    return result


def _row(
    location_id: int,
    locations: dict[int, LocationView],
    top_posts: dict[int, PostView],
    viewer_edit: Optional[LocationEditView],
    owner_edit: Optional[LocationEditView] = None,
) -> Optional[SavedRow]:
    location = locations.get(location_id)
    if location is None:
        return None
    return SavedRow(
        location=merge_location(location, viewer_edit, owner_edit),
        top_post=top_posts.get(location_id),
    )


async def build_saved_view(viewer_id: int, *, session_factory: SessionFactory) -> SavedView:
    """
    Assemble the viewer's saved locations grouped by scope and folder.

    A folder appears in one scope only: personal (created) wins over shared (co-owned),
    which wins over followed. Personal rows show the viewer's own edit; shared and followed
    rows fall back to the most recent edit by any owner of the folder.
    """
    created, co_owned, followed = await asyncio.gather(
        run_in_session(session_factory, folder_repository.list_created_folder_ids, viewer_id),
        run_in_session(session_factory, folder_repository.list_co_owned_folder_ids, viewer_id),
        run_in_session(session_factory, folder_repository.list_followed_folder_ids, viewer_id),
    )
    personal_ids = list(dict.fromkeys(created))
    shared_ids = [f for f in dict.fromkeys(co_owned) if f not in set(personal_ids)]
    taken = set(personal_ids) | set(shared_ids)
    followed_ids = [f for f in dict.fromkeys(followed) if f not in taken]
    all_ids = personal_ids + shared_ids + followed_ids

    pairs, folder_infos, saved_ids, posted_ids, viewer_edits = await asyncio.gather(
        run_in_session(session_factory, folder_repository.list_folder_location_pairs, all_ids),
        run_in_session(session_factory, _folder_infos, all_ids),
        run_in_session(session_factory, list_saved_location_ids, viewer_id),
        run_in_session(session_factory, list_location_ids_posted_by, viewer_id),
        run_in_session(session_factory, _viewer_edits, viewer_id),
    )

    folder_locations: dict[int, list[int]] = {folder_id: [] for folder_id in all_ids}
    for folder_id, location_id in pairs:
        folder_locations[folder_id].append(location_id)

    personal_set = set(personal_ids)
    personal_locs = {loc for f in personal_ids for loc in folder_locations[f]}
    other_locs = {loc for f in shared_ids + followed_ids for loc in folder_locations[f]}
    uncategorised = uncategorised_location_ids(saved_ids, posted_ids, personal_locs, other_locs)

    owner_pairs = {
        (owner_id, location_id)
        for folder_id in shared_ids + followed_ids
        if folder_id in folder_infos
        for owner_id in folder_infos[folder_id].owner_ids
        for location_id in folder_locations[folder_id]
    }
    location_ids = sorted(personal_locs | other_locs | set(uncategorised))

    locations, top_posts, owner_edits = await asyncio.gather(
        run_in_session(session_factory, _locations, location_ids),
        run_in_session(session_factory, _top_posts, location_ids),
        run_in_session(session_factory, _owner_edits, owner_pairs),
    )
    latest_owner_edit = latest_edit_per_location(owner_edits, owner_pairs)

    view = SavedView()
    view.personal[UNCATEGORISED] = [
        row
        for row in (_row(i, locations, top_posts, viewer_edits.get(i)) for i in uncategorised)
        if row is not None
    ]
    for folder_id in all_ids:
        info = folder_infos.get(folder_id)
        if info is None:
            continue
        key = str(folder_id)
        view.folders[key] = info
        rows = []
        for location_id in folder_locations[folder_id]:
            owner_edit = None if folder_id in personal_set else latest_owner_edit.get(location_id)
            row = _row(location_id, locations, top_posts, viewer_edits.get(location_id), owner_edit)
            if row is not None:
                rows.append(row)
        if folder_id in personal_set:
            view.personal[key] = rows
        elif folder_id in shared_ids:
            view.shared[key] = rows
        else:
            view.followed[key] = rows

    LOG.debug(
        "Saved view for user %s: %d personal, %d shared, %d followed folders, %d uncategorised",
        viewer_id, len(personal_ids), len(shared_ids), len(followed_ids), len(view.personal[UNCATEGORISED]),
    )
    return view
