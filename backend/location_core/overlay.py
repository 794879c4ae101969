"""Merge a canonical location with the one edit that applies to the viewer. Pure functions, no I/O."""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from location_core.types import LocationEditView, LocationView

# Edit fields copied onto the location when not None.
_OVERRIDABLE = (
    "google_place_id",
    "title",
    "description",
    "emoji",
    "coordinates",
    "website_url",
    "phone_number",
    "address",
)


def merge_location(
    location: LocationView,
    viewer_edit: Optional[LocationEditView],
    fallback_edit: Optional[LocationEditView] = None,
) -> LocationView:
    """
    Effective location for one viewer.

    The viewer's own edit wins; otherwise fallback_edit (the latest folder-owner edit in
    shared and followed folders); otherwise the canonical row unchanged. Only non-None
    edit fields override.

    When the chosen edit re-points the location to a different place id, website and
    phone come only from the edit (or become ""), so contact details of the old place
    never leak onto the new one. An edit without a place id does not re-point.
    """
    edit = viewer_edit if viewer_edit is not None else fallback_edit
    if edit is None:
        return location

    overrides = {
        name: getattr(edit, name)
        for name in _OVERRIDABLE
        if getattr(edit, name) is not None
    }
    if edit.coordinates is not None:
        overrides["is_valid_location"] = True

    if edit.google_place_id is not None and edit.google_place_id != location.google_place_id:
        overrides["website_url"] = edit.website_url if edit.website_url is not None else ""
        overrides["phone_number"] = edit.phone_number if edit.phone_number is not None else ""

    return replace(location, **overrides)


def latest_edit_per_location(
    edits: Iterable[LocationEditView],
    owner_pairs: set[tuple[int, int]],
) -> dict[int, LocationEditView]:
    """
    For each location keep the most recently updated edit among its folder owners.

    owner_pairs holds the (owner_id, location_id) pairs that actually apply; edits outside
    them are ignored. Equal last_updated values are broken by the higher owner id, so the
    choice is stable across calls.
    """
    best: dict[int, LocationEditView] = {}
    for edit in edits:
        if (edit.user_id, edit.location_id) not in owner_pairs:
            continue
        current = best.get(edit.location_id)
        if current is None or (edit.last_updated, edit.user_id) > (current.last_updated, current.user_id):
            best[edit.location_id] = edit
    return best
