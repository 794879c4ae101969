"""API tests: GET /api/saved."""
import pytest

from repositories.folder_repository import add_folder_owner, add_location_to_folder, create_folder
from repositories.location_edit_repository import upsert_location_edit
from repositories.location_repository import create_location

pytestmark = pytest.mark.api


def test_saved_requires_auth(client):
    """Missing and unknown tokens return 401."""
    assert client.get("/api/saved").status_code == 401
    assert client.get("/api/saved", headers={"Authorization": "Token abc"}).status_code == 401
    assert client.get("/api/saved", headers={"Authorization": "Bearer abc"}).status_code == 401


def test_saved_shared_folder_with_owner_edit(client, db, viewer_factory):
    """Shared folders are keyed by id with folder metadata and the owner's edit applied."""
    alice = viewer_factory("alice")
    bob = viewer_factory("bob")
    loc, _ = create_location(db, title="Canonical", emoji="📍", coordinates=(1.0, 2.0), is_valid_location=True)
    folder = create_folder(db, bob.id, "Weekend", "#abcdef")
    add_folder_owner(db, folder.id, alice.id)
    add_location_to_folder(db, folder.id, loc.id)
    upsert_location_edit(db, bob.id, loc.id, {"title": "Bob's pick"})

    r = client.get("/api/saved", headers=alice.headers)
    assert r.status_code == 200
    data = r.json()
    key = str(folder.id)
    assert data["personal"] == {"uncategorised": []}
    assert data["shared"][key][0]["location"]["title"] == "Bob's pick"
    assert data["shared"][key][0]["topPost"] is None
    assert data["folders"][key]["name"] == "Weekend"
    assert data["folders"][key]["color"] == "#abcdef"
    assert sorted(data["folders"][key]["ownerIds"]) == sorted([alice.id, bob.id])
