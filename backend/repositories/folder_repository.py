"""Folder repository: folders, their locations, owners and followers."""
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.folder import Folder, FolderFollow, FolderLocation, FolderOwner
from repositories.upsert import dialect_insert


def create_folder(session: Session, creator_id: int, name: str, color: str) -> Folder:
    """Create a folder; the creator is also recorded as its first owner."""
    folder = Folder(creator_id=creator_id, name=name, color=color)
    session.add(folder)
    session.flush()
    session.add(FolderOwner(folder_id=folder.id, user_id=creator_id))
    session.commit()
    session.refresh(folder)
    return folder


def _insert_ignore(session: Session, model, keys: list[str], **values) -> None:
    stmt = dialect_insert(session, model).values(**values)
    session.execute(stmt.on_conflict_do_nothing(index_elements=keys))
    session.commit()


def add_folder_owner(session: Session, folder_id: int, user_id: int) -> None:
    """Make user_id a co-owner of the folder (no-op if already an owner)."""
    _insert_ignore(session, FolderOwner, ["folder_id", "user_id"], folder_id=folder_id, user_id=user_id)


def add_location_to_folder(session: Session, folder_id: int, location_id: int) -> None:
    _insert_ignore(
        session, FolderLocation, ["folder_id", "location_id"], folder_id=folder_id, location_id=location_id
    )


def follow_folder(session: Session, user_id: int, folder_id: int) -> None:
    _insert_ignore(session, FolderFollow, ["user_id", "folder_id"], user_id=user_id, folder_id=folder_id)


def list_created_folder_ids(session: Session, user_id: int) -> list[int]:
    """Ids of folders the user created."""
    result = session.execute(
        select(Folder.id).where(Folder.creator_id == user_id).order_by(Folder.id)
    )
    return list(result.scalars().all())


def list_co_owned_folder_ids(session: Session, user_id: int) -> list[int]:
    """Ids of folders the user owns but did not create."""
    result = session.execute(
        select(FolderOwner.folder_id)
        .join(Folder, Folder.id == FolderOwner.folder_id)
        .where(FolderOwner.user_id == user_id)
        .where((Folder.creator_id.is_(None)) | (Folder.creator_id != user_id))
        .order_by(FolderOwner.folder_id)
    )
    return list(result.scalars().all())


def list_followed_folder_ids(session: Session, user_id: int) -> list[int]:
    result = session.execute(
        select(FolderFollow.folder_id)
        .where(FolderFollow.user_id == user_id)
        .order_by(FolderFollow.folder_id)
    )
    return list(result.scalars().all())


def list_folders(session: Session, folder_ids: Iterable[int]) -> list[Folder]:
    ids = list(folder_ids)
    if not ids:
        return []
    result = session.execute(select(Folder).where(Folder.id.in_(ids)).order_by(Folder.id))
    return list(result.scalars().all())


def list_folder_owner_ids(session: Session, folder_ids: Iterable[int]) -> dict[int, list[int]]:
    """Return {folder_id: [owner user ids]} for the given folders."""
    ids = list(folder_ids)
    if not ids:
        return {}
    result = session.execute(
        select(FolderOwner.folder_id, FolderOwner.user_id)
        .where(FolderOwner.folder_id.in_(ids))
        .order_by(FolderOwner.folder_id, FolderOwner.user_id)
    )
    owners: dict[int, list[int]] = {folder_id: [] for folder_id in ids}
    for folder_id, user_id in result.all():
        owners[folder_id].append(user_id)
    return owners


def list_folder_location_pairs(session: Session, folder_ids: Iterable[int]) -> list[tuple[int, int]]:
    """Return (folder_id, location_id) pairs for the given folders."""
    ids = list(folder_ids)
    if not ids:
        return []
    result = session.execute(
        select(FolderLocation.folder_id, FolderLocation.location_id)
        .where(FolderLocation.folder_id.in_(ids))
        .order_by(FolderLocation.folder_id, FolderLocation.location_id)
    )
    return [(folder_id, location_id) for folder_id, location_id in result.all()]
