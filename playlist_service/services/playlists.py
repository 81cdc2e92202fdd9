"""
Playlist service for the playlist API.

Composes the playlist store, the membership manager and the track catalog
into the use cases exposed over HTTP. Authorization is decided here with the
single guard from services.authorization; track ordering is delegated
entirely to services.membership.

Errors are raised as core.errors exceptions and mapped to HTTP responses by
the API layer.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from playlist_service.core.errors import NotFoundError
from playlist_service.core.logging import get_logger
from playlist_service.db import crud
from playlist_service.db.models import Playlist, PlaylistTrack, PlaylistType, PlaylistVisibility
from playlist_service.services import membership
from playlist_service.services.authorization import ensure_owner, ensure_readable
from playlist_service.services.membership import PlaylistTracksPage

logger = get_logger("playlist_service.playlists")


def _require_playlist(db: Session, playlist_id: int) -> Playlist:
    playlist = crud.get_playlist(db, playlist_id)
    if playlist is None:
        raise NotFoundError("Playlist", playlist_id)
    return playlist


# PUBLIC_INTERFACE
def create_playlist(
    db: Session,
    creator_id: int,
    name: str,
    description: Optional[str] = None,
    cover_url: Optional[str] = None,
    visibility: PlaylistVisibility = PlaylistVisibility.PUBLIC,
) -> Playlist:
    """Create a user playlist. System playlists are only created through get-or-create."""
    playlist = crud.create_playlist(
        db,
        creator_id=creator_id,
        name=name,
        description=description,
        cover_url=cover_url,
        visibility=visibility,
        playlist_type=PlaylistType.USER_CREATED,
    )
    logger.info("playlist.created", extra={"playlist_id": playlist.id, "creator_id": creator_id})
    return playlist


# PUBLIC_INTERFACE
def get_playlist(db: Session, playlist_id: int, viewer_id: Optional[int] = None) -> Playlist:
    """Return a playlist the viewer is allowed to see."""
    playlist = _require_playlist(db, playlist_id)
    ensure_readable(playlist, viewer_id)
    return playlist


# PUBLIC_INTERFACE
def get_playlist_tracks(
    db: Session, playlist_id: int, viewer_id: Optional[int] = None, page: int = 1, page_size: int = 20
) -> Tuple[Playlist, PlaylistTracksPage]:
    """Return a readable playlist with one ordered page of its tracks."""
    playlist = get_playlist(db, playlist_id, viewer_id)
    return playlist, membership.list_tracks(db, playlist_id, page=page, page_size=page_size)


# PUBLIC_INTERFACE
def list_user_playlists(
    db: Session, user_id: int, viewer_id: Optional[int] = None, page: int = 1, size: int = 20
) -> Tuple[List[Playlist], int]:
    """A user's playlists: all of them for the user, public ones for everybody else."""
    public_only = viewer_id != user_id
    return crud.list_user_playlists(db, user_id, page=page, size=size, public_only=public_only)


# PUBLIC_INTERFACE
def search_playlists(db: Session, keyword: str, page: int = 1, size: int = 20) -> Tuple[List[Playlist], int]:
    return crud.search_public_playlists(db, keyword, page=page, size=size)


# PUBLIC_INTERFACE
def top_playlists(db: Session, limit: int = 10) -> List[Playlist]:
    return crud.top_public_playlists(db, limit=limit)


# PUBLIC_INTERFACE
def latest_playlists(db: Session, limit: int = 10) -> List[Playlist]:
    return crud.latest_public_playlists(db, limit=limit)


# PUBLIC_INTERFACE
def update_playlist(
    db: Session,
    playlist_id: int,
    user_id: int,
    name: Optional[str] = None,
    description: Optional[str] = None,
    cover_url: Optional[str] = None,
    visibility: Optional[PlaylistVisibility] = None,
) -> Playlist:
    """Update a playlist owned by user_id."""
    playlist = _require_playlist(db, playlist_id)
    ensure_owner(playlist, user_id)
    return crud.update_playlist(
        db, playlist, name=name, description=description, cover_url=cover_url, visibility=visibility
    )


# PUBLIC_INTERFACE
def delete_playlist(db: Session, playlist_id: int, user_id: int) -> None:
    """Delete a playlist owned by user_id together with its memberships."""
    playlist = _require_playlist(db, playlist_id)
    ensure_owner(playlist, user_id)
    crud.delete_playlist(db, playlist)
    logger.info("playlist.deleted", extra={"playlist_id": playlist_id, "creator_id": user_id})


# PUBLIC_INTERFACE
def add_track(
    db: Session, playlist_id: int, track_id: int, user_id: int, position: Optional[int] = None
) -> PlaylistTrack:
    """Add a track on behalf of user_id.

    Ownership is checked here before delegating and again by the membership
    manager once it holds the playlist lock.
    """
    ensure_owner(_require_playlist(db, playlist_id), user_id)
    return membership.add_track(db, playlist_id, track_id, adder_id=user_id, position=position)


# PUBLIC_INTERFACE
def remove_track(db: Session, playlist_id: int, track_id: int, user_id: int) -> None:
    ensure_owner(_require_playlist(db, playlist_id), user_id)
    membership.remove_track(db, playlist_id, track_id, remover_id=user_id)


# PUBLIC_INTERFACE
def record_play(db: Session, playlist_id: int) -> None:
    """Count one play of a playlist."""
    if not crud.increment_play_count(db, playlist_id):
        raise NotFoundError("Playlist", playlist_id)


# PUBLIC_INTERFACE
def toggle_like(db: Session, playlist_id: int, user_id: int, is_like: bool) -> Playlist:
    """Like (is_like=True) or unlike a playlist; the like count never drops below zero."""
    playlist = _require_playlist(db, playlist_id)
    if is_like:
        crud.increment_like_count(db, playlist_id)
    else:
        crud.decrement_like_count(db, playlist_id)
    logger.info("playlist.like_toggled", extra={"playlist_id": playlist_id, "user_id": user_id, "is_like": is_like})
    db.refresh(playlist)
    return playlist


# PUBLIC_INTERFACE
def get_favorite_playlist(db: Session, user_id: int) -> Playlist:
    return crud.get_or_create_system_playlist(db, user_id, PlaylistType.FAVORITE)


# PUBLIC_INTERFACE
def get_recently_played_playlist(db: Session, user_id: int) -> Playlist:
    return crud.get_or_create_system_playlist(db, user_id, PlaylistType.RECENTLY_PLAYED)

