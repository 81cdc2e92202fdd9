"""
Playlist membership manager.

Owns the ordered, duplicate-free list of tracks in each playlist. Sort orders
are a dense 1-based sequence: appends take max + 1, explicit positions shift
the tail up to make room, and removals shift the tail down to close the gap.

Every mutating function is a single transaction against the session:
1. lock the playlist row (serializes add/remove on that playlist only),
2. check ownership and existence,
3. insert/delete the membership and renumber the affected tail,
4. recompute Playlist.music_count from the live membership count,
5. commit.
Any exception rolls the whole unit back, so a partially renumbered playlist
is never committed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from playlist_service.core.errors import AlreadyExistsError, ConflictError, NotFoundError
from playlist_service.core.logging import get_logger
from playlist_service.db import crud
from playlist_service.db.models import Playlist, PlaylistTrack, Track
from playlist_service.services.authorization import ensure_owner

logger = get_logger("playlist_service.membership")


@dataclass
class PlaylistEntry:
    """One track of a playlist page together with its position."""
    track: Track
    position: int
    added_by_id: int
    added_at: datetime


@dataclass
class PlaylistTracksPage:
    playlist_id: int
    page: int
    page_size: int
    total: int
    items: List[PlaylistEntry] = field(default_factory=list)


def _locked_playlist(db: Session, playlist_id: int) -> Playlist:
    playlist = crud.lock_playlist(db, playlist_id)
    if playlist is None:
        raise NotFoundError("Playlist", playlist_id)
    return playlist


def _find_membership(db: Session, playlist_id: int, track_id: int) -> Optional[PlaylistTrack]:
    stmt = (
        select(PlaylistTrack)
        .where(PlaylistTrack.playlist_id == playlist_id, PlaylistTrack.track_id == track_id)
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalars().first()


def _max_sort_order(db: Session, playlist_id: int) -> int:
    stmt = select(func.coalesce(func.max(PlaylistTrack.sort_order), 0)).where(
        PlaylistTrack.playlist_id == playlist_id
    )
    return int(db.execute(stmt).scalar_one())


def _resolve_position(db: Session, playlist_id: int, requested: Optional[int]) -> int:
    """Pick the sort order for a new membership, shifting the tail for explicit positions."""
    last = _max_sort_order(db, playlist_id)
    if requested is None or requested > last:
        return last + 1
    if requested < 1:
        raise ConflictError(f"Position {requested} is out of range; positions start at 1")

    db.execute(
        update(PlaylistTrack)
        .where(PlaylistTrack.playlist_id == playlist_id, PlaylistTrack.sort_order >= requested)
        .values(sort_order=PlaylistTrack.sort_order + 1)
    )
    return requested


def _sync_music_count(db: Session, playlist_id: int) -> int:
    count = crud.count_memberships(db, playlist_id)
    crud.set_music_count(db, playlist_id, count)
    return count


# PUBLIC_INTERFACE
def add_track(
    db: Session,
    playlist_id: int,
    track_id: int,
    adder_id: int,
    position: Optional[int] = None,
) -> PlaylistTrack:
    """Add a track to a playlist.

    Without a position the track is appended after the current maximum. With a
    position p (1-based), entries at p and after move down one place; a p past
    the end appends. Returns the new membership.

    Raises:
    - NotFoundError if the playlist or track does not exist
    - ForbiddenError if adder_id is not the playlist's creator
    - AlreadyExistsError if the track is already in the playlist
    - ConflictError if position < 1
    """
    try:
        playlist = _locked_playlist(db, playlist_id)
        ensure_owner(playlist, adder_id)

        if crud.get_track(db, track_id) is None:
            raise NotFoundError("Track", track_id)
        if _find_membership(db, playlist_id, track_id) is not None:
            raise AlreadyExistsError(f"Track {track_id} is already in playlist {playlist_id}")

        sort_order = _resolve_position(db, playlist_id, position)
        link = PlaylistTrack(
            playlist_id=playlist_id,
            track_id=track_id,
            sort_order=sort_order,
            added_by_id=adder_id,
        )
        db.add(link)
        try:
            db.flush()
        except IntegrityError:
            raise AlreadyExistsError(f"Track {track_id} is already in playlist {playlist_id}")

        count = _sync_music_count(db, playlist_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(link)
    logger.info(
        "playlist.track_added",
        extra={"playlist_id": playlist_id, "track_id": track_id, "position": sort_order, "music_count": count},
    )
    return link


# PUBLIC_INTERFACE
def remove_track(db: Session, playlist_id: int, track_id: int, remover_id: int) -> None:
    """Remove a track from a playlist and close the gap it leaves.

    Raises:
    - NotFoundError if the playlist does not exist or the track is not a member
    - ForbiddenError if remover_id is not the playlist's creator
    """
    try:
        playlist = _locked_playlist(db, playlist_id)
        ensure_owner(playlist, remover_id)

        link = _find_membership(db, playlist_id, track_id)
        if link is None:
            raise NotFoundError(
                "PlaylistTrack", track_id, message=f"Track {track_id} is not in playlist {playlist_id}"
            )
        removed_position = link.sort_order

        db.execute(delete(PlaylistTrack).where(PlaylistTrack.id == link.id))
        db.execute(
            update(PlaylistTrack)
            .where(PlaylistTrack.playlist_id == playlist_id, PlaylistTrack.sort_order > removed_position)
            .values(sort_order=PlaylistTrack.sort_order - 1)
        )

        count = _sync_music_count(db, playlist_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "playlist.track_removed",
        extra={"playlist_id": playlist_id, "track_id": track_id, "position": removed_position, "music_count": count},
    )


# PUBLIC_INTERFACE
def list_tracks(db: Session, playlist_id: int, page: int = 1, page_size: int = 20) -> PlaylistTracksPage:
    """Return one page of a playlist's tracks ordered by position, joined to track metadata.

    Raises:
    - NotFoundError if the playlist does not exist
    """
    if crud.get_playlist(db, playlist_id) is None:
        raise NotFoundError("Playlist", playlist_id)

    page = max(page, 1)
    total = crud.count_memberships(db, playlist_id)
    stmt = (
        select(PlaylistTrack, Track)
        .join(Track, Track.id == PlaylistTrack.track_id)
        .where(PlaylistTrack.playlist_id == playlist_id)
        .order_by(PlaylistTrack.sort_order.asc(), PlaylistTrack.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .execution_options(populate_existing=True)
    )
    items = [
        PlaylistEntry(track=track, position=link.sort_order, added_by_id=link.added_by_id, added_at=link.added_at)
        for link, track in db.execute(stmt).all()
    ]
    return PlaylistTracksPage(playlist_id=playlist_id, page=page, page_size=page_size, total=total, items=items)
