"""
CRUD and data-access helpers for the playlist service.

Contains functions for:
- Track catalog (lookup, search over approved tracks, moderation, play counter)
- Playlist store (create, update, delete, listings, atomic counters,
  system playlist get-or-create, cached music count)

All functions expect a SQLAlchemy Session (2.0 style). Functions that mutate
commit their own work, except `set_music_count` and `count_memberships`,
which run inside the caller's membership transaction.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from playlist_service.db.models import (
    SYSTEM_PLAYLIST_TYPES,
    Playlist,
    PlaylistTrack,
    PlaylistType,
    PlaylistVisibility,
    Track,
    TrackStatus,
)

SYSTEM_PLAYLIST_NAMES = {
    PlaylistType.FAVORITE: "My Favorites",
    PlaylistType.RECENTLY_PLAYED: "Recently Played",
}


def _offset(page: int, size: int) -> int:
    return (max(page, 1) - 1) * size


# --------------------------
# Track catalog
# --------------------------

# PUBLIC_INTERFACE
def create_track(db: Session, upload_user_id: int, title: str, file_url: str, **fields: Any) -> Track:
    """Insert a catalog track (status defaults to PENDING until moderated)."""
    track = Track(upload_user_id=upload_user_id, title=title, file_url=file_url, **fields)
    db.add(track)
    db.commit()
    db.refresh(track)
    return track


# PUBLIC_INTERFACE
def get_track(db: Session, track_id: int) -> Optional[Track]:
    """Get a track by id regardless of moderation status."""
    return db.get(Track, track_id)


# PUBLIC_INTERFACE
def search_tracks(
    db: Session,
    keyword: Optional[str] = None,
    artist: Optional[str] = None,
    genre: Optional[str] = None,
    page: int = 1,
    size: int = 20,
) -> Tuple[List[Track], int]:
    """Search approved tracks, newest first.

    A non-blank keyword matches title, artist or album; otherwise the optional
    artist and genre filters apply. Returns (tracks, total).
    """
    stmt = select(Track).where(Track.status == TrackStatus.APPROVED)
    if keyword and keyword.strip():
        like = f"%{keyword.strip().lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Track.title).like(like),
                func.lower(Track.artist).like(like),
                func.lower(Track.album).like(like),
            )
        )
    else:
        if artist:
            stmt = stmt.where(func.lower(Track.artist).like(f"%{artist.lower()}%"))
        if genre:
            stmt = stmt.where(func.lower(Track.genre).like(f"%{genre.lower()}%"))

    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    page_stmt = stmt.order_by(Track.created_at.desc(), Track.id.desc()).offset(_offset(page, size)).limit(size)
    return list(db.execute(page_stmt).scalars().all()), int(total)


# PUBLIC_INTERFACE
def list_tracks_by_uploader(db: Session, upload_user_id: int, page: int = 1, size: int = 20) -> List[Track]:
    """List tracks uploaded by a user (any status), newest first."""
    stmt = (
        select(Track)
        .where(Track.upload_user_id == upload_user_id)
        .order_by(Track.created_at.desc(), Track.id.desc())
        .offset(_offset(page, size))
        .limit(size)
    )
    return list(db.execute(stmt).scalars().all())


# PUBLIC_INTERFACE
def set_track_status(db: Session, track_id: int, status: TrackStatus) -> Optional[Track]:
    """Move a track to a moderation status. Returns None if the track does not exist."""
    track = db.get(Track, track_id)
    if track is None:
        return None
    track.status = status
    db.commit()
    db.refresh(track)
    return track


# PUBLIC_INTERFACE
def increment_track_play_count(db: Session, track_id: int) -> bool:
    """Atomically add one play to a track. Returns False if the track does not exist."""
    stmt = update(Track).where(Track.id == track_id).values(play_count=Track.play_count + 1)
    res = db.execute(stmt)
    db.commit()
    return res.rowcount > 0


# --------------------------
# Playlists
# --------------------------

# PUBLIC_INTERFACE
def create_playlist(
    db: Session,
    creator_id: int,
    name: str,
    description: Optional[str] = None,
    cover_url: Optional[str] = None,
    visibility: PlaylistVisibility = PlaylistVisibility.PUBLIC,
    playlist_type: PlaylistType = PlaylistType.USER_CREATED,
) -> Playlist:
    """Create a new playlist."""
    playlist = Playlist(
        creator_id=creator_id,
        name=name,
        description=description,
        cover_url=cover_url,
        visibility=visibility,
        type=playlist_type,
    )
    try:
        db.add(playlist)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(playlist)
    return playlist


# PUBLIC_INTERFACE
def get_playlist(db: Session, playlist_id: int) -> Optional[Playlist]:
    """Fetch a playlist by id."""
    return db.get(Playlist, playlist_id)


# PUBLIC_INTERFACE
def lock_playlist(db: Session, playlist_id: int) -> Optional[Playlist]:
    """Fetch a playlist with a row lock held until the current transaction ends.

    populate_existing refreshes an instance already in the identity map, so the
    caller sees the committed state of the row it just locked.
    """
    stmt = (
        select(Playlist)
        .where(Playlist.id == playlist_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalars().first()


# PUBLIC_INTERFACE
def list_user_playlists(
    db: Session, creator_id: int, page: int = 1, size: int = 20, public_only: bool = False
) -> Tuple[List[Playlist], int]:
    """List playlists created by a user, newest first. Returns (playlists, total)."""
    stmt = select(Playlist).where(Playlist.creator_id == creator_id)
    if public_only:
        stmt = stmt.where(Playlist.visibility == PlaylistVisibility.PUBLIC)
    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    page_stmt = stmt.order_by(Playlist.created_at.desc(), Playlist.id.desc()).offset(_offset(page, size)).limit(size)
    return list(db.execute(page_stmt).scalars().all()), int(total)


# PUBLIC_INTERFACE
def search_public_playlists(db: Session, keyword: str, page: int = 1, size: int = 20) -> Tuple[List[Playlist], int]:
    """Search public playlists by name or description, most played first."""
    like = f"%{keyword.strip().lower()}%"
    stmt = select(Playlist).where(
        Playlist.visibility == PlaylistVisibility.PUBLIC,
        or_(func.lower(Playlist.name).like(like), func.lower(Playlist.description).like(like)),
    )
    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    page_stmt = stmt.order_by(Playlist.play_count.desc(), Playlist.id.asc()).offset(_offset(page, size)).limit(size)
    return list(db.execute(page_stmt).scalars().all()), int(total)


# PUBLIC_INTERFACE
def top_public_playlists(db: Session, limit: int = 10) -> List[Playlist]:
    """Public playlists ordered by play count."""
    stmt = (
        select(Playlist)
        .where(Playlist.visibility == PlaylistVisibility.PUBLIC)
        .order_by(Playlist.play_count.desc(), Playlist.id.asc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


# PUBLIC_INTERFACE
def latest_public_playlists(db: Session, limit: int = 10) -> List[Playlist]:
    """Public playlists ordered by creation time, newest first."""
    stmt = (
        select(Playlist)
        .where(Playlist.visibility == PlaylistVisibility.PUBLIC)
        .order_by(Playlist.created_at.desc(), Playlist.id.desc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


# PUBLIC_INTERFACE
def update_playlist(
    db: Session,
    playlist: Playlist,
    name: Optional[str] = None,
    description: Optional[str] = None,
    cover_url: Optional[str] = None,
    visibility: Optional[PlaylistVisibility] = None,
) -> Playlist:
    """Update editable fields on a playlist; None leaves a field unchanged."""
    values = {k: v for k, v in {
        "name": name,
        "description": description,
        "cover_url": cover_url,
        "visibility": visibility,
    }.items() if v is not None}
    for key, value in values.items():
        setattr(playlist, key, value)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(playlist)
    return playlist


# PUBLIC_INTERFACE
def delete_playlist(db: Session, playlist: Playlist) -> None:
    """Delete a playlist; its memberships go with it."""
    try:
        db.delete(playlist)
        db.commit()
    except Exception:
        db.rollback()
        raise


# PUBLIC_INTERFACE
def count_memberships(db: Session, playlist_id: int) -> int:
    """Live number of tracks in a playlist. Runs in the caller's transaction."""
    stmt = select(func.count()).select_from(PlaylistTrack).where(PlaylistTrack.playlist_id == playlist_id)
    return int(db.execute(stmt).scalar_one())


# PUBLIC_INTERFACE
def set_music_count(db: Session, playlist_id: int, count: int) -> None:
    """Persist the cached music count. Runs in the caller's transaction (no commit)."""
    db.execute(update(Playlist).where(Playlist.id == playlist_id).values(music_count=count))


# PUBLIC_INTERFACE
def increment_play_count(db: Session, playlist_id: int) -> bool:
    """Atomically add one play. Returns False if the playlist does not exist."""
    stmt = update(Playlist).where(Playlist.id == playlist_id).values(play_count=Playlist.play_count + 1)
    res = db.execute(stmt)
    db.commit()
    return res.rowcount > 0


# PUBLIC_INTERFACE
def increment_like_count(db: Session, playlist_id: int) -> bool:
    """Atomically add one like. Returns False if the playlist does not exist."""
    stmt = update(Playlist).where(Playlist.id == playlist_id).values(like_count=Playlist.like_count + 1)
    res = db.execute(stmt)
    db.commit()
    return res.rowcount > 0


# PUBLIC_INTERFACE
def decrement_like_count(db: Session, playlist_id: int) -> bool:
    """Atomically remove one like, never going below zero.

    Returns False when nothing changed (missing playlist or already at zero).
    """
    stmt = (
        update(Playlist)
        .where(Playlist.id == playlist_id, Playlist.like_count > 0)
        .values(like_count=Playlist.like_count - 1)
    )
    res = db.execute(stmt)
    db.commit()
    return res.rowcount > 0


# PUBLIC_INTERFACE
def find_system_playlist(db: Session, creator_id: int, playlist_type: PlaylistType) -> Optional[Playlist]:
    """Find a creator's playlist of the given type (unique for system types)."""
    stmt = select(Playlist).where(Playlist.creator_id == creator_id, Playlist.type == playlist_type).limit(1)
    return db.execute(stmt).scalars().first()


# PUBLIC_INTERFACE
def get_or_create_system_playlist(db: Session, creator_id: int, playlist_type: PlaylistType) -> Playlist:
    """Return the creator's FAVORITE/RECENTLY_PLAYED playlist, creating it privately on first access.

    Two first accesses racing each other both try to insert; the loser hits the
    partial unique index and re-reads the winner's row.
    """
    if playlist_type not in SYSTEM_PLAYLIST_TYPES:
        raise ValueError(f"{playlist_type.value} is not a system playlist type")

    existing = find_system_playlist(db, creator_id, playlist_type)
    if existing is not None:
        return existing

    playlist = Playlist(
        creator_id=creator_id,
        name=SYSTEM_PLAYLIST_NAMES[playlist_type],
        type=playlist_type,
        visibility=PlaylistVisibility.PRIVATE,
    )
    try:
        db.add(playlist)
        db.commit()
    except IntegrityError:
        db.rollback()
        winner = find_system_playlist(db, creator_id, playlist_type)
        if winner is None:
            raise
        return winner
    db.refresh(playlist)
    return playlist
