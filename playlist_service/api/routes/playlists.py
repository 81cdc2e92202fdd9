"""
Playlists routes: manage playlists and the ordered tracks within them.

Exposes:
- POST /playlists: Create a playlist owned by the caller
- GET /playlists/search: Search public playlists
- GET /playlists/top, GET /playlists/latest: Public playlist listings
- GET /playlists/me/favorite, GET /playlists/me/recently-played: System playlists (created on first access)
- GET /playlists/user/{user_id}: Playlists created by a user
- GET /playlists/{playlist_id}: Playlist details
- GET /playlists/{playlist_id}/tracks: One ordered page of tracks
- PATCH /playlists/{playlist_id}: Update playlist (creator only)
- DELETE /playlists/{playlist_id}: Delete playlist (creator only)
- POST /playlists/{playlist_id}/tracks: Add a track (creator only)
- DELETE /playlists/{playlist_id}/tracks/{track_id}: Remove a track (creator only)
- POST /playlists/{playlist_id}/play: Count a play
- POST /playlists/{playlist_id}/like: Like or unlike

Domain errors (not found, forbidden, duplicate, conflict) propagate to the
application-level handler registered in api.main.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from playlist_service.api.deps import get_current_user_id, get_db, get_optional_user_id
from playlist_service.core.config import get_settings
from playlist_service.db.models import Playlist
from playlist_service.schemas.catalog import TrackOut
from playlist_service.schemas.playlists import (
    AddTrackRequest,
    MembershipOut,
    PlaylistCreate,
    PlaylistListOut,
    PlaylistOut,
    PlaylistTrackItem,
    PlaylistTracksOut,
    PlaylistUpdate,
)
from playlist_service.services import playlists as playlist_service

router = APIRouter(prefix="/playlists", tags=["Playlists"])

_ERROR_RESPONSES = {
    401: {"description": "Unauthorized"},
    403: {"description": "Forbidden"},
    404: {"description": "Not found"},
}


def _playlist_out(playlist: Playlist) -> PlaylistOut:
    return PlaylistOut.model_validate(playlist)


def _page_out(items: List[Playlist], total: int, page: int, size: int) -> PlaylistListOut:
    return PlaylistListOut(items=[_playlist_out(p) for p in items], total=total, page=page, size=size)


@router.post(
    "",
    summary="Create a new playlist",
    response_model=PlaylistOut,
    status_code=status.HTTP_201_CREATED,
    responses={201: {"description": "Playlist created"}, 401: {"description": "Unauthorized"}},
)
def create_playlist(
    payload: PlaylistCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> PlaylistOut:
    """
    Create a playlist owned by the caller.

    Parameters:
    - name: playlist name (required)
    - description, cover_url, visibility: optional
    """
    playlist = playlist_service.create_playlist(
        db,
        creator_id=user_id,
        name=payload.name,
        description=payload.description,
        cover_url=payload.cover_url,
        visibility=payload.visibility,
    )
    return _playlist_out(playlist)


@router.get("/search", summary="Search public playlists", response_model=PlaylistListOut)
def search_playlists(
    keyword: str = Query(..., min_length=1, description="Text matched against name and description"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    size: Optional[int] = Query(None, ge=1, description="Items per page"),
    db: Session = Depends(get_db),
) -> PlaylistListOut:
    """Public playlists whose name or description contains the keyword, most played first."""
    size = get_settings().clamp_page_size(size)
    items, total = playlist_service.search_playlists(db, keyword, page=page, size=size)
    return _page_out(items, total, page, size)


@router.get("/top", summary="Most played public playlists", response_model=List[PlaylistOut])
def top_playlists(
    limit: int = Query(10, ge=1, le=100, description="Maximum number of playlists"),
    db: Session = Depends(get_db),
) -> List[PlaylistOut]:
    return [_playlist_out(p) for p in playlist_service.top_playlists(db, limit=limit)]


@router.get("/latest", summary="Newest public playlists", response_model=List[PlaylistOut])
def latest_playlists(
    limit: int = Query(10, ge=1, le=100, description="Maximum number of playlists"),
    db: Session = Depends(get_db),
) -> List[PlaylistOut]:
    return [_playlist_out(p) for p in playlist_service.latest_playlists(db, limit=limit)]


@router.get(
    "/me/favorite",
    summary="Get the caller's favorites playlist",
    response_model=PlaylistOut,
    responses={401: {"description": "Unauthorized"}},
)
def get_favorite_playlist(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> PlaylistOut:
    """Return the caller's private favorites playlist, creating it on first access."""
    return _playlist_out(playlist_service.get_favorite_playlist(db, user_id))


@router.get(
    "/me/recently-played",
    summary="Get the caller's recently played playlist",
    response_model=PlaylistOut,
    responses={401: {"description": "Unauthorized"}},
)
def get_recently_played_playlist(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> PlaylistOut:
    """Return the caller's private recently-played playlist, creating it on first access."""
    return _playlist_out(playlist_service.get_recently_played_playlist(db, user_id))


@router.get("/user/{user_id}", summary="List a user's playlists", response_model=PlaylistListOut)
def list_user_playlists(
    user_id: int = Path(..., description="Creator user id"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    size: Optional[int] = Query(None, ge=1, description="Items per page"),
    db: Session = Depends(get_db),
    viewer_id: Optional[int] = Depends(get_optional_user_id),
) -> PlaylistListOut:
    """
    Return playlists created by a user, newest first.

    The creator sees all of them; everybody else sees only public ones.
    """
    size = get_settings().clamp_page_size(size)
    items, total = playlist_service.list_user_playlists(db, user_id, viewer_id=viewer_id, page=page, size=size)
    return _page_out(items, total, page, size)


@router.get(
    "/{playlist_id}",
    summary="Get playlist details",
    response_model=PlaylistOut,
    responses=_ERROR_RESPONSES,
)
def get_playlist_details(
    playlist_id: int = Path(..., description="Playlist id"),
    db: Session = Depends(get_db),
    viewer_id: Optional[int] = Depends(get_optional_user_id),
) -> PlaylistOut:
    return _playlist_out(playlist_service.get_playlist(db, playlist_id, viewer_id))


@router.get(
    "/{playlist_id}/tracks",
    summary="List playlist tracks in order",
    response_model=PlaylistTracksOut,
    responses=_ERROR_RESPONSES,
)
def list_playlist_tracks(
    playlist_id: int = Path(..., description="Playlist id"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    size: Optional[int] = Query(None, ge=1, description="Items per page"),
    db: Session = Depends(get_db),
    viewer_id: Optional[int] = Depends(get_optional_user_id),
) -> PlaylistTracksOut:
    """
    Return the playlist with one page of its tracks, ordered by position.
    """
    size = get_settings().clamp_page_size(size)
    playlist, tracks_page = playlist_service.get_playlist_tracks(
        db, playlist_id, viewer_id=viewer_id, page=page, page_size=size
    )
    return PlaylistTracksOut(
        playlist=_playlist_out(playlist),
        page=tracks_page.page,
        size=tracks_page.page_size,
        total=tracks_page.total,
        tracks=[
            PlaylistTrackItem(
                position=entry.position,
                added_by_id=entry.added_by_id,
                added_at=entry.added_at,
                track=TrackOut.model_validate(entry.track),
            )
            for entry in tracks_page.items
        ],
    )


@router.patch(
    "/{playlist_id}",
    summary="Edit playlist",
    response_model=PlaylistOut,
    responses=_ERROR_RESPONSES,
)
def update_playlist(
    updates: PlaylistUpdate,
    playlist_id: int = Path(..., description="Playlist id"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> PlaylistOut:
    """
    Update editable fields on a playlist created by the caller.
    """
    updated = playlist_service.update_playlist(
        db,
        playlist_id,
        user_id,
        name=updates.name,
        description=updates.description,
        cover_url=updates.cover_url,
        visibility=updates.visibility,
    )
    return _playlist_out(updated)


@router.delete(
    "/{playlist_id}",
    summary="Delete playlist",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={204: {"description": "Deleted"}, **_ERROR_RESPONSES},
)
def delete_playlist(
    playlist_id: int = Path(..., description="Playlist id"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> None:
    """
    Delete a playlist created by the caller. Returns 204 on success.
    """
    playlist_service.delete_playlist(db, playlist_id, user_id)


@router.post(
    "/{playlist_id}/tracks",
    summary="Add track to playlist",
    response_model=MembershipOut,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Track already in playlist"}, **_ERROR_RESPONSES},
)
def add_track(
    payload: AddTrackRequest,
    playlist_id: int = Path(..., description="Playlist id"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> MembershipOut:
    """
    Add a track to a playlist created by the caller.

    Parameters:
    - track_id: track to add
    - position: optional 1-based position; appended when omitted
    """
    link = playlist_service.add_track(db, playlist_id, payload.track_id, user_id, position=payload.position)
    return MembershipOut.model_validate(link)


@router.delete(
    "/{playlist_id}/tracks/{track_id}",
    summary="Remove track from playlist",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={204: {"description": "Track removed"}, **_ERROR_RESPONSES},
)
def remove_track(
    playlist_id: int = Path(..., description="Playlist id"),
    track_id: int = Path(..., description="Track id to remove"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> None:
    """
    Remove a track from a playlist created by the caller; later tracks move up one place.
    """
    playlist_service.remove_track(db, playlist_id, track_id, user_id)


@router.post(
    "/{playlist_id}/play",
    summary="Record a playlist play",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Not found"}},
)
def record_play(
    playlist_id: int = Path(..., description="Playlist id"),
    db: Session = Depends(get_db),
) -> None:
    playlist_service.record_play(db, playlist_id)


@router.post(
    "/{playlist_id}/like",
    summary="Like or unlike a playlist",
    response_model=PlaylistOut,
    responses={401: {"description": "Unauthorized"}, 404: {"description": "Not found"}},
)
def toggle_like(
    playlist_id: int = Path(..., description="Playlist id"),
    is_like: bool = Query(True, description="True to like, false to remove a like"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> PlaylistOut:
    return _playlist_out(playlist_service.toggle_like(db, playlist_id, user_id, is_like))
