"""
Catalog routes: look up and search tracks.

Exposes:
- GET /catalog/search: Search approved tracks by keyword or artist/genre filters
- GET /catalog/tracks/{track_id}: Track metadata by id
- POST /catalog/tracks/{track_id}/play: Count a play of a track
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session

from playlist_service.api.deps import get_db
from playlist_service.core.config import get_settings
from playlist_service.db.crud import get_track, increment_track_play_count, search_tracks
from playlist_service.schemas.catalog import TrackOut, TrackSearchOut

router = APIRouter(prefix="/catalog", tags=["Catalog"])


@router.get(
    "/search",
    summary="Search music catalog",
    response_model=TrackSearchOut,
    responses={200: {"description": "Search results"}},
)
def catalog_search(
    keyword: Optional[str] = Query(None, description="Free-text term matched against title, artist and album"),
    artist: Optional[str] = Query(None, description="Artist filter, used when no keyword is given"),
    genre: Optional[str] = Query(None, description="Genre filter, used when no keyword is given"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    size: Optional[int] = Query(None, ge=1, description="Items per page"),
    db: Session = Depends(get_db),
) -> TrackSearchOut:
    """
    Search approved tracks, newest first.

    Parameters:
    - keyword: free-text search term; when present the artist/genre filters are ignored
    - artist, genre: partial, case-insensitive filters
    - page, size: pagination (1-indexed)
    """
    size = get_settings().clamp_page_size(size)
    tracks, total = search_tracks(db, keyword=keyword, artist=artist, genre=genre, page=page, size=size)
    return TrackSearchOut(
        items=[TrackOut.model_validate(t) for t in tracks],
        total=total,
        page=page,
        size=size,
    )


@router.get(
    "/tracks/{track_id}",
    summary="Get track",
    response_model=TrackOut,
    responses={404: {"description": "Not found"}},
)
def read_track(
    track_id: int = Path(..., description="Track id"),
    db: Session = Depends(get_db),
) -> TrackOut:
    track = get_track(db, track_id)
    if not track:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Track not found")
    return TrackOut.model_validate(track)


@router.post(
    "/tracks/{track_id}/play",
    summary="Record a track play",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Not found"}},
)
def record_track_play(
    track_id: int = Path(..., description="Track id"),
    db: Session = Depends(get_db),
) -> None:
    if not increment_track_play_count(db, track_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Track not found")
