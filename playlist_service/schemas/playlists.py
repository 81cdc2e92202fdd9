"""
Pydantic schemas for playlist operations and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from playlist_service.db.models import PlaylistType, PlaylistVisibility
from playlist_service.schemas.catalog import TrackOut


class PlaylistBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Playlist name")
    description: Optional[str] = Field(None, max_length=500, description="Playlist description")
    cover_url: Optional[str] = Field(None, description="Cover image URL")
    visibility: PlaylistVisibility = Field(default=PlaylistVisibility.PUBLIC, description="Who may view the playlist")


class PlaylistCreate(PlaylistBase):
    """Create schema for playlist."""


class PlaylistUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="Playlist name")
    description: Optional[str] = Field(None, max_length=500, description="Playlist description")
    cover_url: Optional[str] = Field(None, description="Cover image URL")
    visibility: Optional[PlaylistVisibility] = Field(None, description="Who may view the playlist")


class AddTrackRequest(BaseModel):
    track_id: int = Field(..., description="Track ID to add")
    position: Optional[int] = Field(
        None,
        ge=1,
        description="1-based position to insert at; following tracks move down. Appends when omitted.",
    )


class PlaylistOut(PlaylistBase):
    id: int
    creator_id: int
    type: PlaylistType
    play_count: int
    like_count: int
    music_count: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PlaylistListOut(BaseModel):
    items: List[PlaylistOut] = Field(default_factory=list)
    total: int
    page: int
    size: int


class PlaylistTrackItem(BaseModel):
    position: int
    added_by_id: int
    added_at: datetime
    track: TrackOut


class PlaylistTracksOut(BaseModel):
    playlist: PlaylistOut
    page: int
    size: int
    total: int
    tracks: List[PlaylistTrackItem] = Field(default_factory=list)


class MembershipOut(BaseModel):
    id: int
    playlist_id: int
    track_id: int
    sort_order: int
    added_by_id: int
    added_at: datetime

    class Config:
        from_attributes = True
