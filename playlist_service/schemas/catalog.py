"""
Pydantic schemas for catalog tracks and search results.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from playlist_service.db.models import TrackStatus


class TrackBase(BaseModel):
    title: str = Field(..., description="Track title")
    artist: Optional[str] = Field(None, description="Artist name")
    album: Optional[str] = Field(None, description="Album title")
    genre: Optional[str] = Field(None, description="Genre label")
    release_year: Optional[int] = Field(None, description="Year of release")
    duration_seconds: Optional[int] = Field(None, ge=0, description="Duration in seconds")
    file_url: str = Field(..., description="Object store reference of the audio file")
    cover_url: Optional[str] = Field(None, description="Cover image URL")


class TrackOut(TrackBase):
    id: int
    status: TrackStatus
    upload_user_id: int
    play_count: int
    like_count: int
    bit_rate: Optional[int] = None
    sample_rate: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TrackSearchOut(BaseModel):
    items: List[TrackOut] = Field(default_factory=list)
    total: int
    page: int
    size: int
