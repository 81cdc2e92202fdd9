"""
SQLAlchemy ORM models for the playlist service.

This module defines the tables the service owns:
- tracks (catalog metadata and moderation status)
- playlists (with cached play/like/music counters)
- playlist_tracks (ordered membership of a track in a playlist)

Sort orders inside a playlist are dense and 1-based. The index on
(playlist_id, sort_order) is deliberately not unique because inserting at an
explicit position shifts every following row in a single UPDATE.
All timestamps are in UTC.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    TIMESTAMP,
    BigInteger,
    CheckConstraint,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Declarative base for ORM models."""

    pass


class TrackStatus(str, enum.Enum):
    """Moderation status of an uploaded track."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    DELETED = "deleted"


class PlaylistType(str, enum.Enum):
    USER_CREATED = "user_created"
    SYSTEM = "system"
    FAVORITE = "favorite"
    RECENTLY_PLAYED = "recently_played"


class PlaylistVisibility(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    FRIENDS = "friends"


# Playlist types that exist at most once per creator and are created on first access.
SYSTEM_PLAYLIST_TYPES = (PlaylistType.FAVORITE, PlaylistType.RECENTLY_PLAYED)


def _enum_column(enum_cls: type[enum.Enum], name: str) -> Enum:
    # Stored as VARCHAR of the member name so partial indexes can compare plain strings.
    return Enum(enum_cls, name=name, native_enum=False, length=32, validate_strings=True)


# TRACKS
class Track(Base):
    """A track (song) in the catalog with its moderation status and counters."""

    __tablename__ = "tracks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    artist: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    album: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    file_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    cover_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    status: Mapped[TrackStatus] = mapped_column(
        _enum_column(TrackStatus, "track_status"), nullable=False, default=TrackStatus.PENDING
    )
    upload_user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    play_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    file_size: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    bit_rate: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    sample_rate: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    genre: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    release_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    lyrics: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    playlist_links: Mapped[List["PlaylistTrack"]] = relationship(back_populates="track", passive_deletes=True)

    __table_args__ = (
        Index("ix_tracks_title", "title"),
        Index("ix_tracks_status_created", "status", "created_at"),
        CheckConstraint("duration_seconds IS NULL OR duration_seconds >= 0", name="ck_tracks_duration_nonnegative"),
    )


# PLAYLISTS
class Playlist(Base):
    """Playlist owned by its creator, with cached counters."""

    __tablename__ = "playlists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    cover_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    creator_id: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[PlaylistType] = mapped_column(
        _enum_column(PlaylistType, "playlist_type"), nullable=False, default=PlaylistType.USER_CREATED
    )
    visibility: Mapped[PlaylistVisibility] = mapped_column(
        _enum_column(PlaylistVisibility, "playlist_visibility"), nullable=False, default=PlaylistVisibility.PUBLIC
    )
    play_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    music_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    memberships: Mapped[List["PlaylistTrack"]] = relationship(
        back_populates="playlist",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PlaylistTrack.sort_order",
    )

    __table_args__ = (
        Index("ix_playlists_creator_created", "creator_id", "created_at"),
        Index("ix_playlists_visibility_play_count", "visibility", "play_count"),
        Index(
            "uq_playlists_creator_system_type",
            "creator_id",
            "type",
            unique=True,
            postgresql_where=text("type IN ('FAVORITE', 'RECENTLY_PLAYED')"),
            sqlite_where=text("type IN ('FAVORITE', 'RECENTLY_PLAYED')"),
        ),
        CheckConstraint("play_count >= 0", name="ck_playlists_play_count_nonnegative"),
        CheckConstraint("like_count >= 0", name="ck_playlists_like_count_nonnegative"),
        CheckConstraint("music_count >= 0", name="ck_playlists_music_count_nonnegative"),
    )


# PLAYLIST_TRACKS membership
class PlaylistTrack(Base):
    """Ordered membership of a track in a playlist."""

    __tablename__ = "playlist_tracks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    playlist_id: Mapped[int] = mapped_column(ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False)
    track_id: Mapped[int] = mapped_column(ForeignKey("tracks.id", ondelete="CASCADE"), nullable=False, index=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False)
    added_by_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    added_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, server_default=func.now()
    )

    playlist: Mapped["Playlist"] = relationship(back_populates="memberships")
    track: Mapped["Track"] = relationship(back_populates="playlist_links")

    __table_args__ = (
        UniqueConstraint("playlist_id", "track_id", name="uq_playlist_tracks_playlist_track"),
        Index("ix_playlist_tracks_playlist_sort_order", "playlist_id", "sort_order"),
        CheckConstraint("sort_order >= 1", name="ck_playlist_tracks_sort_order_positive"),
    )
