"""
Playlist access rules.

Only the creator may change a playlist or its tracks. Public playlists are
readable by anyone, including anonymous callers; private and friends-only
playlists are readable by their creator alone (this service keeps no
friendship graph).
"""

from __future__ import annotations

from typing import Optional

from playlist_service.core.errors import ForbiddenError
from playlist_service.db.models import Playlist, PlaylistVisibility


# PUBLIC_INTERFACE
def is_owner(playlist: Playlist, user_id: Optional[int]) -> bool:
    return user_id is not None and playlist.creator_id == user_id


# PUBLIC_INTERFACE
def ensure_owner(playlist: Playlist, user_id: Optional[int]) -> None:
    """Raise ForbiddenError unless user_id created the playlist."""
    if not is_owner(playlist, user_id):
        raise ForbiddenError(f"User {user_id} may not modify playlist {playlist.id}")


# PUBLIC_INTERFACE
def ensure_readable(playlist: Playlist, viewer_id: Optional[int]) -> None:
    """Raise ForbiddenError if the viewer may not see a non-public playlist."""
    if playlist.visibility == PlaylistVisibility.PUBLIC:
        return
    if not is_owner(playlist, viewer_id):
        raise ForbiddenError(f"Playlist {playlist.id} is not visible to this user")
