"""Column-level reads used by assertions; they bypass the identity map so values are always fresh."""

from sqlalchemy import select

from playlist_service.db.models import Playlist, PlaylistTrack


def ordering(session, playlist_id):
    """[(track_id, sort_order), ...] ordered by sort_order."""
    stmt = (
        select(PlaylistTrack.track_id, PlaylistTrack.sort_order)
        .where(PlaylistTrack.playlist_id == playlist_id)
        .order_by(PlaylistTrack.sort_order, PlaylistTrack.id)
    )
    return [tuple(row) for row in session.execute(stmt).all()]


def music_count(session, playlist_id):
    stmt = select(Playlist.music_count).where(Playlist.id == playlist_id)
    return session.execute(stmt).scalar_one()


def counters(session, playlist_id):
    stmt = select(Playlist.play_count, Playlist.like_count).where(Playlist.id == playlist_id)
    return tuple(session.execute(stmt).one())


def assert_dense(session, playlist_id):
    """Sort orders are exactly 1..n and music_count equals n."""
    rows = ordering(session, playlist_id)
    assert [pos for _, pos in rows] == list(range(1, len(rows) + 1))
    assert music_count(session, playlist_id) == len(rows)
    return rows
