import pytest

from playlist_service.db import crud
from playlist_service.db.models import TrackStatus


@pytest.mark.unit
def test_create_track_defaults_to_pending(db):
    track = crud.create_track(db, upload_user_id=3, title="Demo", file_url="music/demo.mp3", artist="Band")

    assert track.status == TrackStatus.PENDING
    assert track.play_count == 0
    assert crud.get_track(db, track.id).title == "Demo"


@pytest.mark.unit
def test_search_returns_only_approved_tracks(db, factories):
    approved = factories.TrackFactory(title="Blue Moon")
    factories.TrackFactory(title="Blue Sky", status=TrackStatus.PENDING)
    factories.TrackFactory(title="Blue Rain", status=TrackStatus.REJECTED)

    found, total = crud.search_tracks(db, keyword="blue")

    assert total == 1
    assert [t.id for t in found] == [approved.id]


@pytest.mark.unit
def test_keyword_matches_title_artist_or_album(db, factories):
    by_title = factories.TrackFactory(title="Nightfall", artist="A", album="X")
    by_artist = factories.TrackFactory(title="Other", artist="Night Owls", album="Y")
    by_album = factories.TrackFactory(title="Third", artist="B", album="Midnight")
    factories.TrackFactory(title="Daylight", artist="C", album="Z")

    found, total = crud.search_tracks(db, keyword="  NIGHT ")

    assert total == 3
    assert {t.id for t in found} == {by_title.id, by_artist.id, by_album.id}


@pytest.mark.unit
def test_filters_apply_when_keyword_blank(db, factories):
    match = factories.TrackFactory(artist="The Rockers", genre="rock")
    factories.TrackFactory(artist="The Rockers", genre="jazz")
    factories.TrackFactory(artist="Someone", genre="rock")

    found, total = crud.search_tracks(db, keyword="   ", artist="rockers", genre="ROCK")

    assert total == 1
    assert [t.id for t in found] == [match.id]


@pytest.mark.unit
def test_search_paginates(db, factories):
    created = [factories.TrackFactory(genre="ambient") for _ in range(5)]

    page, total = crud.search_tracks(db, genre="ambient", page=2, size=2)

    assert total == 5
    assert [t.id for t in page] == [created[2].id, created[1].id]


@pytest.mark.unit
def test_set_track_status(db, factories):
    track = factories.TrackFactory(status=TrackStatus.PENDING)

    assert crud.set_track_status(db, track.id, TrackStatus.APPROVED).status == TrackStatus.APPROVED
    assert crud.set_track_status(db, 9999, TrackStatus.APPROVED) is None


@pytest.mark.unit
def test_track_play_counter(db, factories):
    track = factories.TrackFactory()

    assert crud.increment_track_play_count(db, track.id) is True
    assert crud.increment_track_play_count(db, 9999) is False
    db.refresh(track)
    assert track.play_count == 1


@pytest.mark.unit
def test_tracks_by_uploader_include_every_status(db, factories):
    a = factories.TrackFactory(upload_user_id=11, status=TrackStatus.PENDING)
    b = factories.TrackFactory(upload_user_id=11)
    factories.TrackFactory(upload_user_id=12)

    assert {t.id for t in crud.list_tracks_by_uploader(db, 11)} == {a.id, b.id}
