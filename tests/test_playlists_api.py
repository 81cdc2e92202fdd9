"""HTTP-level tests. Data is seeded through committed factories before any request,
and direct database checks come last so the test session never holds SQLite's
write lock while the application is serving a request."""

import pytest

from playlist_service.db.models import PlaylistVisibility
from tests.support.queries import assert_dense

OWNER = 1
STRANGER = 2


@pytest.mark.unit
def test_health(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Healthy"}


@pytest.mark.unit
def test_create_playlist_requires_auth(client):
    resp = client.post("/playlists", json={"name": "Nope"})
    assert resp.status_code == 401


@pytest.mark.unit
def test_invalid_token_is_unauthorized(client):
    resp = client.get("/playlists/me/favorite", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


@pytest.mark.unit
def test_create_and_fetch_playlist(client, auth_headers):
    resp = client.post(
        "/playlists",
        json={"name": "Morning", "description": "coffee", "visibility": "private"},
        headers=auth_headers(OWNER),
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["creator_id"] == OWNER
    assert body["type"] == "user_created"
    assert body["music_count"] == 0

    pid = body["id"]
    assert client.get(f"/playlists/{pid}", headers=auth_headers(OWNER)).status_code == 200
    assert client.get(f"/playlists/{pid}", headers=auth_headers(STRANGER)).status_code == 403
    assert client.get(f"/playlists/{pid}").status_code == 403


@pytest.mark.unit
def test_create_playlist_validates_name(client, auth_headers):
    resp = client.post("/playlists", json={"name": ""}, headers=auth_headers(OWNER))
    assert resp.status_code == 422


@pytest.mark.unit
def test_missing_playlist_returns_404_with_code(client):
    resp = client.get("/playlists/999")
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


@pytest.mark.unit
def test_track_membership_flow(client, auth_headers, factories, db):
    playlist = factories.PlaylistFactory(creator_id=OWNER)
    t1, t2, t3 = (factories.TrackFactory() for _ in range(3))
    pid = playlist.id
    headers = auth_headers(OWNER)

    for expected, track in enumerate((t1, t2, t3), start=1):
        resp = client.post(f"/playlists/{pid}/tracks", json={"track_id": track.id}, headers=headers)
        assert resp.status_code == 201
        assert resp.json()["sort_order"] == expected
        assert resp.json()["added_by_id"] == OWNER

    resp = client.delete(f"/playlists/{pid}/tracks/{t2.id}", headers=headers)
    assert resp.status_code == 204

    listing = client.get(f"/playlists/{pid}/tracks").json()
    assert listing["total"] == 2
    assert listing["playlist"]["music_count"] == 2
    assert [(item["track"]["id"], item["position"]) for item in listing["tracks"]] == [(t1.id, 1), (t3.id, 2)]

    assert_dense(db, pid)


@pytest.mark.unit
def test_insert_at_position_over_http(client, auth_headers, factories):
    playlist = factories.PlaylistFactory(creator_id=OWNER)
    t1, t2 = factories.TrackFactory(), factories.TrackFactory()
    pid = playlist.id
    headers = auth_headers(OWNER)

    client.post(f"/playlists/{pid}/tracks", json={"track_id": t1.id}, headers=headers)
    resp = client.post(f"/playlists/{pid}/tracks", json={"track_id": t2.id, "position": 1}, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["sort_order"] == 1

    listing = client.get(f"/playlists/{pid}/tracks").json()
    assert [item["track"]["id"] for item in listing["tracks"]] == [t2.id, t1.id]

    resp = client.post(f"/playlists/{pid}/tracks", json={"track_id": t1.id, "position": 0}, headers=headers)
    assert resp.status_code == 422


@pytest.mark.unit
def test_membership_error_statuses(client, auth_headers, factories):
    playlist = factories.PlaylistFactory(creator_id=OWNER)
    track = factories.TrackFactory()
    other = factories.TrackFactory()
    pid = playlist.id

    assert client.post(f"/playlists/{pid}/tracks", json={"track_id": track.id}).status_code == 401
    assert (
        client.post(f"/playlists/{pid}/tracks", json={"track_id": track.id}, headers=auth_headers(STRANGER)).status_code
        == 403
    )
    assert client.post(f"/playlists/{pid}/tracks", json={"track_id": track.id}, headers=auth_headers(OWNER)).status_code == 201

    dup = client.post(f"/playlists/{pid}/tracks", json={"track_id": track.id}, headers=auth_headers(OWNER))
    assert dup.status_code == 409
    assert dup.json()["code"] == "ALREADY_EXISTS"

    missing_track = client.post(f"/playlists/{pid}/tracks", json={"track_id": 9999}, headers=auth_headers(OWNER))
    assert missing_track.status_code == 404

    not_member = client.delete(f"/playlists/{pid}/tracks/{other.id}", headers=auth_headers(OWNER))
    assert not_member.status_code == 404

    assert client.delete(f"/playlists/{pid}/tracks/{track.id}", headers=auth_headers(STRANGER)).status_code == 403


@pytest.mark.unit
def test_tracks_listing_paginates(client, auth_headers, factories):
    playlist = factories.PlaylistFactory(creator_id=OWNER)
    tracks = [factories.TrackFactory() for _ in range(5)]
    pid = playlist.id
    for t in tracks:
        client.post(f"/playlists/{pid}/tracks", json={"track_id": t.id}, headers=auth_headers(OWNER))

    page = client.get(f"/playlists/{pid}/tracks", params={"page": 2, "size": 2}).json()

    assert page["page"] == 2
    assert page["size"] == 2
    assert page["total"] == 5
    assert [item["position"] for item in page["tracks"]] == [3, 4]
    assert [item["track"]["id"] for item in page["tracks"]] == [tracks[2].id, tracks[3].id]


@pytest.mark.unit
def test_update_and_delete_playlist(client, auth_headers, factories):
    playlist = factories.PlaylistFactory(creator_id=OWNER, name="Draft")
    track = factories.TrackFactory()
    pid = playlist.id
    client.post(f"/playlists/{pid}/tracks", json={"track_id": track.id}, headers=auth_headers(OWNER))

    assert client.patch(f"/playlists/{pid}", json={"name": "X"}, headers=auth_headers(STRANGER)).status_code == 403

    resp = client.patch(f"/playlists/{pid}", json={"name": "Final", "visibility": "private"}, headers=auth_headers(OWNER))
    assert resp.status_code == 200
    assert resp.json()["name"] == "Final"
    assert resp.json()["visibility"] == "private"

    assert client.delete(f"/playlists/{pid}", headers=auth_headers(STRANGER)).status_code == 403
    assert client.delete(f"/playlists/{pid}", headers=auth_headers(OWNER)).status_code == 204
    assert client.get(f"/playlists/{pid}", headers=auth_headers(OWNER)).status_code == 404


@pytest.mark.unit
def test_play_and_like_counters(client, auth_headers, factories):
    pid = factories.PlaylistFactory(creator_id=OWNER).id

    assert client.post(f"/playlists/{pid}/play").status_code == 204
    assert client.post("/playlists/9999/play").status_code == 404

    liked = client.post(f"/playlists/{pid}/like", headers=auth_headers(STRANGER))
    assert liked.status_code == 200
    assert liked.json()["like_count"] == 1

    client.post(f"/playlists/{pid}/like", params={"is_like": False}, headers=auth_headers(STRANGER))
    floor = client.post(f"/playlists/{pid}/like", params={"is_like": False}, headers=auth_headers(STRANGER))
    assert floor.json()["like_count"] == 0
    assert floor.json()["play_count"] == 1


@pytest.mark.unit
def test_system_playlists_over_http(client, auth_headers):
    first = client.get("/playlists/me/favorite", headers=auth_headers(OWNER))
    second = client.get("/playlists/me/favorite", headers=auth_headers(OWNER))
    recent = client.get("/playlists/me/recently-played", headers=auth_headers(OWNER))

    assert first.status_code == 200
    assert first.json()["id"] == second.json()["id"]
    assert first.json()["type"] == "favorite"
    assert first.json()["visibility"] == "private"
    assert recent.json()["type"] == "recently_played"
    assert client.get("/playlists/me/favorite").status_code == 401


@pytest.mark.unit
def test_user_playlists_and_public_listings(client, auth_headers, factories):
    public = factories.PlaylistFactory(creator_id=OWNER, name="Sunny Side", play_count=3)
    factories.PlaylistFactory(creator_id=OWNER, name="Sunny Secret", visibility=PlaylistVisibility.PRIVATE)
    public_id = public.id

    own = client.get(f"/playlists/user/{OWNER}", headers=auth_headers(OWNER)).json()
    other = client.get(f"/playlists/user/{OWNER}").json()
    assert own["total"] == 2
    assert other["total"] == 1

    search = client.get("/playlists/search", params={"keyword": "sunny"}).json()
    assert [p["id"] for p in search["items"]] == [public_id]

    assert [p["id"] for p in client.get("/playlists/top").json()] == [public_id]
    assert [p["id"] for p in client.get("/playlists/latest").json()] == [public_id]
