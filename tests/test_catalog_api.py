import pytest

from playlist_service.db.models import TrackStatus


@pytest.mark.unit
def test_search_endpoint_lists_approved_tracks(client, factories):
    shown = factories.TrackFactory(title="Harbor Lights", genre="folk")
    factories.TrackFactory(title="Harbor Fog", status=TrackStatus.PENDING)
    shown_id = shown.id

    body = client.get("/catalog/search", params={"keyword": "harbor"}).json()

    assert body["total"] == 1
    assert body["page"] == 1
    assert [t["id"] for t in body["items"]] == [shown_id]
    assert body["items"][0]["status"] == "approved"


@pytest.mark.unit
def test_search_page_size_is_clamped(client, factories):
    factories.TrackFactory()

    body = client.get("/catalog/search", params={"size": 5000}).json()

    assert body["size"] == 100


@pytest.mark.unit
def test_read_track_and_play(client, factories):
    track_id = factories.TrackFactory(title="Solo").id

    resp = client.get(f"/catalog/tracks/{track_id}")
    assert resp.status_code == 200
    assert resp.json()["title"] == "Solo"

    assert client.post(f"/catalog/tracks/{track_id}/play").status_code == 204
    assert client.get(f"/catalog/tracks/{track_id}").json()["play_count"] == 1

    assert client.get("/catalog/tracks/9999").status_code == 404
    assert client.post("/catalog/tracks/9999/play").status_code == 404
