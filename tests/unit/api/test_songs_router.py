"""Tests for the /api/songs endpoints.

Hey future me - these run the REAL app (create_app + lifespan + handlers) with a mocked
provider injected, so every assertion is on the wire format the frontend reads.
Always use `with TestClient(app)`: the lifespan only runs inside the context manager.
"""

from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest
from factories import make_track
from fastapi.testclient import TestClient

from riffus.application.cache import InMemoryTrackCache
from riffus.config import Settings
from riffus.domain.entities import TrackSource
from riffus.domain.exceptions import UpstreamError, ValidationError
from riffus.domain.ports.provider import SearchOptions, ServiceType, TrackProvider
from riffus.main import create_app


def _parse_id(raw: str | None) -> int:
    if not raw or not raw.isdigit():
        raise ValidationError("trackId parameter is required (iTunes track ID)")
    return int(raw)


@pytest.fixture
def provider() -> MagicMock:
    mock = MagicMock(spec=TrackProvider)
    mock.service_type = ServiceType.ITUNES
    mock.search.return_value = []
    mock.lookup.return_value = None
    mock.parse_id.side_effect = _parse_id
    return mock


@pytest.fixture
def client(test_settings: Settings, provider: MagicMock) -> Iterator[TestClient]:
    app = create_app(test_settings, provider=provider)
    with TestClient(app) as test_client:
        yield test_client


class TestSearch:
    def test_returns_songs_with_count(self, client: TestClient, provider: MagicMock) -> None:
        provider.search.return_value = [
            make_track(title="So What", external_id=1),
            make_track(title="Blue in Green", external_id=2),
        ]

        response = client.get("/api/songs/search", params={"q": "jazz", "limit": 5})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 2
        assert [s["title"] for s in body["songs"]] == ["So What", "Blue in Green"]
        provider.search.assert_awaited_once_with("jazz", SearchOptions(limit=5, country="us"))

    def test_song_fields_are_camel_case(self, client: TestClient, provider: MagicMock) -> None:
        provider.search.return_value = [
            make_track(external_id=1, preview_url="https://audio.example/1.m4a", duration=545000)
        ]

        song = client.get("/api/songs/search?q=jazz").json()["songs"][0]

        assert song["coverImage"] == "https://img.example/cover.jpg"
        assert song["previewUrl"] == "https://audio.example/1.m4a"
        assert song["externalId"] == 1
        assert song["duration"] == 545000
        assert song["source"] == "itunes"

    @pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "   "}])
    def test_missing_query_is_400_without_upstream_call(
        self, client: TestClient, provider: MagicMock, params: dict[str, str]
    ) -> None:
        response = client.get("/api/songs/search", params=params)

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Search query is required"}
        provider.search.assert_not_called()

    def test_upstream_failure_is_generic_500(self, client: TestClient, provider: MagicMock) -> None:
        provider.search.side_effect = UpstreamError("HTTP 503: Service Unavailable", "itunes")

        response = client.get("/api/songs/search?q=jazz")

        assert response.status_code == 500
        # test environment: no "error" detail
        assert response.json() == {"success": False, "message": "Failed to search songs"}

    def test_upstream_detail_is_exposed_in_development(
        self, test_settings: Settings, provider: MagicMock
    ) -> None:
        settings = test_settings.model_copy(update={"environment": "development"})
        provider.search.side_effect = UpstreamError("HTTP 503: Service Unavailable", "itunes")

        with TestClient(create_app(settings, provider=provider)) as client:
            response = client.get("/api/songs/search?q=jazz")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Failed to search songs",
            "error": "HTTP 503: Service Unavailable",
        }

    def test_invalid_limit_is_400(self, client: TestClient) -> None:
        response = client.get("/api/songs/search", params={"q": "jazz", "limit": 0})

        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid limit:")

    def test_cached_tracks_are_merged(self, test_settings: Settings, provider: MagicMock) -> None:
        cache = InMemoryTrackCache()
        app = create_app(test_settings, provider=provider, cache=cache)
        provider.search.return_value = [make_track(title="So What", external_id=1)]

        with TestClient(app) as client:
            client.get("/api/songs/search", params={"q": "so what"})
            # second request sees the cached copy and the fresh one as the same song
            body = client.get("/api/songs/search", params={"q": "so what"}).json()

        assert body["count"] == 1
        assert body["songs"][0]["source"] == "itunes"


class TestBrowseAndLists:
    def test_browse_defaults_to_pop(self, client: TestClient, provider: MagicMock) -> None:
        provider.search.return_value = [make_track(external_id=1)]

        response = client.get("/api/songs")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert len(body["data"]) == 1
        assert body["pagination"] == {"page": 1, "limit": 1, "total": 1, "pages": 1}
        provider.search.assert_awaited_once_with("pop", SearchOptions(limit=20, country="us"))

    def test_browse_genre(self, client: TestClient, provider: MagicMock) -> None:
        client.get("/api/songs/", params={"genre": "rock", "limit": 3})

        provider.search.assert_awaited_once_with("rock", SearchOptions(limit=3, country="us"))

    def test_browse_upstream_failure(self, client: TestClient, provider: MagicMock) -> None:
        provider.search.side_effect = UpstreamError("timeout", "itunes")

        response = client.get("/api/songs")

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to fetch songs"

    def test_recent_falls_back_to_popular(self, client: TestClient, provider: MagicMock) -> None:
        provider.search.return_value = [make_track(external_id=1)]

        response = client.get("/api/songs/recent")

        assert response.status_code == 200
        assert response.json()["count"] == 1
        provider.search.assert_awaited_once_with("popular", SearchOptions(limit=10, country="us"))

    def test_recommended_falls_back_to_top(self, client: TestClient, provider: MagicMock) -> None:
        response = client.get("/api/songs/recommended", params={"limit": 4})

        assert response.json() == {"success": True, "count": 0, "songs": []}
        provider.search.assert_awaited_once_with("top", SearchOptions(limit=4, country="us"))

    def test_recommended_upstream_failure(self, client: TestClient, provider: MagicMock) -> None:
        provider.search.side_effect = UpstreamError("timeout", "itunes")

        response = client.get("/api/songs/recommended")

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to fetch recommended songs"


class TestGetSong:
    def test_found(self, client: TestClient, provider: MagicMock) -> None:
        provider.lookup.return_value = make_track(external_id=1440857781)

        response = client.get("/api/songs/1440857781")

        assert response.status_code == 200
        assert response.json()["song"]["externalId"] == 1440857781
        provider.lookup.assert_awaited_once_with(1440857781, "us")

    def test_track_id_query_overrides_path(self, client: TestClient, provider: MagicMock) -> None:
        provider.lookup.return_value = make_track(external_id=42)

        client.get("/api/songs/1", params={"trackId": "42", "country": "GB"})

        provider.lookup.assert_awaited_once_with(42, "gb")

    def test_not_found_is_404(self, client: TestClient) -> None:
        response = client.get("/api/songs/999")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Song not found"}

    def test_malformed_id_is_400(self, client: TestClient, provider: MagicMock) -> None:
        response = client.get("/api/songs/not-a-number")

        assert response.status_code == 400
        assert response.json()["message"] == "trackId parameter is required (iTunes track ID)"
        provider.lookup.assert_not_called()

    def test_upstream_failure(self, client: TestClient, provider: MagicMock) -> None:
        provider.lookup.side_effect = UpstreamError("HTTP 500", "itunes")

        response = client.get("/api/songs/1")

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to fetch song"


class TestPlay:
    def test_proxy_mode_omits_play_count(self, client: TestClient, provider: MagicMock) -> None:
        provider.lookup.return_value = make_track(external_id=1)

        response = client.post("/api/songs/1/play")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Play tracked successfully"
        assert body["song"]["externalId"] == 1
        assert "playCount" not in body

    def test_play_count_with_cache(self, test_settings: Settings, provider: MagicMock) -> None:
        provider.lookup.return_value = make_track(external_id=1)
        app = create_app(test_settings, provider=provider, cache=InMemoryTrackCache())

        with TestClient(app) as client:
            client.post("/api/songs/1/play")
            body = client.post("/api/songs/1/play").json()
            recent = client.get("/api/songs/recent").json()

        assert body["playCount"] == 2
        assert recent["count"] == 1
        assert recent["songs"][0]["source"] == TrackSource.CACHE.value

    def test_unknown_song_is_404(self, client: TestClient) -> None:
        response = client.post("/api/songs/5/play")

        assert response.status_code == 404


class TestOrder:
    def test_order_is_acknowledged(self, client: TestClient, provider: MagicMock) -> None:
        provider.lookup.return_value = make_track(external_id=7)

        response = client.post("/api/songs/order", json={"trackId": 7, "userId": 12})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Order created successfully"
        assert body["order"]["userId"] == "12"
        assert body["order"]["song"]["externalId"] == 7
        assert "createdAt" in body["order"]

    def test_guest_user_and_song_id(self, client: TestClient, provider: MagicMock) -> None:
        provider.lookup.return_value = make_track(external_id=3)

        response = client.post("/api/songs/order", json={"songId": "3"})

        assert response.status_code == 201
        assert response.json()["order"]["userId"] == "guest"
        provider.lookup.assert_awaited_once_with(3, "us")

    def test_missing_ids_is_400(self, client: TestClient, provider: MagicMock) -> None:
        response = client.post("/api/songs/order", json={"userId": 1})

        assert response.status_code == 400
        assert response.json()["message"] == "trackId or songId is required"
        provider.lookup.assert_not_called()

    def test_unknown_song_is_404(self, client: TestClient) -> None:
        response = client.post("/api/songs/order", json={"trackId": 99})

        assert response.status_code == 404
        assert response.json()["message"] == "Song not found"
