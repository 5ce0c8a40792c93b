"""Tests for the global exception handlers (error envelope)."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from riffus.api.dependencies import get_song_service
from riffus.application.services import SongService
from riffus.config import Settings
from riffus.domain.exceptions import NotFoundError, UpstreamError, ValidationError
from riffus.domain.ports.provider import ServiceType, TrackProvider
from riffus.main import create_app


def _app(settings: Settings, service: MagicMock) -> TestClient:
    provider = MagicMock(spec=TrackProvider)
    provider.service_type = ServiceType.ITUNES
    app = create_app(settings, provider=provider)
    app.dependency_overrides[get_song_service] = lambda: service
    # The catch-all handler runs in ServerErrorMiddleware, which re-raises afterwards
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def service() -> MagicMock:
    return MagicMock(spec=SongService)


@pytest.fixture
def dev_settings(test_settings: Settings) -> Settings:
    return test_settings.model_copy(update={"environment": "development"})


class TestDomainErrors:
    def test_validation_error_is_400(self, test_settings: Settings, service: MagicMock) -> None:
        service.search.side_effect = ValidationError("Search query is required")

        with _app(test_settings, service) as client:
            response = client.get("/api/songs/search?q=x")

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Search query is required"}

    def test_not_found_uses_fixed_message(self, test_settings: Settings, service: MagicMock) -> None:
        service.get_song.side_effect = NotFoundError("Song", 123)

        with _app(test_settings, service) as client:
            response = client.get("/api/songs/123")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Song not found"}

    def test_upstream_detail_only_in_development(
        self, dev_settings: Settings, service: MagicMock
    ) -> None:
        service.search.side_effect = UpstreamError("connection reset", "deezer")

        with _app(dev_settings, service) as client:
            response = client.get("/api/songs/search?q=x")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Failed to search songs",
            "error": "connection reset",
        }


class TestHttpErrors:
    def test_unknown_route_uses_envelope(self, test_settings: Settings, service: MagicMock) -> None:
        with _app(test_settings, service) as client:
            response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Not Found"}

    def test_bad_body_is_400(self, test_settings: Settings, service: MagicMock) -> None:
        with _app(test_settings, service) as client:
            response = client.post("/api/songs/order", json={"trackId": [1, 2]})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"].startswith("Invalid trackId")


class TestUnhandledErrors:
    def test_generic_500_hides_detail_outside_development(
        self, test_settings: Settings, service: MagicMock
    ) -> None:
        service.recent.side_effect = RuntimeError("database exploded")

        with _app(test_settings, service) as client:
            response = client.get("/api/songs/recent")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error"}
        assert "X-Correlation-ID" in response.headers

    def test_generic_500_shows_detail_in_development(
        self, dev_settings: Settings, service: MagicMock
    ) -> None:
        service.recent.side_effect = RuntimeError("database exploded")

        with _app(dev_settings, service) as client:
            response = client.get("/api/songs/recent")

        assert response.status_code == 500
        assert response.json()["error"] == "database exploded"
