"""Tests for the Track entity and its identity rules."""

from datetime import date

import pytest
from factories import make_track

from riffus.domain.entities import Track, TrackSource, is_valid_track, normalize_text


class TestIdentityKey:
    """externalId first, normalized text tuple otherwise."""

    def test_external_id_is_the_identity(self) -> None:
        track = make_track(external_id=1440857781)

        assert track.has_external_id
        assert track.identity_key == ("id", 1440857781)

    def test_string_ids_are_supported(self) -> None:
        track = make_track(external_id="4uLU6hMCjMI75M1A2tKUQC", source=TrackSource.SPOTIFY)

        assert track.identity_key == ("id", "4uLU6hMCjMI75M1A2tKUQC")

    def test_fallback_tuple_is_normalized(self) -> None:
        track = make_track(title="  So What ", artist="Miles DAVIS", album="")

        assert not track.has_external_id
        assert track.identity_key == ("tuple", "so what", "miles davis", "")
        assert track.fallback_key == track.identity_key

    def test_same_song_different_sources_share_key(self) -> None:
        cached = make_track(external_id=5, source=TrackSource.CACHE)
        fresh = make_track(external_id=5, source=TrackSource.ITUNES)

        assert cached.identity_key == fresh.identity_key
        assert cached != fresh

    def test_normalize_text_handles_none(self) -> None:
        assert normalize_text(None) == ""
        assert normalize_text(" Straße ") == "strasse"


class TestTrackSerialization:
    """camelCase JSON shape."""

    def test_to_dict_uses_camel_case(self) -> None:
        track = make_track(
            external_id=42,
            preview_url="https://p.example/42.m4a",
            full_track_url="https://music.example/42",
            track_view_url="https://music.example/42",
            duration=545000,
            genre="Jazz",
            release_date=date(1959, 8, 17),
        )

        data = track.to_dict()

        assert data == {
            "title": "So What",
            "artist": "Miles Davis",
            "album": "Kind of Blue",
            "coverImage": "https://img.example/cover.jpg",
            "previewUrl": "https://p.example/42.m4a",
            "fullTrackUrl": "https://music.example/42",
            "trackViewUrl": "https://music.example/42",
            "externalId": 42,
            "duration": 545000,
            "genre": "Jazz",
            "releaseDate": "1959-08-17",
            "source": "itunes",
        }

    def test_with_source_returns_copy(self) -> None:
        track = make_track(external_id=1)

        cached = track.with_source(TrackSource.CACHE)

        assert cached.source is TrackSource.CACHE
        assert track.source is TrackSource.ITUNES
        assert cached.identity_key == track.identity_key


class TestIsValidTrack:
    """Required fields for cache write-back."""

    def test_complete_track_is_valid(self) -> None:
        assert is_valid_track(make_track())

    @pytest.mark.parametrize("field", ["title", "artist", "cover_image"])
    def test_missing_required_field_is_invalid(self, field: str) -> None:
        values = {"title": "t", "artist": "a", "cover_image": "c"}
        values[field] = ""

        assert not is_valid_track(Track(**values))

    def test_none_is_invalid(self) -> None:
        assert not is_valid_track(None)

    def test_album_is_optional(self) -> None:
        assert is_valid_track(make_track(album=""))
