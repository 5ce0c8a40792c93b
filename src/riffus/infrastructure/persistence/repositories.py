"""Repository for cached songs."""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from riffus.domain.entities import ExternalId, Track, TrackSource
from riffus.infrastructure.persistence.models import SongModel, utc_now

logger = logging.getLogger(__name__)


def identity_string(track: Track) -> str:
    """Flatten a track's identity key into the unique column value."""
    if track.external_id is not None:
        return external_identity(track.external_id)
    _, title, artist, album = track.fallback_key
    return f"tuple:{title}|{artist}|{album}"


def external_identity(external_id: ExternalId) -> str:
    # Kind prefix keeps iTunes 123 and a (hypothetical) string "123" apart
    kind = "int" if isinstance(external_id, int) else "str"
    return f"id:{kind}:{external_id}"


def _model_to_track(model: SongModel) -> Track:
    external_id: ExternalId | None = None
    if model.external_id is not None:
        external_id = int(model.external_id) if model.external_id_kind == "int" else model.external_id
    return Track(
        title=model.title,
        artist=model.artist,
        album=model.album,
        cover_image=model.cover_image,
        preview_url=model.preview_url,
        full_track_url=model.full_track_url,
        track_view_url=model.track_view_url,
        external_id=external_id,
        duration=model.duration_ms,
        genre=model.genre,
        release_date=model.release_date,
        source=TrackSource.CACHE,
    )


def _apply_track(model: SongModel, track: Track) -> None:
    # Play statistics are deliberately untouched here
    model.title = track.title
    model.artist = track.artist
    model.album = track.album or ""
    model.cover_image = track.cover_image or ""
    model.preview_url = track.preview_url
    model.full_track_url = track.full_track_url
    model.track_view_url = track.track_view_url
    model.duration_ms = track.duration
    model.genre = track.genre
    model.release_date = track.release_date
    if track.source is not TrackSource.CACHE:
        model.source = track.source.value
    if track.external_id is not None:
        model.external_id = str(track.external_id)
        model.external_id_kind = "int" if isinstance(track.external_id, int) else "str"


class SongRepository:
    """SQLAlchemy access to the riffus_songs table.

    Works on a caller-owned session; commit/rollback is the caller's job
    (Database.session_scope does both).
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def _get_by_identity(self, identity: str) -> SongModel | None:
        stmt = select(SongModel).where(SongModel.identity_key == identity)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(self, track: Track) -> SongModel:
        """Insert the track or refresh the existing row with the same identity."""
        identity = identity_string(track)
        model = await self._get_by_identity(identity)
        if model is None:
            model = SongModel(identity_key=identity, play_count=0)
            self.session.add(model)
        _apply_track(model, track)
        await self.session.flush()
        return model

    async def get(self, external_id: ExternalId) -> Track | None:
        """Get a cached track by provider id."""
        model = await self._get_by_identity(external_identity(external_id))
        return _model_to_track(model) if model else None

    async def search(self, query: str, limit: int = 25) -> list[Track]:
        """Case-insensitive substring search over title, artist and album."""
        needle = query.strip().lower()
        if not needle:
            return []
        stmt = (
            select(SongModel)
            .where(
                or_(
                    func.lower(SongModel.title).contains(needle, autoescape=True),
                    func.lower(SongModel.artist).contains(needle, autoescape=True),
                    func.lower(SongModel.album).contains(needle, autoescape=True),
                )
            )
            .order_by(SongModel.created_at, SongModel.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [_model_to_track(m) for m in result.scalars().all()]

    async def record_play(self, track: Track) -> int:
        """Upsert the track and bump its play counter."""
        model = await self.upsert(track)
        model.play_count = (model.play_count or 0) + 1
        model.last_played = utc_now()
        await self.session.flush()
        return model.play_count

    async def recently_played(self, limit: int = 10) -> list[Track]:
        """Tracks ordered by last play, newest first."""
        stmt = (
            select(SongModel)
            .where(SongModel.last_played.is_not(None))
            .order_by(SongModel.last_played.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [_model_to_track(m) for m in result.scalars().all()]

    async def most_played(self, limit: int = 10) -> list[Track]:
        """Tracks ordered by play count, ties broken by last play."""
        stmt = (
            select(SongModel)
            .where(SongModel.play_count > 0)
            .order_by(SongModel.play_count.desc(), SongModel.last_played.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [_model_to_track(m) for m in result.scalars().all()]

    async def count(self) -> int:
        """Number of cached songs."""
        result = await self.session.execute(select(func.count()).select_from(SongModel))
        return int(result.scalar_one())
