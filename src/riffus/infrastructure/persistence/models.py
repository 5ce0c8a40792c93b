"""SQLAlchemy ORM models for Riffus."""

import uuid
from datetime import UTC, date, datetime

from sqlalchemy import Date, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# Hey future me, utc_now() ensures ALL timestamps are UTC! Naive datetimes break the
# recently-played ordering as soon as two processes disagree on the local timezone.
def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


# SQLite drops tzinfo on the way back. Attach UTC before comparing with aware datetimes.
def ensure_utc_aware(dt: datetime) -> datetime:
    """Ensure datetime is UTC-aware, assuming naive datetimes are UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Listen up, identity_key is the dedup column! It's the string form of Track.identity_key
# ("id:<external id>" or "tuple:<title>|<artist>|<album>", normalized) and carries the UNIQUE
# constraint, so upserts by externalId or by text tuple are one lookup. external_id is stored
# as text because Spotify ids are base62 strings; external_id_kind says how to turn it back.
class SongModel(Base):
    """Cached track plus play statistics."""

    __tablename__ = "riffus_songs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    identity_key: Mapped[str] = mapped_column(
        String(1024), nullable=False, unique=True, index=True
    )
    external_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    external_id_kind: Mapped[str | None] = mapped_column(String(8), nullable=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    artist: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    album: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    cover_image: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    preview_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    full_track_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    track_view_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    genre: Mapped[str | None] = mapped_column(String(100), nullable=True)
    release_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    # Provider the row was last refreshed from: 'itunes', 'deezer', 'spotify', 'local'
    source: Mapped[str] = mapped_column(String(20), nullable=False, default="local")

    play_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_played: Mapped[datetime | None] = mapped_column(nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now, onupdate=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<SongModel {self.artist} - {self.title} ({self.identity_key})>"
