"""SQLAlchemy ORM models for CrateKeeper."""

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import JSON, BigInteger, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


# Hey future me - SQLite doesn't preserve timezone info! Datetimes come back
# naive. File mtimes are compared for EQUALITY during scans, so every datetime
# read from a row must go through this before it meets a walked file's mtime,
# or every single file looks "changed".
def ensure_utc_aware(dt: datetime) -> datetime:
    """Ensure datetime is UTC-aware, assuming naive datetimes are UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ArtistModel(Base):
    """SQLAlchemy model for Artist entity.

    path is unique: one folder belongs to at most one artist. clean_name is
    indexed for exact lookups, fuzzy lookups work on the cached full list.
    """

    __tablename__ = "cratekeeper_artists"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    foreign_artist_id: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    clean_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    sort_name: Mapped[str] = mapped_column(String(255), nullable=False)
    path: Mapped[str | None] = mapped_column(String(1024), nullable=True, unique=True)
    root_folder_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    # JSON list of alternative names from the metadata provider
    aliases: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    monitored: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, default=True, server_default="1"
    )
    quality_profile_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    disambiguation: Mapped[str | None] = mapped_column(String(255), nullable=True)
    added_at: Mapped[datetime] = mapped_column(default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now, onupdate=utc_now, nullable=False
    )

    track_files: Mapped[list["TrackFileModel"]] = relationship(
        back_populates="artist", passive_deletes=True
    )


# Listen up, TrackFileModel is one row per FILE ON DISK, not per song. artist_id
# is SET NULL on artist delete: the file is still there, it just becomes
# unmatched until the next scan attributes it again.
class TrackFileModel(Base):
    """SQLAlchemy model for TrackFile entity."""

    __tablename__ = "cratekeeper_track_files"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    path: Mapped[str] = mapped_column(String(1024), nullable=False, unique=True, index=True)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    modified: Mapped[datetime] = mapped_column(nullable=False)
    quality_format: Mapped[str] = mapped_column(
        String(20), nullable=False, default="unknown", server_default="unknown"
    )
    quality_bitrate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    media_info: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    artist_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("cratekeeper_artists.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    title: Mapped[str | None] = mapped_column(String(512), nullable=True)
    track_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    disc_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    album_title: Mapped[str | None] = mapped_column(String(512), nullable=True)
    added_at: Mapped[datetime] = mapped_column(default=utc_now, nullable=False)

    artist: Mapped[ArtistModel | None] = relationship(back_populates="track_files")
