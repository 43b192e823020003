"""Domain entities."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from cratekeeper.domain.value_objects import ArtistId, TrackFileId
from cratekeeper.domain.value_objects.naming import clean_artist_name, sort_name


class AudioFormat(str, Enum):
    """Audio container/codec families the library understands.

    Hey future me - UNKNOWN is a real value, not an error! A file we could read
    but not classify still gets a record, it just ranks lowest.
    """

    FLAC = "flac"
    ALAC = "alac"
    WAV = "wav"
    AIFF = "aiff"
    APE = "ape"
    WAVPACK = "wavpack"
    DSD = "dsd"
    MP3 = "mp3"
    AAC = "aac"
    M4A = "m4a"
    OGG = "ogg"
    OPUS = "opus"
    WMA = "wma"
    UNKNOWN = "unknown"

    @property
    def is_lossless(self) -> bool:
        """Check if format is lossless."""
        return self in LOSSLESS_FORMATS

    @classmethod
    def from_extension(cls, extension: str) -> "AudioFormat":
        """Map a file extension (with or without dot) to a format."""
        return EXTENSION_FORMATS.get(extension.lower().lstrip("."), cls.UNKNOWN)


LOSSLESS_FORMATS = frozenset(
    {
        AudioFormat.FLAC,
        AudioFormat.ALAC,
        AudioFormat.WAV,
        AudioFormat.AIFF,
        AudioFormat.APE,
        AudioFormat.WAVPACK,
        AudioFormat.DSD,
    }
)

EXTENSION_FORMATS: dict[str, AudioFormat] = {
    "flac": AudioFormat.FLAC,
    "alac": AudioFormat.ALAC,
    "wav": AudioFormat.WAV,
    "aiff": AudioFormat.AIFF,
    "aif": AudioFormat.AIFF,
    "ape": AudioFormat.APE,
    "wv": AudioFormat.WAVPACK,
    "dsf": AudioFormat.DSD,
    "dff": AudioFormat.DSD,
    "mp3": AudioFormat.MP3,
    "aac": AudioFormat.AAC,
    "m4a": AudioFormat.M4A,
    "mp4": AudioFormat.M4A,
    "ogg": AudioFormat.OGG,
    "opus": AudioFormat.OPUS,
    "wma": AudioFormat.WMA,
}

# Quality ranking - higher = better (for sorting)
FORMAT_QUALITY_SCORE: dict[AudioFormat, int] = {
    AudioFormat.DSD: 100,
    AudioFormat.FLAC: 100,
    AudioFormat.ALAC: 95,
    AudioFormat.APE: 92,
    AudioFormat.WAVPACK: 92,
    AudioFormat.WAV: 90,
    AudioFormat.AIFF: 90,
    AudioFormat.MP3: 70,
    AudioFormat.AAC: 65,
    AudioFormat.M4A: 65,
    AudioFormat.OGG: 60,
    AudioFormat.OPUS: 55,
    AudioFormat.WMA: 40,
    AudioFormat.UNKNOWN: 0,
}


@dataclass(frozen=True)
class AudioQuality:
    """Quality of one audio file: format plus (for lossy files) bitrate."""

    format: AudioFormat = AudioFormat.UNKNOWN
    bitrate: int | None = None  # kbps

    @property
    def is_lossless(self) -> bool:
        return self.format.is_lossless

    @property
    def score(self) -> int:
        """Sortable quality score (format rank, then bitrate)."""
        return FORMAT_QUALITY_SCORE[self.format] * 10_000 + (self.bitrate or 0)

    def __str__(self) -> str:
        if self.is_lossless or not self.bitrate:
            return self.format.value.upper()
        return f"{self.format.value.upper()}-{self.bitrate}"


@dataclass(frozen=True)
class MediaInfo:
    """Technical stream info read from an audio file."""

    audio_format: str | None = None
    bitrate: int | None = None  # kbps
    sample_rate: int | None = None  # Hz
    channels: int | None = None
    bits_per_sample: int | None = None
    duration_ms: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the JSON column."""
        return {
            "audio_format": self.audio_format,
            "bitrate": self.bitrate,
            "sample_rate": self.sample_rate,
            "channels": self.channels,
            "bits_per_sample": self.bits_per_sample,
            "duration_ms": self.duration_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "MediaInfo":
        """Rebuild from the JSON column (missing keys become None)."""
        if not data:
            return cls()
        return cls(
            audio_format=data.get("audio_format"),
            bitrate=data.get("bitrate"),
            sample_rate=data.get("sample_rate"),
            channels=data.get("channels"),
            bits_per_sample=data.get("bits_per_sample"),
            duration_ms=data.get("duration_ms"),
        )


@dataclass(frozen=True)
class RootFolder:
    """A configured library root. Artist folders live directly below it."""

    path: Path

    def __post_init__(self) -> None:
        if not self.path.is_absolute():
            raise ValueError(f"Root folder path must be absolute: {self.path}")

    def contains(self, path: Path) -> bool:
        """Check whether path is this root or lies below it."""
        return path == self.path or self.path in path.parents


# Yo, Artist is the DOMAIN ENTITY (not DB model)! clean_name and sort_name are
# derived from name when left empty, so tests and the add flow can construct
# artists with just a name. ALWAYS use UTC in domain timestamps.
@dataclass
class Artist:
    """Artist entity owning one folder in the library."""

    id: ArtistId
    name: str
    foreign_artist_id: str = ""
    clean_name: str = ""
    sort_name: str = ""
    path: Path | None = None
    root_folder_path: Path | None = None
    aliases: list[str] = field(default_factory=list)
    monitored: bool = True
    quality_profile_id: str | None = None
    disambiguation: str | None = None
    added_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Validate artist data and derive normalized names."""
        if not self.name or not self.name.strip():
            raise ValueError("Artist name cannot be empty")
        if self.path is not None and not self.path.is_absolute():
            raise ValueError(f"Artist path must be absolute: {self.path}")
        if not self.clean_name:
            self.clean_name = clean_artist_name(self.name)
        if not self.sort_name:
            self.sort_name = sort_name(self.name)

    def rename(self, name: str) -> None:
        """Change the display name and refresh derived names."""
        if not name or not name.strip():
            raise ValueError("Artist name cannot be empty")
        self.name = name
        self.clean_name = clean_artist_name(name)
        self.sort_name = sort_name(name)
        self.updated_at = datetime.now(UTC)

    def move_to(self, path: Path) -> None:
        """Point the artist at a new folder."""
        if not path.is_absolute():
            raise ValueError(f"Artist path must be absolute: {path}")
        self.path = path
        self.updated_at = datetime.now(UTC)

    def __str__(self) -> str:
        return f"[{self.foreign_artist_id}][{self.name}]"


@dataclass(frozen=True)
class CandidateFile:
    """A file found on disk during one walk. Never persisted."""

    path: Path
    size: int
    modified: datetime


# Hey future me - TrackFile is the CATALOG RECORD for one file on disk. artist_id
# is None for files we accepted but could not attribute to an artist (unmatched).
# modified MUST be the filesystem mtime observed at the last scan, otherwise the
# next scan re-decides the file.
@dataclass
class TrackFile:
    """Persisted record of a known audio file."""

    id: TrackFileId
    path: Path
    size: int
    modified: datetime
    quality: AudioQuality = field(default_factory=AudioQuality)
    media_info: MediaInfo = field(default_factory=MediaInfo)
    artist_id: ArtistId | None = None
    title: str | None = None
    track_number: int | None = None
    disc_number: int | None = None
    album_title: str | None = None
    added_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.path.is_absolute():
            raise ValueError(f"Track file path must be absolute: {self.path}")
        if self.size < 0:
            raise ValueError("Track file size cannot be negative")

    @property
    def is_matched(self) -> bool:
        """Check if the file is attributed to an artist."""
        return self.artist_id is not None


from cratekeeper.domain.entities.events import (  # noqa: E402
    ArtistAddedEvent,
    ArtistEditedEvent,
    ArtistScannedEvent,
    ArtistScanSkippedEvent,
    ArtistsDeletedEvent,
    ArtistsImportedEvent,
    DomainEvent,
    ScanSkipReason,
)
from cratekeeper.domain.entities.import_decision import (  # noqa: E402
    Accepted,
    FilterMode,
    IdentificationOverrides,
    ImportDecision,
    ImportDecisionConfig,
    ImportDecisionInfo,
    LocalTrack,
    ParsedTrackInfo,
    Rejected,
    Rejection,
    RejectionType,
)

__all__ = [
    "Accepted",
    "Artist",
    "ArtistAddedEvent",
    "ArtistEditedEvent",
    "ArtistScanSkippedEvent",
    "ArtistScannedEvent",
    "ArtistsDeletedEvent",
    "ArtistsImportedEvent",
    "AudioFormat",
    "AudioQuality",
    "CandidateFile",
    "DomainEvent",
    "FORMAT_QUALITY_SCORE",
    "FilterMode",
    "IdentificationOverrides",
    "ImportDecision",
    "ImportDecisionConfig",
    "ImportDecisionInfo",
    "LocalTrack",
    "MediaInfo",
    "ParsedTrackInfo",
    "Rejected",
    "Rejection",
    "RejectionType",
    "RootFolder",
    "ScanSkipReason",
    "TrackFile",
]
