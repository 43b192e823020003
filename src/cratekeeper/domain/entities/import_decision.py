"""Import decisions - the verdict on one candidate file.

Hey future me - an ImportDecision is EITHER Accepted OR Rejected, never a bag
with an optional reasons list. Use structural pattern matching:

    match decision:
        case Accepted(item=track):
            ...
        case Rejected(item=track, rejections=reasons):
            ...

A Rejected always carries at least one Rejection and the FIRST one is the
authoritative reason (what we log and show to users).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from cratekeeper.domain.entities import Artist, AudioQuality, MediaInfo


class FilterMode(str, Enum):
    """Which candidates are sent to the decision engine.

    NONE sends everything, KNOWN skips unchanged files we already have a record
    for, MATCHED skips unchanged files only when their record is attributed to
    an artist (unmatched files get another chance at identification).
    """

    NONE = "none"
    KNOWN = "known"
    MATCHED = "matched"


class RejectionType(str, Enum):
    """Whether retrying later could change the outcome."""

    PERMANENT = "permanent"
    TEMPORARY = "temporary"


@dataclass(frozen=True)
class Rejection:
    """One reason a file was not imported."""

    reason: str
    type: RejectionType = RejectionType.PERMANENT

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.reason}"


@dataclass(frozen=True)
class ParsedTrackInfo:
    """What we could learn about a track from its name, folder and stream."""

    title: str | None = None
    artist_title: str | None = None
    album_title: str | None = None
    track_number: int | None = None
    disc_number: int | None = None
    media_info: MediaInfo = field(default_factory=MediaInfo)


@dataclass
class LocalTrack:
    """A file on disk being considered for import."""

    path: Path
    size: int
    modified: datetime
    quality: AudioQuality = field(default_factory=AudioQuality)
    file_track_info: ParsedTrackInfo = field(default_factory=ParsedTrackInfo)
    artist: Artist | None = None
    existing_file: bool = False

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class Accepted:
    """The file should be recorded in the catalog."""

    item: LocalTrack


@dataclass(frozen=True)
class Rejected:
    """The file should not be recorded. rejections is never empty."""

    item: LocalTrack
    rejections: tuple[Rejection, ...]

    def __post_init__(self) -> None:
        if not self.rejections:
            raise ValueError("A rejected decision needs at least one rejection")

    @property
    def reason(self) -> Rejection:
        """The authoritative (first) rejection."""
        return self.rejections[0]


ImportDecision = Accepted | Rejected


@dataclass(frozen=True)
class IdentificationOverrides:
    """Identity the caller already knows, e.g. the artist owning the folder."""

    artist: Artist | None = None


@dataclass(frozen=True)
class ImportDecisionInfo:
    """Context about where the candidates came from.

    known_paths holds the files the catalog already has below source_folder;
    candidates among them are decided as existing files.
    """

    source_folder: Path | None = None
    known_paths: frozenset[Path] = frozenset()


@dataclass(frozen=True)
class ImportDecisionConfig:
    """Knobs for one decide() call."""

    filter_mode: FilterMode = FilterMode.KNOWN
    include_existing: bool = True


__all__ = [
    "Accepted",
    "FilterMode",
    "IdentificationOverrides",
    "ImportDecision",
    "ImportDecisionConfig",
    "ImportDecisionInfo",
    "LocalTrack",
    "ParsedTrackInfo",
    "Rejected",
    "Rejection",
    "RejectionType",
]
