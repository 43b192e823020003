"""Domain events published by the catalog and the disk scanner.

Hey future me - events are plain frozen dataclasses, published through
IEventPublisher AFTER the state change they describe has been written. A
subscriber that reacts to ArtistAddedEvent can rely on the artist being
readable from the repository.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from cratekeeper.domain.entities import Artist


class ScanSkipReason(str, Enum):
    """Why an artist folder was not scanned."""

    NO_ROOT_FOLDER = "no_root_folder"
    ROOT_FOLDER_DOES_NOT_EXIST = "root_folder_does_not_exist"
    ROOT_FOLDER_IS_EMPTY = "root_folder_is_empty"


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all events."""

    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(UTC), kw_only=True
    )


@dataclass(frozen=True)
class ArtistAddedEvent(DomainEvent):
    artist: Artist


@dataclass(frozen=True)
class ArtistsImportedEvent(DomainEvent):
    artists: tuple[Artist, ...]


@dataclass(frozen=True)
class ArtistEditedEvent(DomainEvent):
    """updated is the new state, stored the state before the edit."""

    updated: Artist
    stored: Artist


@dataclass(frozen=True)
class ArtistsDeletedEvent(DomainEvent):
    artists: tuple[Artist, ...]
    delete_files: bool = False
    add_import_list_exclusion: bool = False


@dataclass(frozen=True)
class ArtistScannedEvent(DomainEvent):
    """A folder was reconciled with the catalog."""

    path: Path
    artist: Artist | None = None
    added: int = 0
    updated: int = 0
    rejected: int = 0


@dataclass(frozen=True)
class ArtistScanSkippedEvent(DomainEvent):
    path: Path
    reason: ScanSkipReason
    artist: Artist | None = None


__all__ = [
    "ArtistAddedEvent",
    "ArtistEditedEvent",
    "ArtistScanSkippedEvent",
    "ArtistScannedEvent",
    "ArtistsDeletedEvent",
    "ArtistsImportedEvent",
    "DomainEvent",
    "ScanSkipReason",
]
