"""Domain ports (interfaces) for dependency inversion.

Hey future me - the scan pipeline only ever talks to these ABCs. Production
implementations live in infrastructure/ (SQLAlchemy) and application/services
(mutagen decision engine, root folder service). Tests plug in fakes.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from cratekeeper.domain.entities import (
    Artist,
    CandidateFile,
    DomainEvent,
    FilterMode,
    IdentificationOverrides,
    ImportDecision,
    ImportDecisionConfig,
    ImportDecisionInfo,
    RootFolder,
    TrackFile,
)
from cratekeeper.domain.value_objects import ArtistId


class ICatalogStore(ABC):
    """Durable set of known track files."""

    @abstractmethod
    async def add_many(self, records: Sequence[TrackFile]) -> None:
        """Insert new records. Called once per scanned folder, also with []."""
        pass

    @abstractmethod
    async def update_many(self, records: Sequence[TrackFile]) -> None:
        """Update existing records (matched by id). Also called with []."""
        pass

    @abstractmethod
    async def get_by_artist(self, artist_id: ArtistId) -> list[TrackFile]:
        """Get all records attributed to an artist."""
        pass

    @abstractmethod
    async def get_by_base_path(self, path: Path) -> list[TrackFile]:
        """Get all records whose file lies below path."""
        pass

    @abstractmethod
    async def filter_changed(
        self, candidates: Sequence[CandidateFile], filter_mode: FilterMode
    ) -> list[CandidateFile]:
        """Drop candidates that are unchanged according to filter_mode."""
        pass

    @abstractmethod
    async def cleanup(self, base_path: Path, current_paths: Sequence[Path]) -> int:
        """Delete records below base_path whose file is not in current_paths.

        Returns:
            Number of deleted records
        """
        pass


class IImportDecisionEngine(ABC):
    """Decides which candidate files become catalog records."""

    @abstractmethod
    async def decide(
        self,
        candidates: Sequence[CandidateFile],
        overrides: IdentificationOverrides,
        info: ImportDecisionInfo,
        config: ImportDecisionConfig,
    ) -> list[ImportDecision]:
        """Return exactly one decision per candidate, in any order."""
        pass


class IRootResolver(ABC):
    """Maps a folder to the configured root it lives under."""

    @abstractmethod
    async def best_root_for(self, path: Path) -> RootFolder | None:
        """Get the most specific root containing path, or None."""
        pass


class IArtistRepository(ABC):
    """Repository interface for Artist entities."""

    @abstractmethod
    async def add(self, artist: Artist) -> Artist:
        """Add a new artist."""
        pass

    @abstractmethod
    async def add_many(self, artists: Sequence[Artist]) -> list[Artist]:
        """Add several artists in one transaction."""
        pass

    @abstractmethod
    async def get_by_id(self, artist_id: ArtistId) -> Artist | None:
        """Get an artist by ID."""
        pass

    @abstractmethod
    async def get_by_foreign_id(self, foreign_artist_id: str) -> Artist | None:
        """Get an artist by metadata provider ID."""
        pass

    @abstractmethod
    async def get_by_clean_name(self, clean_name: str) -> Artist | None:
        """Get an artist by normalized name."""
        pass

    @abstractmethod
    async def get_by_path(self, path: Path) -> Artist | None:
        """Get the artist owning exactly this folder."""
        pass

    @abstractmethod
    async def update(self, artist: Artist) -> Artist:
        """Update an existing artist."""
        pass

    @abstractmethod
    async def update_many(self, artists: Sequence[Artist]) -> list[Artist]:
        """Update several artists in one transaction."""
        pass

    @abstractmethod
    async def delete_many(self, artist_ids: Sequence[ArtistId]) -> None:
        """Delete artists by ID."""
        pass

    @abstractmethod
    async def list_all(self) -> list[Artist]:
        """List every artist."""
        pass


class IArtistInfoProvider(ABC):
    """Remote metadata lookup for artists."""

    @abstractmethod
    async def get_artist_info(self, foreign_artist_id: str) -> Artist:
        """Fetch the provider's view of an artist.

        Raises:
            ArtistNotFoundError: The provider has no artist with this id
        """
        pass


class IEventPublisher(ABC):
    """Fire-and-forget domain event sink."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """Publish one event."""
        pass


__all__ = [
    "IArtistInfoProvider",
    "IArtistRepository",
    "ICatalogStore",
    "IEventPublisher",
    "IImportDecisionEngine",
    "IRootResolver",
]
