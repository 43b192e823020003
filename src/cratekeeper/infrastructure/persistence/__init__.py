"""Infrastructure persistence layer."""

from .artist_store import SqlArtistRepository
from .catalog_store import SqlCatalogStore
from .database import Database
from .models import ArtistModel, Base, TrackFileModel
from .repositories import ArtistRepository, TrackFileRepository

__all__ = [
    "ArtistModel",
    "ArtistRepository",
    "Base",
    "Database",
    "SqlArtistRepository",
    "SqlCatalogStore",
    "TrackFileModel",
    "TrackFileRepository",
]
