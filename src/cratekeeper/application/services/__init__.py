"""Application services - disk scanning, import decisions and the artist catalog."""

from cratekeeper.application.services.add_artist_service import (
    AddArtistRequest,
    AddArtistService,
    MonitorType,
)
from cratekeeper.application.services.artist_matcher import ArtistMatcher
from cratekeeper.application.services.artist_path_builder import ArtistPathBuilder
from cratekeeper.application.services.artist_service import ArtistService
from cratekeeper.application.services.directory_walker import DirectoryWalker
from cratekeeper.application.services.disk_scan_service import (
    ArtistScanResult,
    DiskScanService,
    ScanOutcome,
)
from cratekeeper.application.services.import_decision_engine import (
    MediaInfoDecisionEngine,
)
from cratekeeper.application.services.root_folder_service import RootFolderService

__all__ = [
    "AddArtistRequest",
    "AddArtistService",
    "ArtistMatcher",
    "ArtistPathBuilder",
    "ArtistScanResult",
    "ArtistService",
    "DirectoryWalker",
    "DiskScanService",
    "MediaInfoDecisionEngine",
    "MonitorType",
    "RootFolderService",
    "ScanOutcome",
]
