"""Resolve which configured root folder an artist folder belongs to."""

import logging
from collections.abc import Iterable
from pathlib import Path

from cratekeeper.config import Settings
from cratekeeper.domain.entities import RootFolder
from cratekeeper.domain.ports import IRootResolver

logger = logging.getLogger(__name__)


class RootFolderService(IRootResolver):
    """Root folders come from settings and are read-only here."""

    def __init__(self, root_folders: Iterable[RootFolder]) -> None:
        self._roots = list(root_folders)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RootFolderService":
        """Build from Settings.storage.root_folders."""
        return cls(RootFolder(path=path) for path in settings.storage.root_folders)

    def all(self) -> list[RootFolder]:
        """Get every configured root."""
        return list(self._roots)

    # Nested roots are allowed (/music and /music/lossless). The longest match
    # wins so an artist in /music/lossless/X belongs to the inner root.
    async def best_root_for(self, path: Path) -> RootFolder | None:
        """Get the most specific root containing path."""
        matches = [root for root in self._roots if root.contains(path)]
        if not matches:
            logger.debug(f"No root folder contains {path}")
            return None
        return max(matches, key=lambda root: len(root.path.parts))
