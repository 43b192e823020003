"""Filtered recursive walk of artist folders.

Hey future me - this is BLOCKING code (os.scandir + stat). Never call scan()
directly from a coroutine; DiskScanService runs it via loop.run_in_executor().

Every file is stat'ed exactly once (DirEntry.stat() caches the result), and
excluded folders are pruned BEFORE descending, so a 40k-file @eaDir thumbnail
tree costs one readdir, not 40k stats.
"""

import logging
import os
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from cratekeeper.domain.entities import CandidateFile
from cratekeeper.domain.value_objects.path_filter import PathFilter

logger = logging.getLogger(__name__)


class DirectoryWalker:
    """Walks folders and returns the files worth looking at."""

    def __init__(self, path_filter: PathFilter | None = None) -> None:
        self._filter = path_filter or PathFilter()

    def scan(self, root_paths: Iterable[Path]) -> list[CandidateFile]:
        """Collect candidate files below each root.

        A missing root or an existing-but-empty root produces exactly one
        warning and no candidates; the remaining roots are still walked.

        Args:
            root_paths: Absolute folders to walk (usually one artist folder)

        Returns:
            Candidates sorted by path
        """
        candidates: list[CandidateFile] = []

        for root in root_paths:
            if not root.is_dir():
                logger.warning(f"Folder does not exist, skipping scan: {root}")
                continue

            found = self._walk(root)
            if not found and self._is_empty(root):
                logger.warning(f"Folder is empty, skipping scan: {root}")
                continue
            candidates.extend(found)

        candidates.sort(key=lambda c: c.path)
        return candidates

    def _walk(self, root: Path) -> list[CandidateFile]:
        found: list[CandidateFile] = []
        seen_dirs: set[tuple[int, int]] = set()
        pending: list[Path] = [root]

        while pending:
            directory = pending.pop()
            try:
                dir_stat = directory.stat()
            except OSError as e:
                logger.warning(f"Cannot access folder {directory}: {e}")
                continue

            # Symlinked folders can loop back into themselves
            dir_key = (dir_stat.st_dev, dir_stat.st_ino)
            if dir_key in seen_dirs:
                logger.debug(f"Already walked {directory}, skipping symlink loop")
                continue
            seen_dirs.add(dir_key)

            try:
                entries = list(os.scandir(directory))
            except PermissionError as e:
                logger.warning(f"Permission denied accessing {directory}: {e}")
                continue
            except OSError as e:
                logger.warning(f"Cannot list folder {directory}: {e}")
                continue

            for entry in entries:
                try:
                    if entry.is_dir():
                        if not self._filter.is_excluded_folder(entry.name):
                            pending.append(Path(entry.path))
                        continue

                    if not entry.is_file() or self._filter.is_excluded_file(entry.name):
                        continue

                    stat = entry.stat()
                except FileNotFoundError:
                    # Deleted between listing and stat
                    logger.debug(f"File vanished during scan: {entry.path}")
                    continue
                except OSError as e:
                    logger.warning(f"Cannot read {entry.path}: {e}")
                    continue

                found.append(
                    CandidateFile(
                        path=Path(entry.path),
                        size=stat.st_size,
                        modified=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
                    )
                )

        return found

    @staticmethod
    def _is_empty(root: Path) -> bool:
        """Check whether a folder has no entries at all."""
        try:
            with os.scandir(root) as it:
                return next(it, None) is None
        except OSError:
            return False
