"""Exclusion rules for the disk walk.

Hey future me - these rules decide what a scan never even looks at. All
comparisons are on a SINGLE path component and case-insensitive. The artist
folder itself is never tested: an artist literally named "Extras" or ".hack"
still gets scanned, only folders BELOW it are filtered.

Rules:
1. Folders named "extras" (bonus material, interviews, artwork dumps)
2. Folders named ".AppleDouble" or "@eaDir" (NAS/macOS metadata)
3. Any folder starting with "." (".@__thumb", ".hidden", ...)
4. Files named ".DS_Store" or starting with "._" (macOS resource forks)

Other dot FILES are kept on purpose - ".t01.mp3" is a real track.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

EXCLUDED_FOLDER_NAMES = frozenset({"extras", ".appledouble", "@eadir"})
EXCLUDED_FILE_NAMES = frozenset({".ds_store"})
EXCLUDED_FILE_PREFIXES: tuple[str, ...] = ("._",)


@dataclass(frozen=True)
class PathFilter:
    """Decides which folders and files below an artist folder are skipped."""

    excluded_folder_names: frozenset[str] = field(default=EXCLUDED_FOLDER_NAMES)
    excluded_file_names: frozenset[str] = field(default=EXCLUDED_FILE_NAMES)
    excluded_file_prefixes: tuple[str, ...] = field(default=EXCLUDED_FILE_PREFIXES)

    def is_excluded_folder(self, name: str) -> bool:
        """Check one folder name found below the artist folder."""
        lowered = name.lower()
        return lowered.startswith(".") or lowered in self.excluded_folder_names

    def is_excluded_file(self, name: str) -> bool:
        """Check one file name."""
        lowered = name.lower()
        if lowered in self.excluded_file_names:
            return True
        return lowered.startswith(self.excluded_file_prefixes)

    def should_skip(self, relative_segments: Sequence[str], is_file: bool = True) -> bool:
        """Check a path given as its components relative to the artist folder.

        Folders are tested top-down so a rejected ancestor short-circuits the
        rest. The last segment is tested as a file when is_file is set.

        Args:
            relative_segments: Path components below the artist folder
            is_file: Whether the last segment names a file

        Returns:
            True if the path must not be scanned

        Examples:
            >>> PathFilter().should_skip(["Extras", "bonus.mp3"])
            True
            >>> PathFilter().should_skip(["Season 1", ".t01.mp3"])
            False
        """
        if not relative_segments:
            return False

        folders = relative_segments[:-1] if is_file else relative_segments
        if any(self.is_excluded_folder(folder) for folder in folders):
            return True

        return is_file and self.is_excluded_file(relative_segments[-1])


__all__ = ["PathFilter"]
