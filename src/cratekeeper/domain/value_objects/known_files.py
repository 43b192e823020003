"""Index of catalog records by path, used to classify walked files."""

from collections.abc import Iterable
from enum import Enum
from pathlib import Path

from cratekeeper.domain.entities import CandidateFile, FilterMode, TrackFile


class FileState(str, Enum):
    """How a walked file relates to the catalog."""

    NEW = "new"
    UNCHANGED = "unchanged"
    CHANGED = "changed"


# Hey future me - change detection is MTIME ONLY. A size change with identical
# mtime is practically impossible on real filesystems and re-reading every file
# to compare sizes would defeat the point of the index. Size still matters
# later when deciding whether an accepted file needs an update.
class KnownFileIndex:
    """Lookup of known records keyed by absolute path."""

    def __init__(self, records: Iterable[TrackFile]) -> None:
        self._by_path: dict[Path, TrackFile] = {record.path: record for record in records}

    def __len__(self) -> int:
        return len(self._by_path)

    def __contains__(self, path: object) -> bool:
        return path in self._by_path

    def get(self, path: Path) -> TrackFile | None:
        """Get the record for a path, if any."""
        return self._by_path.get(path)

    def classify(self, candidate: CandidateFile) -> FileState:
        """Classify one candidate as NEW, UNCHANGED or CHANGED."""
        record = self._by_path.get(candidate.path)
        if record is None:
            return FileState.NEW
        if record.modified == candidate.modified:
            return FileState.UNCHANGED
        return FileState.CHANGED

    def filter_changed(
        self, candidates: Iterable[CandidateFile], filter_mode: FilterMode
    ) -> list[CandidateFile]:
        """Keep the candidates the decision engine still has to look at.

        Args:
            candidates: Files found on disk
            filter_mode: NONE keeps everything, KNOWN drops unchanged files,
                MATCHED drops unchanged files only if their record has an artist

        Returns:
            Candidates in input order
        """
        if filter_mode == FilterMode.NONE:
            return list(candidates)

        result: list[CandidateFile] = []
        for candidate in candidates:
            if self.classify(candidate) != FileState.UNCHANGED:
                result.append(candidate)
                continue
            if filter_mode == FilterMode.MATCHED:
                record = self._by_path[candidate.path]
                if not record.is_matched:
                    result.append(candidate)
        return result

    def paths(self) -> set[Path]:
        """All known paths."""
        return set(self._by_path)


__all__ = ["FileState", "KnownFileIndex"]
