"""Production import decision engine backed by mutagen.

Hey future me - every candidate gets exactly ONE decision, never an exception.
Specifications are checked in order and the cheap ones first:

1. AudioExtensionSpecification - "notes.txt" is not a track
2. NotEmptySpecification - 0-byte files from aborted copies
3. ExistingFileSpecification - files the catalog already has (known_paths on
   ImportDecisionInfo) are only rejected when include_existing is off
4. The stream read - mutagen must understand the file

The mutagen read only happens when 1 to 3 pass, otherwise we'd open every
cover.jpg in the library. All failing cheap specs are reported together, the
first one is the authoritative reason.

Identity (title, track, disc, album) comes from the FOLDER STRUCTURE, same as
the rest of the library code - tags are not trusted here.
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from mutagen import File as MutagenFile  # type: ignore[attr-defined]
from mutagen import MutagenError

from cratekeeper.domain.entities import (
    Accepted,
    AudioFormat,
    AudioQuality,
    CandidateFile,
    IdentificationOverrides,
    ImportDecision,
    ImportDecisionConfig,
    ImportDecisionInfo,
    LocalTrack,
    MediaInfo,
    ParsedTrackInfo,
    Rejected,
    Rejection,
    RejectionType,
)
from cratekeeper.domain.ports import IImportDecisionEngine
from cratekeeper.domain.value_objects.track_naming import is_audio_file, parse_track_path

logger = logging.getLogger(__name__)

MediaInfoReader = Callable[[Path], MediaInfo | None]


def read_media_info(path: Path) -> MediaInfo | None:
    """Read technical stream info with mutagen (BLOCKING).

    Returns:
        MediaInfo, or None when mutagen can't identify or parse the file
    """
    try:
        audio = MutagenFile(path)
    except (MutagenError, OSError) as e:
        logger.warning(f"Error reading audio info from {path}: {e}")
        return None

    if audio is None or audio.info is None:
        logger.debug(f"MutagenFile returned None for {path}")
        return None

    info = audio.info
    audio_format = AudioFormat.from_extension(path.suffix)
    # .m4a holds either AAC or ALAC, only the codec tells them apart
    if getattr(info, "codec", None) == "alac":
        audio_format = AudioFormat.ALAC

    length = getattr(info, "length", None)
    bitrate = getattr(info, "bitrate", None)
    return MediaInfo(
        audio_format=audio_format.value,
        bitrate=int(bitrate / 1000) if bitrate else None,
        sample_rate=getattr(info, "sample_rate", None) or None,
        channels=getattr(info, "channels", None) or None,
        bits_per_sample=getattr(info, "bits_per_sample", None) or None,
        duration_ms=int(length * 1000) if length else None,
    )


class ImportSpecification(ABC):
    """One rule a candidate must satisfy."""

    @abstractmethod
    def is_satisfied_by(
        self, item: LocalTrack, config: ImportDecisionConfig
    ) -> Rejection | None:
        """Return a Rejection when the rule fails, None when it passes."""
        pass


class AudioExtensionSpecification(ImportSpecification):
    def is_satisfied_by(
        self, item: LocalTrack, config: ImportDecisionConfig
    ) -> Rejection | None:
        if is_audio_file(item.path.name):
            return None
        return Rejection(f"Not a supported audio file: {item.path.suffix or item.path.name}")


class NotEmptySpecification(ImportSpecification):
    def is_satisfied_by(
        self, item: LocalTrack, config: ImportDecisionConfig
    ) -> Rejection | None:
        if item.size > 0:
            return None
        return Rejection("File is empty")


class ExistingFileSpecification(ImportSpecification):
    """Known files are only re-imported when the caller allows it."""

    def is_satisfied_by(
        self, item: LocalTrack, config: ImportDecisionConfig
    ) -> Rejection | None:
        if not item.existing_file or config.include_existing:
            return None
        return Rejection("File is already in the library", RejectionType.PERMANENT)


DEFAULT_SPECIFICATIONS: tuple[ImportSpecification, ...] = (
    AudioExtensionSpecification(),
    NotEmptySpecification(),
    ExistingFileSpecification(),
)


class MediaInfoDecisionEngine(IImportDecisionEngine):
    """Accepts readable audio files and attaches their quality."""

    def __init__(
        self,
        executor: ThreadPoolExecutor | None = None,
        reader: MediaInfoReader = read_media_info,
        specifications: Sequence[ImportSpecification] = DEFAULT_SPECIFICATIONS,
    ) -> None:
        # mutagen is I/O + parsing, keep it off the event loop
        self._executor = executor or ThreadPoolExecutor(
            max_workers=min(8, max(2, os.cpu_count() or 4)),
            thread_name_prefix="mediainfo",
        )
        self._reader = reader
        self._specifications = tuple(specifications)

    async def decide(
        self,
        candidates: Sequence[CandidateFile],
        overrides: IdentificationOverrides,
        info: ImportDecisionInfo,
        config: ImportDecisionConfig,
    ) -> list[ImportDecision]:
        """Decide every candidate concurrently."""
        if not candidates:
            return []

        decisions = await asyncio.gather(
            *(
                self._decide_one(candidate, overrides, info, config)
                for candidate in candidates
            )
        )

        accepted = sum(1 for d in decisions if isinstance(d, Accepted))
        logger.debug(
            f"Import decisions: {accepted} accepted, {len(decisions) - accepted} rejected "
            f"of {len(candidates)} candidates"
        )
        return list(decisions)

    async def _decide_one(
        self,
        candidate: CandidateFile,
        overrides: IdentificationOverrides,
        info: ImportDecisionInfo,
        config: ImportDecisionConfig,
    ) -> ImportDecision:
        item = self._build_local_track(candidate, overrides, info)

        try:
            rejections = [
                rejection
                for spec in self._specifications
                if (rejection := spec.is_satisfied_by(item, config)) is not None
            ]
            if rejections:
                return Rejected(item=item, rejections=tuple(rejections))

            loop = asyncio.get_running_loop()
            media_info = await loop.run_in_executor(self._executor, self._reader, item.path)
        except Exception as e:
            # One broken file must never stop the batch
            logger.warning(f"Unexpected error deciding {candidate.path}: {e}", exc_info=True)
            return Rejected(
                item=item,
                rejections=(Rejection("Unable to read audio metadata", RejectionType.TEMPORARY),),
            )

        if media_info is None:
            return Rejected(item=item, rejections=(Rejection("Unable to read audio metadata"),))

        item.file_track_info = ParsedTrackInfo(
            title=item.file_track_info.title,
            artist_title=item.file_track_info.artist_title,
            album_title=item.file_track_info.album_title,
            track_number=item.file_track_info.track_number,
            disc_number=item.file_track_info.disc_number,
            media_info=media_info,
        )
        item.quality = quality_from_media_info(media_info)
        return Accepted(item=item)

    @staticmethod
    def _build_local_track(
        candidate: CandidateFile, overrides: IdentificationOverrides, info: ImportDecisionInfo
    ) -> LocalTrack:
        artist = overrides.artist
        parsed, album_title = parse_track_path(
            candidate.path, artist.path if artist is not None else None
        )
        return LocalTrack(
            path=candidate.path,
            size=candidate.size,
            modified=candidate.modified,
            file_track_info=ParsedTrackInfo(
                title=parsed.title,
                artist_title=parsed.artist or (artist.name if artist else None),
                album_title=album_title,
                track_number=parsed.track_number,
                disc_number=parsed.disc_number,
            ),
            artist=artist,
            existing_file=candidate.path in info.known_paths,
        )

    def shutdown(self) -> None:
        """Release the thread pool."""
        self._executor.shutdown(wait=False)


def quality_from_media_info(media_info: MediaInfo) -> AudioQuality:
    """Derive the quality of a file from its stream info."""
    audio_format = AudioFormat(media_info.audio_format or AudioFormat.UNKNOWN.value)
    bitrate = None if audio_format.is_lossless else media_info.bitrate
    return AudioQuality(format=audio_format, bitrate=bitrate)
