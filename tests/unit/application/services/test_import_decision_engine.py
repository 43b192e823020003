"""Tests for MediaInfoDecisionEngine.

The mutagen reader is swapped for a plain function, so these tests only cover
the specification order and how read results turn into decisions.
"""

from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from fakes import make_artist, make_candidate

from cratekeeper.application.services.import_decision_engine import (
    ExistingFileSpecification,
    MediaInfoDecisionEngine,
    quality_from_media_info,
    read_media_info,
)
from cratekeeper.domain.entities import (
    Accepted,
    AudioFormat,
    IdentificationOverrides,
    ImportDecisionConfig,
    ImportDecisionInfo,
    LocalTrack,
    MediaInfo,
    Rejected,
    RejectionType,
)

FLAC_INFO = MediaInfo(
    audio_format="flac", bitrate=900, sample_rate=44100, channels=2, bits_per_sample=16
)
MP3_INFO = MediaInfo(audio_format="mp3", bitrate=320, sample_rate=44100, channels=2)


class RecordingReader:
    """Reader double returning canned MediaInfo per suffix."""

    def __init__(self, by_suffix: dict[str, MediaInfo | None], error: Exception | None = None):
        self.by_suffix = by_suffix
        self.error = error
        self.paths: list[Path] = []

    def __call__(self, path: Path) -> MediaInfo | None:
        self.paths.append(path)
        if self.error is not None:
            raise self.error
        return self.by_suffix.get(path.suffix)


@pytest.fixture
def executor() -> Iterator[ThreadPoolExecutor]:
    """Small thread pool shut down after each test."""
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=True)


async def _decide(engine: MediaInfoDecisionEngine, *candidates, artist=None) -> list:
    return await engine.decide(
        list(candidates),
        IdentificationOverrides(artist=artist),
        ImportDecisionInfo(),
        ImportDecisionConfig(),
    )


class TestMediaInfoDecisionEngine:
    """Test decisions per candidate."""

    @pytest.mark.asyncio
    async def test_accepts_readable_flac(self, executor: ThreadPoolExecutor) -> None:
        """A readable lossless file is accepted with its quality and parsed name."""
        artist = make_artist("Michael Jackson", Path("/music/Michael Jackson"))
        engine = MediaInfoDecisionEngine(executor, RecordingReader({".flac": FLAC_INFO}))
        candidate = make_candidate(
            Path("/music/Michael Jackson/Thriller (1982)/05 - Billie Jean.flac")
        )

        (decision,) = await _decide(engine, candidate, artist=artist)

        assert isinstance(decision, Accepted)
        track = decision.item
        assert track.quality.format == AudioFormat.FLAC
        assert track.quality.bitrate is None
        assert track.file_track_info.title == "Billie Jean"
        assert track.file_track_info.track_number == 5
        assert track.file_track_info.album_title == "Thriller"
        assert track.file_track_info.media_info == FLAC_INFO
        assert track.artist is artist

    @pytest.mark.asyncio
    async def test_lossy_keeps_bitrate(self, executor: ThreadPoolExecutor) -> None:
        """Lossy quality carries the bitrate."""
        engine = MediaInfoDecisionEngine(executor, RecordingReader({".mp3": MP3_INFO}))

        (decision,) = await _decide(engine, make_candidate(Path("/music/A/01 - x.mp3")))

        assert isinstance(decision, Accepted)
        assert str(decision.item.quality) == "MP3-320"

    @pytest.mark.asyncio
    async def test_non_audio_rejected_without_reading(self, executor: ThreadPoolExecutor) -> None:
        """Artwork never reaches mutagen."""
        reader = RecordingReader({})
        engine = MediaInfoDecisionEngine(executor, reader)

        (decision,) = await _decide(engine, make_candidate(Path("/music/A/cover.jpg")))

        assert isinstance(decision, Rejected)
        assert "Not a supported audio file" in decision.reason.reason
        assert reader.paths == []

    @pytest.mark.asyncio
    async def test_empty_file_rejected(self, executor: ThreadPoolExecutor) -> None:
        """0-byte files are rejected."""
        engine = MediaInfoDecisionEngine(executor, RecordingReader({".mp3": MP3_INFO}))

        (decision,) = await _decide(engine, make_candidate(Path("/music/A/x.mp3"), size=0))

        assert isinstance(decision, Rejected)
        assert decision.reason.reason == "File is empty"

    @pytest.mark.asyncio
    async def test_all_cheap_failures_reported(self, executor: ThreadPoolExecutor) -> None:
        """Every failing cheap rule is listed, the first one is the reason."""
        engine = MediaInfoDecisionEngine(executor, RecordingReader({}))

        (decision,) = await _decide(engine, make_candidate(Path("/music/A/x.txt"), size=0))

        assert isinstance(decision, Rejected)
        assert len(decision.rejections) == 2
        assert decision.reason == decision.rejections[0]

    @pytest.mark.asyncio
    async def test_unreadable_rejected_permanently(self, executor: ThreadPoolExecutor) -> None:
        """A file mutagen can't parse is rejected."""
        engine = MediaInfoDecisionEngine(executor, RecordingReader({".mp3": None}))

        (decision,) = await _decide(engine, make_candidate(Path("/music/A/x.mp3")))

        assert isinstance(decision, Rejected)
        assert decision.reason.reason == "Unable to read audio metadata"
        assert decision.reason.type == RejectionType.PERMANENT

    @pytest.mark.asyncio
    async def test_reader_crash_rejected_temporarily(self, executor: ThreadPoolExecutor) -> None:
        """An unexpected reader error becomes a TEMPORARY rejection, not an exception."""
        engine = MediaInfoDecisionEngine(
            executor, RecordingReader({}, error=RuntimeError("disk went away"))
        )

        (decision,) = await _decide(engine, make_candidate(Path("/music/A/x.mp3")))

        assert isinstance(decision, Rejected)
        assert decision.reason.type == RejectionType.TEMPORARY

    @pytest.mark.asyncio
    async def test_one_decision_per_candidate(self, executor: ThreadPoolExecutor) -> None:
        """Mixed batches get exactly one decision each."""
        engine = MediaInfoDecisionEngine(executor, RecordingReader({".mp3": MP3_INFO}))
        candidates = [
            make_candidate(Path("/music/A/1.mp3")),
            make_candidate(Path("/music/A/cover.jpg")),
            make_candidate(Path("/music/A/2.mp3"), size=0),
        ]

        decisions = await _decide(engine, *candidates)

        assert sorted(d.item.path for d in decisions) == sorted(c.path for c in candidates)
        assert sum(isinstance(d, Accepted) for d in decisions) == 1

    @pytest.mark.asyncio
    async def test_known_paths_mark_existing_files(self, executor: ThreadPoolExecutor) -> None:
        """Files the catalog already has pass unless include_existing is off."""
        reader = RecordingReader({".mp3": MP3_INFO})
        engine = MediaInfoDecisionEngine(executor, reader)
        known = make_candidate(Path("/music/A/1.mp3"))
        new = make_candidate(Path("/music/A/2.mp3"))
        info = ImportDecisionInfo(
            source_folder=Path("/music/A"), known_paths=frozenset({known.path})
        )

        included = await engine.decide(
            [known, new],
            IdentificationOverrides(),
            info,
            ImportDecisionConfig(include_existing=True),
        )
        excluded = await engine.decide(
            [known, new],
            IdentificationOverrides(),
            info,
            ImportDecisionConfig(include_existing=False),
        )

        assert all(isinstance(d, Accepted) for d in included)
        assert {d.item.path: d.item.existing_file for d in included} == {
            known.path: True,
            new.path: False,
        }
        by_path = {d.item.path: d for d in excluded}
        assert isinstance(by_path[known.path], Rejected)
        assert by_path[known.path].reason.reason == "File is already in the library"
        assert isinstance(by_path[new.path], Accepted)
        # The excluded known file is never opened
        assert reader.paths.count(known.path) == 1

    @pytest.mark.asyncio
    async def test_no_candidates(self, executor: ThreadPoolExecutor) -> None:
        """An empty batch yields no decisions."""
        engine = MediaInfoDecisionEngine(executor, RecordingReader({}))
        assert await _decide(engine) == []


class TestSpecifications:
    """Test individual rules and helpers."""

    def test_existing_file_excluded_on_request(self) -> None:
        """Known files are rejected only when include_existing is off."""
        item = LocalTrack(
            path=Path("/music/A/x.mp3"),
            size=1,
            modified=make_candidate(Path("/x")).modified,
            existing_file=True,
        )
        spec = ExistingFileSpecification()

        assert spec.is_satisfied_by(item, ImportDecisionConfig(include_existing=True)) is None
        assert spec.is_satisfied_by(item, ImportDecisionConfig(include_existing=False)) is not None

    def test_quality_from_unknown_format(self) -> None:
        """Missing format falls back to UNKNOWN."""
        assert quality_from_media_info(MediaInfo()).format == AudioFormat.UNKNOWN

    def test_read_media_info_on_garbage(self, tmp_path: Path) -> None:
        """mutagen failures become None, never an exception."""
        garbage = tmp_path / "broken.flac"
        garbage.write_bytes(b"this is not a flac stream")

        assert read_media_info(garbage) is None

    def test_read_media_info_missing_file(self, tmp_path: Path) -> None:
        """A vanished file is treated as unreadable."""
        assert read_media_info(tmp_path / "gone.mp3") is None
