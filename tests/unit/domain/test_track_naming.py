"""Unit tests for Lidarr-style track file and folder name parsing."""

from pathlib import Path

import pytest

from cratekeeper.domain.value_objects.track_naming import (
    album_title_from_folder,
    disc_number_from_folder,
    is_audio_file,
    parse_track_filename,
    parse_track_path,
)


class TestParseTrackFilename:
    """Tests for parse_track_filename function."""

    def test_parse_standard_format(self) -> None:
        """Test parsing 'NN - Title.ext' format."""
        result = parse_track_filename("05 - Billie Jean.flac")
        assert result.title == "Billie Jean"
        assert result.track_number == 5
        assert result.disc_number is None
        assert result.artist is None

    def test_parse_multi_disc_format(self) -> None:
        """Test parsing 'DD-TT - Title.ext' format."""
        result = parse_track_filename("02-05 - Birthday.flac")
        assert result.title == "Birthday"
        assert result.track_number == 5
        assert result.disc_number == 2

    def test_parse_various_artists_format(self) -> None:
        """Test parsing 'NN - Artist - Title.ext' format."""
        result = parse_track_filename("01 - Michael Jackson - Thriller.mp3")
        assert result.track_number == 1
        assert result.artist == "Michael Jackson"
        assert result.title == "Thriller"

    def test_parse_number_without_dash(self) -> None:
        """Test the fallback for 'NN Title.ext'."""
        result = parse_track_filename("07 Song.mp3")
        assert result.track_number == 7
        assert result.title == "Song"

    def test_parse_plain_title(self) -> None:
        """Test that unparseable names fall back to the stem."""
        result = parse_track_filename("Intro.mp3")
        assert result.title == "Intro"
        assert result.track_number is None


class TestFolderHelpers:
    """Tests for folder name helpers."""

    @pytest.mark.parametrize(
        ("folder", "disc"),
        [("Disc 2", 2), ("CD 1", 1), ("disk3", 3), ("Disc 1 - The Early Years", 1)],
    )
    def test_disc_folder(self, folder: str, disc: int) -> None:
        """Test disc numbers are read from disc folders."""
        assert disc_number_from_folder(folder) == disc

    def test_non_disc_folder(self) -> None:
        """Test regular folders have no disc number."""
        assert disc_number_from_folder("Thriller (1982)") is None

    @pytest.mark.parametrize(
        ("folder", "title"),
        [
            ("Thriller (1982)", "Thriller"),
            ("Bad (1987) (Deluxe Edition)", "Bad"),
            ("Thriller (1982) [FLAC]", "Thriller"),
            ("Unknown Album", "Unknown Album"),
        ],
    )
    def test_album_title(self, folder: str, title: str) -> None:
        """Test album titles are stripped of year and tags."""
        assert album_title_from_folder(folder) == title

    @pytest.mark.parametrize("name", ["a.mp3", "b.FLAC", "c.m4a", "d.opus"])
    def test_audio_extensions(self, name: str) -> None:
        """Test supported audio extensions."""
        assert is_audio_file(name)

    @pytest.mark.parametrize("name", ["cover.jpg", "notes.txt", "album.cue", "noext"])
    def test_non_audio_extensions(self, name: str) -> None:
        """Test that artwork and sidecar files are not audio."""
        assert not is_audio_file(name)


class TestParseTrackPath:
    """Tests for parse_track_path function."""

    def test_album_from_parent_folder(self) -> None:
        """Test the album title comes from the folder holding the file."""
        parsed, album = parse_track_path(
            Path("/music/Michael Jackson/Thriller (1982)/05 - Billie Jean.flac"),
            Path("/music/Michael Jackson"),
        )
        assert parsed.title == "Billie Jean"
        assert album == "Thriller"

    def test_disc_folder_between(self) -> None:
        """Test 'Disc N' folders supply the disc and are skipped for the album."""
        parsed, album = parse_track_path(
            Path("/music/The Beatles/The Beatles (1968)/Disc 2/03 - Birthday.flac"),
            Path("/music/The Beatles"),
        )
        assert parsed.disc_number == 2
        assert parsed.track_number == 3
        assert album == "The Beatles"

    def test_file_directly_in_artist_folder(self) -> None:
        """Test loose files in the artist folder have no album."""
        parsed, album = parse_track_path(
            Path("/music/Moby/01 - Porcelain.mp3"), Path("/music/Moby")
        )
        assert parsed.title == "Porcelain"
        assert album is None
