"""Parse track metadata out of Lidarr-style file and folder names.

Hey future me - this is the fallback identity for a file whose tags we don't
trust (or can't read). It understands the usual layouts:

    /Artist/Album (Year)/05 - Title.flac
    /Artist/Album (Year)/01-05 - Title.flac        (disc 1, track 5)
    /Artist/Album (Year)/Disc 2/05 - Title.flac    (disc from folder)
    /Various Artists/Comp/01 - Artist - Title.flac

Anything else degrades to "title = file stem" rather than failing.
"""

import re
from dataclasses import dataclass
from pathlib import Path

# "NN - Title.ext"
STANDARD_TRACK_PATTERN = re.compile(
    r"^(?P<track>\d{1,3})\s*[-–—]\s*(?P<title>.+)\.(?P<ext>\w+)$"
)

# "DD-TT - Title.ext" or "DD-TT Title.ext"
MULTI_DISC_TRACK_PATTERN = re.compile(
    r"^(?P<disc>\d{1,2})[-–—](?P<track>\d{1,3})\s*[-–—]?\s*(?P<title>.+)\.(?P<ext>\w+)$"
)

# "NN - Artist - Title.ext"
VARIOUS_ARTISTS_TRACK_PATTERN = re.compile(
    r"^(?P<track>\d{1,3})\s*[-–—]\s*(?P<artist>.+?)\s*[-–—]\s*(?P<title>.+)\.(?P<ext>\w+)$"
)

# "Disc 2", "CD 1", "Disc 1 - The Early Years"
DISC_FOLDER_PATTERN = re.compile(
    r"^(?:Disc|CD|Disk)\s*(?P<disc>\d{1,2})(?:\s*[-–—:]\s*(?P<title>.+))?$",
    re.IGNORECASE,
)

# "Thriller (1982)", "Bad (1987) (Deluxe Edition)", "Thriller (1982) [FLAC]"
ALBUM_FOLDER_PATTERN = re.compile(
    r"^(?P<title>.+?)\s*\((?P<year>\d{4})\)(?:\s*\((?P<disambiguation>[^)]+)\))?(?:\s*\[[^\]]+\])?$"
)

# Supported audio file extensions (lowercase, with dot)
AUDIO_EXTENSIONS = frozenset(
    {
        ".mp3",
        ".m4a",
        ".aac",
        ".ogg",
        ".opus",
        ".wma",
        ".flac",
        ".wav",
        ".aiff",
        ".aif",
        ".alac",
        ".ape",
        ".wv",
        ".dsf",
        ".dff",
        ".mp4",
    }
)


@dataclass(frozen=True)
class ParsedTrackName:
    """Result of parsing a track file name."""

    title: str
    track_number: int | None = None
    disc_number: int | None = None
    artist: str | None = None


def is_audio_file(filename: str) -> bool:
    """Check if a filename has a supported audio extension."""
    return Path(filename).suffix.lower() in AUDIO_EXTENSIONS


def disc_number_from_folder(folder_name: str) -> int | None:
    """Get the disc number from a "Disc N" style folder name."""
    match = DISC_FOLDER_PATTERN.match(folder_name.strip())
    return int(match.group("disc")) if match else None


def album_title_from_folder(folder_name: str) -> str:
    """Strip year, disambiguation and quality tags from an album folder name."""
    match = ALBUM_FOLDER_PATTERN.match(folder_name.strip())
    return match.group("title").strip() if match else folder_name.strip()


def parse_track_filename(filename: str) -> ParsedTrackName:
    """Parse a track file name (no directories).

    Tries patterns in order: multi-disc, various artists, standard, fallback.

    Examples:
        >>> parse_track_filename("05 - Billie Jean.flac")
        ParsedTrackName(title='Billie Jean', track_number=5, disc_number=None, artist=None)
        >>> parse_track_filename("02-05 - Birthday.flac").disc_number
        2
    """
    filename = filename.strip()

    match = MULTI_DISC_TRACK_PATTERN.match(filename)
    if match:
        return ParsedTrackName(
            title=match.group("title").strip(),
            track_number=int(match.group("track")),
            disc_number=int(match.group("disc")),
        )

    match = VARIOUS_ARTISTS_TRACK_PATTERN.match(filename)
    if match:
        return ParsedTrackName(
            title=match.group("title").strip(),
            track_number=int(match.group("track")),
            artist=match.group("artist").strip(),
        )

    match = STANDARD_TRACK_PATTERN.match(filename)
    if match:
        return ParsedTrackName(
            title=match.group("title").strip(),
            track_number=int(match.group("track")),
        )

    stem = Path(filename).stem
    leading_number = re.match(r"^(\d{1,3})", stem)
    if leading_number:
        title = stem[len(leading_number.group(0)) :].lstrip(" -–—.")
        return ParsedTrackName(
            title=title or stem, track_number=int(leading_number.group(1))
        )
    return ParsedTrackName(title=stem)


def parse_track_path(path: Path, artist_folder: Path | None = None) -> tuple[ParsedTrackName, str | None]:
    """Parse a full track path into name info plus album title.

    The album is the first folder below the artist folder; a "Disc N" folder in
    between supplies the disc number when the file name does not.

    Returns:
        (parsed file name, album title or None for files directly in the artist folder)
    """
    parsed = parse_track_filename(path.name)
    parent = path.parent

    disc_from_folder = disc_number_from_folder(parent.name)
    album_folder = parent.parent if disc_from_folder is not None else parent

    if parsed.disc_number is None and disc_from_folder is not None:
        parsed = ParsedTrackName(
            title=parsed.title,
            track_number=parsed.track_number,
            disc_number=disc_from_folder,
            artist=parsed.artist,
        )

    if artist_folder is not None and album_folder == artist_folder:
        return parsed, None
    return parsed, album_title_from_folder(album_folder.name)


__all__ = [
    "AUDIO_EXTENSIONS",
    "ParsedTrackName",
    "album_title_from_folder",
    "disc_number_from_folder",
    "is_audio_file",
    "parse_track_filename",
    "parse_track_path",
]
