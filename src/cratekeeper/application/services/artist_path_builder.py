"""Build artist folder paths below a root folder."""

from pathlib import Path

from cratekeeper.domain.entities import Artist
from cratekeeper.domain.value_objects.naming import sanitize_folder_name


class ArtistPathBuilder:
    """Turns an artist plus root folder into the artist's folder path.

    Folder name format is "{Artist Name}" (sanitized), with the disambiguation
    appended in parentheses only by the add flow when the plain name is taken.
    """

    def folder_name(self, artist: Artist) -> str:
        """Folder name for an artist."""
        name = sanitize_folder_name(artist.name)
        if not name:
            raise ValueError(f"Artist name '{artist.name}' yields an empty folder name")
        return name

    def build_path(self, artist: Artist, use_existing_relative_folder: bool) -> Path:
        """Path of the artist folder below artist.root_folder_path.

        Args:
            artist: Artist with root_folder_path set
            use_existing_relative_folder: Keep the current folder name (moving
                between roots) instead of rebuilding it from the name

        Raises:
            ValueError: root_folder_path is not set
        """
        if artist.root_folder_path is None:
            raise ValueError(f"Artist {artist} has no root folder to build a path from")

        if use_existing_relative_folder and artist.path is not None:
            return artist.root_folder_path / artist.path.name

        return artist.root_folder_path / self.folder_name(artist)
