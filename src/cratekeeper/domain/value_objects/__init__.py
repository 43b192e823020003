"""Domain value objects."""

from __future__ import annotations

import uuid
from dataclasses import dataclass


# Hey future me, ids are wrapped so an ArtistId can never be passed where a
# TrackFileId is expected. value is the canonical uuid string that also goes
# into the String(36) primary key columns.
@dataclass(frozen=True)
class ArtistId:
    """Value object for artist ID."""

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("ArtistId cannot be empty")

    @classmethod
    def generate(cls) -> ArtistId:
        """Generate a new unique ID."""
        return cls(str(uuid.uuid4()))

    @classmethod
    def from_string(cls, value: str) -> ArtistId:
        """Create ID from a stored string."""
        return cls(value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TrackFileId:
    """Value object for track file ID."""

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("TrackFileId cannot be empty")

    @classmethod
    def generate(cls) -> TrackFileId:
        """Generate a new unique ID."""
        return cls(str(uuid.uuid4()))

    @classmethod
    def from_string(cls, value: str) -> TrackFileId:
        """Create ID from a stored string."""
        return cls(value)

    def __str__(self) -> str:
        return self.value


__all__ = ["ArtistId", "TrackFileId"]
