"""Fuzzy artist lookup by free text.

Hey future me - this is how a folder called "Beatles" or a tag saying "The
Beatls" finds the artist "The Beatles". Four scoring functions are tried, each
comparing one view of the artist against one view of the title:

    1. clean name      vs clean title
    2. raw name        vs raw title
    3. best of aliases+name (cleaned) vs clean title
    4. article fallback: title "The X" -> clean name vs clean("X"),
       otherwise clean name vs "the" + clean title

For each function, artists are sorted by score and trimmed twice:

    GAP:       keep the longest prefix where no step down between neighbours
               is >= gap (0.2). A clear winner drops everyone behind it.
    THRESHOLD: then keep entries while score > threshold (0.8), letting the
               entry right after a passing one through as well.

The ORDER matters (gap first, then threshold) - don't "simplify" it into a
single filter, tied runner-ups are exactly what makes a lookup ambiguous.

Similarity is rapidfuzz's normalized Indel ratio scaled to [0, 1].
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from rapidfuzz import fuzz

from cratekeeper.domain.entities import Artist
from cratekeeper.domain.value_objects.naming import clean_artist_name

logger = logging.getLogger(__name__)

DEFAULT_FUZZ_THRESHOLD = 0.8
DEFAULT_FUZZ_GAP = 0.2

ScoreFunction = Callable[[Artist, str], float]


def similarity(left: str, right: str) -> float:
    """Fuzzy similarity of two strings in [0, 1]."""
    if not left and not right:
        return 1.0
    return fuzz.ratio(left, right) / 100.0


@dataclass(frozen=True)
class ScoringFunction:
    """One way of scoring an artist against a prepared title."""

    name: str
    score: ScoreFunction
    title: str


@dataclass(frozen=True)
class ScoredArtist:
    artist: Artist
    score: float


def scoring_functions(title: str, clean_title: str) -> list[ScoringFunction]:
    """Build the ordered scoring functions for a title."""
    functions = [
        ScoringFunction(
            "clean_name", lambda a, t: similarity(a.clean_name, t), clean_title
        ),
        ScoringFunction("name", lambda a, t: similarity(a.name, t), title),
        ScoringFunction(
            "aliases",
            lambda a, t: max(
                similarity(clean_artist_name(n), t) for n in [*a.aliases, a.name]
            ),
            clean_title,
        ),
    ]

    if title[:4].lower() == "the ":
        functions.append(
            ScoringFunction(
                "without_article",
                lambda a, t: similarity(a.clean_name, t),
                clean_artist_name(title[4:]),
            )
        )
    else:
        functions.append(
            ScoringFunction(
                "with_article",
                lambda a, t: similarity(a.clean_name, t),
                "the" + clean_title,
            )
        )

    return functions


class ArtistMatcher:
    """Exact and fuzzy artist lookup over an in-memory artist list."""

    def __init__(
        self,
        fuzz_threshold: float = DEFAULT_FUZZ_THRESHOLD,
        fuzz_gap: float = DEFAULT_FUZZ_GAP,
    ) -> None:
        if not 0.0 <= fuzz_threshold <= 1.0:
            raise ValueError(f"fuzz_threshold must be within [0, 1], got {fuzz_threshold}")
        if not 0.0 <= fuzz_gap <= 1.0:
            raise ValueError(f"fuzz_gap must be within [0, 1], got {fuzz_gap}")
        self.fuzz_threshold = fuzz_threshold
        self.fuzz_gap = fuzz_gap

    def find_exact(self, artists: Sequence[Artist], title: str) -> Artist | None:
        """Find the artist whose clean name equals the cleaned title."""
        clean_title = clean_artist_name(title)
        return next((a for a in artists if a.clean_name == clean_title), None)

    def find_inexact(self, artists: Sequence[Artist], title: str) -> Artist | None:
        """Find the single best fuzzy match.

        Scoring functions are tried in order; the first one that leaves exactly
        one artist standing decides. None if every function is ambiguous or
        empty.
        """
        for function in scoring_functions(title, clean_artist_name(title)):
            survivors = self.rank(artists, function)
            if len(survivors) == 1:
                logger.debug(
                    f"Matched '{title}' to {survivors[0].artist} via {function.name} "
                    f"({survivors[0].score:.2f})"
                )
                return survivors[0].artist
        return None

    def find_candidates(self, artists: Sequence[Artist], title: str) -> list[Artist]:
        """Union of survivors over all scoring functions, distinct by id."""
        seen: set[str] = set()
        candidates: list[Artist] = []
        for function in scoring_functions(title, clean_artist_name(title)):
            for scored in self.rank(artists, function):
                if scored.artist.id.value in seen:
                    continue
                seen.add(scored.artist.id.value)
                candidates.append(scored.artist)
        return candidates

    def rank(self, artists: Sequence[Artist], function: ScoringFunction) -> list[ScoredArtist]:
        """Score, sort and trim artists for one scoring function."""
        ordered = sorted(
            (ScoredArtist(a, function.score(a, function.title)) for a in artists),
            key=lambda s: s.score,
            reverse=True,
        )

        # Gap rule
        gap_kept: list[ScoredArtist] = []
        for i, scored in enumerate(ordered):
            if i > 0 and ordered[i - 1].score - scored.score >= self.fuzz_gap:
                break
            gap_kept.append(scored)

        # Threshold rule with one-step relaxation
        survivors: list[ScoredArtist] = []
        for i, scored in enumerate(gap_kept):
            if scored.score > self.fuzz_threshold or (
                i > 0 and gap_kept[i - 1].score > self.fuzz_threshold
            ):
                survivors.append(scored)
            else:
                break
        return survivors
