"""Artist name normalization and folder-name sanitizing.

Hey future me - three different "names" float around for every artist:

1. NAME: what the metadata provider calls them ("The Beatles")
2. CLEAN NAME: the comparison key used for exact lookups ("thebeatles")
3. SORT NAME: what library lists sort by ("Beatles, The")

Clean names are what EntityMatcher-style lookups compare against, so every
place that builds one MUST go through clean_artist_name(). Never lowercase a
name by hand and call it clean.

Usage:
    from cratekeeper.domain.value_objects.naming import clean_artist_name

    clean_artist_name("The Beatles")          # 'thebeatles'
    clean_artist_name("Simon and Garfunkel")  # 'simongarfunkel'
    sort_name("The Beatles")                  # 'Beatles, The'
"""

import re
import unicodedata

# Articles and joiners are stripped when they appear INSIDE a name, never at the
# very start. "The The" keeps its first word, "Simon and Garfunkel" loses "and".
# A lone trailing "a" is kept so "Sepultura a" style edge cases stay distinct.
# Everything that is not a word character (spaces, punctuation) goes too.
CLEAN_NAME_PATTERN = re.compile(
    r"((?:\b|_)(?!^)(a(?!$)|an|the|and|or|of)(?:\b|_))|\W|_",
    re.IGNORECASE,
)

# Leading article for sort names
SORT_ARTICLES: tuple[str, ...] = ("the ", "a ", "an ")

# Characters illegal in filenames across operating systems
# Windows: < > : " / \ | ? *
# Linux: / and NUL
ILLEGAL_CHARS_PATTERN = re.compile(r'[<>"/\\|?*\x00-\x1f]')


def remove_accents(text: str) -> str:
    """Strip combining marks ("Motörhead" -> "Motorhead")."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def clean_artist_name(name: str) -> str:
    """Build the comparison key for an artist name.

    Args:
        name: Artist name or free-text title

    Returns:
        Lowercase, accent-free name without punctuation, whitespace or inner
        articles. Purely numeric names are returned unchanged.

    Examples:
        >>> clean_artist_name("The Beatles")
        'thebeatles'
        >>> clean_artist_name("Beatles")
        'beatles'
        >>> clean_artist_name("Mötley Crüe")
        'motleycrue'
        >>> clean_artist_name("Earth, Wind & Fire")
        'earthwindfire'
    """
    if not name:
        return ""

    # "311", "1349" - numeric band names are their own key
    if name.strip().isdigit():
        return name.strip()

    return CLEAN_NAME_PATTERN.sub("", remove_accents(name)).lower()


def sort_name(name: str) -> str:
    """Move a leading article to the end for sorting.

    Examples:
        >>> sort_name("The Beatles")
        'Beatles, The'
        >>> sort_name("A Tribe Called Quest")
        'Tribe Called Quest, A'
        >>> sort_name("Pink Floyd")
        'Pink Floyd'
    """
    if not name:
        return ""

    name_lower = name.lower()
    for article in SORT_ARTICLES:
        if name_lower.startswith(article) and len(name) > len(article):
            rest = name[len(article) :]
            article_proper = name[: len(article) - 1]
            return f"{rest}, {article_proper}"

    return name


def sanitize_folder_name(name: str) -> str:
    """Make a name safe to use as a single folder component.

    Colons become " -" (Lidarr default), other illegal characters are dropped,
    and trailing dots/spaces are trimmed because Windows refuses them.

    Examples:
        >>> sanitize_folder_name("AC/DC")
        'ACDC'
        >>> sanitize_folder_name("Re: Stacks")
        'Re - Stacks'
    """
    result = name.replace(":", " -")
    result = ILLEGAL_CHARS_PATTERN.sub("", result)
    result = re.sub(r"\s+", " ", result)
    return result.strip().rstrip(". ")


__all__ = [
    "CLEAN_NAME_PATTERN",
    "clean_artist_name",
    "remove_accents",
    "sanitize_folder_name",
    "sort_name",
]
