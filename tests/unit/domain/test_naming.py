"""Unit tests for artist name normalization.

Clean names are the exact-lookup key for artists, so these pin down which
characters and words survive cleaning.
"""

import pytest

from cratekeeper.domain.value_objects.naming import (
    clean_artist_name,
    remove_accents,
    sanitize_folder_name,
    sort_name,
)


class TestCleanArtistName:
    """Tests for clean_artist_name function."""

    def test_leading_article_is_kept(self) -> None:
        """Test that 'The' at the start survives, only whitespace goes."""
        assert clean_artist_name("The Beatles") == "thebeatles"

    def test_inner_joiner_is_removed(self) -> None:
        """Test that 'and' between words is stripped."""
        assert clean_artist_name("Simon and Garfunkel") == "simongarfunkel"

    def test_punctuation_is_removed(self) -> None:
        """Test that commas, ampersands and spaces disappear."""
        assert clean_artist_name("Earth, Wind & Fire") == "earthwindfire"

    def test_accents_are_removed(self) -> None:
        """Test that diacritics are folded to plain letters."""
        assert clean_artist_name("Mötley Crüe") == "motleycrue"

    def test_underscores_are_removed(self) -> None:
        """Test that underscores count as separators."""
        assert clean_artist_name("Pink_Floyd") == "pinkfloyd"

    def test_numeric_name_unchanged(self) -> None:
        """Test that purely numeric band names are their own key."""
        assert clean_artist_name("311") == "311"
        assert clean_artist_name(" 1349 ") == "1349"

    def test_empty_name(self) -> None:
        """Test that an empty name yields an empty key."""
        assert clean_artist_name("") == ""

    @pytest.mark.parametrize("name", ["BEATLES", "beatles", "Beatles"])
    def test_case_insensitive(self, name: str) -> None:
        """Test that case never matters."""
        assert clean_artist_name(name) == "beatles"


class TestRemoveAccents:
    """Tests for remove_accents function."""

    def test_umlauts(self) -> None:
        """Test folding of umlauts."""
        assert remove_accents("Motörhead") == "Motorhead"

    def test_plain_text_untouched(self) -> None:
        """Test that ASCII text passes through."""
        assert remove_accents("Queen") == "Queen"


class TestSortName:
    """Tests for sort_name function."""

    def test_the_prefix(self) -> None:
        """Test 'The X' -> 'X, The'."""
        assert sort_name("The Beatles") == "Beatles, The"

    def test_a_prefix(self) -> None:
        """Test 'A X' -> 'X, A'."""
        assert sort_name("A Tribe Called Quest") == "Tribe Called Quest, A"

    def test_no_article(self) -> None:
        """Test names without article are unchanged."""
        assert sort_name("Pink Floyd") == "Pink Floyd"

    def test_article_only(self) -> None:
        """Test that a bare article is not rotated."""
        assert sort_name("The") == "The"


class TestSanitizeFolderName:
    """Tests for sanitize_folder_name function."""

    def test_slash_removed(self) -> None:
        """Test that path separators are dropped."""
        assert sanitize_folder_name("AC/DC") == "ACDC"

    def test_colon_replaced(self) -> None:
        """Test that colons become ' -'."""
        assert sanitize_folder_name("Re: Stacks") == "Re - Stacks"

    def test_trailing_dots_trimmed(self) -> None:
        """Test that trailing dots and spaces are trimmed."""
        assert sanitize_folder_name("Mr. Big...") == "Mr. Big"

    def test_question_mark_removed(self) -> None:
        """Test Windows-illegal characters are dropped."""
        assert sanitize_folder_name("? and the Mysterians") == "and the Mysterians"
