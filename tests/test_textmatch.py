"""Tests for findscan.textmatch module."""
import pytest

from findscan.textmatch import (
    find_next,
    fold_case,
    is_identifier_char,
    is_whole_word,
    iter_matches,
)


class TestFindNext:
    def test_first_match_from_start(self) -> None:
        assert find_next("ab ab", "ab") == (0, 2)

    def test_respects_start(self) -> None:
        assert find_next("ab ab", "ab", 1) == (3, 5)

    def test_no_match(self) -> None:
        assert find_next("hello", "xyz") is None
        assert find_next("hello", "hello", 1) is None

    def test_empty_pattern_rejected(self) -> None:
        with pytest.raises(ValueError):
            find_next("anything", "")

    def test_negative_start_rejected(self) -> None:
        with pytest.raises(ValueError):
            find_next("anything", "a", -1)

    def test_case_insensitive_positions(self) -> None:
        for line in ("foo bar", "FOO bar", "fOo bar"):
            assert find_next(line, "Foo") == (0, 3)
        assert find_next("x fOo", "Foo") == (2, 5)

    def test_case_sensitive(self) -> None:
        assert find_next("foo Foo", "Foo", case_sensitive=True) == (4, 7)
        assert find_next("foo FOO", "Foo", case_sensitive=True) is None

    def test_whole_word_skips_embedded_occurrences(self) -> None:
        line = "concatenate cat scatter"
        assert find_next(line, "cat", whole_word=True) == (12, 15)
        assert find_next(line, "cat", 13, whole_word=True) is None

    def test_whole_word_rejection_advances(self) -> None:
        assert find_next("xx x", "x", whole_word=True) == (3, 4)
        assert find_next("xxxx", "x", whole_word=True) is None

    def test_underscore_and_digits_are_word_chars(self) -> None:
        assert find_next("_x x1 x", "x", whole_word=True) == (6, 7)

    def test_punctuation_is_a_boundary(self) -> None:
        assert find_next("(cat).", "cat", whole_word=True) == (1, 4)


class TestIterMatches:
    def test_every_non_overlapping_occurrence(self) -> None:
        line = "concatenate cat scatter"
        assert list(iter_matches(line, "cat")) == [(3, 6), (12, 15), (17, 20)]

    def test_whole_word_keeps_only_standalone(self) -> None:
        line = "concatenate cat scatter"
        assert list(iter_matches(line, "cat", whole_word=True)) == [(12, 15)]

    def test_restart_at_previous_end(self) -> None:
        assert list(iter_matches("aaaa", "aa")) == [(0, 2), (2, 4)]
        assert list(iter_matches("aaa", "aa")) == [(0, 2)]

    def test_matches_cover_pattern_text(self) -> None:
        line = "Speed, speed and SPEED"
        spans = list(iter_matches(line, "speed"))
        assert [line[b:e].lower() for b, e in spans] == ["speed"] * 3


class TestHelpers:
    def test_identifier_chars_are_ascii(self) -> None:
        assert is_identifier_char("a")
        assert is_identifier_char("Z")
        assert is_identifier_char("7")
        assert is_identifier_char("_")
        assert not is_identifier_char("-")
        assert not is_identifier_char("é")

    def test_is_whole_word_at_line_edges(self) -> None:
        assert is_whole_word("cat", 0, 3)
        assert not is_whole_word("cats", 0, 3)
        assert not is_whole_word("bobcat", 3, 6)

    def test_fold_case_preserves_length(self) -> None:
        text = "İstanbul ÀB"
        folded = fold_case(text)
        assert len(folded) == len(text)
        assert folded.endswith("àb")
