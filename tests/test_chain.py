"""Tests for word loading and chain generation."""

import logging
import random

import pytest

from wordchain import (
    FALLBACK_WORDS,
    GenerationFailure,
    filter_words,
    generate_chain,
    is_valid_chain,
    load_words,
)


class TestFilterWords:
    """Test cases for word-list cleaning."""

    def test_filters_malformed_entries(self):
        """Non-alphabetic and out-of-range words are dropped silently."""
        lines = [" Art\n", "TIN", "a1b", "ab", "abcdef", "", "nut", "don't"]
        assert filter_words(lines) == ["art", "tin", "nut"]

    def test_deduplicates_keeping_first(self):
        """Duplicates differing only in case or whitespace collapse to one entry."""
        assert filter_words(["echo", "ECHO ", "oval", "echo"]) == ["echo", "oval"]


class TestLoadWords:
    """Test cases for reading the word file."""

    def test_reads_file(self, tmp_path):
        """Words are read one per line and filtered."""
        path = tmp_path / "words.txt"
        path.write_text("art\nTin\nx\nnut\n", encoding="utf-8")
        assert load_words(path) == ["art", "tin", "nut"]

    def test_missing_file_uses_fallback(self, tmp_path, caplog):
        """An unreadable file falls back to the built-in list with a warning."""
        with caplog.at_level(logging.WARNING, logger="wordchain"):
            words = load_words(tmp_path / "missing.txt")
        assert words == FALLBACK_WORDS
        assert "fallback" in caplog.text

    def test_empty_file_uses_fallback(self, tmp_path):
        """A file without a single usable word also falls back."""
        path = tmp_path / "words.txt"
        path.write_text("1234\nab\n", encoding="utf-8")
        assert load_words(path) == FALLBACK_WORDS

    def test_single_word_uses_fallback(self, tmp_path, caplog):
        """One usable word can never make a chain, so the built-in list is used."""
        path = tmp_path / "words.txt"
        path.write_text("art\n", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="wordchain"):
            words = load_words(path)
        assert words == FALLBACK_WORDS
        assert "cannot form a chain" in caplog.text

    def test_unlinkable_words_use_fallback(self, tmp_path):
        """Words with no last-to-first links fall back too."""
        path = tmp_path / "words.txt"
        path.write_text("abc\nxyz\nqrs\n", encoding="utf-8")
        assert load_words(path, chain_len=2) == FALLBACK_WORDS

    def test_fallback_depends_on_chain_length(self, tmp_path):
        """A list good for three words can still be too short for four."""
        path = tmp_path / "words.txt"
        path.write_text("art\ntin\nnut\n", encoding="utf-8")
        assert load_words(path, chain_len=3) == ["art", "tin", "nut"]
        assert load_words(path, chain_len=4) == FALLBACK_WORDS


class TestGenerateChain:
    """Test cases for the randomized chain generator."""

    @pytest.mark.parametrize("n", [2, 3, 4, 5])
    def test_chains_are_valid(self, n):
        """Every chain links last letter to first letter and never repeats a word."""
        for seed in range(20):
            chain = generate_chain(FALLBACK_WORDS, n, rng=random.Random(seed))
            assert len(chain) == n
            assert len(set(chain)) == n
            for a, b in zip(chain, chain[1:]):
                assert a[-1] == b[0]
            assert all(w in FALLBACK_WORDS for w in chain)
            assert is_valid_chain(chain)

    def test_only_possible_chain(self):
        """With a single valid ordering the generator must find it."""
        chain = generate_chain(["nut", "tin", "art"], 3, rng=random.Random(1))
        assert chain == ["art", "tin", "nut"]

    def test_seeded_rng_is_reproducible(self):
        """Same seed, same pool, same chain."""
        a = generate_chain(FALLBACK_WORDS, 4, rng=random.Random(7))
        b = generate_chain(list(reversed(FALLBACK_WORDS)), 4, rng=random.Random(7))
        assert a == b

    @pytest.mark.parametrize("n", [0, 1, 6])
    def test_rejects_unsupported_length(self, n):
        """Only chains of 2 to 5 words are supported."""
        with pytest.raises(ValueError):
            generate_chain(FALLBACK_WORDS, n)

    def test_failure_when_no_links(self):
        """A pool without any linking words fails within the attempt budget."""
        with pytest.raises(GenerationFailure):
            generate_chain(["abc", "xyz"], 2, max_attempts=25, rng=random.Random(0))

    def test_failure_when_pool_too_small(self):
        """A pool smaller than the chain can never succeed."""
        with pytest.raises(GenerationFailure):
            generate_chain(["art"], 2, max_attempts=5)

    def test_failure_is_runtime_error(self):
        """Callers catching RuntimeError also see generation failures."""
        assert issubclass(GenerationFailure, RuntimeError)

    def test_empty_strings_in_pool_are_ignored(self):
        """Blank entries that slipped past filtering never break generation."""
        chain = generate_chain(["", "nut", "tin", "art"], 3, rng=random.Random(5))
        assert chain == ["art", "tin", "nut"]


class TestIsValidChain:
    """Test cases for the chain invariant check."""

    def test_valid(self):
        assert is_valid_chain(["art", "tin", "nut"])

    def test_broken_link(self):
        assert not is_valid_chain(["art", "nut"])

    def test_repeated_word(self):
        assert not is_valid_chain(["pop", "pop"])

    def test_empty(self):
        assert not is_valid_chain([])

    def test_word_length_bounds(self):
        assert not is_valid_chain(["ab", "ba"])
        assert not is_valid_chain(["abcdef", "fable"])

    def test_chain_length_bounds(self):
        assert not is_valid_chain(["art"])
        assert not is_valid_chain(["art", "tin", "nut", "tea", "ant", "tan"])
        assert is_valid_chain(["art", "tin", "nut", "tea", "ant"])
