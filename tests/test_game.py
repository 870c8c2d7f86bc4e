"""Tests for reveal tracking and the game session."""

import random

import pytest

from wordchain import RevealTracker, WordChainGame, format_elapsed

CHAIN = ["art", "tin", "nut"]


class FakeClock:
    """Monotonic clock the tests can move by hand."""

    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


class TestRevealTracker:
    """Test cases for per-word revealed positions."""

    def setup_method(self):
        self.tracker = RevealTracker(CHAIN)

    def test_starts_hidden(self):
        assert self.tracker.hidden_count() == 9
        assert self.tracker.visible_letters() == set()
        assert self.tracker.masked_words() == ["___", "___", "___"]
        assert not self.tracker.is_solved()

    def test_reveal_marks_exactly_matching_positions(self):
        """Only positions holding the literal letter are revealed, in every word."""
        added = self.tracker.reveal_all_occurrences("t")
        assert added == 3
        assert self.tracker.revealed == [{2}, {0}, {2}]
        assert self.tracker.masked_words() == ["__t", "t__", "__t"]
        assert self.tracker.hidden_count() == 6

    def test_reveal_is_idempotent(self):
        self.tracker.reveal_all_occurrences("n")
        before = [set(r) for r in self.tracker.revealed]
        assert self.tracker.reveal_all_occurrences("n") == 0
        assert self.tracker.revealed == before

    def test_reveal_absent_letter(self):
        assert self.tracker.reveal_all_occurrences("z") == 0
        assert self.tracker.hidden_count() == 9

    def test_hidden_counts_per_letter(self):
        self.tracker.reveal_all_occurrences("a")
        assert self.tracker.hidden_counts() == {"r": 1, "t": 3, "i": 1, "n": 2, "u": 1}

    def test_revealed_anywhere(self):
        assert not self.tracker.is_revealed_anywhere("n")
        self.tracker.reveal_all_occurrences("n")
        assert self.tracker.is_revealed_anywhere("n")
        assert not self.tracker.is_revealed_anywhere("u")

    def test_letter_frequencies(self):
        assert self.tracker.letter_frequencies() == {"a": 1, "r": 1, "t": 3, "i": 1, "n": 2, "u": 1}

    def test_single_hidden_cell_is_always_picked(self):
        for letter in "artin":
            self.tracker.reveal_all_occurrences(letter)
        assert self.tracker.hidden_cells() == [(2, 1)]
        for seed in range(10):
            assert self.tracker.pick_random_hidden_cell(random.Random(seed)) == (2, 1)

    def test_pick_when_solved(self):
        for letter in "artinu":
            self.tracker.reveal_all_occurrences(letter)
        assert self.tracker.is_solved()
        assert self.tracker.pick_random_hidden_cell() is None

    def test_pick_is_a_hidden_cell(self):
        self.tracker.reveal_all_occurrences("t")
        rng = random.Random(3)
        for _ in range(50):
            wi, li = self.tracker.pick_random_hidden_cell(rng)
            assert li not in self.tracker.revealed[wi]


class TestWordChainGame:
    """Test cases for guesses, hints, reveal and timing."""

    def setup_method(self):
        self.clock = FakeClock()
        self.game = WordChainGame(CHAIN, clock=self.clock)

    def test_rejects_invalid_chain(self):
        with pytest.raises(ValueError):
            WordChainGame(["art", "nut"])

    def test_rejects_out_of_range_words(self):
        with pytest.raises(ValueError):
            WordChainGame(["ab", "ba"])

    def test_graph_is_derived_once(self):
        assert self.game.order == ["a", "r", "t", "i", "n", "u"]
        assert len(self.game.edges) == 6
        assert self.game.first_letter == "a"
        assert self.game.last_letter == "t"

    def test_correct_guess_reveals(self):
        assert self.game.guess("t", "t")
        assert self.game.tracker.revealed == [{2}, {0}, {2}]
        assert self.game.error_count == 0

    def test_wrong_guess_on_unknown_letter_counts(self):
        assert not self.game.guess("t", "n")
        assert self.game.error_count == 1
        self.game.guess("a", "n")
        assert self.game.error_count == 2

    def test_wrong_guess_on_known_letter_is_free(self):
        """Dropping on a node whose letter is already showing never costs an error."""
        self.game.guess("n", "n")
        for _ in range(3):
            self.game.guess("t", "n")
        assert self.game.error_count == 0

    def test_solved_only_when_nothing_hidden(self):
        for letter in "artin":
            self.game.guess(letter, letter)
            assert not self.game.solved
            assert self.game.tracker.hidden_count() > 0
        self.game.guess("u", "u")
        assert self.game.solved
        assert self.game.show_words
        assert self.game.tracker.hidden_count() == 0

    def test_timer_freezes_at_solve(self):
        self.clock.now = 130.0
        assert self.game.elapsed() == 30.0
        for letter in "artinu":
            self.game.guess(letter, letter)
        self.clock.now = 500.0
        assert self.game.elapsed() == 30.0
        assert self.game.solved_elapsed == 30.0

    def test_hint_reveals_a_hidden_letter(self):
        letter = self.game.hint(random.Random(0))
        assert letter in "artinu"
        assert self.game.hint_count == 1
        assert self.game.tracker.is_revealed_anywhere(letter)
        assert self.game.tracker.hidden_counts().get(letter, 0) == 0

    def test_hint_on_last_cell_solves(self):
        for letter in "artin":
            self.game.guess(letter, letter)
        assert self.game.hint() == "u"
        assert self.game.solved
        assert self.game.hint_count == 1
        assert self.game.error_count == 0

    def test_no_hint_after_solve_or_reveal(self):
        self.game.reveal()
        assert self.game.hint() is None
        assert self.game.hint_count == 0

        game = WordChainGame(CHAIN)
        for letter in "artinu":
            game.guess(letter, letter)
        assert game.hint() is None

    def test_reveal_keeps_reveal_sets(self):
        self.game.reveal()
        assert self.game.show_words
        assert not self.game.solved
        assert self.game.tracker.hidden_count() == 9
        assert self.game.error_count == 0
        assert self.game.hint_count == 0

    def test_new_game_from_pool(self):
        game = WordChainGame.new(["nut", "tin", "art"], 3, rng=random.Random(2))
        assert game.chain == ["art", "tin", "nut"]


def test_format_elapsed():
    assert format_elapsed(0) == "0:00"
    assert format_elapsed(65.9) == "1:05"
    assert format_elapsed(-3) == "0:00"
