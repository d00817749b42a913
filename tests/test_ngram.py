"""Tests for the n-gram value type and context windows."""

from __future__ import annotations

import pytest

from namewise.lm.ngram import WILDCARD_TOKEN, NGram, construct_ngram_at, windows_covering


class TestNGram:
    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            NGram([])

    def test_prefix_and_suffix(self):
        ngram = NGram(["a", "b", "c"])
        assert ngram.prefix == ("a", "b")
        assert ngram.suffix == ("b", "c")
        assert NGram(["a"]).prefix is None
        assert NGram(["a"]).suffix is None

    def test_last(self):
        ngram = NGram(["a", "b", "c", "d"])
        assert ngram.last(2) == ("c", "d")
        assert ngram.last(10) is ngram

    def test_hashable_as_multiset_key(self):
        counts = {NGram(["a", "b"]): 2}
        assert counts[NGram(("a", "b"))] == 2

    def test_wildcard_positions(self):
        ngram = NGram(["int", WILDCARD_TOKEN, "=", f"get{WILDCARD_TOKEN}"])
        assert ngram.wildcard_positions() == [1, 3]

    def test_substitute_replaces_wrapped_tokens(self):
        ngram = NGram([WILDCARD_TOKEN, "=", f"this.{WILDCARD_TOKEN}"])
        assert ngram.substitute("count") == ("count", "=", "this.count")


class TestWindows:
    TOKENS = ["a", "b", "c", "d", "e"]

    def test_construct_ngram_at_clips_start(self):
        assert construct_ngram_at(1, self.TOKENS, 3) == ("a", "b")
        assert construct_ngram_at(4, self.TOKENS, 3) == ("c", "d", "e")

    def test_windows_in_the_middle(self):
        windows = windows_covering(2, self.TOKENS, 3)
        assert windows == [("a", "b", "c"), ("b", "c", "d"), ("c", "d", "e")]

    def test_windows_clipped_at_start(self):
        windows = windows_covering(0, self.TOKENS, 3)
        assert windows == [("a",), ("a", "b"), ("a", "b", "c")]

    def test_windows_clipped_at_end(self):
        windows = windows_covering(4, self.TOKENS, 3)
        assert windows == [("c", "d", "e"), ("d", "e"), ("e",)]

    def test_every_window_contains_position(self):
        for size in range(1, 6):
            for position in range(len(self.TOKENS)):
                for window in windows_covering(position, self.TOKENS, size):
                    assert self.TOKENS[position] in window
                    assert 1 <= len(window) <= size
