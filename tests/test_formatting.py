"""Tests for whitespace tokens and formatting suggestions."""

from __future__ import annotations

import pytest

from namewise.config import SuggestionConfig
from namewise.lm.model import NGramLanguageModel
from namewise.lm.ngram import UNK_SYMBOL
from namewise.parser.formatting import FormattingTokenizer, is_whitespace_token, whitespace_token
from namewise.parser.models import ScopeKind
from namewise.parser.tokenizer import RegexTokenizer
from namewise.renaming.factory import create_renamer
from namewise.renaming.formatting import FormattingAccuracy, FormattingRenamer
from namewise.renaming.models import Renaming
from namewise.snippets.formatting import FormattingScorer

TRAINING_SNIPPET = "int x = 1;"


@pytest.fixture
def formatting_model() -> NGramLanguageModel:
    tokenizer = FormattingTokenizer()
    model = NGramLanguageModel()
    model.train([tokenizer.token_texts(TRAINING_SNIPPET) for _ in range(50)])
    return model


class TestWhitespaceToken:
    @pytest.mark.parametrize(
        "gap, expected",
        [
            ("", "WS_NONE"),
            (" ", "WS_s1"),
            ("   ", "WS_s3"),
            ("\t", "WS_s4"),
            ("\n    ", "WS_n1_i4"),
            (" \n\n\t", "WS_n2_i4"),
            ("\n", "WS_n1_i0"),
        ],
    )
    def test_encoding(self, gap, expected):
        assert whitespace_token(gap) == expected

    def test_tab_size(self):
        assert whitespace_token("\t", tab_size=2) == "WS_s2"

    def test_is_whitespace_token(self):
        assert is_whitespace_token("WS_s1")
        assert not is_whitespace_token("x")


class TestFormattingTokenizer:
    def test_interleaves_gaps(self):
        tokens = FormattingTokenizer().token_texts(TRAINING_SNIPPET)
        assert tokens == ["int", "WS_s1", "x", "WS_s1", "=", "WS_s1", "1", "WS_NONE", ";"]

    def test_comments_become_markers(self):
        tokens = FormattingTokenizer().token_texts("x; // done\ny;")
        assert tokens == [
            "x", "WS_NONE", ";", "WS_s1", "<COMMENT>", "WS_n1_i0", "y", "WS_NONE", ";"
        ]

    def test_leading_whitespace_ignored(self):
        assert FormattingTokenizer().token_texts("   x")[0] == "x"


class TestFormattingRenamer:
    def test_candidates_are_whitespace(self, formatting_model):
        renamer = FormattingRenamer(formatting_model)
        tokens = FormattingTokenizer().token_texts("int x=1;")
        ranking = renamer.rank_position(tokens, 3)
        assert {r.name for r in ranking} == {"WS_NONE", "WS_s1", UNK_SYMBOL}

    def test_suggests_trained_layout(self, formatting_model):
        renamer = FormattingRenamer(formatting_model)
        tokens = FormattingTokenizer().token_texts("int x=1;")
        assert tokens[3] == "WS_NONE"
        assert renamer.rank_position(tokens, 3)[0].name == "WS_s1"

    def test_score_code_visits_every_gap(self, formatting_model):
        renamer = FormattingRenamer(formatting_model)
        results = renamer.score_code("int x=1;")
        assert [position for position, _, _ in results] == [1, 3, 5, 7]
        assert [actual for _, actual, _ in results] == ["WS_s1", "WS_NONE", "WS_NONE", "WS_NONE"]

    def test_evaluate_on_training_layout(self, formatting_model):
        accuracy = FormattingRenamer(formatting_model).evaluate(TRAINING_SNIPPET)
        assert accuracy.total == 4
        assert accuracy.precision(0.1) == 1.0
        assert accuracy.recall(0.1) == 1.0


class TestFormattingAccuracy:
    def test_record_and_merge(self):
        first = FormattingAccuracy(thresholds=(1.0, 5.0))
        first.record("WS_s1", [Renaming(0.5, "WS_s1")])
        second = FormattingAccuracy(thresholds=(1.0, 5.0))
        second.record("WS_s1", [Renaming(3.0, "WS_NONE")])
        second.record("WS_s1", [])
        first.merge(second)

        assert first.total == 3
        assert first.precision(1.0) == 1.0
        assert first.recall(1.0) == pytest.approx(1 / 3)
        assert first.precision(5.0) == 0.5
        assert first.recall(5.0) == pytest.approx(2 / 3)
        assert first.rows()[0] == (1.0, 1.0, pytest.approx(1 / 3))

    def test_empty(self):
        accuracy = FormattingAccuracy()
        assert accuracy.precision(1.0) == 0.0
        assert accuracy.recall(1.0) == 0.0


class TestFormattingScorer:
    def test_reports_unusual_gaps(self, formatting_model):
        scorer = FormattingScorer(
            FormattingRenamer(formatting_model), SuggestionConfig(threshold_formatting=1000.0)
        )
        result = scorer.score_source("int x=1;", "A.java", "java")
        assert result.unit == "A.java"
        assert result.identifiers_scored == 4
        assert len(result.suggestions) == 2
        for suggestion in result.suggestions:
            assert suggestion.name == "WS_NONE"
            assert suggestion.top.name == "WS_s1"
            assert suggestion.confidence_gap > 0
            assert suggestion.scope.line == 1
            assert suggestion.scope.file_path == "A.java"
        assert result.score == pytest.approx(sum(s.confidence_gap for s in result.suggestions))

    def test_trained_layout_has_no_suggestions(self, formatting_model):
        scorer = FormattingScorer(FormattingRenamer(formatting_model))
        result = scorer.score_source(TRAINING_SNIPPET)
        assert result.identifiers_scored == 4
        assert result.suggestions == []

    def test_single_threshold_for_every_kind(self, formatting_model):
        scorer = FormattingScorer(
            FormattingRenamer(formatting_model), SuggestionConfig(threshold_formatting=3.5)
        )
        assert {scorer.threshold_for(kind) for kind in ScopeKind} == {3.5}


class TestFormattingFactory:
    def test_wraps_plain_tokenizer(self, formatting_model):
        renamer = create_renamer("formatting", formatting_model, RegexTokenizer("python"))
        assert isinstance(renamer, FormattingRenamer)
        assert isinstance(renamer.tokenizer, FormattingTokenizer)
        assert renamer.tokenizer.language == "python"
        assert renamer._whitespace == ["WS_NONE", "WS_s1"]
