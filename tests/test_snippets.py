"""Tests for snippet-level suggestion scoring and triage."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from namewise.config import ModelConfig, SuggestionConfig
from namewise.lm.builder import ModelBuilder
from namewise.lm.ngram import UNK_SYMBOL
from namewise.parser.models import ScopeKind
from namewise.parser.tokenizer import PythonTokenizer
from namewise.renaming.models import Renaming
from namewise.renaming.renamers import IdentifierRenamer
from namewise.snippets.models import SnippetSuggestions, Suggestion
from namewise.snippets.ranking import ReviewStats, rank_units, top_fraction
from namewise.snippets.scorer import SnippetScorer, apply_threshold


@pytest.fixture
def scorer(count_model, java_tokenizer) -> SnippetScorer:
    return SnippetScorer(IdentifierRenamer(count_model, java_tokenizer))


class TestApplyThreshold:
    RANKING = [
        Renaming(1.0, "a"),
        Renaming(2.0, "b"),
        Renaming(3.0, "c"),
        Renaming(9.0, UNK_SYMBOL),
    ]

    def test_unk_forced_back_at_threshold(self):
        filtered = apply_threshold(self.RANKING, threshold=5.0, max_suggestions=2)
        assert [(r.name, r.score) for r in filtered] == [
            ("a", 1.0), ("b", 2.0), (UNK_SYMBOL, 5.0)
        ]

    def test_unk_does_not_count_toward_limit(self):
        ranking = [Renaming(0.5, UNK_SYMBOL), Renaming(1.0, "a"), Renaming(2.0, "b")]
        filtered = apply_threshold(ranking, threshold=5.0, max_suggestions=1)
        assert [r.name for r in filtered] == [UNK_SYMBOL, "a"]

    def test_idempotent(self):
        once = apply_threshold(self.RANKING, threshold=2.5, max_suggestions=1)
        twice = apply_threshold(once, threshold=2.5, max_suggestions=1)
        assert once == twice

    def test_never_empty(self):
        assert apply_threshold([], threshold=1.0, max_suggestions=5) == (
            Renaming(1.0, UNK_SYMBOL),
        )


class TestSnippetScorer:
    def test_thresholds_by_kind(self, scorer):
        assert scorer.threshold_for(ScopeKind.VARIABLE) == 6.0
        assert scorer.threshold_for(ScopeKind.METHOD) == 1.0
        assert scorer.threshold_for(ScopeKind.TYPE) == 1.0

    def test_confidence_gap_positive_for_rare_name(self, scorer, cnt_scope):
        ranking = scorer.renamer.rank(cnt_scope, "cnt")
        gap = scorer.confidence_gap(ranking, "cnt")
        scores = {r.name: r.score for r in ranking}
        assert gap > 0
        assert gap == pytest.approx(scores["cnt"] - ranking[0].score)

    def test_confidence_gap_zero_for_best_name(self, scorer):
        ranking = [Renaming(1.0, "count"), Renaming(2.0, UNK_SYMBOL)]
        assert scorer.confidence_gap(ranking, "count") == 0.0

    def test_confidence_gap_uses_unk_for_unknown_names(self, scorer):
        ranking = [Renaming(1.0, "count"), Renaming(2.0, "foo"), Renaming(4.0, UNK_SYMBOL)]
        assert scorer.confidence_gap(ranking, "foo") == pytest.approx(3.0)
        scorer.config = SuggestionConfig(use_unk=False)
        assert scorer.confidence_gap(ranking, "foo") == pytest.approx(1.0)

    def test_confidence_gap_empty_ranking(self, scorer):
        assert scorer.confidence_gap([], "x") == 0.0

    def test_suggest_filters_ranking(self, scorer, cnt_scope):
        suggestion = scorer.suggest(cnt_scope, "cnt")
        assert 0 < suggestion.confidence_gap <= 6.0
        assert suggestion.renamings[0].name == suggestion.top.name
        assert UNK_SYMBOL in [r.name for r in suggestion.renamings]
        assert all(r.score <= 6.0 for r in suggestion.renamings)

    def test_gap_measured_after_filtering(self, count_model, java_tokenizer, cnt_scope):
        class Fixed(IdentifierRenamer):
            def rank(self, scope, name):
                return [Renaming(1.0, "int"), Renaming(9.0, "count"), Renaming(12.0, UNK_SYMBOL)]

        renamer = Fixed(count_model, java_tokenizer)
        filtered = SnippetScorer(renamer).suggest(cnt_scope, "count")
        assert filtered.confidence_gap == pytest.approx(5.0)
        unfiltered = SnippetScorer(renamer, SuggestionConfig(filter_suggestions=False))
        assert unfiltered.suggest(cnt_scope, "count").confidence_gap == pytest.approx(8.0)

    def test_score_unit(self, scorer, cnt_scope):
        result = scorer.score_unit([(cnt_scope, "cnt")], unit="Counter.java")
        assert result.unit == "Counter.java"
        assert result.identifiers_scored == 1
        assert len(result.suggestions) == 1
        assert result.score == pytest.approx(result.suggestions[0].confidence_gap)

    def test_reporting_floor(self, count_model, java_tokenizer, cnt_scope):
        scorer = SnippetScorer(
            IdentifierRenamer(count_model, java_tokenizer),
            SuggestionConfig(reporting_floor=1000.0),
        )
        result = scorer.score_unit([(cnt_scope, "cnt")])
        assert result.identifiers_scored == 1
        assert result.suggestions == []
        assert result.score == 0.0

    def test_failing_identifier_is_skipped(self, count_model, java_tokenizer, cnt_scope, caplog):
        class Flaky(IdentifierRenamer):
            def rank(self, scope, name):
                if name == "boom":
                    raise RuntimeError("scope extractor mismatch")
                return super().rank(scope, name)

        scorer = SnippetScorer(Flaky(count_model, java_tokenizer))
        with caplog.at_level(logging.WARNING, logger="namewise"):
            result = scorer.score_unit([(cnt_scope, "boom"), (cnt_scope, "cnt")])
        assert result.identifiers_scored == 1
        assert [s.name for s in result.suggestions] == ["cnt"]
        assert "boom" in caplog.text


class TestSuggestionModels:
    def test_prob_not_rename(self):
        suggestion = Suggestion(
            name="cur",
            renamings=(Renaming(1.0, "alt"), Renaming(1.0, "cur"), Renaming(3.0, UNK_SYMBOL)),
        )
        # 2^-1 + 2^-3 out of 2^-1 + 2^-1 + 2^-3
        assert suggestion.prob_not_rename() == pytest.approx(0.625 / 1.125)
        assert suggestion.kind == ScopeKind.VARIABLE

    def test_log_prob_not_renaming(self):
        half = Suggestion(name="cur", renamings=(Renaming(1.0, "alt"), Renaming(1.0, "cur")))
        result = SnippetSuggestions(unit="x", suggestions=[half, half])
        assert result.log_prob_not_renaming() == pytest.approx(-2.0)


class TestRanking:
    @pytest.fixture
    def python_scorer(self, tmp_project: Path) -> SnippetScorer:
        builder = ModelBuilder(ModelConfig())
        model = builder.build_from_directory(tmp_project)
        return SnippetScorer(IdentifierRenamer(model, PythonTokenizer()))

    def test_rank_units_orders_by_score(self, python_scorer, tmp_project: Path):
        files = sorted(tmp_project.glob("*.py"))
        (tmp_project / "broken.py").write_text("def broken(:\n")
        ranked, stats = rank_units(python_scorer, files + [tmp_project / "broken.py"], workers=2)

        assert len(ranked) == len(files)
        assert stats.units_scored == len(files)
        assert stats.units_failed == 1
        assert str(tmp_project / "broken.py") in stats.failures
        scores = [r.score for r in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_sequential_matches_parallel(self, python_scorer, tmp_project: Path):
        files = sorted(tmp_project.glob("*.py"))
        sequential, _ = rank_units(python_scorer, files, workers=1)
        parallel, _ = rank_units(python_scorer, files, workers=3)
        assert [(r.unit, r.score) for r in sequential] == [(r.unit, r.score) for r in parallel]

    def test_top_fraction(self):
        ranked = [SnippetSuggestions(unit=str(i), score=float(10 - i)) for i in range(10)]
        assert [r.unit for r in top_fraction(ranked, 0.1)] == ["0"]
        assert len(top_fraction(ranked, 0.25)) == 3
        assert top_fraction(ranked[:3], 0.1) == ranked[:1]
        assert top_fraction([], 0.5) == []

    def test_review_stats_merge(self):
        left = ReviewStats(units_scored=2, identifiers_scored=5, suggestions=1)
        right = ReviewStats(units_scored=1, identifiers_scored=3, suggestions=2)
        right.failures["bad.py"] = "syntax error"
        left.merge(right)
        assert left.units_scored == 3
        assert left.identifiers_scored == 8
        assert left.suggestions == 3
        assert left.units_failed == 1
