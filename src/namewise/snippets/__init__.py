"""Snippet-level aggregation of identifier suggestions."""

from namewise.snippets.formatting import FormattingScorer
from namewise.snippets.models import SnippetSuggestions, Suggestion
from namewise.snippets.ranking import ReviewStats, rank_units, top_fraction
from namewise.snippets.scorer import SnippetScorer, apply_threshold

__all__ = [
    "FormattingScorer",
    "ReviewStats",
    "SnippetScorer",
    "SnippetSuggestions",
    "Suggestion",
    "apply_threshold",
    "rank_units",
    "top_fraction",
]
