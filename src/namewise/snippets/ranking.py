"""Rank many code units against each other by snippet score."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from namewise.snippets.models import SnippetSuggestions
from namewise.snippets.scorer import SnippetScorer

logger = logging.getLogger("namewise.snippets")


@dataclass
class ReviewStats:
    """Counters for one batch of scored units.

    Each task fills its own instance; the batch folds them together with
    `merge` once every task has finished.
    """

    units_scored: int = 0
    identifiers_scored: int = 0
    suggestions: int = 0
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def units_failed(self) -> int:
        return len(self.failures)

    def record(self, result: SnippetSuggestions) -> None:
        self.units_scored += 1
        self.identifiers_scored += result.identifiers_scored
        self.suggestions += len(result.suggestions)

    def merge(self, other: ReviewStats) -> None:
        self.units_scored += other.units_scored
        self.identifiers_scored += other.identifiers_scored
        self.suggestions += other.suggestions
        self.failures.update(other.failures)


def _score_one(
    scorer: SnippetScorer, unit: str | Path, kwargs: dict
) -> tuple[SnippetSuggestions | None, ReviewStats]:
    stats = ReviewStats()
    try:
        result = scorer.score_file(unit, **kwargs)
    except Exception as e:
        logger.warning(f"Skipping {unit}: {e}", exc_info=True)
        stats.failures[str(unit)] = str(e)
        return None, stats
    stats.record(result)
    return result, stats


def rank_units(
    scorer: SnippetScorer,
    units: Sequence[str | Path],
    workers: int = 4,
    progress_callback: Callable[[str, int, int], None] | None = None,
    **kwargs,
) -> tuple[list[SnippetSuggestions], ReviewStats]:
    """Score every unit and order them from least to most natural.

    Args:
        scorer: Scorer holding the trained renamer.
        units: Source files to score.
        workers: Worker threads; the model is read-only so tasks share it.
        progress_callback: Optional callback(unit, completed, total).
        **kwargs: Identifier filters passed to `SnippetScorer.score_file`
            (variables, methods, types).

    Returns:
        Units sorted by descending snippet score (ties by unit name), and
        the merged batch statistics. Failed units are absent from the list.
    """
    stats = ReviewStats()
    total = len(units)
    outcomes: list[tuple[SnippetSuggestions | None, ReviewStats]] = []

    if workers <= 1 or total < 2:
        for i, unit in enumerate(units):
            outcomes.append(_score_one(scorer, unit, kwargs))
            if progress_callback:
                progress_callback(str(unit), i + 1, total)
    else:
        with ThreadPoolExecutor(max_workers=workers) as ex:
            futures = [ex.submit(_score_one, scorer, unit, kwargs) for unit in units]
            for i, (unit, future) in enumerate(zip(units, futures)):
                outcomes.append(future.result())
                if progress_callback:
                    progress_callback(str(unit), i + 1, total)

    ranked: list[SnippetSuggestions] = []
    for result, local in outcomes:
        stats.merge(local)
        if result is not None:
            ranked.append(result)
    ranked.sort(key=lambda r: (-r.score, r.unit))
    return ranked, stats


def top_fraction(
    ranked: Sequence[SnippetSuggestions], fraction: float = 0.1
) -> list[SnippetSuggestions]:
    """The leading `fraction` of an already ranked list, at least one unit if any."""
    if not ranked or fraction <= 0:
        return []
    count = max(1, math.ceil(len(ranked) * min(fraction, 1.0)))
    return list(ranked[:count])
