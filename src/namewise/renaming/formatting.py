"""Whitespace (formatting) suggestions ranked with the same n-gram machinery."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from namewise.lm.ngram import UNK_SYMBOL, WILDCARD_TOKEN, NGram, windows_covering
from namewise.parser.formatting import FormattingTokenizer, is_whitespace_token
from namewise.renaming.models import Renaming
from namewise.renaming.renamers import IdentifierRenamer

logger = logging.getLogger("namewise.formatting")

DEFAULT_THRESHOLDS = (0.1, 0.2, 0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.5, 4.0, 5.0, 6.0, 8.0, 10.0, 12.0)


@dataclass
class FormattingAccuracy:
    """Precision and recall of the top whitespace suggestion at a ladder of thresholds.

    A suggestion counts as made at threshold t when the top candidate
    scores at most t. One accumulator per task; combine with `merge`.
    """

    thresholds: tuple[float, ...] = DEFAULT_THRESHOLDS
    total: int = 0
    suggested: dict[float, int] = field(default_factory=dict)
    correct: dict[float, int] = field(default_factory=dict)

    def record(self, actual: str, ranking: Sequence[Renaming]) -> None:
        self.total += 1
        if not ranking:
            return
        top = ranking[0]
        for t in self.thresholds:
            if top.score <= t:
                self.suggested[t] = self.suggested.get(t, 0) + 1
                if top.name == actual:
                    self.correct[t] = self.correct.get(t, 0) + 1

    def merge(self, other: FormattingAccuracy) -> None:
        self.total += other.total
        for t, n in other.suggested.items():
            self.suggested[t] = self.suggested.get(t, 0) + n
        for t, n in other.correct.items():
            self.correct[t] = self.correct.get(t, 0) + n

    def precision(self, threshold: float) -> float:
        made = self.suggested.get(threshold, 0)
        return self.correct.get(threshold, 0) / made if made else 0.0

    def recall(self, threshold: float) -> float:
        return self.suggested.get(threshold, 0) / self.total if self.total else 0.0

    def rows(self) -> list[tuple[float, float, float]]:
        return [(t, self.precision(t), self.recall(t)) for t in self.thresholds]


class FormattingRenamer(IdentifierRenamer):
    """Treats each whitespace gap as the identifier to rename.

    Candidates are every whitespace token the model knows, plus the current
    one and UNK. Scores are summed over the covering windows rather than
    averaged.
    """

    average_scores = False

    def __init__(self, model, tokenizer: FormattingTokenizer | None = None) -> None:
        super().__init__(model, tokenizer or FormattingTokenizer())
        self._whitespace = sorted(tok for tok in model.vocabulary if is_whitespace_token(tok))

    def ngrams_around(self, tokens: Sequence[str], position: int) -> Counter[NGram]:
        rewritten = list(tokens)
        rewritten[position] = WILDCARD_TOKEN
        return Counter(windows_covering(position, rewritten, self.model.order))

    def rank_position(self, tokens: Sequence[str], position: int) -> list[Renaming]:
        """Rank whitespace tokens for the gap at `position`."""
        candidates = list(self._whitespace)
        for extra in (tokens[position], UNK_SYMBOL):
            if extra not in candidates:
                candidates.append(extra)
        return self.calculate_scores(self.ngrams_around(tokens, position), candidates)

    def whitespace_positions(self, tokens: Sequence[str]) -> list[int]:
        return [i for i, tok in enumerate(tokens) if is_whitespace_token(tok)]

    def score_code(self, code: str) -> list[tuple[int, str, list[Renaming]]]:
        """Rank every whitespace gap in `code`.

        Returns:
            (position, actual whitespace token, ranking) per gap. A gap whose
            scoring fails is logged and left out.
        """
        return self.score_tokens(self.tokenizer.token_texts(code))

    def score_tokens(self, tokens: Sequence[str]) -> list[tuple[int, str, list[Renaming]]]:
        """Rank every whitespace gap of an already tokenized stream."""
        results = []
        for position in self.whitespace_positions(tokens):
            try:
                ranking = self.rank_position(tokens, position)
            except Exception:
                logger.warning(f"Skipping whitespace at token {position}", exc_info=True)
                continue
            results.append((position, tokens[position], ranking))
        return results

    def evaluate(self, code: str, accuracy: FormattingAccuracy | None = None) -> FormattingAccuracy:
        """Record how often the top suggestion matches the actual layout."""
        accuracy = accuracy or FormattingAccuracy()
        for _, actual, ranking in self.score_code(code):
            accuracy.record(actual, ranking)
        return accuracy
