"""Suggestion value objects for single identifiers and whole code units."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from namewise.lm.ngram import UNK_SYMBOL
from namewise.parser.models import Scope, ScopeKind
from namewise.renaming.models import Renaming


@dataclass(frozen=True)
class Suggestion:
    """Ranked alternatives for one identifier.

    `confidence_gap` is the score of the current name minus the score of
    the best candidate, measured on `renamings` as reported.
    """

    name: str
    renamings: tuple[Renaming, ...]
    confidence_gap: float = 0.0
    scope: Scope | None = None

    @property
    def kind(self) -> ScopeKind:
        return self.scope.kind if self.scope else ScopeKind.VARIABLE

    @property
    def top(self) -> Renaming | None:
        return self.renamings[0] if self.renamings else None

    def prob_not_rename(self) -> float:
        """Share of the 2^-score mass held by the current name and UNK."""
        if not self.renamings:
            return 1.0
        scores = np.array([r.score for r in self.renamings])
        mass = np.exp2(-scores)
        keep = np.array([r.name in (self.name, UNK_SYMBOL) for r in self.renamings])
        total = float(mass.sum())
        if total == 0.0:
            return 1.0
        return float(mass[keep].sum()) / total


@dataclass
class SnippetSuggestions:
    """Suggestions for one code unit and its aggregate unnaturalness score."""

    unit: str
    suggestions: list[Suggestion] = field(default_factory=list)
    score: float = 0.0
    identifiers_scored: int = 0

    def log_prob_not_renaming(self) -> float:
        """log2 of the probability that no reported identifier needs renaming."""
        total = 0.0
        for suggestion in self.suggestions:
            prob = suggestion.prob_not_rename()
            if prob <= 0.0:
                return -math.inf
            total += math.log2(prob)
        return total
