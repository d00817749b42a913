"""Conditional name distributions used as scoring priors."""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Hashable
from typing import Protocol

from namewise.parser.models import Scope


class Prior(Protocol):
    """Anything that gives a probability for a name in a scope."""

    def probability(self, name: str, scope: Scope | None) -> float: ...


class ConditionalDistribution:
    """Maximum-likelihood estimate of P(element | given) from counts."""

    def __init__(self) -> None:
        self._counts: dict[Hashable, Counter[str]] = defaultdict(Counter)

    def add(self, element: str, given: Hashable, count: int = 1) -> None:
        self._counts[given][element] += count

    def probability(self, element: str, given: Hashable) -> float:
        counts = self._counts.get(given)
        if not counts:
            return 0.0
        return counts[element] / sum(counts.values())

    def most_likely(self, given: Hashable) -> str | None:
        counts = self._counts.get(given)
        if not counts:
            return None
        return min(counts.items(), key=lambda kv: (-kv[1], kv[0]))[0]

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {str(given): dict(counts) for given, counts in self._counts.items()}

    @classmethod
    def from_dict(cls, data: dict[str, dict[str, int]]) -> ConditionalDistribution:
        dist = cls()
        for given, counts in data.items():
            for element, count in counts.items():
                dist.add(element, given, count)
        return dist

    def __len__(self) -> int:
        return len(self._counts)
