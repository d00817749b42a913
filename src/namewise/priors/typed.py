"""Name prior conditioned on the declared type of the identifier."""

from __future__ import annotations

from collections.abc import Iterable

from namewise.parser.models import Scope
from namewise.priors.base import ConditionalDistribution


class TypePrior:
    """P(name | declared type). Scopes without a known type give 1."""

    def __init__(self, distribution: ConditionalDistribution | None = None) -> None:
        self.distribution = distribution or ConditionalDistribution()

    @classmethod
    def build(cls, identifiers: Iterable[tuple[Scope, str]]) -> TypePrior:
        prior = cls()
        for scope, name in identifiers:
            if scope.type_name:
                prior.distribution.add(name, scope.type_name)
        return prior

    def probability(self, name: str, scope: Scope | None) -> float:
        if scope is None or not scope.type_name:
            return 1.0
        return self.distribution.probability(name, scope.type_name)

    def most_likely_name(self, type_name: str) -> str | None:
        return self.distribution.most_likely(type_name)

    def to_dict(self) -> dict:
        return self.distribution.to_dict()

    @classmethod
    def from_dict(cls, data: dict) -> TypePrior:
        return cls(ConditionalDistribution.from_dict(data))
