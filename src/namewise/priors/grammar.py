"""Name prior conditioned on the syntactic position of the identifier."""

from __future__ import annotations

from collections.abc import Iterable

from namewise.parser.models import Scope
from namewise.priors.base import ConditionalDistribution


class GrammarPrior:
    """P(name | node type) * P(name | parent node type).

    The node type and the parent node type are treated as independent
    evidence.
    """

    def __init__(
        self,
        node_prior: ConditionalDistribution | None = None,
        parent_prior: ConditionalDistribution | None = None,
    ) -> None:
        self.node_prior = node_prior or ConditionalDistribution()
        self.parent_prior = parent_prior or ConditionalDistribution()

    @classmethod
    def build(cls, identifiers: Iterable[tuple[Scope, str]]) -> GrammarPrior:
        """Count names per syntactic category from scope extractor output."""
        prior = cls()
        for scope, name in identifiers:
            prior.node_prior.add(name, scope.node_type)
            prior.parent_prior.add(name, scope.parent_node_type)
        return prior

    def probability(self, name: str, scope: Scope | None) -> float:
        if scope is None:
            return 1.0
        return self.node_prior.probability(name, scope.node_type) * (
            self.parent_prior.probability(name, scope.parent_node_type)
        )

    def to_dict(self) -> dict:
        return {"node": self.node_prior.to_dict(), "parent": self.parent_prior.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> GrammarPrior:
        return cls(
            ConditionalDistribution.from_dict(data.get("node", {})),
            ConditionalDistribution.from_dict(data.get("parent", {})),
        )
