"""Name priors: independent distributions added to the n-gram score."""

from namewise.priors.base import ConditionalDistribution, Prior
from namewise.priors.grammar import GrammarPrior
from namewise.priors.typed import TypePrior

__all__ = ["ConditionalDistribution", "GrammarPrior", "Prior", "TypePrior"]
