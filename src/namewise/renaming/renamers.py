"""Identifier renaming strategies.

Every strategy scores a candidate name by substituting it into all
context windows around the identifier and averaging the negative log2
probabilities the language model assigns them. Prior strategies add a
penalty of -log2 P(name) per prior on top.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Sequence

import numpy as np

from namewise.exceptions import ModelError, ScoringError
from namewise.lm.interpolated import InterpolatedLanguageModel
from namewise.lm.model import NGramLanguageModel
from namewise.lm.ngram import WILDCARD_TOKEN, NGram
from namewise.parser.models import Scope
from namewise.parser.tokenizer import Tokenizer
from namewise.priors.base import Prior
from namewise.priors.grammar import GrammarPrior
from namewise.priors.typed import TypePrior
from namewise.renaming.candidates import CandidateGenerator, mark_occurrences, wrapped
from namewise.renaming.models import Renaming

logger = logging.getLogger("namewise.renaming")


class IdentifierRenamer:
    """Rank alternative names for an identifier using an n-gram model only."""

    # Average the cross-entropy over contexts; summed when False.
    average_scores = True

    def __init__(
        self,
        model: NGramLanguageModel | InterpolatedLanguageModel,
        tokenizer: Tokenizer,
        max_candidates: int = 1000,
    ) -> None:
        self.model = model
        self.tokenizer = tokenizer
        self.generator = CandidateGenerator(model, tokenizer, max_candidates)

    def rank(self, scope: Scope, name: str) -> list[Renaming]:
        """Rank candidate names for `name` inside `scope`.

        Args:
            scope: The snippet the identifier lives in.
            name: The identifier's current name.

        Returns:
            Renamings sorted ascending by (score, name). The current name
            and UNK are always among the candidates.
        """
        contexts = self.generator.snippet_ngrams(scope.code, name)
        return self._rank_contexts(contexts, name, scope)

    def rank_positions(
        self,
        tokens: Sequence[str],
        positions: Sequence[int],
        name: str,
        scope: Scope | None = None,
    ) -> list[Renaming]:
        """Rank candidates for an identifier bound at explicit token positions."""
        rewritten = list(tokens)
        marker = wrapped(name)
        for position in positions:
            tok = rewritten[position]
            rewritten[position] = (
                tok.replace(marker, wrapped(WILDCARD_TOKEN)) if marker in tok else WILDCARD_TOKEN
            )
        contexts = self.generator.ngrams_at_positions(rewritten, positions)
        return self._rank_contexts(contexts, name, scope)

    def rank_tokens(self, tokens: Sequence[str], name: str) -> list[Renaming]:
        """Rank candidates for every occurrence of `name` in a token sequence."""
        rewritten, positions = mark_occurrences(tokens, name)
        contexts = self.generator.ngrams_at_positions(rewritten, positions)
        return self._rank_contexts(contexts, name, None)

    def _rank_contexts(
        self, contexts: Counter[NGram], name: str, scope: Scope | None
    ) -> list[Renaming]:
        candidates = self.generator.candidate_pool(contexts, name)
        if not contexts:
            # No occurrence to score against: fall back to the unigram probability.
            unigram = Counter({NGram((WILDCARD_TOKEN,)): 1})
            return self.calculate_scores(unigram, candidates, scope, n_contexts=0)
        return self.calculate_scores(contexts, candidates, scope)

    def calculate_scores(
        self,
        contexts: Counter[NGram],
        candidates: Sequence[str],
        scope: Scope | None = None,
        n_contexts: int | None = None,
    ) -> list[Renaming]:
        """Score every candidate against the context multiset.

        A candidate whose scoring raises is logged and left out.

        Raises:
            ModelError: If the model has not been trained.
            ScoringError: If `contexts` is empty.
        """
        if not self.model.is_trained:
            raise ModelError("Language model has not been trained")
        if not contexts:
            raise ScoringError("No context n-grams to score candidates against")
        ngrams = list(contexts)
        weights = np.array([contexts[ng] for ng in ngrams], dtype=float)
        total = float(weights.sum())
        if n_contexts is None:
            n_contexts = int(total)

        renamings: list[Renaming] = []
        for candidate in candidates:
            try:
                probs = np.array(
                    [self.model.probability(ng.substitute(candidate)) for ng in ngrams]
                )
                cross_entropy = -float(np.log2(probs) @ weights)
                score = cross_entropy + self.prior_penalty(candidate, scope)
                if self.average_scores:
                    score /= total
            except Exception:
                logger.warning(f"Skipping candidate {candidate!r}", exc_info=True)
                continue
            renamings.append(Renaming(score, candidate, n_contexts, scope))
        return sorted(renamings)

    def prior_penalty(self, candidate: str, scope: Scope | None) -> float:
        """Extra cross-entropy a strategy adds for `candidate`. Zero by default."""
        return 0.0


class PriorRenamer(IdentifierRenamer):
    """Adds -log2 P(name) from each prior to the n-gram score.

    A prior that gives a candidate zero probability adds `penalty` instead,
    except for names the language model maps to UNK, which score like UNK
    and are never penalised.
    """

    def __init__(
        self,
        model: NGramLanguageModel | InterpolatedLanguageModel,
        tokenizer: Tokenizer,
        priors: Sequence[Prior] = (),
        max_candidates: int = 1000,
        penalty: float = 6.0,
    ) -> None:
        super().__init__(model, tokenizer, max_candidates)
        self.priors = list(priors)
        self.penalty = penalty

    def prior_penalty(self, candidate: str, scope: Scope | None) -> float:
        total = 0.0
        for prior in self.priors:
            prob = prior.probability(candidate, scope)
            if prob > 0:
                total -= math.log2(prob)
            elif not self.model.is_unknown(candidate):
                total += self.penalty
        return total


class GrammarPriorRenamer(PriorRenamer):
    """N-gram score plus a prior on names given their syntactic position."""

    def __init__(
        self,
        model: NGramLanguageModel | InterpolatedLanguageModel,
        tokenizer: Tokenizer,
        grammar_prior: GrammarPrior,
        max_candidates: int = 1000,
        penalty: float = 6.0,
    ) -> None:
        super().__init__(model, tokenizer, [grammar_prior], max_candidates, penalty)


class TypePriorRenamer(PriorRenamer):
    """N-gram score plus a prior on names given their declared type."""

    def __init__(
        self,
        model: NGramLanguageModel | InterpolatedLanguageModel,
        tokenizer: Tokenizer,
        type_prior: TypePrior,
        max_candidates: int = 1000,
        penalty: float = 6.0,
    ) -> None:
        super().__init__(model, tokenizer, [type_prior], max_candidates, penalty)


class AllPriorRenamer(PriorRenamer):
    """Grammar and type priors together, each switchable.

    With both switched off this ranks exactly like IdentifierRenamer.
    """

    def __init__(
        self,
        model: NGramLanguageModel | InterpolatedLanguageModel,
        tokenizer: Tokenizer,
        grammar_prior: GrammarPrior | None = None,
        type_prior: TypePrior | None = None,
        use_grammar: bool = True,
        use_types: bool = True,
        max_candidates: int = 1000,
        penalty: float = 6.0,
    ) -> None:
        priors: list[Prior] = []
        if use_grammar and grammar_prior is not None:
            priors.append(grammar_prior)
        if use_types and type_prior is not None:
            priors.append(type_prior)
        super().__init__(model, tokenizer, priors, max_candidates, penalty)


class InterpolatedRenamer(IdentifierRenamer):
    """Scores against a local model interpolated with a shared global model.

    The global model is owned by the caller and only read here.
    """

    def __init__(
        self,
        global_model: NGramLanguageModel,
        local_model: NGramLanguageModel,
        tokenizer: Tokenizer,
        global_weight: float = 0.2,
        max_candidates: int = 1000,
    ) -> None:
        model = InterpolatedLanguageModel(global_model, local_model, global_weight)
        super().__init__(model, tokenizer, max_candidates)
