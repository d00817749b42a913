"""Linear interpolation between a shared global model and a local model."""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping, Sequence

from namewise.exceptions import ConfigError, ModelError
from namewise.lm.model import NGramLanguageModel
from namewise.lm.ngram import WILDCARD_TOKEN, NGram


class InterpolatedLanguageModel:
    """P(ngram) = w * P_global(ngram) + (1 - w) * P_local(ngram).

    The global model is typically trained once on a large corpus and shared
    by reference between many interpolated models; it is never copied or
    mutated here. Vocabulary, UNK handling and alternative fillers come from
    the local model. Interpolated models cannot be trained.
    """

    def __init__(
        self,
        global_model: NGramLanguageModel,
        local_model: NGramLanguageModel,
        global_weight: float = 0.2,
    ) -> None:
        if not 0.0 <= global_weight <= 1.0:
            raise ConfigError(f"interpolation weight must be in [0, 1], got {global_weight}")
        if not (global_model.is_trained and local_model.is_trained):
            raise ModelError("Both models must be trained before interpolation")
        self.global_model = global_model
        self.local_model = local_model
        self.global_weight = global_weight

    @property
    def order(self) -> int:
        return self.local_model.order

    @property
    def is_trained(self) -> bool:
        return True

    @property
    def vocabulary(self) -> frozenset[str]:
        return self.local_model.vocabulary

    def train(self, *args, **kwargs):
        raise ModelError("InterpolatedLanguageModel cannot be trained")

    def is_unknown(self, token: str) -> bool:
        return self.local_model.is_unknown(token)

    def probability(self, ngram: Sequence[str]) -> float:
        pruned = NGram(ngram).last(self.global_model.order)
        return (
            self.global_weight * self.global_model.probability(pruned)
            + (1.0 - self.global_weight) * self.local_model.probability(ngram)
        )

    def alternative_fillers(
        self,
        contexts: Mapping[Sequence[str], int],
        wildcard: str = WILDCARD_TOKEN,
    ) -> Counter[str]:
        return self.local_model.alternative_fillers(contexts, wildcard)
