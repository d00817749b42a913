"""Backoff-smoothed n-gram language model over code tokens."""

from __future__ import annotations

import logging
import os
from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from namewise.config import ModelConfig
from namewise.exceptions import ConfigError, ModelError
from namewise.lm.ngram import UNK_SYMBOL, WILDCARD_TOKEN, NGram, construct_ngram_at
from namewise.lm.trie import CountTrie

logger = logging.getLogger("namewise.lm")


@dataclass
class TrainingReport:
    """What happened while training a model."""

    units_trained: int = 0
    failures: dict[str, str] = field(default_factory=dict)  # unit label -> error
    vocabulary_size: int = 0
    distinct_ngrams: int = 0
    pruned_ngrams: int = 0

    @property
    def units_failed(self) -> int:
        return len(self.failures)


def count_ngrams(
    units: Sequence[Sequence[str]], order: int, vocabulary: frozenset[str]
) -> CountTrie:
    """Count every n-gram of length 1..order ending at every position of every unit.

    Tokens outside `vocabulary` are recorded as UNK. Module-level so it can
    run in a worker process.
    """
    trie = CountTrie()
    for tokens in units:
        mapped = [tok if tok in vocabulary else UNK_SYMBOL for tok in tokens]
        for end in range(len(mapped)):
            longest = construct_ngram_at(end, mapped, order)
            for size in range(1, len(longest) + 1):
                trie.add(longest[-size:])
    return trie


def _unit_label(index: int, unit: Any) -> str:
    if isinstance(unit, (str, Path)) and len(str(unit)) < 256 and "\n" not in str(unit):
        return str(unit)
    return f"unit #{index}"


class NGramLanguageModel:
    """An n-gram model with stupid-backoff smoothing.

    The probability of an n-gram is its maximum-likelihood estimate
    count(ngram) / count(prefix). An unseen n-gram backs off to its
    (n-1)-suffix, discounted by `backoff_factor` at each step. Unigrams use
    add-one smoothing over the vocabulary plus UNK, so every query has a
    strictly positive probability.

    A model is trained exactly once; afterwards it is read-only and safe to
    query from many threads.
    """

    def __init__(
        self,
        order: int = 5,
        backoff_factor: float = 0.4,
        vocabulary_cutoff: int = 1,
        ngram_cutoff: int = 0,
    ) -> None:
        if order < 1:
            raise ConfigError(f"n-gram order must be positive, got {order}")
        if not 0.0 < backoff_factor < 1.0:
            raise ConfigError(f"backoff factor must be in (0, 1), got {backoff_factor}")
        if vocabulary_cutoff < 0 or ngram_cutoff < 0:
            raise ConfigError("cut-off thresholds must be non-negative")
        self.order = order
        self.backoff_factor = backoff_factor
        self.vocabulary_cutoff = vocabulary_cutoff
        self.ngram_cutoff = ngram_cutoff
        self._trie = CountTrie()
        self._vocabulary: frozenset[str] = frozenset()
        self._trained = False

    @classmethod
    def from_config(cls, config: ModelConfig) -> NGramLanguageModel:
        return cls(
            order=config.order,
            backoff_factor=config.backoff_factor,
            vocabulary_cutoff=config.vocabulary_cutoff,
            ngram_cutoff=config.ngram_cutoff,
        )

    @classmethod
    def from_counts(
        cls,
        trie: CountTrie,
        vocabulary: Iterable[str],
        order: int,
        backoff_factor: float,
        vocabulary_cutoff: int = 1,
        ngram_cutoff: int = 0,
    ) -> NGramLanguageModel:
        """Rebuild a trained model from previously computed counts."""
        model = cls(order, backoff_factor, vocabulary_cutoff, ngram_cutoff)
        model._trie = trie
        model._vocabulary = frozenset(vocabulary)
        model._trained = True
        return model

    @property
    def is_trained(self) -> bool:
        return self._trained

    @property
    def vocabulary(self) -> frozenset[str]:
        return self._vocabulary

    @property
    def trie(self) -> CountTrie:
        return self._trie

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def train(
        self,
        corpus: Iterable[Any],
        tokenize: Callable[[Any], Sequence[str]] | None = None,
        workers: int = 1,
        mode: str = "threads",
    ) -> TrainingReport:
        """Train the model on a corpus of units.

        Args:
            corpus: Units to train on. Either token sequences, or anything
                `tokenize` accepts (file paths, source strings).
            tokenize: Optional callable turning a unit into tokens. A unit
                whose tokenization raises is skipped and reported.
            workers: Number of parallel counting workers.
            mode: "threads" or "processes".

        Returns:
            A report listing trained and failed units.

        Raises:
            ModelError: If the model was already trained.
        """
        if self._trained:
            raise ModelError("Model is already trained; build a new model to retrain")

        report = TrainingReport()
        units: list[list[str]] = []
        for i, unit in enumerate(corpus):
            if tokenize is None:
                units.append(list(unit))
                continue
            try:
                units.append(list(tokenize(unit)))
            except Exception as e:
                label = _unit_label(i, unit)
                logger.warning(f"Skipping {label}: {e}", exc_info=True)
                report.failures[label] = str(e)

        if not units:
            logger.warning("Training corpus is empty; model only knows UNK")

        logger.info("Building vocabulary...")
        frequencies: Counter[str] = Counter()
        for tokens in units:
            frequencies.update(tokens)
        self._vocabulary = frozenset(
            tok for tok, n in frequencies.items()
            if n > self.vocabulary_cutoff and tok != UNK_SYMBOL
        )

        logger.info(f"Vocabulary built ({len(self._vocabulary)} tokens). Counting n-grams...")
        self._trie = self._count_parallel(units, workers, mode)

        if self.ngram_cutoff > 0:
            report.pruned_ngrams = self._trie.cutoff_rare(self.ngram_cutoff)

        self._trained = True
        report.units_trained = len(units)
        report.vocabulary_size = len(self._vocabulary)
        report.distinct_ngrams = len(self._trie)
        return report

    def _count_parallel(
        self, units: list[list[str]], workers: int, mode: str
    ) -> CountTrie:
        if workers <= 1 or len(units) < 2:
            return count_ngrams(units, self.order, self._vocabulary)

        workers = min(workers, os.cpu_count() or workers, len(units))
        chunk = -(-len(units) // workers)
        chunks = [units[i:i + chunk] for i in range(0, len(units), chunk)]

        exec_cls = ThreadPoolExecutor if mode == "threads" else ProcessPoolExecutor
        merged = CountTrie()
        with exec_cls(max_workers=workers) as ex:
            futures = [
                ex.submit(count_ngrams, part, self.order, self._vocabulary)
                for part in chunks
            ]
            # Partial stores are merged only after every worker has finished.
            partials = [f.result() for f in futures]
        for partial in partials:
            merged.merge(partial)
        return merged

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_unknown(self, token: str) -> bool:
        """True if `token` collapses to UNK under this model."""
        return token not in self._vocabulary

    def map_unknown(self, ngram: Sequence[str]) -> NGram:
        """Replace out-of-vocabulary tokens with UNK."""
        return NGram([tok if tok in self._vocabulary else UNK_SYMBOL for tok in ngram])

    def probability(self, ngram: Sequence[str]) -> float:
        """Smoothed probability of the last token of `ngram` given the others."""
        self._check_trained()
        mapped = self.map_unknown(ngram).last(self.order)
        return self._backoff(mapped)

    def _backoff(self, ngram: NGram) -> float:
        discount = 1.0
        while len(ngram) > 1:
            count = self._trie.count(ngram)
            if count > 0:
                return discount * count / self._trie.count(ngram.prefix)
            discount *= self.backoff_factor
            ngram = ngram.suffix
        return discount * self._unigram(ngram[0])

    def _unigram(self, token: str) -> float:
        return (self._trie.count((token,)) + 1) / (
            self._trie.total + len(self._vocabulary) + 1
        )

    def alternative_fillers(
        self,
        contexts: Mapping[Sequence[str], int],
        wildcard: str = WILDCARD_TOKEN,
    ) -> Counter[str]:
        """Tokens seen in training at the wildcard position of the given contexts.

        Each filler is weighted by its training count in the completed
        n-gram times the multiplicity of the context. When a context holds
        the wildcard more than once, the filler must fit every position.
        UNK and the wildcard itself are never returned.
        """
        self._check_trained()
        fillers: Counter[str] = Counter()
        for ngram, weight in contexts.items():
            for filler, count in self._fillers_for(NGram(ngram), wildcard).items():
                fillers[filler] += count * weight
        fillers.pop(UNK_SYMBOL, None)
        fillers.pop(wildcard, None)
        return fillers

    def _fillers_for(self, ngram: NGram, wildcard: str) -> dict[str, int]:
        ngram = ngram.last(self.order)
        positions = ngram.wildcard_positions(wildcard)
        if not positions:
            return {}
        first = positions[0]
        prefix = self.map_unknown(ngram[:first]) if first else ()
        pre, _, post = ngram[first].partition(wildcard)

        found: dict[str, int] = {}
        for token in self._trie.children(prefix):
            filler = _extract_filler(token, pre, post)
            if not filler or filler == UNK_SYMBOL:
                continue
            completed = self.map_unknown(ngram.substitute(filler, wildcard))
            count = self._trie.count(completed)
            if count:
                found[filler] = count
        return found

    def _check_trained(self) -> None:
        if not self._trained:
            raise ModelError("Language model has not been trained")


def _extract_filler(token: str, pre: str, post: str) -> str | None:
    if not (token.startswith(pre) and token.endswith(post)):
        return None
    if len(token) <= len(pre) + len(post):
        return None
    return token[len(pre):len(token) - len(post)]
