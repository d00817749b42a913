"""Tests for the SQLite model store."""

from __future__ import annotations

from pathlib import Path

import pytest

from namewise.exceptions import StoreError
from namewise.lm.model import NGramLanguageModel
from namewise.lm.store import ModelStore
from namewise.parser.models import Scope
from namewise.priors.grammar import GrammarPrior
from namewise.priors.typed import TypePrior


@pytest.fixture
def store(tmp_path: Path):
    store = ModelStore(tmp_path / ".namewise" / "model.db")
    yield store
    store.close()


class TestModelStore:
    def test_round_trip(self, store: ModelStore, count_model: NGramLanguageModel):
        store.save(count_model)
        loaded = store.load_model()
        assert loaded.trie == count_model.trie
        assert loaded.vocabulary == count_model.vocabulary
        assert loaded.order == count_model.order
        assert loaded.backoff_factor == count_model.backoff_factor
        for ngram in [("int", "count"), ("int", "cnt", "="), ("never",)]:
            assert loaded.probability(ngram) == count_model.probability(ngram)

    def test_priors_round_trip(self, store: ModelStore, count_model: NGramLanguageModel):
        scope = Scope(code="", node_type="Assign", type_name="int")
        grammar = GrammarPrior.build([(scope, "count")])
        types = TypePrior.build([(scope, "count")])
        store.save(count_model, grammar, types, metadata={"files": 3})

        loaded_grammar, loaded_types = store.load_priors()
        assert loaded_grammar.probability("count", scope) == 1.0
        assert loaded_types.most_likely_name("int") == "count"
        assert store.get_metadata("files") == 3

    def test_missing_priors(self, store: ModelStore, count_model: NGramLanguageModel):
        store.save(count_model)
        assert store.load_priors() == (None, None)

    def test_save_replaces_previous_model(self, store: ModelStore, count_model):
        other = NGramLanguageModel(order=2, vocabulary_cutoff=0)
        other.train([["a", "b"]])
        store.save(count_model)
        store.save(other)
        loaded = store.load_model()
        assert loaded.order == 2
        assert loaded.vocabulary == frozenset({"a", "b"})
        assert loaded.trie == other.trie

    def test_empty_store(self, store: ModelStore):
        assert not store.has_model()
        with pytest.raises(StoreError):
            store.load_model()

    def test_untrained_model_rejected(self, store: ModelStore):
        with pytest.raises(StoreError):
            store.save(NGramLanguageModel())

    def test_stats(self, store: ModelStore, count_model: NGramLanguageModel):
        store.save(count_model)
        stats = store.get_stats()
        assert stats["ngrams"] == len(list(count_model.trie.items()))
        assert stats["vocabulary"] == len(count_model.vocabulary)
        assert store.has_model()
