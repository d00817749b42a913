"""N-gram language models over code tokens."""

from namewise.lm.interpolated import InterpolatedLanguageModel
from namewise.lm.model import NGramLanguageModel, TrainingReport
from namewise.lm.ngram import UNK_SYMBOL, WILDCARD_TOKEN, NGram
from namewise.lm.trie import CountTrie

__all__ = [
    "CountTrie",
    "InterpolatedLanguageModel",
    "NGram",
    "NGramLanguageModel",
    "TrainingReport",
    "UNK_SYMBOL",
    "WILDCARD_TOKEN",
]
