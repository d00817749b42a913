"""Context windows and candidate pools for identifier renaming."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from namewise.lm.ngram import UNK_SYMBOL, WILDCARD_TOKEN, NGram, windows_covering
from namewise.parser.tokenizer import Tokenizer


def wrapped(name: str) -> str:
    """The escaped form of a name inside a rewritten token, e.g. %count%."""
    return f"%{name}%"


def mark_occurrences(tokens: Sequence[str], name: str) -> tuple[list[str], list[int]]:
    """Replace every occurrence of `name` with the wildcard.

    A token matches when it equals the name or embeds its wrapped form.
    Inside a wrapped token only the bare name is replaced, so `get%cnt%`
    becomes `get%%WC%%` and a filler substitutes back to `get%count%`.

    Returns:
        The rewritten tokens and the positions that were rewritten.
    """
    marker = wrapped(name)
    rewritten: list[str] = []
    positions: list[int] = []
    for i, tok in enumerate(tokens):
        if tok == name:
            rewritten.append(WILDCARD_TOKEN)
            positions.append(i)
        elif marker in tok:
            rewritten.append(tok.replace(marker, wrapped(WILDCARD_TOKEN)))
            positions.append(i)
        else:
            rewritten.append(tok)
    return rewritten, positions


class CandidateGenerator:
    """Builds context multisets around an identifier and pools candidate names."""

    def __init__(self, model, tokenizer: Tokenizer, max_candidates: int = 1000) -> None:
        self.model = model
        self.tokenizer = tokenizer
        self.max_candidates = max_candidates

    def snippet_ngrams(self, code: str, name: str) -> Counter[NGram]:
        """Context n-grams around every occurrence of `name` in `code`."""
        tokens, positions = mark_occurrences(self.tokenizer.token_texts(code), name)
        return self.ngrams_at_positions(tokens, positions)

    def ngrams_at_positions(
        self, tokens: Sequence[str], positions: Sequence[int]
    ) -> Counter[NGram]:
        """Every window of up to N tokens covering each position.

        Windows shared by neighbouring occurrences are counted once per
        occurrence.
        """
        contexts: Counter[NGram] = Counter()
        for position in positions:
            contexts.update(windows_covering(position, tokens, self.model.order))
        return contexts

    def candidate_pool(self, contexts: Counter[NGram], name: str) -> list[str]:
        """The most frequent fillers of the contexts, plus `name` and UNK.

        The pool holds at most max_candidates + 2 names.
        """
        pool: list[str] = []
        if contexts:
            fillers = self.model.alternative_fillers(contexts, WILDCARD_TOKEN)
            ranked = sorted(fillers.items(), key=lambda kv: (-kv[1], kv[0]))
            pool = [filler for filler, _ in ranked[:self.max_candidates]]
        for extra in (name, UNK_SYMBOL):
            if extra not in pool:
                pool.append(extra)
        return pool
