"""N-gram value type and context-window helpers."""

from __future__ import annotations

from collections.abc import Sequence

WILDCARD_TOKEN = "%WC%"
UNK_SYMBOL = "UNK_SYMBOL"


class NGram(tuple):
    """An immutable, non-empty sequence of tokens.

    Behaves like a tuple (hashable, comparable), so n-grams can be used
    directly as multiset keys.
    """

    __slots__ = ()

    def __new__(cls, tokens: Sequence[str]) -> NGram:
        if len(tokens) == 0:
            raise ValueError("An n-gram must contain at least one token")
        return super().__new__(cls, tokens)

    @property
    def prefix(self) -> NGram | None:
        """All tokens but the last, or None for a unigram."""
        if len(self) == 1:
            return None
        return NGram(self[:-1])

    @property
    def suffix(self) -> NGram | None:
        """All tokens but the first (the backoff context), or None for a unigram."""
        if len(self) == 1:
            return None
        return NGram(self[1:])

    def last(self, size: int) -> NGram:
        """Keep at most the last `size` tokens."""
        if len(self) <= size:
            return self
        return NGram(self[len(self) - size:])

    def wildcard_positions(self, wildcard: str = WILDCARD_TOKEN) -> list[int]:
        """Indexes of tokens that are, or embed, the wildcard."""
        return [i for i, tok in enumerate(self) if wildcard in tok]

    def substitute(self, replacement: str, wildcard: str = WILDCARD_TOKEN) -> NGram:
        """Replace the wildcard (also inside wrapped tokens) with `replacement`."""
        return NGram([tok.replace(wildcard, replacement) for tok in self])

    def __repr__(self) -> str:
        return f"NGram({' '.join(self)})"


def construct_ngram_at(position: int, tokens: Sequence[str], size: int) -> NGram:
    """The n-gram of at most `size` tokens ending at `position`, clipped at the start."""
    start = max(0, position - size + 1)
    return NGram(tokens[start:position + 1])


def windows_covering(position: int, tokens: Sequence[str], size: int) -> list[NGram]:
    """Every window of at most `size` tokens that contains `position`.

    Windows are clipped at both ends of the sequence; clipped windows are
    kept because they carry the boundary context.
    """
    windows = []
    for start in range(position - size + 1, position + 1):
        lo = max(0, start)
        hi = min(len(tokens), start + size)
        windows.append(NGram(tokens[lo:hi]))
    return windows
