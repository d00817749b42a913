"""Ranked rename candidates."""

from __future__ import annotations

from dataclasses import dataclass, field

from namewise.lm.ngram import UNK_SYMBOL
from namewise.parser.models import Scope


@dataclass(frozen=True, order=True)
class Renaming:
    """A candidate name and its cross-entropy score (lower is more natural).

    Renamings compare by (score, name) only, which gives a deterministic
    total order over a ranked set.
    """

    score: float
    name: str
    n_contexts: int = field(default=0, compare=False)
    scope: Scope | None = field(default=None, compare=False, repr=False)

    @property
    def is_unk(self) -> bool:
        return self.name == UNK_SYMBOL
