"""Count store for n-grams, organised as a token trie."""

from __future__ import annotations

from collections.abc import Iterator, Sequence


class _Node:
    __slots__ = ("count", "children")

    def __init__(self) -> None:
        self.count = 0
        self.children: dict[str, _Node] = {}


class CountTrie:
    """Maps token sequences of length 1..N to occurrence counts.

    Each path from the root spells an n-gram; the node at its end holds the
    number of times that exact n-gram was recorded. The root count is the
    total number of unigrams recorded.
    """

    def __init__(self) -> None:
        self._root = _Node()

    @property
    def total(self) -> int:
        return self._root.count

    def add(self, ngram: Sequence[str], count: int = 1) -> None:
        """Record `count` occurrences of `ngram`."""
        node = self._root
        for token in ngram:
            child = node.children.get(token)
            if child is None:
                child = _Node()
                node.children[token] = child
            node = child
        node.count += count
        if len(ngram) == 1:
            self._root.count += count

    def count(self, ngram: Sequence[str]) -> int:
        node = self._find(ngram)
        return node.count if node is not None else 0

    def children(self, prefix: Sequence[str]) -> dict[str, int]:
        """Tokens seen directly after `prefix`, with the count of each extension."""
        node = self._find(prefix)
        if node is None:
            return {}
        return {tok: child.count for tok, child in node.children.items()}

    def merge(self, other: CountTrie) -> None:
        """Add every count from `other` into this trie."""
        self._root.count += other._root.count
        stack = [(self._root, other._root)]
        while stack:
            mine, theirs = stack.pop()
            for token, their_child in theirs.children.items():
                my_child = mine.children.get(token)
                if my_child is None:
                    my_child = _Node()
                    mine.children[token] = my_child
                my_child.count += their_child.count
                stack.append((my_child, their_child))

    def cutoff_rare(self, threshold: int) -> int:
        """Drop n-grams of length >= 2 seen `threshold` times or fewer.

        A node's count never exceeds that of its prefix node, so removing a
        node removes only rarer extensions with it. Returns the number of
        removed nodes.
        """
        removed = 0
        stack = list(self._root.children.values())
        while stack:
            node = stack.pop()
            for token in list(node.children):
                child = node.children[token]
                if child.count <= threshold:
                    removed += 1 + self._size(child)
                    del node.children[token]
                else:
                    stack.append(child)
        return removed

    def items(self) -> Iterator[tuple[tuple[str, ...], int]]:
        """Yield (ngram, count) for every recorded n-gram, in sorted order."""
        stack: list[tuple[tuple[str, ...], _Node]] = [
            ((tok,), child) for tok, child in sorted(self._root.children.items(), reverse=True)
        ]
        while stack:
            path, node = stack.pop()
            if node.count:
                yield path, node.count
            for tok, child in sorted(node.children.items(), reverse=True):
                stack.append((path + (tok,), child))

    def __len__(self) -> int:
        return self._size(self._root)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CountTrie):
            return NotImplemented
        return self.total == other.total and list(self.items()) == list(other.items())

    def _find(self, ngram: Sequence[str]) -> _Node | None:
        node = self._root
        for token in ngram:
            node = node.children.get(token)
            if node is None:
                return None
        return node

    @staticmethod
    def _size(node: _Node) -> int:
        size = 0
        stack = list(node.children.values())
        while stack:
            current = stack.pop()
            size += 1
            stack.extend(current.children.values())
        return size
