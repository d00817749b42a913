"""Shared test fixtures for Namewise."""

from __future__ import annotations

from pathlib import Path

import pytest

from namewise.lm.model import NGramLanguageModel
from namewise.parser.models import Scope
from namewise.parser.tokenizer import RegexTokenizer

COUNT_SNIPPET = "int count = 0; count = count + 1;"
CNT_SNIPPET = "int cnt = 0; cnt = cnt + 1;"


@pytest.fixture
def java_tokenizer() -> RegexTokenizer:
    return RegexTokenizer("java")


@pytest.fixture
def count_corpus(java_tokenizer: RegexTokenizer) -> list[list[str]]:
    """100 units naming the counter `count` and one naming it `cnt`."""
    count_tokens = java_tokenizer.token_texts(COUNT_SNIPPET)
    cnt_tokens = java_tokenizer.token_texts(CNT_SNIPPET)
    return [list(count_tokens) for _ in range(100)] + [list(cnt_tokens)]


@pytest.fixture
def count_model(count_corpus: list[list[str]]) -> NGramLanguageModel:
    model = NGramLanguageModel(order=5)
    model.train(count_corpus)
    return model


@pytest.fixture
def cnt_scope() -> Scope:
    return Scope(code=CNT_SNIPPET, node_type="LocalVariable", parent_node_type="Method")


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create a temporary project directory with sample Python files."""
    (tmp_path / "orders.py").write_text('''"""Order totals."""


def order_total(items, tax_rate):
    total = 0
    for item in items:
        total = total + item.price
    return total * (1 + tax_rate)


def order_count(items):
    count = 0
    for item in items:
        count = count + 1
    return count
''')

    (tmp_path / "invoices.py").write_text('''"""Invoice totals."""


def invoice_total(lines, tax_rate):
    total = 0
    for line in lines:
        total = total + line.price
    return total * (1 + tax_rate)


def invoice_count(lines):
    count = 0
    for line in lines:
        count = count + 1
    return count
''')

    (tmp_path / "carts.py").write_text('''"""Shopping carts."""


class Cart:
    def __init__(self, items):
        self.items = items

    def cart_total(self, tax_rate):
        t = 0
        for item in self.items:
            t = t + item.price
        return t * (1 + tax_rate)
''')

    return tmp_path
