"""Persistent storage for trained models using SQLite.

Tokens are interned (stored once, referenced by integer) and every
recorded n-gram is one row keyed by its token-id path. Priors and model
parameters live in the metadata table as JSON.
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any

from namewise.exceptions import StoreError
from namewise.lm.model import NGramLanguageModel
from namewise.lm.trie import CountTrie
from namewise.priors.grammar import GrammarPrior
from namewise.priors.typed import TypePrior

_MODEL_KEYS = ("order", "backoff_factor", "vocabulary_cutoff", "ngram_cutoff")


class ModelStore:
    """Persists and loads a trained n-gram model and its priors."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                self._conn = sqlite3.connect(str(self.db_path))
                self._conn.row_factory = sqlite3.Row
                self._create_tables(self._conn)
            except sqlite3.DatabaseError as e:
                self._conn = None
                raise StoreError(f"Cannot open model store {self.db_path}: {e}") from e
        return self._conn

    @staticmethod
    def _create_tables(conn: sqlite3.Connection) -> None:
        conn.executescript("""
            -- Intern tokens (stored once, referenced by integer)
            CREATE TABLE IF NOT EXISTS token_map (
                tid INTEGER PRIMARY KEY,
                token TEXT UNIQUE NOT NULL,
                in_vocabulary INTEGER NOT NULL DEFAULT 0
            );

            -- One row per recorded n-gram; path is space-separated token ids
            CREATE TABLE IF NOT EXISTS ngrams (
                path TEXT PRIMARY KEY,
                length INTEGER NOT NULL,
                count INTEGER NOT NULL
            );

            CREATE TABLE IF NOT EXISTS metadata (
                key TEXT PRIMARY KEY,
                value TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_ngrams_length ON ngrams(length);
        """)
        conn.commit()

    # ------------------------------------------------------------------
    # Save / Load
    # ------------------------------------------------------------------

    def save(
        self,
        model: NGramLanguageModel,
        grammar_prior: GrammarPrior | None = None,
        type_prior: TypePrior | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Replace the stored model with `model` and its priors."""
        if not model.is_trained:
            raise StoreError("Cannot store an untrained model")
        conn = self._get_conn()
        conn.execute("DELETE FROM ngrams")
        conn.execute("DELETE FROM token_map")
        conn.execute("DELETE FROM metadata")

        token_cache: dict[str, int] = {}

        def intern(token: str) -> int:
            tid = token_cache.get(token)
            if tid is None:
                tid = len(token_cache) + 1
                token_cache[token] = tid
            return tid

        for token in sorted(model.vocabulary):
            intern(token)
        rows = []
        for ngram, count in model.trie.items():
            path = " ".join(str(intern(tok)) for tok in ngram)
            rows.append((path, len(ngram), count))

        conn.executemany(
            "INSERT INTO token_map (tid, token, in_vocabulary) VALUES (?, ?, ?)",
            [
                (tid, token, int(token in model.vocabulary))
                for token, tid in token_cache.items()
            ],
        )
        conn.executemany("INSERT INTO ngrams (path, length, count) VALUES (?, ?, ?)", rows)

        values: dict[str, Any] = {key: getattr(model, key) for key in _MODEL_KEYS}
        if grammar_prior is not None:
            values["grammar_prior"] = grammar_prior.to_dict()
        if type_prior is not None:
            values["type_prior"] = type_prior.to_dict()
        values.update(metadata or {})
        conn.executemany(
            "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
            [(key, json.dumps(value)) for key, value in values.items()],
        )
        conn.commit()

    def load_model(self) -> NGramLanguageModel:
        """Rebuild the stored model.

        Raises:
            StoreError: If the store holds no model.
        """
        params = {key: self.get_metadata(key) for key in _MODEL_KEYS}
        if params["order"] is None:
            raise StoreError(f"No trained model in {self.db_path}. Run 'namewise train' first.")

        conn = self._get_conn()
        tid_to_token: dict[int, str] = {}
        vocabulary: list[str] = []
        for row in conn.execute("SELECT tid, token, in_vocabulary FROM token_map"):
            tid_to_token[row["tid"]] = row["token"]
            if row["in_vocabulary"]:
                vocabulary.append(row["token"])

        trie = CountTrie()
        try:
            for row in conn.execute("SELECT path, count FROM ngrams ORDER BY length"):
                trie.add([tid_to_token[int(tid)] for tid in row["path"].split()], row["count"])
        except (KeyError, ValueError) as e:
            raise StoreError(f"Corrupt model store {self.db_path}: {e}") from e

        return NGramLanguageModel.from_counts(
            trie,
            vocabulary,
            order=params["order"],
            backoff_factor=params["backoff_factor"],
            vocabulary_cutoff=params["vocabulary_cutoff"] or 0,
            ngram_cutoff=params["ngram_cutoff"] or 0,
        )

    def load_priors(self) -> tuple[GrammarPrior | None, TypePrior | None]:
        grammar = self.get_metadata("grammar_prior")
        types = self.get_metadata("type_prior")
        return (
            GrammarPrior.from_dict(grammar) if grammar is not None else None,
            TypePrior.from_dict(types) if types is not None else None,
        )

    def has_model(self) -> bool:
        return self.get_metadata("order") is not None

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def set_metadata(self, key: str, value: Any) -> None:
        conn = self._get_conn()
        conn.execute(
            "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
            (key, json.dumps(value)),
        )
        conn.commit()

    def get_metadata(self, key: str, default: Any = None) -> Any:
        conn = self._get_conn()
        row = conn.execute("SELECT value FROM metadata WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        return json.loads(row["value"])

    def get_stats(self) -> dict[str, int]:
        """Row counts for status reporting."""
        conn = self._get_conn()
        tokens = conn.execute("SELECT COUNT(*) AS cnt FROM token_map").fetchone()["cnt"]
        vocab = conn.execute(
            "SELECT COUNT(*) AS cnt FROM token_map WHERE in_vocabulary = 1"
        ).fetchone()["cnt"]
        ngrams = conn.execute("SELECT COUNT(*) AS cnt FROM ngrams").fetchone()["cnt"]
        return {"tokens": tokens, "vocabulary": vocab, "ngrams": ngrams}

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None
