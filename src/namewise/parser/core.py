"""Core parser orchestration - selects the tokenizer and scope extractor for each file."""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path

from namewise.config import IndexerConfig
from namewise.exceptions import TokenizationError
from namewise.parser.models import Scope, ScopeKind, detect_language
from namewise.parser.tokenizer import PythonTokenizer, RegexTokenizer, Tokenizer


def get_tokenizer(language: str | None) -> Tokenizer:
    """Pick the most accurate tokenizer available for a language.

    - Python: stdlib tokenize (zero deps)
    - JS/TS, Go, Rust, Java: tree-sitter when the grammar is installed
    - Anything else, or a missing grammar: the regex tokenizer
    """
    if language == "python":
        return PythonTokenizer()

    from namewise.parser.tree_sitter_tokenizer import TreeSitterTokenizer, is_available

    if language and is_available(language):
        return TreeSitterTokenizer(language)
    return RegexTokenizer(language or "java")


def read_source(file_path: str | Path) -> str:
    try:
        return Path(file_path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise TokenizationError(f"Cannot read {file_path}: {e}") from e


def tokenize_file(file_path: str | Path) -> list[str]:
    """Tokenize a file with the tokenizer for its detected language."""
    return get_tokenizer(detect_language(str(file_path))).token_texts(read_source(file_path))


def tokenize_formatted_file(file_path: str | Path) -> list[str]:
    """Tokenize a file into code tokens interleaved with whitespace tokens."""
    from namewise.parser.formatting import FormattingTokenizer

    language = detect_language(str(file_path)) or "java"
    return FormattingTokenizer(language).token_texts(read_source(file_path))


def extract_scopes(
    source: str,
    file_path: str = "",
    language: str | None = None,
    variables: bool = True,
    methods: bool = True,
    types: bool = True,
) -> list[tuple[Scope, str]]:
    """Extract (scope, identifier) pairs from a source text.

    Python sources get per-function scopes from the ast extractor. Other
    languages have no scope extractor, so every distinct identifier is
    scoped to the whole file as a variable.
    """
    language = language or detect_language(file_path)
    if language == "python":
        from namewise.parser.scopes import PythonScopeExtractor

        extractor = PythonScopeExtractor(variables=variables, methods=methods, types=types)
        return extractor.extract(source, file_path)

    if not variables:
        return []
    tokenizer = get_tokenizer(language)
    first_seen: dict[str, int] = {}
    for tok in tokenizer.tokenize(source):
        if tokenizer.is_identifier(tok):
            first_seen.setdefault(tok.text, tok.line)
    return [
        (
            Scope(
                code=source,
                node_type="identifier",
                parent_node_type="file",
                kind=ScopeKind.VARIABLE,
                file_path=file_path,
                line=line,
            ),
            name,
        )
        for name, line in sorted(first_seen.items(), key=lambda kv: (kv[1], kv[0]))
    ]


def collect_files(root: str | Path, config: IndexerConfig | None = None) -> list[Path]:
    """Collect all supported source files under `root`, respecting exclusion patterns."""
    root = Path(root).resolve()
    if config is None:
        config = IndexerConfig()

    files = []
    max_size = config.max_file_size_kb * 1024
    all_exclude = config.exclude_patterns + _read_gitignore(root)

    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root)

        # Filter out excluded directories
        dirnames[:] = [
            d
            for d in dirnames
            if not _should_exclude(os.path.join(rel_dir, d) if rel_dir != "." else d, all_exclude)
        ]

        for filename in filenames:
            rel_path = os.path.join(rel_dir, filename) if rel_dir != "." else filename
            if _should_exclude(rel_path, all_exclude):
                continue

            lang = detect_language(filename)
            if lang is None:
                continue
            # Filter by configured languages (empty list = all)
            if config.languages and lang not in config.languages:
                continue

            full_path = Path(dirpath) / filename
            try:
                if full_path.stat().st_size > max_size:
                    continue
            except OSError:
                continue

            files.append(full_path)

    return sorted(files)


def _should_exclude(path: str, patterns: list[str]) -> bool:
    """Check if a path matches any exclusion pattern."""
    path_parts = Path(path).parts
    for pattern in patterns:
        if fnmatch.fnmatch(path, pattern):
            return True
        for part in path_parts:
            if fnmatch.fnmatch(part, pattern):
                return True
    return False


def _read_gitignore(root: Path) -> list[str]:
    """Read .gitignore patterns from the project root."""
    gitignore = root / ".gitignore"
    if not gitignore.exists():
        return []

    patterns = []
    try:
        for line in gitignore.read_text().splitlines():
            line = line.strip()
            if line and not line.startswith("#") and not line.startswith("!"):
                patterns.append(line.rstrip("/"))
    except OSError:
        pass
    return patterns
