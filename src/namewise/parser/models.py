"""Data models for tokens and identifier scopes."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class TokenKind(str, Enum):
    """Lexical classes a tokenizer assigns."""

    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    OPERATOR = "operator"
    LITERAL = "literal"
    WHITESPACE = "whitespace"
    OTHER = "other"


class ScopeKind(str, Enum):
    """Which kind of identifier a scope was extracted for."""

    VARIABLE = "variable"
    METHOD = "method"
    TYPE = "type"


class Token(BaseModel):
    """A lexical token. Equality is on the exact text and kind."""

    model_config = ConfigDict(frozen=True)

    text: str
    kind: TokenKind = TokenKind.OTHER
    line: int = 0

    @property
    def is_identifier(self) -> bool:
        return self.kind == TokenKind.IDENTIFIER


class Scope(BaseModel):
    """A bounded snippet of code plus the syntactic context of an identifier.

    `node_type` is the syntactic category of the identifier's own
    construct (e.g. "arg", "Assign") and `parent_node_type` that of the
    enclosing construct (e.g. "FunctionDef"). Two scopes are compatible
    exactly when these fields are equal.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    node_type: str = ""
    parent_node_type: str = ""
    kind: ScopeKind = ScopeKind.VARIABLE
    type_name: str | None = None
    file_path: str = ""
    line: int = 0

    def sort_key(self) -> tuple:
        return (self.file_path, self.line, self.kind.value, self.node_type, self.code)


# Language detection by file extension
EXTENSION_LANGUAGE_MAP: dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".java": "java",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".go": "go",
    ".rs": "rust",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
}


def detect_language(file_path: str) -> str | None:
    """Detect programming language from file extension."""
    from pathlib import Path

    ext = Path(file_path).suffix.lower()
    return EXTENSION_LANGUAGE_MAP.get(ext)
