"""Tree-sitter based tokenizer for accurate multi-language token streams."""

from __future__ import annotations

from namewise.exceptions import GrammarNotAvailableError, TokenizationError
from namewise.parser.models import Token, TokenKind
from namewise.parser.tokenizer import Tokenizer

# Tree-sitter language module mapping
_TS_LANGUAGE_MODULES = {
    "javascript": "tree_sitter_javascript",
    "typescript": "tree_sitter_typescript",
    "go": "tree_sitter_go",
    "rust": "tree_sitter_rust",
    "java": "tree_sitter_java",
}

_IDENTIFIER_NODE_TYPES = {
    "identifier",
    "type_identifier",
    "field_identifier",
    "property_identifier",
    "shorthand_property_identifier",
    "package_identifier",
}

# Nodes emitted as a single literal token instead of descending into them
_ATOMIC_NODE_TYPES = {
    "string",
    "string_literal",
    "template_string",
    "interpreted_string_literal",
    "raw_string_literal",
    "character_literal",
    "char_literal",
    "regex",
}

_LITERAL_SUFFIXES = ("_literal", "number", "integer", "float")


def is_available(language: str | None = None) -> bool:
    """Check if tree-sitter and the required language grammar are available."""
    try:
        import tree_sitter  # noqa: F401
    except ImportError:
        return False

    if language is None:
        return True

    module_name = _TS_LANGUAGE_MODULES.get(language)
    if not module_name:
        return False

    try:
        __import__(module_name)
        return True
    except ImportError:
        return False


def _get_language(lang: str):
    """Get a tree-sitter Language object for the given language."""
    from tree_sitter import Language

    module_name = _TS_LANGUAGE_MODULES.get(lang)
    if not module_name:
        raise ValueError(f"No tree-sitter grammar for language: {lang}")

    module = __import__(module_name)
    # tree_sitter_typescript exposes language_typescript() instead of language()
    factory = getattr(module, "language", None) or getattr(module, f"language_{lang}")
    return Language(factory())


class TreeSitterTokenizer(Tokenizer):
    """Tokenize by walking the leaves of a tree-sitter syntax tree."""

    def __init__(self, language: str) -> None:
        if not is_available(language):
            raise GrammarNotAvailableError(
                language, _TS_LANGUAGE_MODULES.get(language, "tree-sitter").replace("_", "-")
            )
        from tree_sitter import Parser

        self.language = language
        self._parser = Parser(_get_language(language))

    def tokenize(self, text: str) -> list[Token]:
        source_bytes = text.encode("utf-8")
        try:
            tree = self._parser.parse(source_bytes)
        except Exception as e:
            raise TokenizationError(f"tree-sitter failed on {self.language} source: {e}") from e

        tokens: list[Token] = []
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            if node.type == "comment" or node.type.endswith("_comment"):
                continue
            if node.child_count == 0 or node.type in _ATOMIC_NODE_TYPES:
                raw = source_bytes[node.start_byte:node.end_byte]
                value = raw.decode("utf-8", errors="replace")
                if value.strip():
                    tokens.append(
                        Token(text=value, kind=self._classify(node), line=node.start_point[0] + 1)
                    )
                continue
            stack.extend(reversed(node.children))
        return tokens

    @staticmethod
    def _classify(node) -> TokenKind:
        if node.type in _IDENTIFIER_NODE_TYPES:
            return TokenKind.IDENTIFIER
        if node.type in _ATOMIC_NODE_TYPES or node.type.endswith(_LITERAL_SUFFIXES):
            return TokenKind.LITERAL
        if not node.is_named:
            return TokenKind.KEYWORD if node.type.isalpha() else TokenKind.OPERATOR
        return TokenKind.OTHER
