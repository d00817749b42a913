"""Tokenizers that turn source text into lexical tokens."""

from __future__ import annotations

import io
import keyword
import re
import tokenize as pytokenize
from pathlib import Path

from namewise.exceptions import TokenizationError
from namewise.parser.models import Token, TokenKind

NEWLINE_TOKEN = "<NEWLINE>"
INDENT_TOKEN = "<INDENT>"
DEDENT_TOKEN = "<DEDENT>"


class Tokenizer:
    """Base tokenizer interface."""

    language = ""

    def tokenize(self, text: str) -> list[Token]:
        """Split `text` into tokens.

        Raises:
            TokenizationError: If the text cannot be tokenized.
        """
        raise NotImplementedError

    def token_texts(self, text: str) -> list[str]:
        return [tok.text for tok in self.tokenize(text)]

    def tokenize_file(self, path: str | Path) -> list[str]:
        """Read and tokenize a file; I/O errors surface as TokenizationError."""
        try:
            text = Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise TokenizationError(f"Cannot read {path}: {e}") from e
        return self.token_texts(text)

    def is_identifier(self, token: Token) -> bool:
        return token.kind == TokenKind.IDENTIFIER

    def identifiers(self, text: str) -> list[str]:
        """Distinct identifier names in `text`, in order of first appearance."""
        seen: dict[str, None] = {}
        for tok in self.tokenize(text):
            if self.is_identifier(tok):
                seen.setdefault(tok.text, None)
        return list(seen)


class PythonTokenizer(Tokenizer):
    """Python tokenizer built on the stdlib `tokenize` module.

    Comments and blank lines are dropped; logical newlines and indentation
    changes become the marker tokens <NEWLINE>, <INDENT> and <DEDENT>.
    """

    language = "python"

    def tokenize(self, text: str) -> list[Token]:
        tokens: list[Token] = []
        try:
            for tok in pytokenize.generate_tokens(io.StringIO(text).readline):
                kind = tok.type
                if kind in (pytokenize.COMMENT, pytokenize.NL, pytokenize.ENDMARKER):
                    continue
                line = tok.start[0]
                if kind == pytokenize.NEWLINE:
                    tokens.append(Token(text=NEWLINE_TOKEN, kind=TokenKind.OTHER, line=line))
                elif kind == pytokenize.INDENT:
                    tokens.append(Token(text=INDENT_TOKEN, kind=TokenKind.OTHER, line=line))
                elif kind == pytokenize.DEDENT:
                    tokens.append(Token(text=DEDENT_TOKEN, kind=TokenKind.OTHER, line=line))
                elif kind == pytokenize.NAME:
                    tok_kind = (
                        TokenKind.KEYWORD if keyword.iskeyword(tok.string)
                        else TokenKind.IDENTIFIER
                    )
                    tokens.append(Token(text=tok.string, kind=tok_kind, line=line))
                elif kind == pytokenize.OP:
                    tokens.append(Token(text=tok.string, kind=TokenKind.OPERATOR, line=line))
                elif kind == pytokenize.ERRORTOKEN:
                    if tok.string.strip():
                        tokens.append(Token(text=tok.string, kind=TokenKind.OTHER, line=line))
                elif tok.string:
                    tokens.append(Token(text=tok.string, kind=TokenKind.LITERAL, line=line))
        except (pytokenize.TokenError, SyntaxError) as e:
            raise TokenizationError(f"Python tokenization failed: {e}") from e
        return tokens


JAVA_KEYWORDS = frozenset(
    """
    abstract assert boolean break byte case catch char class const continue
    default do double else enum extends final finally float for goto if
    implements import instanceof int interface long native new package private
    protected public return short static strictfp super switch synchronized
    this throw throws transient try void volatile while true false null var
    """.split()
)

C_LIKE_KEYWORDS = JAVA_KEYWORDS | frozenset(
    """
    auto const extern register signed sizeof struct typedef union unsigned
    function let yield await async delete typeof in of export from as
    func go chan defer fallthrough map range select type package fn impl mut
    pub use mod trait where loop match ref self crate
    """.split()
)

_C_COMMENT = r"//[^\n]*|/\*[\s\S]*?\*/"
_HASH_COMMENT = r"#[^\n]*"

_TOKEN_TEMPLATE = (
    r"(?P<ws>\s+)"
    r"|(?P<comment>{comment})"
    r"|(?P<string>{strings})"
    r"|(?P<number>0[xX][0-9a-fA-F_]+[lLuU]*|\d[\d_]*(?:\.\d*)?(?:[eE][+-]?\d+)?[fFdDlLuU]*"
    r"|\.\d+(?:[eE][+-]?\d+)?[fFdD]?)"
    r"|(?P<name>[^\W\d][\w$]*|\$[\w$]*)"
    r"|(?P<op>>>>=|<<=|>>=|>>>|\.\.\.|->|=>|::|\+\+|--|&&|\|\||\*\*|//|:="
    r"|[=!<>+\-*/%&|^]=|<<|>>|[^\s\w])"
)

_C_STRINGS = r"\"(?:\\.|[^\"\\\n])*\"|'(?:\\.|[^'\\\n])*'|`[^`]*`"
_PY_STRINGS = (
    r"[rRbBuUfF]{0,2}(?:\"\"\"[\s\S]*?\"\"\"|'''[\s\S]*?'''"
    r"|\"(?:\\.|[^\"\\\n])*\"|'(?:\\.|[^'\\\n])*')"
)


def _compile_pattern(language: str) -> re.Pattern[str]:
    if language == "python":
        return re.compile(_TOKEN_TEMPLATE.format(comment=_HASH_COMMENT, strings=_PY_STRINGS))
    return re.compile(_TOKEN_TEMPLATE.format(comment=_C_COMMENT, strings=_C_STRINGS))


class RegexTokenizer(Tokenizer):
    """Lightweight tokenizer for C-like languages and loose snippets.

    Used when no grammar-backed tokenizer is available. Comments are
    skipped; everything else becomes a token.
    """

    def __init__(self, language: str = "java", keywords: frozenset[str] | None = None) -> None:
        self.language = language
        if keywords is None:
            if language == "python":
                keywords = frozenset(keyword.kwlist)
            elif language == "java":
                keywords = JAVA_KEYWORDS
            else:
                keywords = C_LIKE_KEYWORDS
        self.keywords = keywords
        self._pattern = _compile_pattern(language)

    def spans(self, text: str) -> list[tuple[str, str, int, int]]:
        """(group, text, start, end) for every lexical match, whitespace included."""
        return [
            (m.lastgroup or "", m.group(), m.start(), m.end())
            for m in self._pattern.finditer(text)
        ]

    def tokenize(self, text: str) -> list[Token]:
        tokens: list[Token] = []
        line = 1
        for group, value, _, _ in self.spans(text):
            if group not in ("ws", "comment"):
                tokens.append(Token(text=value, kind=self.classify(group, value), line=line))
            line += value.count("\n")
        return tokens

    def classify(self, group: str, value: str) -> TokenKind:
        if group == "name":
            return TokenKind.KEYWORD if value in self.keywords else TokenKind.IDENTIFIER
        if group in ("string", "number"):
            return TokenKind.LITERAL
        if group == "op":
            return TokenKind.OPERATOR
        return TokenKind.OTHER
