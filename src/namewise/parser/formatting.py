"""Whitespace-annotated token streams for formatting suggestions."""

from __future__ import annotations

from namewise.parser.models import Token, TokenKind
from namewise.parser.tokenizer import RegexTokenizer, Tokenizer

WHITESPACE_PREFIX = "WS_"
COMMENT_TOKEN = "<COMMENT>"


def whitespace_token(gap: str, tab_size: int = 4) -> str:
    """Encode the whitespace between two code tokens.

    WS_NONE for adjacent tokens, WS_s<n> for n columns on the same line and
    WS_n<k>_i<m> for k line breaks followed by an m-column indent.
    """
    if not gap:
        return f"{WHITESPACE_PREFIX}NONE"
    newlines = gap.count("\n")
    if newlines:
        indent = gap.rsplit("\n", 1)[1].expandtabs(tab_size)
        return f"{WHITESPACE_PREFIX}n{newlines}_i{len(indent)}"
    return f"{WHITESPACE_PREFIX}s{len(gap.expandtabs(tab_size))}"


def is_whitespace_token(token: str) -> bool:
    return token.startswith(WHITESPACE_PREFIX)


class FormattingTokenizer(Tokenizer):
    """Interleave code tokens with one whitespace token per gap.

    Comments are kept as a single <COMMENT> marker so the layout around
    them is still modelled.
    """

    def __init__(self, language: str = "java", tab_size: int = 4) -> None:
        self.language = language
        self.tab_size = tab_size
        self._lexer = RegexTokenizer(language)

    def tokenize(self, text: str) -> list[Token]:
        tokens: list[Token] = []
        gap = ""
        line = 1
        for group, value, _, _ in self._lexer.spans(text):
            if group == "ws":
                gap += value
            else:
                if tokens:
                    tokens.append(
                        Token(
                            text=whitespace_token(gap, self.tab_size),
                            kind=TokenKind.WHITESPACE,
                            line=line,
                        )
                    )
                if group == "comment":
                    tokens.append(Token(text=COMMENT_TOKEN, kind=TokenKind.OTHER, line=line))
                else:
                    tokens.append(
                        Token(text=value, kind=self._lexer.classify(group, value), line=line)
                    )
                gap = ""
            line += value.count("\n")
        return tokens

    def is_identifier(self, token: Token) -> bool:
        return token.kind == TokenKind.WHITESPACE
