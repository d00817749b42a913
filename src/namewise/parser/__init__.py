"""Source tokenization and identifier scope extraction for Namewise."""

from namewise.parser.core import collect_files, extract_scopes, get_tokenizer, tokenize_file
from namewise.parser.models import Scope, ScopeKind, Token, TokenKind

__all__ = [
    "Scope",
    "ScopeKind",
    "Token",
    "TokenKind",
    "collect_files",
    "extract_scopes",
    "get_tokenizer",
    "tokenize_file",
]
