"""Custom exceptions for Namewise."""


class NamewiseError(Exception):
    """Base exception for all Namewise errors."""


class ConfigError(NamewiseError):
    """Configuration-related errors."""


class TokenizationError(NamewiseError):
    """A unit of source code could not be tokenized."""


class ModelError(NamewiseError):
    """Language model lifecycle errors."""


class ScoringError(NamewiseError):
    """Candidate scoring errors."""


class StoreError(NamewiseError):
    """Model store errors."""


class GrammarNotAvailableError(TokenizationError):
    """Raised when a tree-sitter grammar for a language is not installed."""

    def __init__(self, language: str, package: str):
        super().__init__(
            f"Language '{language}' requires the '{package}' package. "
            f"Install it with: pip install {package}"
        )
