"""Factory for creating renaming strategies from configuration."""

from __future__ import annotations

from collections.abc import Callable

from namewise.config import STRATEGIES, RenamerConfig
from namewise.exceptions import ConfigError
from namewise.lm.model import NGramLanguageModel
from namewise.parser.tokenizer import Tokenizer
from namewise.priors.grammar import GrammarPrior
from namewise.priors.typed import TypePrior
from namewise.renaming.renamers import (
    AllPriorRenamer,
    GrammarPriorRenamer,
    IdentifierRenamer,
    InterpolatedRenamer,
    TypePriorRenamer,
)


def _base(model, tokenizer, config, grammar_prior, type_prior, global_model):
    return IdentifierRenamer(model, tokenizer, config.max_candidates)


def _grammar(model, tokenizer, config, grammar_prior, type_prior, global_model):
    if grammar_prior is None:
        raise ConfigError("The 'grammar' strategy needs a grammar prior")
    return GrammarPriorRenamer(
        model, tokenizer, grammar_prior, config.max_candidates, config.prior_penalty
    )


def _types(model, tokenizer, config, grammar_prior, type_prior, global_model):
    if type_prior is None:
        raise ConfigError("The 'types' strategy needs a type prior")
    return TypePriorRenamer(
        model, tokenizer, type_prior, config.max_candidates, config.prior_penalty
    )


def _all(model, tokenizer, config, grammar_prior, type_prior, global_model):
    return AllPriorRenamer(
        model,
        tokenizer,
        grammar_prior,
        type_prior,
        use_grammar=config.use_grammar,
        use_types=config.use_types,
        max_candidates=config.max_candidates,
        penalty=config.prior_penalty,
    )


def _interpolated(model, tokenizer, config, grammar_prior, type_prior, global_model):
    if global_model is None:
        raise ConfigError("The 'interpolated' strategy needs a global model")
    return InterpolatedRenamer(
        global_model, model, tokenizer, config.interpolation_weight, config.max_candidates
    )


def _formatting(model, tokenizer, config, grammar_prior, type_prior, global_model):
    from namewise.parser.formatting import FormattingTokenizer
    from namewise.renaming.formatting import FormattingRenamer

    if not isinstance(tokenizer, FormattingTokenizer):
        tokenizer = FormattingTokenizer(tokenizer.language or "java")
    return FormattingRenamer(model, tokenizer)


_REGISTRY: dict[str, Callable[..., IdentifierRenamer]] = {
    "base": _base,
    "grammar": _grammar,
    "types": _types,
    "all": _all,
    "interpolated": _interpolated,
    "formatting": _formatting,
}


def create_renamer(
    strategy: str,
    model: NGramLanguageModel,
    tokenizer: Tokenizer,
    config: RenamerConfig | None = None,
    grammar_prior: GrammarPrior | None = None,
    type_prior: TypePrior | None = None,
    global_model: NGramLanguageModel | None = None,
) -> IdentifierRenamer:
    """Create a renamer for a named strategy.

    Args:
        strategy: One of base, grammar, types, all, interpolated, formatting.
        model: The trained (local) language model.
        tokenizer: Tokenizer for scope snippets.
        config: Candidate and prior settings.
        grammar_prior: Needed by the grammar strategy, optional for all.
        type_prior: Needed by the types strategy, optional for all.
        global_model: Shared global model for the interpolated strategy.

    Returns:
        An initialized renamer.

    Raises:
        ConfigError: If the strategy is unknown or a resource it needs is missing.
    """
    factory = _REGISTRY.get(strategy.lower())
    if factory is None:
        raise ConfigError(
            f"Unknown renaming strategy: '{strategy}'. "
            f"Supported strategies: {', '.join(STRATEGIES)}"
        )
    config = config or RenamerConfig()
    return factory(model, tokenizer, config, grammar_prior, type_prior, global_model)
