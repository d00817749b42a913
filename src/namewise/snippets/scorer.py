"""Turn per-identifier rankings into reportable suggestions for a code unit."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from namewise.config import SuggestionConfig
from namewise.lm.ngram import UNK_SYMBOL
from namewise.parser.core import extract_scopes, read_source
from namewise.parser.models import Scope, ScopeKind
from namewise.renaming.models import Renaming
from namewise.renaming.renamers import IdentifierRenamer
from namewise.snippets.models import SnippetSuggestions, Suggestion

logger = logging.getLogger("namewise.snippets")


def apply_threshold(
    renamings: Iterable[Renaming], threshold: float, max_suggestions: int
) -> tuple[Renaming, ...]:
    """Keep the best renamings scoring at most `threshold`.

    At most `max_suggestions` names other than UNK are kept. UNK is always
    in the result: if it scored above the threshold it is added back with
    a score equal to the threshold. Filtering an already filtered set
    returns it unchanged.
    """
    kept: list[Renaming] = []
    unk: Renaming | None = None
    for renaming in sorted(renamings):
        if renaming.score > threshold:
            break
        if renaming.is_unk:
            unk = renaming
        elif len(kept) < max_suggestions:
            kept.append(renaming)
    if unk is None:
        unk = Renaming(threshold, UNK_SYMBOL)
    kept.append(unk)
    return tuple(sorted(kept))


class SnippetScorer:
    """Scores every identifier of a unit and aggregates the confidence gaps."""

    def __init__(self, renamer: IdentifierRenamer, config: SuggestionConfig | None = None) -> None:
        self.renamer = renamer
        self.config = config or SuggestionConfig()

    def threshold_for(self, kind: ScopeKind) -> float:
        if kind == ScopeKind.METHOD:
            return self.config.threshold_method
        if kind == ScopeKind.TYPE:
            return self.config.threshold_type
        return self.config.threshold_variable

    def confidence_gap(self, renamings: Sequence[Renaming], name: str) -> float:
        """Score of the current name minus the score of the best candidate in `renamings`.

        With `use_unk`, a name the model does not know is measured by the
        UNK entry. A name missing from the ranking also falls back to UNK.
        Zero when neither is ranked.
        """
        if not renamings:
            return 0.0
        scores = {r.name: r.score for r in renamings}
        current = None
        if not (self.config.use_unk and self.renamer.model.is_unknown(name)):
            current = scores.get(name)
        if current is None:
            current = scores.get(UNK_SYMBOL)
        if current is None:
            return 0.0
        return current - renamings[0].score

    def suggest(self, scope: Scope, name: str) -> Suggestion:
        """Rank one identifier and filter its candidates for reporting."""
        return self.suggestion_from(scope, name, self.renamer.rank(scope, name))

    def suggestion_from(
        self, scope: Scope, name: str, ranking: Sequence[Renaming]
    ) -> Suggestion:
        """Build a suggestion from a finished ranking.

        With `filter_suggestions` the ranking is thresholded first and the
        gap measured on what is left, so a current name scoring above the
        threshold is measured by UNK at the threshold score.
        """
        if self.config.filter_suggestions:
            ranking = apply_threshold(
                ranking, self.threshold_for(scope.kind), self.config.max_suggestions
            )
        gap = self.confidence_gap(ranking, name)
        return Suggestion(name=name, renamings=tuple(ranking), confidence_gap=gap, scope=scope)

    def score_unit(
        self, identifiers: Iterable[tuple[Scope, str]], unit: str = ""
    ) -> SnippetSuggestions:
        """Score every (scope, identifier) pair of one code unit.

        Identifiers whose ranking fails are logged and skipped. Only
        suggestions with a gap above the reporting floor count toward the
        unit score.
        """
        result = SnippetSuggestions(unit=unit)
        for scope, name in identifiers:
            try:
                suggestion = self.suggest(scope, name)
            except Exception:
                logger.warning(f"Skipping identifier {name!r} in {unit or 'unit'}", exc_info=True)
                continue
            self.collect(result, suggestion)
        return self.finish(result)

    def collect(self, result: SnippetSuggestions, suggestion: Suggestion) -> None:
        result.identifiers_scored += 1
        if suggestion.confidence_gap > self.config.reporting_floor:
            result.suggestions.append(suggestion)

    def finish(self, result: SnippetSuggestions) -> SnippetSuggestions:
        """Order suggestions by descending gap and total them into the unit score."""
        result.suggestions.sort(
            key=lambda s: (-s.confidence_gap, s.scope.sort_key() if s.scope else (), s.name)
        )
        result.score = sum(s.confidence_gap for s in result.suggestions)
        return result

    def score_source(
        self,
        source: str,
        file_path: str = "",
        language: str | None = None,
        variables: bool = True,
        methods: bool = True,
        types: bool = True,
    ) -> SnippetSuggestions:
        identifiers = extract_scopes(source, file_path, language, variables, methods, types)
        return self.score_unit(identifiers, unit=file_path)

    def score_file(
        self,
        path: str | Path,
        variables: bool = True,
        methods: bool = True,
        types: bool = True,
    ) -> SnippetSuggestions:
        """Score a source file.

        Raises:
            TokenizationError: If the file cannot be read or parsed.
        """
        return self.score_source(
            read_source(path), str(path), variables=variables, methods=methods, types=types
        )
