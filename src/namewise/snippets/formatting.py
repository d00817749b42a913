"""Formatting review: whitespace gaps reported like identifier suggestions."""

from __future__ import annotations

from namewise.parser.models import Scope, ScopeKind
from namewise.renaming.formatting import FormattingRenamer
from namewise.snippets.models import SnippetSuggestions
from namewise.snippets.scorer import SnippetScorer


class FormattingScorer(SnippetScorer):
    """Scores every whitespace gap of a unit with a `FormattingRenamer`.

    Each gap becomes one suggestion whose name is the actual whitespace
    token. Gaps share a single threshold since they have no identifier kind.
    """

    renamer: FormattingRenamer

    def threshold_for(self, kind: ScopeKind) -> float:
        return self.config.threshold_formatting

    def score_source(
        self,
        source: str,
        file_path: str = "",
        language: str | None = None,
        variables: bool = True,
        methods: bool = True,
        types: bool = True,
    ) -> SnippetSuggestions:
        """Score the layout of a source text.

        The identifier kind filters do not apply here; every gap is scored.
        """
        tokens = self.renamer.tokenizer.tokenize(source)
        result = SnippetSuggestions(unit=file_path)
        for position, actual, ranking in self.renamer.score_tokens([t.text for t in tokens]):
            scope = Scope(
                code=source,
                node_type="whitespace",
                parent_node_type="file",
                file_path=file_path,
                line=tokens[position].line,
            )
            self.collect(result, self.suggestion_from(scope, actual, ranking))
        return self.finish(result)
