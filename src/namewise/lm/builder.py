"""Train a language model and name priors from source files."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from namewise.config import ModelConfig, ProjectConfig
from namewise.exceptions import ConfigError, NamewiseError
from namewise.lm.model import NGramLanguageModel, TrainingReport
from namewise.parser.core import (
    collect_files,
    extract_scopes,
    read_source,
    tokenize_file,
    tokenize_formatted_file,
)
from namewise.parser.models import Scope
from namewise.priors.grammar import GrammarPrior
from namewise.priors.typed import TypePrior

logger = logging.getLogger("namewise.builder")

# Strategies whose models are trained on a different token stream.
_STRATEGY_TOKENIZERS: dict[str, Callable[[Path], Sequence[str]]] = {
    "formatting": tokenize_formatted_file,
}


class ModelBuilder:
    """Builds an n-gram model plus grammar and type priors from a file set.

    A builder may be reused; every build starts from fresh state. Unless
    an explicit `tokenize` is given, files are tokenized the way the
    renaming `strategy` reads them: the formatting strategy needs the
    whitespace tokens the identifier strategies drop.
    """

    def __init__(
        self,
        config: ModelConfig | None = None,
        tokenize: Callable[[Path], Sequence[str]] | None = None,
        strategy: str = "base",
    ) -> None:
        self.config = config or ModelConfig()
        self.strategy = strategy
        self._tokenize = tokenize
        self.model: NGramLanguageModel | None = None
        self.report = TrainingReport()
        self.grammar_prior = GrammarPrior()
        self.type_prior = TypePrior()

    def build_from_directory(
        self,
        root: str | Path,
        config: ProjectConfig | None = None,
        progress_callback: Callable[[str, int, int], None] | None = None,
    ) -> NGramLanguageModel:
        """Train on every supported file under `root`.

        Args:
            root: Root directory to scan.
            config: Project configuration (indexer, model and renamer settings).
            progress_callback: Optional callback(file_path, current, total).

        Returns:
            The trained model.

        Raises:
            ConfigError: If no source files are found.
        """
        if config is not None:
            self.config = config.model
            self.strategy = config.renamer.strategy
        files = collect_files(root, config.indexer if config else None)
        return self.build_from_files(files, progress_callback)

    def build_from_files(
        self,
        files: Sequence[str | Path],
        progress_callback: Callable[[str, int, int], None] | None = None,
    ) -> NGramLanguageModel:
        """Train on an explicit list of files.

        Files that fail to tokenize are skipped and listed in `self.report`.

        Raises:
            ConfigError: If `files` is empty.
        """
        if not files:
            raise ConfigError("No source files to train on")

        paths = [Path(f) for f in files]
        total = len(paths)
        counter = iter(range(1, total + 1))

        tokenize_unit = self._tokenize or _STRATEGY_TOKENIZERS.get(self.strategy, tokenize_file)

        def tokenize(path: Path) -> Sequence[str]:
            if progress_callback:
                progress_callback(str(path), next(counter), total)
            return tokenize_unit(path)

        self.model = NGramLanguageModel.from_config(self.config)
        self.report = self.model.train(paths, tokenize=tokenize, workers=self.config.workers)

        identifiers: list[tuple[Scope, str]] = []
        for path in paths:
            if str(path) in self.report.failures:
                continue
            try:
                identifiers.extend(extract_scopes(read_source(path), str(path)))
            except NamewiseError as e:
                logger.warning(f"No scopes for {path}: {e}")
        self.grammar_prior = GrammarPrior.build(identifiers)
        self.type_prior = TypePrior.build(identifiers)
        logger.info(
            f"Trained on {self.report.units_trained} files "
            f"({self.report.units_failed} skipped, {len(identifiers)} identifiers)"
        )
        return self.model

    def get_stats(self) -> dict:
        return {
            "files": self.report.units_trained,
            "failed": self.report.units_failed,
            "vocabulary": self.report.vocabulary_size,
            "ngrams": self.report.distinct_ngrams,
            "pruned": self.report.pruned_ngrams,
        }
