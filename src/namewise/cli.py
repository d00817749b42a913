"""Command-line interface for Namewise."""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path

import click
from rich.logging import RichHandler

from namewise import __version__
from namewise.config import (
    MODEL_DB_FILE,
    ProjectConfig,
    find_project_root,
    get_namewise_dir,
    load_config,
    save_config,
    set_config_value,
)
from namewise.exceptions import NamewiseError
from namewise.ui.console import Console

console = Console()


def _setup_logging(verbose: bool) -> None:
    handler = RichHandler(console=console.console, show_path=False, rich_tracebacks=verbose)
    logger = logging.getLogger("namewise")
    logger.handlers[:] = [handler]
    logger.setLevel(logging.INFO if verbose else logging.WARNING)


def _get_project_root(path: str | None = None) -> Path:
    """Find the project root or error."""
    if path:
        root = Path(path).resolve()
        if not root.exists():
            console.error(f"Path does not exist: {path}")
            sys.exit(1)
        return root

    root = find_project_root()
    if root is None:
        console.error(
            "No Namewise project found. Run 'namewise init' first, "
            "or specify a path with --path."
        )
        sys.exit(1)
    return root


class _Scorers:
    """Lazily builds one scorer per source language, all sharing one model."""

    def __init__(self, root: Path, config: ProjectConfig) -> None:
        from namewise.lm.store import ModelStore

        self.config = config
        store = ModelStore(get_namewise_dir(root) / MODEL_DB_FILE)
        try:
            if not store.has_model():
                console.error("No trained model found. Run 'namewise train' first.")
                sys.exit(1)
            self.model = store.load_model()
            self.grammar_prior, self.type_prior = store.load_priors()
        except NamewiseError as e:
            console.error(str(e))
            sys.exit(1)
        finally:
            store.close()

        self.global_model = None
        if config.renamer.strategy == "interpolated" and config.renamer.global_model_path:
            global_store = ModelStore(config.renamer.global_model_path)
            try:
                self.global_model = global_store.load_model()
            except NamewiseError as e:
                console.error(f"Cannot load global model: {e}")
                sys.exit(1)
            finally:
                global_store.close()
        self._scorers: dict[str | None, object] = {}

    def for_language(self, language: str | None):
        from namewise.parser.core import get_tokenizer
        from namewise.parser.formatting import FormattingTokenizer
        from namewise.renaming.factory import create_renamer
        from namewise.snippets.formatting import FormattingScorer
        from namewise.snippets.scorer import SnippetScorer

        if language not in self._scorers:
            formatting = self.config.renamer.strategy == "formatting"
            tokenizer = (
                FormattingTokenizer(language or "java") if formatting else get_tokenizer(language)
            )
            try:
                renamer = create_renamer(
                    self.config.renamer.strategy,
                    self.model,
                    tokenizer,
                    self.config.renamer,
                    grammar_prior=self.grammar_prior,
                    type_prior=self.type_prior,
                    global_model=self.global_model,
                )
            except NamewiseError as e:
                console.error(str(e))
                sys.exit(1)
            scorer_cls = FormattingScorer if formatting else SnippetScorer
            self._scorers[language] = scorer_cls(renamer, self.config.suggestions)
        return self._scorers[language]


@click.group()
@click.version_option(version=__version__, prog_name="namewise")
@click.option("--verbose", "-v", is_flag=True, help="Log progress and skipped units.")
def main(verbose: bool):
    """Namewise - rank identifier names by how natural they look in their context."""
    _setup_logging(verbose)


@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--strategy", "-s", default=None, help="Renaming strategy to use.")
@click.option("--order", "-n", default=None, type=int, help="N-gram order.")
def init(path: str | None, strategy: str | None, order: int | None):
    """Initialize Namewise for a repository and train a model on its sources."""
    root = Path(path or ".").resolve()
    if not root.exists():
        console.error(f"Path does not exist: {root}")
        sys.exit(1)

    console.banner()
    console.info(f"Initializing Namewise for: {root}")

    config = load_config(root)
    config.name = root.name
    config.root_path = str(root)
    try:
        if strategy:
            config = set_config_value(config, "renamer.strategy", strategy)
        if order:
            config = set_config_value(config, "model.order", order)
    except (KeyError, ValueError) as e:
        console.error(f"Invalid option: {e}")
        sys.exit(1)

    save_config(root, config)
    console.success("Configuration saved")

    _do_train(root, config)


@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--workers", "-w", default=None, type=int, help="Parallel counting workers.")
def train(path: str | None, workers: int | None):
    """Retrain the language model on the project's source files."""
    root = _get_project_root(path)
    config = load_config(root)
    if workers:
        config.model.workers = workers
    _do_train(root, config)


def _do_train(root: Path, config: ProjectConfig):
    """Train the model and priors, then persist them."""
    from namewise.lm.builder import ModelBuilder
    from namewise.lm.store import ModelStore

    builder = ModelBuilder(config.model, strategy=config.renamer.strategy)
    console.info("Scanning and tokenizing source files...")
    start_time = time.time()

    try:
        with console.progress() as progress:
            task = progress.add_task("Training...", total=None)

            def on_progress(file_path: str, current: int, total: int):
                progress.update(
                    task, total=total, completed=current,
                    description=f"Tokenizing {Path(file_path).name}",
                )

            model = builder.build_from_directory(root, config, on_progress)
    except NamewiseError as e:
        console.error(str(e))
        sys.exit(1)

    elapsed = time.time() - start_time
    stats = builder.get_stats()
    console.success(f"Trained on {stats['files']} files in {elapsed:.1f}s")
    for unit, message in sorted(builder.report.failures.items()):
        console.warning(f"Skipped {unit}: {message}")
    console.show_stats(stats)

    store = ModelStore(get_namewise_dir(root) / MODEL_DB_FILE)
    try:
        store.save(
            model,
            grammar_prior=builder.grammar_prior,
            type_prior=builder.type_prior,
            metadata={"stats": stats, "root": str(root), "trained_at": time.time()},
        )
    except NamewiseError as e:
        console.error(str(e))
        sys.exit(1)
    finally:
        store.close()

    console.success("Model saved to .namewise/")


@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
def status(path: str | None):
    """Show the trained model's statistics."""
    from namewise.lm.store import ModelStore

    root = _get_project_root(path)
    store = ModelStore(get_namewise_dir(root) / MODEL_DB_FILE)
    try:
        if not store.has_model():
            console.error("No trained model found. Run 'namewise train' first.")
            sys.exit(1)
        stats = dict(store.get_metadata("stats") or store.get_stats())
        stats["order"] = store.get_metadata("order")
        stats["backoff_factor"] = store.get_metadata("backoff_factor")
    finally:
        store.close()

    console.banner()
    console.info(f"Project: {root.name}")
    console.show_stats(stats)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.argument("name")
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--limit", "-l", default=10, help="Number of candidates to show.")
def rank(file: str, name: str, path: str | None, limit: int):
    """Rank alternative names for identifier NAME in FILE."""
    from namewise.parser.core import extract_scopes, read_source
    from namewise.parser.models import Scope, detect_language

    root = _get_project_root(path)
    config = load_config(root)
    if config.renamer.strategy == "formatting":
        console.error("The formatting strategy has no identifiers to rank. Use 'namewise review'.")
        sys.exit(1)
    scorers = _Scorers(root, config)
    language = detect_language(file)

    try:
        source = read_source(file)
    except NamewiseError as e:
        console.error(str(e))
        sys.exit(1)
    try:
        scopes = [s for s, ident in extract_scopes(source, file, language) if ident == name]
    except NamewiseError as e:
        console.warning(f"Falling back to the whole file: {e}")
        scopes = []
    if not scopes:
        scopes = [Scope(code=source, file_path=file)]

    scorer = scorers.for_language(language)
    for scope in scopes:
        renamings = scorer.renamer.rank(scope, name)
        if not renamings:
            console.warning(f"No candidates for '{name}'")
            continue
        console.show_ranking(name, renamings, limit)
        gap = scorer.confidence_gap(renamings, name)
        if gap > 0:
            console.warning(f"'{renamings[0].name}' reads more naturally (gap {gap:.2f})")
        else:
            console.success(f"'{name}' is already the most natural name here")


def _kinds(variables: bool, methods: bool, types: bool) -> dict[str, bool]:
    # No filter means every kind of identifier.
    if not (variables or methods or types):
        return {"variables": True, "methods": True, "types": True}
    return {"variables": variables, "methods": methods, "types": types}


@main.command()
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False), required=True)
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--variables", is_flag=True, help="Only review variable names.")
@click.option("--methods", is_flag=True, help="Only review method names.")
@click.option("--types", "types_", is_flag=True, help="Only review type names.")
def review(
    files: tuple[str, ...], path: str | None, variables: bool, methods: bool, types_: bool
):
    """Suggest better names for identifiers in FILES."""
    from namewise.parser.models import detect_language

    root = _get_project_root(path)
    config = load_config(root)
    scorers = _Scorers(root, config)
    kinds = _kinds(variables, methods, types_)

    failed = 0
    for file in files:
        scorer = scorers.for_language(detect_language(file))
        try:
            result = scorer.score_file(file, **kinds)
        except NamewiseError as e:
            console.error(f"{file}: {e}")
            failed += 1
            continue
        console.show_suggestions(result)
    if failed == len(files):
        sys.exit(1)


@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--fraction", "-f", default=0.1, type=float, help="Share of files to show.")
@click.option("--workers", "-w", default=4, type=int, help="Parallel scoring workers.")
def triage(path: str | None, fraction: float, workers: int):
    """Rank the project's files from least to most natural naming."""
    from namewise.parser.core import collect_files
    from namewise.parser.models import detect_language
    from namewise.snippets.ranking import ReviewStats, rank_units, top_fraction

    root = _get_project_root(path)
    config = load_config(root)
    scorers = _Scorers(root, config)

    by_language: dict[str | None, list[Path]] = {}
    for file in collect_files(root, config.indexer):
        by_language.setdefault(detect_language(str(file)), []).append(file)
    if not by_language:
        console.error("No source files found.")
        sys.exit(1)

    ranked = []
    stats = ReviewStats()
    with console.progress() as progress:
        task = progress.add_task("Scoring...", total=sum(len(f) for f in by_language.values()))
        for language, files in sorted(by_language.items(), key=lambda kv: kv[0] or ""):

            def on_progress(unit: str, current: int, total: int):
                progress.advance(task)

            results, local = rank_units(
                scorers.for_language(language), files, workers, on_progress
            )
            ranked.extend(results)
            stats.merge(local)

    ranked.sort(key=lambda r: (-r.score, r.unit))
    console.show_triage(top_fraction(ranked, fraction), stats)


@main.command("config")
@click.argument("action", type=click.Choice(["set", "get", "show"]))
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--path", "-p", default=None, help="Path to the project root.")
def config_cmd(action: str, key: str | None, value: str | None, path: str | None):
    """Manage Namewise configuration."""
    root = _get_project_root(path)
    config = load_config(root)

    if action == "show":
        console.console.print_json(json.dumps(config.model_dump(), indent=2))
    elif action == "get":
        if not key:
            console.error("Usage: namewise config get <key>")
            sys.exit(1)
        data = config.model_dump()
        for part in key.split("."):
            if isinstance(data, dict) and part in data:
                data = data[part]
            else:
                console.error(f"Unknown key: {key}")
                sys.exit(1)
        console.console.print(f"{key} = {data}")
    elif action == "set":
        if not key or value is None:
            console.error("Usage: namewise config set <key> <value>")
            sys.exit(1)
        try:
            # Try to parse as JSON for non-string values
            try:
                parsed_value = json.loads(value)
            except json.JSONDecodeError:
                parsed_value = value

            config = set_config_value(config, key, parsed_value)
            save_config(root, config)
            console.success(f"Set {key} = {parsed_value}")
        except KeyError:
            console.error(f"Unknown config key: {key}")
            sys.exit(1)
        except ValueError as e:
            console.error(f"Invalid value for {key}: {e}")
            sys.exit(1)


if __name__ == "__main__":
    main()
