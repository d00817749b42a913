"""Configuration management for Namewise."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

NAMEWISE_DIR = ".namewise"
CONFIG_FILE = "config.json"
MODEL_DB_FILE = "model.db"

STRATEGIES = ("base", "grammar", "types", "all", "interpolated", "formatting")


class ModelConfig(BaseModel):
    """N-gram language model configuration."""

    order: int = Field(default=5, ge=1)
    vocabulary_cutoff: int = Field(default=1, ge=0)
    ngram_cutoff: int = Field(default=0, ge=0)
    backoff_factor: float = Field(default=0.4, gt=0.0, lt=1.0)
    workers: int = Field(default=1, ge=1)


class RenamerConfig(BaseModel):
    """Candidate generation and scoring configuration."""

    strategy: str = "base"
    max_candidates: int = Field(default=1000, ge=1)
    prior_penalty: float = Field(default=6.0, ge=0.0)
    use_grammar: bool = True
    use_types: bool = True
    interpolation_weight: float = Field(default=0.2, ge=0.0, le=1.0)
    global_model_path: str | None = None

    @field_validator("strategy")
    @classmethod
    def _known_strategy(cls, value: str) -> str:
        value = value.lower()
        if value not in STRATEGIES:
            expected = ", ".join(STRATEGIES)
            raise ValueError(f"unknown strategy '{value}', expected one of {expected}")
        return value


class SuggestionConfig(BaseModel):
    """Thresholds applied before suggestions are reported."""

    threshold_variable: float = 6.0
    threshold_method: float = 1.0
    threshold_type: float = 1.0
    threshold_formatting: float = 12.0
    max_suggestions: int = Field(default=5, ge=1)
    reporting_floor: float = 0.0
    use_unk: bool = True
    filter_suggestions: bool = True


class IndexerConfig(BaseModel):
    """Source file collection configuration."""

    exclude_patterns: list[str] = Field(
        default_factory=lambda: [
            "node_modules",
            "__pycache__",
            ".git",
            ".namewise",
            "dist",
            "build",
            ".venv",
            "venv",
            ".env",
            "*.pyc",
            "*.pyo",
            "*.so",
            "*.min.js",
            "*.lock",
        ]
    )
    max_file_size_kb: int = 500
    languages: list[str] = Field(default_factory=list)  # empty = auto-detect


class ProjectConfig(BaseModel):
    """Full project configuration."""

    name: str = ""
    root_path: str = "."
    model: ModelConfig = Field(default_factory=ModelConfig)
    renamer: RenamerConfig = Field(default_factory=RenamerConfig)
    suggestions: SuggestionConfig = Field(default_factory=SuggestionConfig)
    indexer: IndexerConfig = Field(default_factory=IndexerConfig)


def find_project_root(start: Path | None = None) -> Path | None:
    """Walk up from `start` looking for a .namewise directory."""
    current = (start or Path.cwd()).resolve()
    while current != current.parent:
        if (current / NAMEWISE_DIR).is_dir():
            return current
        current = current.parent
    if (current / NAMEWISE_DIR).is_dir():
        return current
    return None


def get_namewise_dir(root: Path) -> Path:
    """Get the .namewise directory for a project root."""
    return root / NAMEWISE_DIR


def load_config(root: Path) -> ProjectConfig:
    """Load configuration from .namewise/config.json."""
    config_path = get_namewise_dir(root) / CONFIG_FILE
    if config_path.exists():
        data = json.loads(config_path.read_text())
        return ProjectConfig(**data)
    return ProjectConfig(name=root.name, root_path=str(root))


def save_config(root: Path, config: ProjectConfig) -> None:
    """Save configuration to .namewise/config.json."""
    nw_dir = get_namewise_dir(root)
    nw_dir.mkdir(parents=True, exist_ok=True)
    config_path = nw_dir / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(), indent=2))


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Set a nested config value using dot notation (e.g., 'model.order')."""
    parts = key.split(".")
    data = config.model_dump()
    target = data
    for part in parts[:-1]:
        if part not in target or not isinstance(target[part], dict):
            raise KeyError(f"Invalid config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Invalid config key: {key}")
    target[parts[-1]] = value
    return ProjectConfig(**data)
