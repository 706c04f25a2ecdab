from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError


class VectorizerConfig(BaseModel):
    dimension: int = Field(default=384, ge=1)
    backend: Literal["hashing", "sentence-transformers"] = "hashing"
    model_name: str = Field(default="sentence-transformers/all-MiniLM-L6-v2")


class RankingConfig(BaseModel):
    """Weights and floors used when ordering notes for a query."""

    embedding_weight: float = 0.2
    keyword_weight: float = 0.3
    title_bonus: float = 2.0

    title_weight: float = 5.0
    tag_weight: float = 2.0
    content_weight: float = 0.5
    min_token_length: int = Field(default=3, ge=1)

    # Floors compare against the combined score; None disables the floor for that call site.
    chat_min_score: Optional[float] = 0.0
    search_min_score: Optional[float] = 0.1

    fallback_similarity: float = 0.5
    chat_limit: int = Field(default=20, ge=1)
    search_limit: int = Field(default=10, ge=1)


class SynthesisConfig(BaseModel):
    greetings: List[str] = Field(default_factory=lambda: ["hi", "hello", "hey", "greetings"])
    context_chars: int = Field(default=1000, ge=1)
    snippet_chars: int = Field(default=150, ge=1)


class AppConfig(BaseModel):
    data_dir: Path = Field(default=Path("data"))
    index_dir: Path = Field(default=Path("index"))
    owner_id: str = Field(default="local")
    openai_model: str = Field(default="gpt-4o-mini")
    generation_timeout: float = Field(default=30.0, gt=0)
    generation_max_retries: int = Field(default=1, ge=0)

    vectorizer: VectorizerConfig = Field(default_factory=VectorizerConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    synthesis: SynthesisConfig = Field(default_factory=SynthesisConfig)

    @property
    def data_dir_resolved(self) -> Path:
        return self.data_dir.resolve()

    @property
    def index_dir_resolved(self) -> Path:
        return self.index_dir.resolve()

    @property
    def notes_path(self) -> Path:
        return self.index_dir_resolved / "notes.json"


def load_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load configuration from a YAML file.

    If `path` is None, looks for `config.yaml` in the current working directory.
    Also loads environment variables from a `.env` file if present.
    """
    load_dotenv()

    if path is None:
        path = Path("config.yaml")

    if not path.exists():
        return AppConfig()

    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    try:
        cfg = AppConfig(**raw)
    except ValidationError as e:
        raise SystemExit(f"Invalid configuration in {path}:\n{e}") from e

    cfg.data_dir_resolved.mkdir(parents=True, exist_ok=True)
    cfg.index_dir_resolved.mkdir(parents=True, exist_ok=True)
    return cfg


__all__ = ["AppConfig", "RankingConfig", "SynthesisConfig", "VectorizerConfig", "load_config"]
