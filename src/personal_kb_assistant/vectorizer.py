"""
Text fingerprints for notes and queries.

The default `HashingVectorizer` is a pure function of its input: no model,
no network, no process state. Each meaningful token writes its in-document
frequency at its stream position and adds half of that frequency at a
hashed slot, and the result is L2-normalised.

`SentenceTransformerVectorizer` fits behind the same `Vectorizer` protocol
for deployments that want learned embeddings.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import FrozenSet, Protocol

import numpy as np

from .config import VectorizerConfig

logger = logging.getLogger(__name__)

TOKEN_RE = re.compile(r"\w+")

STOPWORDS: FrozenSet[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to",
        "for", "of", "with", "by", "is", "was", "are", "be", "have", "has",
        "had", "do", "does", "did", "will", "would", "could", "should",
    }
)

MIN_TOKEN_LENGTH = 3


class Vectorizer(Protocol):
    dimension: int

    def vectorize(self, text: str | None) -> np.ndarray:
        ...


def tokenize(text: str | None) -> list[str]:
    if not text:
        return []
    return TOKEN_RE.findall(text.lower())


def token_slot(token: str, dimension: int) -> int:
    """Stable slot for a token: sum of its code points modulo `dimension`."""
    return sum(ord(ch) for ch in token) % dimension


class HashingVectorizer:
    def __init__(self, dimension: int = 384) -> None:
        if dimension < 1:
            raise ValueError(f"dimension must be positive, got {dimension}")
        self.dimension = dimension

    def vectorize(self, text: str | None) -> np.ndarray:
        vector = np.zeros(self.dimension, dtype=np.float64)

        tokens = tokenize(text)
        if not tokens:
            return vector

        counts = Counter(tokens)
        total = len(tokens)
        meaningful = [t for t in tokens if t not in STOPWORDS and len(t) >= MIN_TOKEN_LENGTH]

        last = self.dimension - 1
        for i, token in enumerate(meaningful):
            freq = counts[token] / total
            vector[min(i, last)] = freq
            # May land on the positional slot; accumulate, never overwrite.
            vector[token_slot(token, self.dimension)] += 0.5 * freq

        magnitude = float(np.linalg.norm(vector))
        if magnitude > 0:
            vector /= magnitude
        return vector


class SentenceTransformerVectorizer:
    """Learned embeddings via sentence-transformers, loaded on first use."""

    def __init__(self, model_name: str, dimension: int = 384) -> None:
        self.model_name = model_name
        self.dimension = dimension
        self._model = None

    def _load_model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer

            logger.info("Loading embedding model: %s", self.model_name)
            self._model = SentenceTransformer(self.model_name)
            self.dimension = int(self._model.get_sentence_embedding_dimension())
        return self._model

    def vectorize(self, text: str | None) -> np.ndarray:
        model = self._load_model()
        if not text or not text.strip():
            return np.zeros(self.dimension, dtype=np.float64)

        embedding = model.encode([text], convert_to_numpy=True)[0].astype(np.float64)
        magnitude = float(np.linalg.norm(embedding))
        if magnitude > 0:
            embedding /= magnitude
        return embedding


def build_vectorizer(cfg: VectorizerConfig | None = None) -> Vectorizer:
    if cfg is None:
        cfg = VectorizerConfig()
    if cfg.backend == "sentence-transformers":
        return SentenceTransformerVectorizer(cfg.model_name, dimension=cfg.dimension)
    return HashingVectorizer(cfg.dimension)


__all__ = [
    "HashingVectorizer",
    "STOPWORDS",
    "SentenceTransformerVectorizer",
    "Vectorizer",
    "build_vectorizer",
    "token_slot",
    "tokenize",
]
