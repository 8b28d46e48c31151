"""Text embeddings for the semantic index."""

from __future__ import annotations

import hashlib
import math
from typing import Protocol


def tokenize(text: str) -> list[str]:
    """Lowercase alphanumeric tokens."""
    return [t for t in "".join(ch.lower() if ch.isalnum() else " " for ch in text).split() if t]


def stable_hash(token: str) -> int:
    """Process-independent hash of a token."""
    return int.from_bytes(hashlib.blake2b(token.encode("utf-8"), digest_size=8).digest(), "big")


class Embedder(Protocol):
    """Anything that maps text to a fixed-length vector."""

    dimensions: int

    def embed(self, text: str) -> list[float]: ...


class HashedBagOfWordsEmbedder:
    """Deterministic hashed bag-of-words with position weighting.

    Token ``i`` adds ``1 / (i + 1)`` to bucket ``hash(token) % dimensions``;
    the vector is then L2-normalized. Empty text gives the zero vector.
    """

    def __init__(self, dimensions: int = 100) -> None:
        if dimensions <= 0:
            raise ValueError("Embedding dimensions must be positive.")
        self.dimensions = dimensions

    def embed(self, text: str) -> list[float]:
        vector = [0.0] * self.dimensions
        for index, token in enumerate(tokenize(text)):
            vector[stable_hash(token) % self.dimensions] += 1.0 / (index + 1)
        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0:
            return vector
        return [v / norm for v in vector]
