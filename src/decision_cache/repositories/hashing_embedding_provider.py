"""Feature-hashing embedding provider.

Maps lowercased word tokens into a fixed-width vector with a signed hash
(the "hashing trick") and L2-normalizes the result. Queries that share
words get a high cosine similarity, which is enough to catch reworded
automation commands without downloading a model.
"""

import hashlib
import re

import numpy as np

from decision_cache.config import settings

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


class HashingEmbeddingProvider:
    """Deterministic embedding provider with no external model.

    This class satisfies the EmbeddingProvider protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        provider = HashingEmbeddingProvider.create(dimension=256)
        vector = provider.encode("/orchestrate status")
        ```
    """

    def __init__(self, dimension: int | None = None) -> None:
        """Initialize the hashing provider.

        Args:
            dimension: Vector width. Defaults to settings.embedding_dimension.
        """
        self._dimension = dimension or settings.embedding_dimension
        if self._dimension <= 0:
            raise ValueError("dimension must be positive")

    @classmethod
    def create(cls, dimension: int | None = None) -> "HashingEmbeddingProvider":
        """Factory method to create HashingEmbeddingProvider with defaults."""
        return cls(dimension=dimension)

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return f"hashing-{self._dimension}"

    def _bucket(self, token: str) -> tuple[int, float]:
        digest = hashlib.blake2b(token.encode("utf-8"), digest_size=8).digest()
        value = int.from_bytes(digest, "big")
        sign = -1.0 if value >> 63 else 1.0
        return value % self._dimension, sign

    def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Args:
            text: The text to encode

        Returns:
            Unit-length vector, or all zeros for text without word characters
        """
        vector = np.zeros(self._dimension, dtype=np.float64)
        for token in _TOKEN_RE.findall(text.lower()):
            index, sign = self._bucket(token)
            vector[index] += sign

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector.tolist()

    def encode_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts."""
        return [self.encode(text) for text in texts]

    def is_available(self) -> bool:
        """Always available: no model or network involved."""
        return True
