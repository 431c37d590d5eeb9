"""sentence-transformers provider for semantic cache lookups.

The model runs in-process and is loaded on the first encode, so a cache that
only serves exact hits never pays for it. Install with the ``local`` extra.

Every vector leaving this module is unit length (or all zeros), the same
contract HashingEmbeddingProvider keeps, so similarity scores compare across
providers and against entries already in the semantic store.
"""

import logging
import time

import numpy as np
from sentence_transformers import SentenceTransformer

from decision_cache.config import settings
from decision_cache.exceptions import EmbeddingProviderError

logger = logging.getLogger(__name__)


def _to_vectors(raw, expected: int) -> np.ndarray:
    """Coerce model output to a (expected, dim) float64 matrix of unit rows."""
    matrix = np.atleast_2d(np.asarray(raw, dtype=np.float64))
    if matrix.ndim != 2 or matrix.shape[0] != expected:
        raise EmbeddingProviderError(f"Model returned shape {matrix.shape} for {expected} text(s)")
    if not np.all(np.isfinite(matrix)):
        raise EmbeddingProviderError("Model returned non-finite embedding values")

    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    # zero rows stay zero and score 0.0 against everything
    return np.divide(matrix, norms, out=np.zeros_like(matrix), where=norms > 0)


class LocalEmbeddingProvider:
    """In-process EmbeddingProvider backed by a sentence-transformers model.

    Satisfies the EmbeddingProvider protocol structurally.
    """

    def __init__(self, model_name: str | None = None) -> None:
        self._model_name = model_name or settings.embedding_model
        self._model: SentenceTransformer | None = None
        self._dimension: int | None = None

    @classmethod
    def create(cls, model_name: str | None = None) -> "LocalEmbeddingProvider":
        """Factory method to create LocalEmbeddingProvider with defaults."""
        return cls(model_name=model_name)

    @property
    def model(self) -> SentenceTransformer:
        """Lazy-load the model, wrapping download or load failures."""
        if self._model is None:
            logger.info("Loading embedding model %s", self._model_name)
            start = time.monotonic()
            try:
                self._model = SentenceTransformer(self._model_name)
            except OSError as e:
                raise EmbeddingProviderError(f"Cannot load model {self._model_name}: {e}") from e
            logger.info("Embedding model %s ready in %.2fs", self._model_name, time.monotonic() - start)
        return self._model

    @property
    def dimension(self) -> int:
        if self._dimension is None:
            self._dimension = len(self.encode("dimension"))
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    def encode(self, text: str) -> list[float]:
        return self.encode_batch([text])[0]

    def encode_batch(self, texts: list[str]) -> list[list[float]]:
        """Encode texts in one model call.

        Raises:
            EmbeddingProviderError: If the model cannot load or returns a
                wrongly shaped or non-finite result.
        """
        if not texts:
            return []
        raw = self.model.encode(list(texts), show_progress_bar=False, convert_to_numpy=True)
        vectors = _to_vectors(raw, len(texts))
        if self._dimension is None:
            self._dimension = vectors.shape[1]
        return vectors.tolist()

    def is_available(self) -> bool:
        """Check if the model can be loaded."""
        try:
            _ = self.model
        except EmbeddingProviderError as e:
            logger.warning("Local embedding model unavailable: %s", e)
            return False
        return True
