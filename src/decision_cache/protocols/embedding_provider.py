"""Embedding provider protocol.

Defines the interface for any embedding generation service that can
convert query text to vector embeddings for the semantic cache.

Implementations:
- Feature hashing (local, default, no model download)
- sentence-transformers (local)
- Ollama (HTTP)
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Protocol for embedding generation services.

    Implementations must be deterministic: the same text always maps
    to the same vector under a given model.
    """

    @property
    def dimension(self) -> int:
        """Return the dimension of the embedding vectors."""
        ...

    @property
    def model_name(self) -> str:
        """Return the name/identifier of the model."""
        ...

    def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Args:
            text: The text to encode

        Returns:
            The embedding vector as a list of floats

        Raises:
            EmbeddingProviderError: If the provider cannot produce a vector
        """
        ...

    def encode_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts efficiently.

        Args:
            texts: List of texts to encode

        Returns:
            List of embedding vectors
        """
        ...

    def is_available(self) -> bool:
        """Check if the embedding provider is available.

        Returns:
            True if available, False otherwise
        """
        ...
