"""Ollama-based embedding provider.

Uses Ollama's local API to generate embeddings. Every request carries a
timeout so a stalled Ollama server raises EmbeddingProviderError, which
CacheService.get_or_compute treats as a semantic miss, instead of hanging
the caller.

Requirements:
    - Ollama installed: https://ollama.com
    - Model pulled: `ollama pull embeddinggemma`
    - Ollama running: `ollama serve`
"""

import httpx

from decision_cache.config import settings
from decision_cache.exceptions import EmbeddingProviderError


class OllamaEmbeddingProvider:
    """Ollama-based implementation of EmbeddingProvider protocol.

    This class satisfies the EmbeddingProvider protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        provider = OllamaEmbeddingProvider.create(
            model_name="embeddinggemma",
            base_url="http://localhost:11434",
        )
        embedding = provider.encode("Hello, world!")
        ```
    """

    # Known model dimensions (for common models)
    MODEL_DIMENSIONS = {
        "embeddinggemma": 768,
        "embeddinggemma:300m": 768,
        "nomic-embed-text": 768,
        "mxbai-embed-large": 1024,
        "all-minilm": 384,
        "all-minilm:l6-v2": 384,
    }

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the Ollama embedding provider.

        Args:
            model_name: Name of the Ollama model. Defaults to settings.embedding_model.
            base_url: Ollama API base URL. Defaults to settings.ollama_base_url.
            timeout: Request timeout in seconds. Defaults to settings.embedding_timeout.
            client: Preconfigured HTTP client, mainly for tests.
        """
        self._model_name = model_name or settings.embedding_model
        self._base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self._timeout = timeout or settings.embedding_timeout
        self._dimension: int | None = None
        self._client = client

    @property
    def client(self) -> httpx.Client:
        """Lazy-load the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout)
        return self._client

    @classmethod
    def create(
        cls,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> "OllamaEmbeddingProvider":
        """Factory method to create OllamaEmbeddingProvider with defaults.

        Args:
            model_name: Model name. If None, uses settings.
            base_url: Ollama API URL. If None, uses settings.
            timeout: Request timeout. If None, uses settings.

        Returns:
            Configured OllamaEmbeddingProvider
        """
        return cls(model_name=model_name, base_url=base_url, timeout=timeout)

    @property
    def dimension(self) -> int:
        """Get the embedding vector dimension.

        Known models return their documented width; unknown models report 768
        until the first encode reveals the real width.
        """
        if self._dimension is None:
            self._dimension = self.MODEL_DIMENSIONS.get(self._model_name, 768)
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    def _embed(self, payload_input: str | list[str]) -> list[list[float]]:
        url = f"{self._base_url}/api/embed"
        payload = {"model": self._model_name, "input": payload_input}

        try:
            response = self.client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            error_msg = f"Ollama API error: {e}"
            if isinstance(e, httpx.ConnectError):
                error_msg += " (is Ollama running? Try: ollama serve)"
            elif isinstance(e, httpx.TimeoutException):
                error_msg += f" (no answer within {self._timeout}s)"
            raise EmbeddingProviderError(error_msg) from e

        # Ollama returns {"embeddings": [[...], ...]}, older versions {"embedding": [...]}
        if data.get("embeddings"):
            embeddings = data["embeddings"]
        elif "embedding" in data:
            embeddings = [data["embedding"]]
        else:
            raise EmbeddingProviderError(f"Unexpected response format: {data}")

        self._dimension = len(embeddings[0])
        return embeddings

    def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Raises:
            EmbeddingProviderError: If the request fails, times out or returns no vector
        """
        return self._embed(text)[0]

    def encode_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts in one request."""
        if not texts:
            return []
        return self._embed(texts)

    def is_available(self) -> bool:
        """Check if Ollama answers with an embedding."""
        try:
            self.encode("test")
            return True
        except EmbeddingProviderError:
            return False

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None
