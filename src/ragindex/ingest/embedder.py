"""Embedding generator — LiteLLM embeddings for chunk text.

- ``embed()`` embeds a single string.
- ``embed_many()`` embeds a list in one or more batched requests; output
  order always matches input order.
- No retries, caching or deduplication happen here: identical texts are
  embedded as many times as they appear.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import litellm

from ragindex.errors import ConfigurationError, EmbeddingError
from ragindex.models import DocumentChunk, Embedding

LOGGER = logging.getLogger(__name__)

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True

_PROVIDER_ENV: dict[str, str | None] = {
    "openai": "OPENAI_API_KEY",
    "azure": "AZURE_API_KEY",
    "cohere": "COHERE_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "voyage": "VOYAGE_API_KEY",
    "ollama": None,  # Local, no key required
}


@dataclass
class EmbeddingConfig:
    """Configuration for embedding generation.

    ``dimensions`` is checked against every returned vector; set it to None
    to accept whatever the model returns.
    """

    model: str = "openai/text-embedding-3-small"
    dimensions: int | None = 1536
    batch_size: int = 96


class EmbeddingGenerator:
    """Turn chunk text into vectors through ``litellm.embedding()``."""

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self.config = config or EmbeddingConfig()
        if self.config.batch_size < 1:
            raise ConfigurationError("embedding batch_size must be >= 1")

    def embed(self, text: str) -> Embedding:
        return self._request([text])[0]

    def embed_many(self, texts: list[str]) -> list[Embedding]:
        """Embed *texts*; the i-th vector belongs to the i-th text."""
        vectors: list[Embedding] = []
        size = self.config.batch_size
        for start in range(0, len(texts), size):
            vectors.extend(self._request(texts[start : start + size]))
        return vectors

    def embed_chunks(self, chunks: list[DocumentChunk]) -> list[tuple[DocumentChunk, Embedding]]:
        """Embed each chunk's content and pair it with its vector."""
        vectors = self.embed_many([chunk.content for chunk in chunks])
        return list(zip(chunks, vectors))

    # ------------------------------------------------------------------
    # Provider call
    # ------------------------------------------------------------------

    def _request(self, batch: list[str]) -> list[Embedding]:
        try:
            response = litellm.embedding(model=self.config.model, input=batch)
        except Exception as exc:
            LOGGER.error("Embedding request to %s failed: %s", self.config.model, exc)
            raise EmbeddingError(f"Embedding request to '{self.config.model}' failed: {exc}") from exc

        items = sorted(response.data, key=lambda item: item.get("index", 0))
        vectors = [list(item["embedding"]) for item in items]

        if len(vectors) != len(batch):
            raise EmbeddingError(
                f"Model '{self.config.model}' returned {len(vectors)} embeddings for {len(batch)} inputs"
            )
        expected = self.config.dimensions
        for vector in vectors:
            if expected is not None and len(vector) != expected:
                raise EmbeddingError(
                    f"Model '{self.config.model}' returned a {len(vector)}-dimensional vector, "
                    f"expected {expected}"
                )
        return vectors

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def check_api_key(self) -> None:
        """Raise ConfigurationError if no API key is set for the embedding provider."""
        model = self.config.model
        provider = model.split("/")[0].lower() if "/" in model else "openai"
        env_var = _PROVIDER_ENV.get(provider)
        if env_var and not os.environ.get(env_var):
            raise ConfigurationError(
                f"No API key found for provider '{provider}'. "
                f"Set the {env_var} environment variable."
            )
