"""FastEmbed client for ONNX-based text embeddings.

fastembed runs on ONNX Runtime and downloads/caches the model on first use.
"""

import logging
from typing import Protocol

import numpy as np
from fastembed import TextEmbedding

from talentmatch.config import EMBEDDING_MODEL, EMBEDDING_TIMEOUT_SECONDS
from talentmatch.errors import ProviderError
from talentmatch.utils import call_with_timeout

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    """Anything that turns text into a fixed-length vector."""

    def embed_text(self, text: str) -> list[float]: ...


class FastEmbedClient:
    """Embedding provider backed by a fastembed ONNX model.

    Every call is bounded by `timeout` seconds. Model load, inference and
    timeout failures all surface as ProviderError.
    """

    def __init__(
        self,
        model_name: str = EMBEDDING_MODEL,
        timeout: float | None = EMBEDDING_TIMEOUT_SECONDS,
    ):
        self.model_name = model_name
        self.timeout = timeout
        self._model: TextEmbedding | None = None

    def _get_model(self) -> TextEmbedding:
        """Lazy load the fastembed model; it is cached for subsequent calls."""
        if self._model is None:
            self._model = TextEmbedding(self.model_name)
        return self._model

    def _embed(self, text: str) -> np.ndarray:
        embeddings = list(self._get_model().embed([text]))
        return embeddings[0]

    def embed_text(self, text: str) -> list[float]:
        """Generate embedding for a single text string.

        Args:
            text: Text to embed.

        Returns:
            Embedding vector as list of floats (dimension 384 for MiniLM).

        Raises:
            ProviderError: If the text is empty or the model fails or times out.
        """
        if not text or not text.strip():
            raise ProviderError("Cannot embed empty text")

        vector = call_with_timeout(self._embed, self.timeout, text)
        logger.debug(f"Embedded {len(text)} chars into a {len(vector)}-dim vector")
        return vector.tolist()

    def embed_texts_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts in one model pass.

        Args:
            texts: List of texts to embed.

        Returns:
            List of embedding vectors, each as a list of floats.
        """
        if not texts:
            return []

        def _embed_all() -> list[np.ndarray]:
            return list(self._get_model().embed(texts))

        embeddings = call_with_timeout(_embed_all, self.timeout)
        return [emb.tolist() for emb in embeddings]
