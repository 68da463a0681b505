"""
Embedding providers and the shared embedding engine.
Semantic recall with sentence-transformers, loaded once per process.
"""

from abc import ABC, abstractmethod
import asyncio
import hashlib
import re
from typing import Callable, List, Optional

import numpy as np

from ..core.errors import ModelInitializationFailure
from util.logging import logger

TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    model_name = "unknown"

    def load(self) -> None:
        """Load any expensive resources. Called once, off the event loop."""
        pass

    @abstractmethod
    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic feature-hashing embedding provider.

    Each lower-cased word token is hashed into one of ``dimension`` buckets
    with a hash-derived sign, so texts sharing words score higher. Useful for
    tests and offline use without model downloads.
    """

    model_name = "deterministic-hash"

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def embed_text(self, text: str) -> List[float]:
        """Generate deterministic embedding vector using token hashing."""
        vector = np.zeros(self.dimension, dtype=np.float64)

        for token in TOKEN_PATTERN.findall(text.lower()):
            digest = hashlib.md5(token.encode()).hexdigest()
            bucket = int(digest[:8], 16) % self.dimension
            sign = 1.0 if int(digest[8:10], 16) % 2 == 0 else -1.0
            vector[bucket] += sign

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector = vector / norm
        return vector.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models.

    Uses all-MiniLM-L6-v2 (mean pooling, 384 dims) unless configured otherwise.
    """

    def __init__(self, model_name: str = "sentence-transformers/all-MiniLM-L6-v2"):
        self.model_name = model_name
        self._model = None
        self._dimension = None

    def load(self) -> None:
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name)

    @property
    def model(self):
        if self._model is None:
            self.load()
        return self._model

    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector using sentence transformers."""
        embedding = self.model.encode(text, convert_to_numpy=True, normalize_embeddings=True)
        return embedding.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._dimension is None:
            self._dimension = self.model.get_sentence_embedding_dimension()
        return self._dimension


def _l2_normalize(vector: List[float]) -> List[float]:
    array = np.asarray(vector, dtype=np.float64)
    norm = np.linalg.norm(array)
    if norm == 0:
        return array.tolist()
    return (array / norm).tolist()


class EmbeddingEngine:
    """
    Owns the process-wide embedding provider.

    The provider is built and loaded on the first ``embed`` call. Concurrent
    first callers await the same in-flight load, so the model is loaded at
    most once. A failed load is not cached; the next call tries again.
    """

    def __init__(self, provider_factory: Callable[[], IEmbeddingProvider]):
        """
        Args:
            provider_factory: Zero-argument callable returning a provider
        """
        self._provider_factory = provider_factory
        self._provider: Optional[IEmbeddingProvider] = None
        self._pending: Optional[asyncio.Future] = None

    @property
    def is_initialized(self) -> bool:
        return self._provider is not None

    @property
    def provider(self) -> Optional[IEmbeddingProvider]:
        return self._provider

    async def _load(self) -> IEmbeddingProvider:
        provider = None
        try:
            provider = self._provider_factory()
            logger.log_model_event(provider.model_name, "loading", status="started")
            await asyncio.to_thread(provider.load)
        except Exception as e:
            model_name = provider.model_name if provider is not None else IEmbeddingProvider.model_name
            logger.log_model_event(model_name, "load", {"error": str(e)}, status="failed")
            raise ModelInitializationFailure(f"Failed to load embedding model: {e}") from e

        logger.log_model_event(provider.model_name, "loaded")
        return provider

    def _discard_failed_load(self, future: asyncio.Future) -> None:
        # Also runs when every waiter was cancelled
        if self._pending is future and (future.cancelled() or future.exception() is not None):
            self._pending = None

    async def initialize(self) -> IEmbeddingProvider:
        """Load the provider once and return it.

        Raises:
            ModelInitializationFailure: If the model could not be loaded
        """
        if self._provider is not None:
            return self._provider

        if self._pending is None or self._pending.cancelled():
            self._pending = asyncio.ensure_future(self._load())
            self._pending.add_done_callback(self._discard_failed_load)
        pending = self._pending

        try:
            provider = await asyncio.shield(pending)
        except ModelInitializationFailure:
            if self._pending is pending:
                self._pending = None
            raise

        self._provider = provider
        self._pending = None
        return provider

    async def embed(self, text: str) -> List[float]:
        """
        Embed text into an L2-normalized vector.

        Args:
            text: Text to embed

        Returns:
            Unit-length embedding (all zeros if the provider produced a zero vector)
        """
        provider = await self.initialize()
        vector = await asyncio.to_thread(provider.embed_text, text)
        return _l2_normalize(vector)

    async def get_dimension(self) -> int:
        provider = await self.initialize()
        return provider.get_dimension()
