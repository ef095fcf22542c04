"""Embedding provider collaborators.

The core only consumes embeddings. Providers follow the lazy-load pattern:
artifacts are loaded on first use via `ensure_loaded()`.
"""

import asyncio
import hashlib
import logging
import threading
from abc import ABC, abstractmethod

from config import settings
from services.cache import CachePort, InMemoryCache

logger = logging.getLogger(__name__)


class EmbeddingProviderError(RuntimeError):
    """Raised when a provider cannot produce an embedding."""


class EmbeddingProvider(ABC):
    """Base class for text embedding providers.

    Subclasses must implement:
        - load(): load model artifacts into memory
        - embed(texts): return one vector per input text
    """

    model_name: str = ""
    _loaded: bool = False
    # reentrant: CachedEmbeddingProvider.load() loads its inner provider
    _load_lock = threading.RLock()

    @abstractmethod
    def load(self) -> None:
        """Load model weights/artifacts. Called once by ensure_loaded()."""

    @abstractmethod
    def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of texts."""

    async def aembed(self, text: str) -> list[float]:
        """Embed one text without blocking the event loop."""
        vectors = await asyncio.to_thread(self.embed, [text])
        if not vectors:
            raise EmbeddingProviderError(f"{self.model_name} returned no vector")
        return vectors[0]

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def ensure_loaded(self) -> None:
        """Load model if not already loaded. Safe to call from worker threads."""
        if self._loaded:
            return
        with self._load_lock:
            if not self._loaded:
                logger.info("Loading embedding model: %s", self.model_name)
                self.load()
                self._loaded = True


class SentenceTransformerEmbeddingProvider(EmbeddingProvider):
    """sentence-transformers backed provider (JobBERT-v2 by default, ~425MB)."""

    def __init__(self, model_name: str | None = None) -> None:
        self.model_name = model_name or settings.embedding_model
        self._model = None

    def load(self) -> None:
        try:
            from sentence_transformers import SentenceTransformer

            self._model = SentenceTransformer(self.model_name)
            logger.info("Embedding model loaded: %s", self.model_name)
        except Exception as e:
            logger.warning("Failed to load embedding model %s: %s", self.model_name, e)
            self._model = None

    def embed(self, texts: list[str]) -> list[list[float]]:
        self.ensure_loaded()
        if self._model is None:
            raise EmbeddingProviderError(f"Embedding model {self.model_name} unavailable")
        if not texts:
            return []
        vectors = self._model.encode(texts, convert_to_numpy=True)
        return [vector.tolist() for vector in vectors]


class CachedEmbeddingProvider(EmbeddingProvider):
    """Memoizes another provider through a CachePort."""

    def __init__(self, provider: EmbeddingProvider, cache: CachePort | None = None) -> None:
        self.provider = provider
        self.model_name = provider.model_name
        self.cache = cache if cache is not None else InMemoryCache(settings.embedding_cache_size)

    def load(self) -> None:
        self.provider.ensure_loaded()

    def _key(self, text: str) -> str:
        digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
        return f"{self.model_name}:{digest}"

    def embed(self, texts: list[str]) -> list[list[float]]:
        results: list[list[float] | None] = [self.cache.get(self._key(t)) for t in texts]
        missing = [i for i, vector in enumerate(results) if vector is None]
        if missing:
            fresh = self.provider.embed([texts[i] for i in missing])
            if len(fresh) != len(missing):
                raise EmbeddingProviderError(
                    f"{self.model_name} returned {len(fresh)} vectors for {len(missing)} texts"
                )
            for i, vector in zip(missing, fresh):
                self.cache.set(self._key(texts[i]), vector)
                results[i] = vector
        return [vector for vector in results if vector is not None]
