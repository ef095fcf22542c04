"""Shared test configuration, markers and fake collaborators."""

from datetime import date

import pytest

from services.embeddings import EmbeddingProvider, EmbeddingProviderError


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: loads real embedding models (slow, needs network/CPU)"
    )


class KeyedEmbeddingProvider(EmbeddingProvider):
    """Deterministic provider: looks texts up in a dict, no model involved."""

    model_name = "keyed-test-provider"

    def __init__(self, vectors=None, default=None, fail_on=()):
        self.vectors = vectors or {}
        self.default = default
        self.fail_on = set(fail_on)
        self.requested: list[str] = []

    def load(self) -> None:
        pass

    def embed(self, texts):
        self.requested.extend(texts)
        vectors = []
        for text in texts:
            if text in self.fail_on:
                raise EmbeddingProviderError(f"forced failure for {text!r}")
            vector = self.vectors.get(text, self.default)
            if vector is None:
                raise EmbeddingProviderError(f"no vector for {text!r}")
            vectors.append(vector)
        return vectors


@pytest.fixture
def keyed_provider():
    """Factory for KeyedEmbeddingProvider instances."""
    return KeyedEmbeddingProvider


@pytest.fixture
def as_of():
    """Fixed reference date for recency-dependent tests."""
    return date(2026, 1, 15)
