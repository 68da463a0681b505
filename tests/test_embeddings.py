"""
Tests for embedding providers and the shared embedding engine.
"""

import asyncio
import time

import numpy as np
import pytest
from unittest.mock import patch
from journal_index.core.errors import ModelInitializationFailure
from journal_index.vector.embeddings import (
    IEmbeddingProvider,
    DeterministicHashEmbedding,
    EmbeddingEngine,
)


class CountingProvider(DeterministicHashEmbedding):
    """Hash provider whose load is slow and counted."""

    loads = 0

    def load(self):
        CountingProvider.loads += 1
        time.sleep(0.05)


@pytest.fixture(autouse=True)
def reset_counter():
    CountingProvider.loads = 0


def test_embedding_interface():
    """Test that the hash provider implements the interface."""
    embedder = DeterministicHashEmbedding(dimension=384)

    assert isinstance(embedder, IEmbeddingProvider)
    assert embedder.get_dimension() == 384


def test_deterministic_embedding():
    """Test that the same input always produces the same output."""
    embedder1 = DeterministicHashEmbedding(dimension=384)
    embedder2 = DeterministicHashEmbedding(dimension=384)

    vector1 = embedder1.embed_text("Hello, world!")
    vector2 = embedder2.embed_text("Hello, world!")

    assert vector1 == vector2
    assert len(vector1) == 384


def test_hash_embedding_is_unit_length():
    """Test that non-empty text produces an L2-normalized vector."""
    vector = DeterministicHashEmbedding(dimension=64).embed_text("vector embeddings for journal search")
    assert np.linalg.norm(vector) == pytest.approx(1.0)


def test_hash_embedding_shares_words():
    """Test that texts sharing words are more similar than unrelated texts."""
    embedder = DeterministicHashEmbedding(dimension=384)

    base = np.array(embedder.embed_text("typescript errors"))
    related = np.array(embedder.embed_text("TypeScript"))
    unrelated = np.array(embedder.embed_text("component architecture"))

    assert float(np.dot(base, related)) > float(np.dot(base, unrelated))


def test_hash_embedding_edge_cases():
    """Test empty and punctuation-only text produce zero vectors of full dimension."""
    embedder = DeterministicHashEmbedding(dimension=32)

    assert embedder.embed_text("") == [0.0] * 32
    assert embedder.embed_text("!@#$%^&*()") == [0.0] * 32
    assert len(embedder.embed_text("A" * 1000)) == 32


def test_engine_embed_returns_unit_vectors():
    """Test that the engine normalizes provider output."""

    class RawProvider(IEmbeddingProvider):
        def embed_text(self, text):
            return [3.0, 4.0]

        def get_dimension(self):
            return 2

    engine = EmbeddingEngine(RawProvider)
    vector = asyncio.run(engine.embed("anything"))

    assert vector == pytest.approx([0.6, 0.8])
    assert engine.is_initialized


def test_engine_loads_model_once_under_concurrency():
    """Test that concurrent first callers share one model load."""
    factory_calls = []

    def factory():
        factory_calls.append(1)
        return CountingProvider(dimension=16)

    engine = EmbeddingEngine(factory)

    async def run():
        return await asyncio.gather(*(engine.embed(f"entry number {i}") for i in range(5)))

    vectors = asyncio.run(run())

    assert len(vectors) == 5
    assert all(len(v) == 16 for v in vectors)
    assert len(factory_calls) == 1
    assert CountingProvider.loads == 1

    # Subsequent calls reuse the loaded provider
    asyncio.run(engine.embed("one more"))
    assert len(factory_calls) == 1
    assert CountingProvider.loads == 1


def test_engine_failure_reaches_every_waiter_and_retries():
    """Test that a failed load fails all concurrent callers and is not cached."""
    attempts = []

    def factory():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("model files missing")
        return DeterministicHashEmbedding(dimension=8)

    engine = EmbeddingEngine(factory)

    async def run():
        return await asyncio.gather(engine.embed("a"), engine.embed("b"), engine.embed("c"),
                                    return_exceptions=True)

    results = asyncio.run(run())

    assert len(attempts) == 1
    assert all(isinstance(result, ModelInitializationFailure) for result in results)
    assert "model files missing" in str(results[0])
    assert not engine.is_initialized

    vector = asyncio.run(engine.embed("retry"))
    assert len(attempts) == 2
    assert len(vector) == 8
    assert engine.is_initialized


def test_engine_load_failure_wraps_provider_load_error():
    """Test that errors raised while loading the model are reported as init failures."""

    class BrokenProvider(DeterministicHashEmbedding):
        def load(self):
            raise OSError("cannot download model")

    engine = EmbeddingEngine(BrokenProvider)

    with pytest.raises(ModelInitializationFailure, match="cannot download model"):
        asyncio.run(engine.embed("text"))


def test_engine_retries_after_abandoned_failed_load():
    """Test that a load failing after its only caller was cancelled is not reused."""
    attempts = []

    class SlowBrokenProvider(DeterministicHashEmbedding):
        def load(self):
            time.sleep(0.05)
            raise OSError("download interrupted")

    def factory():
        attempts.append(1)
        if len(attempts) == 1:
            return SlowBrokenProvider(dimension=8)
        return DeterministicHashEmbedding(dimension=8)

    engine = EmbeddingEngine(factory)

    async def run():
        abandoned = asyncio.ensure_future(engine.embed("abandoned"))
        await asyncio.sleep(0.01)
        abandoned.cancel()
        with pytest.raises(asyncio.CancelledError):
            await abandoned

        # Let the abandoned load finish failing
        await asyncio.sleep(0.2)
        return await engine.embed("fresh")

    vector = asyncio.run(run())

    assert len(attempts) == 2
    assert len(vector) == 8
    assert engine.is_initialized


def test_engine_load_failure_logs_model_name():
    """Test that load failures are logged under the provider's model name."""

    class BrokenProvider(DeterministicHashEmbedding):
        def load(self):
            raise OSError("cannot download model")

    engine = EmbeddingEngine(lambda: BrokenProvider(dimension=8))

    with patch("journal_index.vector.embeddings.logger") as mock_logger:
        with pytest.raises(ModelInitializationFailure):
            asyncio.run(engine.embed("text"))

    failed = [c for c in mock_logger.log_model_event.call_args_list if c.kwargs.get("status") == "failed"]
    assert len(failed) == 1
    assert failed[0].args[0] == "deterministic-hash"


def test_engine_dimension():
    """Test dimension lookup goes through the loaded provider."""
    engine = EmbeddingEngine(lambda: DeterministicHashEmbedding(dimension=128))
    assert asyncio.run(engine.get_dimension()) == 128


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
