"""
Vector layer for the journal index: text normalization, embeddings and sidecar records.
"""

# Package initialization for vector module
from .codec import extract_searchable_text, cosine_similarity
from .embeddings import IEmbeddingProvider, DeterministicHashEmbedding, SentenceTransformerEmbedding, EmbeddingEngine
from .record_store import RecordStore
from .types import VectorRecord, SearchResult, SearchOptions, DateRange

__all__ = [
    'extract_searchable_text',
    'cosine_similarity',
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding',
    'EmbeddingEngine',
    'RecordStore',
    'VectorRecord',
    'SearchResult',
    'SearchOptions',
    'DateRange'
]
