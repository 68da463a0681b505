"""
Semantic search over the project and user journal stores.
Exhaustive cosine ranking of sidecar records, with section/date/store filters.
"""

import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

from .config import (
    EXCERPT_LENGTH,
    RECENT_EXCERPT_LENGTH,
    SEARCH_DEFAULT_LIMIT,
    SEARCH_MIN_SCORE,
    get_project_journal_path,
    get_user_journal_path,
)
from .errors import DimensionMismatch
from .reconcile import IndexReconciler
from ..vector.codec import cosine_similarity
from ..vector.embeddings import EmbeddingEngine
from ..vector.record_store import RecordStore
from ..vector.types import SearchOptions, SearchResult, VectorRecord
from util.logging import logger

EXCERPT_STEP = 20
ELLIPSIS = "..."

Candidate = Tuple[VectorRecord, str]


def generate_excerpt(text: str, query: str, max_length: int = EXCERPT_LENGTH) -> str:
    """
    Pick the ``max_length`` window of ``text`` that shows the most query words.

    Windows start every 20 characters; each scores the number of distinct
    lower-cased query words it contains. The first best window wins. With an
    empty query the head of the text is returned.
    """
    if not query or not query.strip():
        return text[:max_length] + (ELLIPSIS if len(text) > max_length else "")

    query_words = list(dict.fromkeys(query.lower().split()))
    text_lower = text.lower()

    best_position = 0
    best_score = 0
    for position in range(0, len(text) - max_length + 1, EXCERPT_STEP):
        window = text_lower[position:position + max_length]
        score = sum(1 for word in query_words if word in window)
        if score > best_score:
            best_score = score
            best_position = position

    excerpt = text[best_position:best_position + max_length]
    if best_position > 0:
        excerpt = ELLIPSIS + excerpt
    if best_position + max_length < len(text):
        excerpt += ELLIPSIS
    return excerpt


def _matches_sections(record: VectorRecord, sections: Optional[List[str]]) -> bool:
    if not sections:
        return True
    wanted = [section.lower() for section in sections]
    return any(want in label.lower() for want in wanted for label in record.sections)


class SearchService:
    """
    Query engine over both journal stores.

    Args:
        engine: Shared embedding engine
        project_path: Project store root (configured default when None)
        user_path: User store root (configured default when None)
        store: Record store used to read sidecars
    """

    def __init__(self, engine: EmbeddingEngine, project_path: Optional[str] = None,
                 user_path: Optional[str] = None, store: Optional[RecordStore] = None):
        self.engine = engine
        self.project_path = project_path or get_project_journal_path()
        self.user_path = user_path or get_user_journal_path()
        self.store = store or RecordStore()

    def _store_roots(self, store_type: str) -> List[Tuple[str, str]]:
        if store_type not in ("project", "user", "both"):
            raise ValueError(f"type must be one of: project, user, both (got {store_type!r})")

        roots = []
        if store_type in ("both", "project"):
            roots.append(("project", self.project_path))
        if store_type in ("both", "user"):
            roots.append(("user", self.user_path))
        return roots

    async def _load_candidates(self, store_type: str) -> List[Candidate]:
        candidates = []
        for label, root in self._store_roots(store_type):
            records = await asyncio.to_thread(self.store.scan_all, root)
            candidates.extend((record, label) for record in records)
        return candidates

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> List[SearchResult]:
        """
        Rank journal entries by semantic similarity to ``query``.

        Raises:
            ModelInitializationFailure: If the query could not be embedded
        """
        options = options or SearchOptions()
        limit = options.limit if options.limit is not None else SEARCH_DEFAULT_LIMIT
        min_score = options.min_score if options.min_score is not None else SEARCH_MIN_SCORE

        query_embedding = await self.engine.embed(query)
        candidates = await self._load_candidates(options.type)

        scored = []
        for record, label in candidates:
            if not _matches_sections(record, options.sections):
                continue
            if options.date_range and not options.date_range.contains(record.timestamp):
                continue

            try:
                score = cosine_similarity(query_embedding, record.embedding)
            except DimensionMismatch as e:
                logger.log_index_operation("score", record.path, {"error": str(e)}, status="skipped")
                continue
            if score >= min_score:
                scored.append((score, record, label))

        scored.sort(key=lambda item: item[0], reverse=True)

        results = [
            SearchResult(
                path=record.path,
                score=score,
                text=record.text,
                sections=list(record.sections),
                timestamp=record.timestamp,
                excerpt=generate_excerpt(record.text, query),
                type=label,
            )
            for score, record, label in scored[:limit]
        ]

        logger.log_search(query, options.type, len(candidates), len(results))
        return results

    async def list_recent(self, options: Optional[SearchOptions] = None) -> List[SearchResult]:
        """List entries newest first. ``min_score`` and ``sections`` are ignored."""
        options = options or SearchOptions()
        limit = options.limit if options.limit is not None else SEARCH_DEFAULT_LIMIT

        candidates = await self._load_candidates(options.type)
        if options.date_range:
            candidates = [c for c in candidates if options.date_range.contains(c[0].timestamp)]

        candidates.sort(key=lambda c: c[0].timestamp, reverse=True)

        return [
            SearchResult(
                path=record.path,
                score=1.0,
                text=record.text,
                sections=list(record.sections),
                timestamp=record.timestamp,
                excerpt=generate_excerpt(record.text, "", RECENT_EXCERPT_LENGTH),
                type=label,
            )
            for record, label in candidates[:limit]
        ]

    async def read_entry(self, path: str) -> Optional[str]:
        """Read a note's raw content; None if it does not exist."""
        try:
            return await asyncio.to_thread(Path(path).read_text, encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return None

    async def reconcile_all(self) -> int:
        """Backfill missing sidecars in both store roots."""
        reconciler = IndexReconciler(self.engine, self.store)
        return await reconciler.reconcile_all([self.project_path, self.user_path])
