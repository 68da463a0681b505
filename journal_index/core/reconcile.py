"""
Index reconciliation between journal notes and their vector sidecars.

Any note without a sidecar is embedded and indexed (self-healing backfill).
Runs once at startup over both stores and is safe to re-run: notes that
already have a sidecar are never touched.
"""

import asyncio
import re
import time
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..vector.codec import extract_searchable_text
from ..vector.embeddings import EmbeddingEngine
from ..vector.record_store import DAY_DIRECTORY_PATTERN, RecordStore
from ..vector.types import VectorRecord
from util.logging import logger

# HH-MM-SS-<fraction>, as produced by the journal writer
NOTE_NAME_PATTERN = re.compile(r"^(\d{2})-(\d{2})-(\d{2})-(\d+)$")

PathLike = Union[str, Path]


def timestamp_from_note_path(note_path: PathLike) -> int:
    """
    Recover a note's creation instant (ms epoch, local time) from its path.

    Expects ``<YYYY-MM-DD>/<HH-MM-SS-ffffff>.md``; anything else falls back to now.
    """
    path = Path(note_path)
    day = path.parent.name
    match = NOTE_NAME_PATTERN.match(path.stem)

    if match and DAY_DIRECTORY_PATTERN.match(day):
        hours, minutes, seconds, fraction = match.groups()
        microseconds = int(fraction[:6].ljust(6, "0"))
        try:
            created = datetime.strptime(f"{day} {hours}:{minutes}:{seconds}", "%Y-%m-%d %H:%M:%S")
        except ValueError:
            created = None
        if created is not None:
            created = created.replace(microsecond=microseconds)
            return int(created.timestamp() * 1000)

    return int(time.time() * 1000)


class IndexReconciler:
    """Backfills missing vector records for notes under a store root."""

    def __init__(self, engine: EmbeddingEngine, store: Optional[RecordStore] = None):
        self.engine = engine
        self.store = store or RecordStore()

    async def index_note(self, note_path: PathLike, content: Optional[str] = None,
                         timestamp: Optional[int] = None) -> Optional[VectorRecord]:
        """
        Embed one note and write its sidecar.

        Args:
            note_path: Path of the note file
            content: Note content, read from disk when omitted
            timestamp: Creation instant in ms, recovered from the path when omitted

        Returns:
            The saved record, or None when the note has no embeddable text
        """
        note_path = Path(note_path)
        if content is None:
            content = await asyncio.to_thread(note_path.read_text, encoding="utf-8", errors="replace")

        text, sections = extract_searchable_text(content)
        if not text:
            return None

        embedding = await self.engine.embed(text)
        record = VectorRecord(
            embedding=embedding,
            text=text,
            sections=sections,
            timestamp=timestamp if timestamp is not None else timestamp_from_note_path(note_path),
            path=str(note_path),
        )
        await asyncio.to_thread(self.store.save, note_path, record)
        return record

    def _missing_notes(self, store_root: PathLike) -> List[Path]:
        return [note for note in self.store.iter_notes(store_root) if not self.store.exists(note)]

    async def reconcile(self, store_root: PathLike) -> int:
        """
        Create sidecars for every note under ``store_root`` that lacks one.

        Per-note failures are logged and skipped; this never raises.

        Returns:
            Number of records created
        """
        start_time = time.time()
        created = 0
        skipped = 0

        try:
            notes = await asyncio.to_thread(self._missing_notes, store_root)
        except OSError as e:
            logger.log_operation("reconcile.store", "failed", {"store_root": str(store_root), "error": str(e)})
            return 0

        for note_path in notes:
            try:
                record = await self.index_note(note_path)
            except Exception as e:
                skipped += 1
                logger.log_index_operation("reconcile", str(note_path), {"error": str(e)}, status="skipped")
                continue

            if record is not None:
                created += 1

        logger.log_reconcile(str(store_root), created, skipped, start_time, time.time())
        return created

    async def reconcile_all(self, store_roots: Iterable[PathLike]) -> int:
        """Reconcile each store root in turn and return the total records created."""
        total = 0
        for store_root in store_roots:
            total += await self.reconcile(store_root)
        return total
