"""
Journal writer.
Writes timestamped markdown notes into the project and user stores and
indexes each one as it is written.
"""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .config import get_embedding_engine, get_project_journal_path, get_user_journal_path
from .reconcile import IndexReconciler
from ..vector.embeddings import EmbeddingEngine
from ..vector.record_store import RecordStore
from util.logging import logger

# Thought categories in the order they are written, with their section labels
SECTION_LABELS = {
    "feelings": "Feelings",
    "project_notes": "Project Notes",
    "user_context": "User Context",
    "technical_insights": "Technical Insights",
    "world_knowledge": "World Knowledge",
}
PROJECT_CATEGORIES = ("project_notes",)
USER_CATEGORIES = ("feelings", "user_context", "technical_insights", "world_knowledge")


def format_date(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d")


def format_time(moment: datetime) -> str:
    return moment.strftime("%H-%M-%S-") + f"{moment.microsecond:06d}"


def _epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def format_frontmatter(moment: datetime) -> str:
    time_display = moment.strftime("%I:%M:%S %p").lstrip("0")
    date_display = f"{moment.strftime('%B')} {moment.day}, {moment.year}"
    utc = moment.astimezone(timezone.utc)
    iso = utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"

    return (
        "---\n"
        f'title: "{time_display} - {date_display}"\n'
        f"date: {iso}\n"
        f"timestamp: {_epoch_ms(moment)}\n"
        "---\n"
    )


def format_thoughts(thoughts: Dict[str, Optional[str]], moment: datetime) -> str:
    sections = []
    for category, label in SECTION_LABELS.items():
        body = thoughts.get(category)
        if body and body.strip():
            sections.append(f"## {label}\n\n{body.strip()}")

    return f"{format_frontmatter(moment)}\n" + "\n\n".join(sections) + "\n"


class JournalManager:
    """
    Writes notes to the journal stores and embeds them at write time.

    A failure to embed never loses the note; reconciliation picks it up later.
    """

    def __init__(self, project_path: Optional[str] = None, user_path: Optional[str] = None,
                 engine: Optional[EmbeddingEngine] = None, store: Optional[RecordStore] = None):
        self.project_path = project_path or get_project_journal_path()
        self.user_path = user_path or get_user_journal_path()
        self.store = store or RecordStore()
        self.reconciler = IndexReconciler(engine or get_embedding_engine(), self.store)

    async def write_entry(self, content: str) -> Path:
        """Write a free-form entry to the project store."""
        moment = datetime.now().astimezone()
        body = f"{format_frontmatter(moment)}\n{content.strip()}\n"
        return await self._write(self.project_path, body, moment)

    async def write_thoughts(self, thoughts: Dict[str, Optional[str]]) -> List[Path]:
        """
        Write categorized thoughts.

        ``project_notes`` goes to the project store; feelings, user context,
        technical insights and world knowledge go to the user store. Each
        store receives at most one note.

        Raises:
            ValueError: If no category has content
        """
        moment = datetime.now().astimezone()
        written = []

        for root, categories in ((self.project_path, PROJECT_CATEGORIES), (self.user_path, USER_CATEGORIES)):
            subset = {category: thoughts.get(category) for category in categories}
            if any(value and value.strip() for value in subset.values()):
                written.append(await self._write(root, format_thoughts(subset, moment), moment))

        if not written:
            raise ValueError("At least one thought category must be provided")
        return written

    async def generate_missing_embeddings(self) -> int:
        """Backfill sidecars for notes in both stores written before indexing existed."""
        return await self.reconciler.reconcile_all([self.project_path, self.user_path])

    async def _write(self, root: str, content: str, moment: datetime) -> Path:
        day_directory = Path(root) / format_date(moment)
        note_path = day_directory / f"{format_time(moment)}{self.store.note_extension}"

        try:
            await asyncio.to_thread(day_directory.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise OSError(f"Failed to create journal directory at {day_directory}: {e}") from e

        await asyncio.to_thread(note_path.write_text, content, encoding="utf-8")

        try:
            record = await self.reconciler.index_note(note_path, content=content, timestamp=_epoch_ms(moment))
        except Exception as e:
            logger.log_index_operation("embed", str(note_path), {"error": str(e)}, status="failed")
            record = None

        logger.log_entry_write(str(note_path), record.sections if record else [])
        return note_path
