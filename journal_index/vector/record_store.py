"""
Sidecar persistence for vector records.
Each note ``X.md`` pairs with exactly one ``X.embedding`` JSON file beside it.
"""

import re
from pathlib import Path
from typing import Iterator, List, Optional, Union

from pydantic import ValidationError

from ..core.config import NOTE_EXTENSION, SIDECAR_EXTENSION
from ..core.errors import RecordParseFailure
from .types import VectorRecord
from util.logging import logger

DAY_DIRECTORY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

PathLike = Union[str, Path]


def iter_day_directories(store_root: PathLike) -> Iterator[Path]:
    """Yield the date-partitioned (YYYY-MM-DD) subdirectories of a store root, oldest first."""
    root = Path(store_root)
    try:
        entries = sorted(root.iterdir())
    except FileNotFoundError:
        return

    for entry in entries:
        if entry.is_dir() and DAY_DIRECTORY_PATTERN.match(entry.name):
            yield entry


class RecordStore:
    """Reads and writes vector record sidecars next to their notes."""

    def __init__(self, note_extension: str = NOTE_EXTENSION, sidecar_extension: str = SIDECAR_EXTENSION):
        self.note_extension = note_extension
        self.sidecar_extension = sidecar_extension

    def sidecar_path(self, note_path: PathLike) -> Path:
        """Map a note path to its sidecar path (same directory and base name)."""
        path = Path(note_path)
        if path.suffix == self.note_extension:
            return path.with_suffix(self.sidecar_extension)
        return path.with_name(path.name + self.sidecar_extension)

    def save(self, note_path: PathLike, record: VectorRecord) -> Path:
        """
        Write a record as the sidecar of ``note_path``, replacing any previous one.

        Returns:
            Path of the written sidecar
        """
        target = self.sidecar_path(note_path)
        target.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        logger.log_index_operation("save", str(note_path), {"dimension": len(record.embedding)})
        return target

    def load(self, note_path: PathLike) -> Optional[VectorRecord]:
        """
        Load the sidecar record of ``note_path``.

        Returns:
            The record, or None if no sidecar exists yet

        Raises:
            RecordParseFailure: If the sidecar is not a valid record
            OSError: For I/O failures other than a missing file
        """
        return self.load_sidecar(self.sidecar_path(note_path))

    def load_sidecar(self, sidecar: PathLike) -> Optional[VectorRecord]:
        sidecar = Path(sidecar)
        try:
            content = sidecar.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise RecordParseFailure(str(sidecar), "not valid UTF-8") from e

        try:
            return VectorRecord.model_validate_json(content)
        except ValidationError as e:
            raise RecordParseFailure(str(sidecar), f"{e.error_count()} validation error(s)") from e

    def exists(self, note_path: PathLike) -> bool:
        return self.sidecar_path(note_path).exists()

    def iter_records(self, store_root: PathLike) -> Iterator[VectorRecord]:
        """
        Lazily yield every readable record under a store root.

        Corrupt or unreadable sidecars are logged and skipped. A missing root
        yields nothing.
        """
        for day_dir in iter_day_directories(store_root):
            try:
                sidecars = sorted(day_dir.glob(f"*{self.sidecar_extension}"))
            except OSError as e:
                logger.log_index_operation("scan", str(day_dir), {"error": str(e)}, status="skipped")
                continue

            for sidecar in sidecars:
                try:
                    record = self.load_sidecar(sidecar)
                except (RecordParseFailure, OSError) as e:
                    logger.log_index_operation("load", str(sidecar), {"error": str(e)}, status="skipped")
                    continue

                if record is not None:
                    yield record

    def scan_all(self, store_root: PathLike) -> List[VectorRecord]:
        """Load every readable record under a store root."""
        return list(self.iter_records(store_root))

    def iter_notes(self, store_root: PathLike) -> Iterator[Path]:
        """Yield every note file under a store root."""
        for day_dir in iter_day_directories(store_root):
            yield from sorted(day_dir.glob(f"*{self.note_extension}"))

