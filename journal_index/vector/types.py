"""
Vector index types.
Sidecar records are validated through pydantic; query-side shapes are plain dataclasses.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictInt, field_validator


class VectorRecord(BaseModel):
    """Sidecar record for exactly one journal note."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    embedding: List[float]
    """Embedding of the normalized note text"""

    text: str
    """Normalized text that was embedded"""

    sections: List[str]
    """Section labels in order of appearance"""

    timestamp: StrictInt
    """Note creation instant in milliseconds since the epoch"""

    path: str
    """Absolute path of the indexed note"""

    @field_validator('embedding')
    @classmethod
    def embedding_must_not_be_empty(cls, v):
        if not v:
            raise ValueError('embedding cannot be empty')
        return v


TimeBound = Union[datetime, int, None]


def to_epoch_ms(value: Union[datetime, int]) -> int:
    """Convert a datetime (naive = local time) or millisecond int to epoch milliseconds."""
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    return int(value)


@dataclass
class DateRange:
    """Timestamp bounds; both ends are inclusive and either may be open."""

    start: TimeBound = None
    end: TimeBound = None

    def contains(self, timestamp: int) -> bool:
        if self.start is not None and timestamp < to_epoch_ms(self.start):
            return False
        if self.end is not None and timestamp > to_epoch_ms(self.end):
            return False
        return True


@dataclass
class SearchOptions:
    """Options shared by search and list_recent."""

    limit: Optional[int] = None
    min_score: Optional[float] = None
    sections: Optional[List[str]] = None
    date_range: Optional[DateRange] = None
    type: str = "both"  # project|user|both


@dataclass
class SearchResult:
    """Represents one ranked (or recent) journal entry."""

    path: str
    score: float
    text: str
    sections: List[str] = field(default_factory=list)
    timestamp: int = 0
    excerpt: str = ""
    type: str = "project"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
