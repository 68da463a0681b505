"""Error taxonomy for the journal index."""


class JournalIndexError(Exception):
    """Base exception for journal index operations."""
    pass


class DimensionMismatch(JournalIndexError, ValueError):
    """Raised when two vectors of different length are compared."""

    def __init__(self, left: int, right: int):
        self.left = left
        self.right = right
        super().__init__(f"Vectors must have same length (got {left} and {right})")


class ModelInitializationFailure(JournalIndexError):
    """Raised when the embedding model cannot be loaded."""
    pass


class RecordParseFailure(JournalIndexError):
    """Raised when a sidecar record cannot be decoded into a VectorRecord."""

    def __init__(self, sidecar_path: str, reason: str):
        self.sidecar_path = sidecar_path
        self.reason = reason
        super().__init__(f"Failed to parse vector record {sidecar_path}: {reason}")
