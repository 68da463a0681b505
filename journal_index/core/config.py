"""
Journal index configuration.
All settings are read from environment variables with local-first defaults.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Store roots (resolved through paths.py when unset)
JOURNAL_PROJECT_PATH = os.getenv("JOURNAL_PROJECT_PATH")
JOURNAL_USER_PATH = os.getenv("JOURNAL_USER_PATH")
JOURNAL_SUBDIRECTORY = os.getenv("JOURNAL_SUBDIRECTORY", ".private-journal")

# Embedding configuration
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "sentence_transformers")  # sentence_transformers|hash
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "sentence-transformers/all-MiniLM-L6-v2")
EMBED_DIM = int(os.getenv("EMBED_DIM", "384"))

# Search defaults
SEARCH_DEFAULT_LIMIT = int(os.getenv("SEARCH_DEFAULT_LIMIT", "10"))
SEARCH_MIN_SCORE = float(os.getenv("SEARCH_MIN_SCORE", "0.1"))
EXCERPT_LENGTH = int(os.getenv("EXCERPT_LENGTH", "200"))
RECENT_EXCERPT_LENGTH = int(os.getenv("RECENT_EXCERPT_LENGTH", "150"))
RECENT_DEFAULT_DAYS = int(os.getenv("RECENT_DEFAULT_DAYS", "30"))

# File pairing
NOTE_EXTENSION = ".md"
SIDECAR_EXTENSION = ".embedding"

# Startup behaviour
RECONCILE_ON_STARTUP = os.getenv("RECONCILE_ON_STARTUP", "true").lower() == "true"

# Debug flag
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Version string
VERSION = "1.0.0"

VALID_PROVIDERS = ("sentence_transformers", "hash")
STORE_TYPES = ("project", "user")

_engine = None


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def get_project_journal_path() -> str:
    """Get the project store root, honouring JOURNAL_PROJECT_PATH."""
    explicit = os.getenv("JOURNAL_PROJECT_PATH")
    if explicit:
        return str(Path(explicit).expanduser().resolve())

    from .paths import resolve_project_journal_path
    return resolve_project_journal_path(os.getenv("JOURNAL_SUBDIRECTORY", JOURNAL_SUBDIRECTORY))


def get_user_journal_path() -> str:
    """Get the user store root, honouring JOURNAL_USER_PATH."""
    explicit = os.getenv("JOURNAL_USER_PATH")
    if explicit:
        return str(Path(explicit).expanduser().resolve())

    from .paths import resolve_user_journal_path
    return resolve_user_journal_path(os.getenv("JOURNAL_SUBDIRECTORY", JOURNAL_SUBDIRECTORY))


def get_embedding_provider():
    """Get configured embedding provider implementation."""
    provider = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER)

    if provider == "hash":
        from journal_index.vector.embeddings import DeterministicHashEmbedding
        return DeterministicHashEmbedding(dimension=int(os.getenv("EMBED_DIM", str(EMBED_DIM))))

    from journal_index.vector.embeddings import SentenceTransformerEmbedding
    return SentenceTransformerEmbedding(os.getenv("EMBED_MODEL_NAME", EMBED_MODEL_NAME))


def get_embedding_engine():
    """Get the process-wide embedding engine, constructing it on first use.

    The model itself is not loaded here; loading happens on the first embed call.
    """
    global _engine
    if _engine is None:
        from journal_index.vector.embeddings import EmbeddingEngine
        _engine = EmbeddingEngine(get_embedding_provider)
    return _engine


def reset_embedding_engine():
    """Drop the cached engine so the next lookup rebuilds it from the environment."""
    global _engine
    _engine = None


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    provider = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER)
    if provider not in VALID_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {provider}")

    if EMBED_DIM < 1:
        issues.append("EMBED_DIM must be >= 1")

    if SEARCH_DEFAULT_LIMIT < 1:
        issues.append("SEARCH_DEFAULT_LIMIT must be >= 1")

    if not -1.0 <= SEARCH_MIN_SCORE <= 1.0:
        issues.append("SEARCH_MIN_SCORE must be within [-1, 1]")

    if EXCERPT_LENGTH < 1 or RECENT_EXCERPT_LENGTH < 1:
        issues.append("Excerpt lengths must be >= 1")

    return issues
