"""
Store root resolution.
Picks the first usable directory for the project and user journal stores.
"""

import os
from typing import List

# Working directories that must never hold a journal
_SYSTEM_DIRECTORIES = {"/", "C:\\", "/System", "/usr"}


def _candidate_paths(subdirectory: str, include_current_directory: bool) -> List[str]:
    candidates = []

    if include_current_directory:
        try:
            cwd = os.getcwd()
        except OSError:
            cwd = None
        if cwd and cwd not in _SYSTEM_DIRECTORIES:
            candidates.append(os.path.join(cwd, subdirectory))

    for var in ("HOME", "USERPROFILE"):
        if os.environ.get(var):
            candidates.append(os.path.join(os.environ[var], subdirectory))

    # Temp directories as last resort
    candidates.append(os.path.join("/tmp", subdirectory))
    for var in ("TEMP", "TMP"):
        if os.environ.get(var):
            candidates.append(os.path.join(os.environ[var], subdirectory))

    return candidates


def resolve_journal_path(subdirectory: str = ".private-journal", include_current_directory: bool = True) -> str:
    """
    Resolve the best available directory for journal storage.

    Args:
        subdirectory: Directory name appended to each candidate base
        include_current_directory: Whether the working directory is a candidate

    Returns:
        Path of the first candidate
    """
    candidates = [path for path in _candidate_paths(subdirectory, include_current_directory) if path]
    return candidates[0] if candidates else os.path.join("/tmp", subdirectory)


def resolve_user_journal_path(subdirectory: str = ".private-journal") -> str:
    """Resolve the user-scoped journal root (never the working directory)."""
    return resolve_journal_path(subdirectory, include_current_directory=False)


def resolve_project_journal_path(subdirectory: str = ".private-journal") -> str:
    """Resolve the project-scoped journal root."""
    return resolve_journal_path(subdirectory, include_current_directory=True)
