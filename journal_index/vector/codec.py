"""
Text normalization and vector similarity for journal notes.
Pure functions, no I/O.
"""

import re
from typing import List, Sequence, Tuple

import numpy as np

from ..core.errors import DimensionMismatch

FRONTMATTER_PATTERN = re.compile(r"^---\n.*?\n---\n", re.DOTALL)
SECTION_PATTERN = re.compile(r"^## (.+)$", re.MULTILINE)
EXCESS_BLANK_LINES = re.compile(r"\n{3,}")


def extract_searchable_text(markdown_content: str) -> Tuple[str, List[str]]:
    """
    Normalize a raw note into embeddable text plus its section labels.

    A leading ``---`` delimited header is stripped when present, ``## Label``
    heading lines are collected (in order, duplicates kept) and removed, runs
    of blank lines collapse to a single blank line and the result is trimmed.

    Args:
        markdown_content: Raw note file content

    Returns:
        Tuple of (text, sections)
    """
    body = FRONTMATTER_PATTERN.sub("", markdown_content, count=1)

    sections = [match.group(1) for match in SECTION_PATTERN.finditer(body)]

    text = SECTION_PATTERN.sub("", body)
    text = EXCESS_BLANK_LINES.sub("\n\n", text)
    return text.strip(), sections


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two equal-length vectors.

    Returns 0.0 when either vector has zero norm.

    Raises:
        DimensionMismatch: If the vectors differ in length
    """
    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b))

    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)

    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = np.dot(vec_a, vec_b) / (norm_a * norm_b)
    return float(np.clip(similarity, -1.0, 1.0))
