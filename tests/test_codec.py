"""
Tests for note text normalization and cosine similarity.
"""

import pytest
from journal_index.core.errors import DimensionMismatch
from journal_index.vector.codec import extract_searchable_text, cosine_similarity


NOTE_WITH_HEADER = """---
title: "12:00:00 PM - May 31, 2025"
date: 2025-05-31T12:00:00.000Z
timestamp: 1717156800000
---

## Feelings

I feel great about this feature implementation.

## Technical Insights

TypeScript interfaces are really powerful for maintaining code quality.
"""


def test_extracts_sections_in_order():
    """Test that section labels are collected in order of appearance."""
    text, sections = extract_searchable_text(NOTE_WITH_HEADER)

    assert sections == ["Feelings", "Technical Insights"]
    assert "I feel great about this feature implementation." in text
    assert "TypeScript interfaces are really powerful" in text


def test_strips_header_and_heading_markers():
    """Test that header fields and heading lines do not reach the embedded text."""
    text, _ = extract_searchable_text(NOTE_WITH_HEADER)

    assert 'title: "12:00:00 PM' not in text
    assert "timestamp:" not in text
    assert "---" not in text
    assert "##" not in text
    assert text == (
        "I feel great about this feature implementation.\n\n"
        "TypeScript interfaces are really powerful for maintaining code quality."
    )


def test_note_without_header():
    """Test that a note with no header keeps all body text."""
    text, sections = extract_searchable_text("## Project Notes\n\nThe build is green.\n")

    assert sections == ["Project Notes"]
    assert text == "The build is green."


def test_unterminated_header_is_left_alone():
    """Test that a malformed header is not stripped and does not raise."""
    content = "---\ntitle: broken\n\nSome body text"
    text, sections = extract_searchable_text(content)

    assert sections == []
    assert "Some body text" in text
    assert "title: broken" in text


def test_duplicate_sections_preserved():
    """Test that repeated labels are kept."""
    content = "## Feelings\n\nfirst\n\n## Feelings\n\nsecond"
    text, sections = extract_searchable_text(content)

    assert sections == ["Feelings", "Feelings"]
    assert text == "first\n\nsecond"


def test_blank_line_runs_collapse():
    """Test that three or more newlines collapse to a single blank line."""
    text, _ = extract_searchable_text("one\n\n\n\n\ntwo\n\n\nthree")
    assert text == "one\n\ntwo\n\nthree"


def test_headings_only_yield_empty_text():
    """Test that a note with no section bodies normalizes to empty text."""
    text, sections = extract_searchable_text("---\ntitle: x\n---\n\n## Feelings\n\n## User Context\n")

    assert text == ""
    assert sections == ["Feelings", "User Context"]


def test_empty_input():
    """Test the empty note edge case."""
    assert extract_searchable_text("") == ("", [])


def test_cosine_identical_vectors():
    """Test that identical vectors score 1."""
    assert cosine_similarity([1, 0, 0], [1, 0, 0]) == pytest.approx(1.0, abs=1e-6)
    assert cosine_similarity([0.3, -0.2, 0.9], [0.3, -0.2, 0.9]) == pytest.approx(1.0, abs=1e-6)


def test_cosine_orthogonal_vectors():
    """Test that orthogonal vectors score 0."""
    assert cosine_similarity([1, 0, 0], [0, 1, 0]) == pytest.approx(0.0, abs=1e-6)


def test_cosine_opposite_vectors():
    """Test that opposite vectors score -1."""
    assert cosine_similarity([1, 2, 3], [-1, -2, -3]) == pytest.approx(-1.0, abs=1e-6)


def test_cosine_is_scale_invariant():
    """Test that magnitude does not affect the score."""
    assert cosine_similarity([1, 1], [5, 5]) == pytest.approx(1.0, abs=1e-6)


def test_cosine_zero_vector_returns_zero():
    """Test that a zero-norm vector scores exactly 0, never NaN."""
    assert cosine_similarity([0, 0, 0], [1, 2, 3]) == 0.0
    assert cosine_similarity([1, 2, 3], [0, 0, 0]) == 0.0
    assert cosine_similarity([0, 0], [0, 0]) == 0.0


def test_cosine_dimension_mismatch():
    """Test that vectors of different length are rejected."""
    with pytest.raises(DimensionMismatch) as exc_info:
        cosine_similarity([1, 0, 0], [1, 0])

    assert exc_info.value.left == 3
    assert exc_info.value.right == 2
    assert isinstance(exc_info.value, ValueError)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
