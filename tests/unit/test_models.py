"""Tests for record helpers and pagination rules."""

import pytest

from schoolshelf.core.models import BookRecord, BookType, clamp_limit, clamp_offset, normalize_class_groups


@pytest.mark.parametrize(
    "requested,expected",
    [(None, 50), (0, 50), (-5, 50), (1, 1), (100, 100), (1000, 100)],
)
def test_clamp_limit(requested, expected):
    assert clamp_limit(requested) == expected


@pytest.mark.parametrize("requested,expected", [(None, 0), (-1, 0), (7, 7)])
def test_clamp_offset(requested, expected):
    assert clamp_offset(requested) == expected


def test_normalize_class_groups():
    assert normalize_class_groups(["B", "A", "B"]) == ["A", "B"]


def test_book_record_parses_aggregated_tags():
    row = {
        "id": "b1",
        "title": "T",
        "author": "A",
        "description": None,
        "cover_url": None,
        "pdf_url": None,
        "curriculum_component": "Mathematics",
        "book_type": "professor",
        "class_groups": '["2nd Year A", "1st Year A"]',
    }
    book = BookRecord.from_row(row)
    assert book.class_groups == ["1st Year A", "2nd Year A"]
    assert book.book_type is BookType.PROFESSOR
    assert book.description == ""
