"""Test MarkList."""

import pytest

from bookshelf_place.core.marklist import MarkList


def test_mark_assigns_dense_indices():
    marks = MarkList(10)
    assert marks.mark(7) == 0
    assert marks.mark(2) == 1
    assert marks.mark(7) == 0
    assert marks.list == [7, 2]
    assert len(marks) == 2
    assert marks.index_of(2) == 1


def test_membership():
    marks = MarkList(5)
    marks.mark(3)
    assert marks.is_marked(3)
    assert 3 in marks
    assert 4 not in marks
    assert 99 not in marks


def test_index_of_unmarked():
    marks = MarkList(5)
    with pytest.raises(KeyError):
        marks.index_of(1)


def test_clear_allows_reuse():
    marks = MarkList(5)
    marks.mark(1)
    marks.mark(4)
    marks.clear()
    assert len(marks) == 0
    assert not marks.is_marked(1)
    assert marks.mark(4) == 0


def test_negative_size():
    with pytest.raises(ValueError):
        MarkList(-1)
