"""Tests for idle.dirty."""
from __future__ import annotations

from idle.dirty import ALL_CATEGORIES, DirtyCategory, DirtySet


def test_mark_and_drain():
    dirty = DirtySet()
    assert not dirty
    dirty.mark(DirtyCategory.RESOURCE, DirtyCategory.FLAG)
    dirty.mark(DirtyCategory.RESOURCE)
    assert len(dirty) == 2
    assert dirty.is_dirty(DirtyCategory.FLAG)

    drained = dirty.drain()
    assert drained == frozenset({DirtyCategory.RESOURCE, DirtyCategory.FLAG})
    assert not dirty
    assert dirty.drain() == frozenset()


def test_marks_after_drain_land_in_next_set():
    dirty = DirtySet()
    dirty.mark(DirtyCategory.STAT)
    first = dirty.drain()
    dirty.mark(DirtyCategory.ACHIEVEMENT)
    assert first == frozenset({DirtyCategory.STAT})
    assert dirty.drain() == frozenset({DirtyCategory.ACHIEVEMENT})


def test_mark_all():
    dirty = DirtySet()
    dirty.mark_all(DirtyCategory)
    assert dirty.drain() == ALL_CATEGORIES
