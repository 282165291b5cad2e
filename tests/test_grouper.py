"""Tests for the edit grouper."""

import pytest

from reforge.errors import NotFoundError, OverlapError
from reforge.grouper import EditGrouper
from reforge.models import ReferenceLocation, TextSpan


def loc(path, start, length=3):
    return ReferenceLocation(path, TextSpan(start, length))


@pytest.fixture
def grouper(registry):
    """Grouper over a registry with two files."""
    registry.add_file("a", "x" * 40)
    registry.add_file("b", "y" * 40)
    return EditGrouper(registry)


class TestGrouping:
    """Tests for partitioning and ordering."""

    def test_partition_by_file(self, grouper):
        """One batch per file, in order of first appearance."""
        batches = grouper.group([loc("b", 1), loc("a", 5), loc("b", 9)])
        assert [b.path for b in batches] == ["b", "a"]
        assert batches[0].spans == (TextSpan(9, 3), TextSpan(1, 3))
        assert batches[1].spans == (TextSpan(5, 3),)

    def test_descending_order(self, grouper):
        """Spans are sorted by descending start regardless of input order."""
        batches = grouper.group([loc("a", 10), loc("a", 2), loc("a", 20)])
        assert [s.start for s in batches[0].spans] == [20, 10, 2]

    def test_duplicates_collapse(self, grouper):
        """Exact duplicate spans produce one edit."""
        batches = grouper.group([loc("a", 4), loc("a", 4), loc("a", 20), loc("a", 4)])
        assert batches[0].spans == (TextSpan(20, 3), TextSpan(4, 3))

    def test_batch_carries_tracked_file(self, grouper, registry):
        """Batches reference the registry's file record."""
        batches = grouper.group([loc("a", 0)])
        assert batches[0].file is registry.get_file("a")

    def test_empty_input(self, grouper):
        """No locations, no batches."""
        assert grouper.group([]) == []

    def test_adjacent_spans_do_not_overlap(self, grouper):
        """Touching spans are fine."""
        batches = grouper.group([loc("a", 0), loc("a", 3), loc("a", 6, 0)])
        assert [s.start for s in batches[0].spans] == [6, 3, 0]


class TestGroupingErrors:
    """Tests for invariant violations."""

    def test_overlap_rejected(self, grouper):
        """Overlapping spans in one file raise OverlapError."""
        with pytest.raises(OverlapError) as exc_info:
            grouper.group([loc("a", 4, 3), loc("a", 5, 3)])
        assert exc_info.value.path == "a"
        assert exc_info.value.first == TextSpan(4, 3)
        assert exc_info.value.second == TextSpan(5, 3)

    def test_same_start_different_length_rejected(self, grouper):
        """Differently-sized reports at one offset are overlaps."""
        with pytest.raises(OverlapError):
            grouper.group([loc("a", 4, 3), loc("a", 4, 5)])

    def test_overlap_only_within_file(self, grouper):
        """Identical spans in different files are independent."""
        batches = grouper.group([loc("a", 4), loc("b", 4)])
        assert len(batches) == 2

    def test_untracked_file(self, grouper):
        """Locations in untracked files raise NotFoundError."""
        with pytest.raises(NotFoundError):
            grouper.group([loc("zzz", 0)])
