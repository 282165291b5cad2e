"""Tests for the project source registry."""

import threading

import pytest

from reforge.errors import DuplicateError, NotFoundError, RangeError
from reforge.registry import SourceRegistry


class TestFileRegistration:
    """Tests for adding and reading files."""

    def test_add_file_starts_at_version_zero(self, registry):
        """New files are tracked at version 0."""
        tracked = registry.add_file("a.py", "x = 1\n")
        assert tracked.version == 0
        assert tracked.registry is registry
        assert registry.get_text("a.py") == "x = 1\n"
        assert registry.get_version("a.py") == 0

    def test_duplicate_path_rejected(self, registry):
        """Registering the same path twice fails."""
        registry.add_file("a.py", "")
        with pytest.raises(DuplicateError) as exc_info:
            registry.add_file("a.py", "other")
        assert exc_info.value.path == "a.py"
        assert registry.get_text("a.py") == ""

    def test_duplicate_after_normalisation(self, registry):
        """Equivalent spellings of a path are the same file."""
        registry.add_file("pkg/mod.py", "")
        with pytest.raises(DuplicateError):
            registry.add_file("pkg/./mod.py", "")

    def test_untracked_path(self, registry):
        """Reading an untracked path raises NotFoundError."""
        with pytest.raises(NotFoundError):
            registry.get_text("missing.py")
        with pytest.raises(NotFoundError):
            registry.get_version("missing.py")

    def test_case_insensitive_registry(self):
        """Case-insensitive registries fold paths to lower case."""
        registry = SourceRegistry(case_sensitive=False)
        registry.add_file("Pkg/Mod.py", "x")
        assert registry.has_file("pkg/mod.py")
        assert registry.paths() == ["pkg/mod.py"]

    def test_paths_in_registration_order(self, registry):
        """paths() keeps registration order."""
        for name in ["b.py", "a.py", "c.py"]:
            registry.add_file(name, "")
        assert registry.paths() == ["b.py", "a.py", "c.py"]
        assert len(registry) == 3


class TestReplaceRange:
    """Tests for the single mutation primitive."""

    def test_replace_middle(self, registry):
        """Replacing a range splices in the new text."""
        registry.add_file("a", "let foo = 1;")
        registry.replace_range("a", 4, 7, "barbaz")
        assert registry.get_text("a") == "let barbaz = 1;"

    def test_version_increments_by_one(self, registry):
        """Every successful call bumps the version by exactly one."""
        registry.add_file("a", "abcdef")
        versions = [registry.get_version("a")]
        for start, end, text in [(0, 1, "X"), (2, 2, "--"), (0, 8, ""), (0, 0, "z")]:
            registry.replace_range("a", start, end, text)
            versions.append(registry.get_version("a"))
        assert versions == [0, 1, 2, 3, 4]

    def test_identical_replacement_still_bumps_version(self, registry):
        """Replacing text with itself is inert but still a mutation."""
        registry.add_file("a", "foo")
        registry.replace_range("a", 0, 3, "foo")
        assert registry.get_text("a") == "foo"
        assert registry.get_version("a") == 1

    @pytest.mark.parametrize("start,end", [(3, 2), (0, 7), (-1, 2)])
    def test_invalid_range(self, registry, start, end):
        """Out-of-bounds or inverted ranges raise RangeError."""
        registry.add_file("a", "abcdef")
        with pytest.raises(RangeError):
            registry.replace_range("a", start, end, "x")
        assert registry.get_text("a") == "abcdef"
        assert registry.get_version("a") == 0

    def test_end_at_length_allowed(self, registry):
        """A range ending exactly at the text length is valid."""
        registry.add_file("a", "abc")
        registry.replace_range("a", 3, 3, "d")
        assert registry.get_text("a") == "abcd"

    def test_untracked_file(self, registry):
        """Replacing in an untracked file raises NotFoundError."""
        with pytest.raises(NotFoundError):
            registry.replace_range("nope", 0, 0, "x")

    def test_other_files_untouched(self, registry):
        """Edits never change another file's version."""
        registry.add_file("a", "aaa")
        registry.add_file("b", "bbb")
        registry.replace_range("a", 0, 1, "A")
        assert registry.get_version("b") == 0
        assert registry.get_text("b") == "bbb"


class TestSnapshots:
    """Tests for snapshots and capture/restore."""

    def test_snapshot_is_frozen(self, registry):
        """A snapshot keeps the text it was taken at."""
        registry.add_file("a", "hello")
        snapshot = registry.snapshot("a")
        registry.replace_range("a", 0, 5, "bye")
        assert snapshot.text == "hello"
        assert snapshot.version == 0
        assert snapshot.get_length() == 5
        assert snapshot.get_text(1, 3) == "el"

    def test_restore_keeps_versions_increasing(self, registry):
        """Restoring goes through replace_range."""
        registry.add_file("a", "one")
        registry.add_file("b", "two")
        captured = registry.capture()
        registry.replace_range("a", 0, 3, "uno")

        registry.restore(captured)

        assert registry.get_text("a") == "one"
        assert registry.get_version("a") == 2
        assert registry.get_version("b") == 0


class TestAnchors:
    """Tests for anchors following edits."""

    def test_anchor_after_edit_shifts(self, registry):
        """Edits before an anchor move it by the length change."""
        registry.add_file("a", "let foo = foo;")
        anchor = registry.track("a", 10)
        registry.replace_range("a", 4, 7, "x")
        assert anchor.offset == 8
        assert registry.get_text("a")[anchor.offset:] == "foo;"

    def test_anchor_at_edit_start_stays(self, registry):
        """An anchor at the start of a replaced range stays put."""
        registry.add_file("a", "let foo = 1;")
        anchor = registry.track("a", 4)
        registry.replace_range("a", 4, 7, "barbaz")
        assert anchor.offset == 4

    def test_anchor_inside_replaced_range_collapses(self, registry):
        """An anchor inside a replaced range moves to its start."""
        registry.add_file("a", "abcdefgh")
        anchor = registry.track("a", 5)
        registry.replace_range("a", 2, 7, "")
        assert anchor.offset == 2

    def test_anchor_before_edit_unchanged(self, registry):
        """Edits after an anchor do not move it."""
        registry.add_file("a", "abcdefgh")
        anchor = registry.track("a", 1)
        registry.replace_range("a", 4, 6, "XXXXXX")
        assert anchor.offset == 1

    def test_insertion_at_anchor(self, registry):
        """A pure insertion at the anchor leaves it in place."""
        registry.add_file("a", "abc")
        anchor = registry.track("a", 1)
        registry.replace_range("a", 1, 1, "zz")
        assert anchor.offset == 1

    def test_track_out_of_bounds(self, registry):
        """Anchors must lie inside the text."""
        registry.add_file("a", "abc")
        with pytest.raises(RangeError):
            registry.track("a", 4)


class TestConcurrency:
    """Tests for per-file serialisation of mutations."""

    def test_concurrent_replacements_are_serialised(self, registry):
        """Every replacement from every thread lands exactly once."""
        registry.add_file("a.py", "")
        workers, calls = 8, 250

        def insert():
            for _ in range(calls):
                registry.replace_range("a.py", 0, 0, "x")

        threads = [threading.Thread(target=insert) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert registry.get_version("a.py") == workers * calls
        assert registry.get_text("a.py") == "x" * (workers * calls)

    def test_anchor_shifts_under_concurrent_edits(self, registry):
        """Anchors see every insertion in front of them."""
        registry.add_file("a.py", "<end")
        anchor = registry.track("a.py", 1)

        def insert():
            for _ in range(100):
                registry.replace_range("a.py", 0, 0, "ab")

        threads = [threading.Thread(target=insert) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert anchor.offset == 1 + 4 * 100 * 2
        assert registry.get_text("a.py")[anchor.offset:] == "end"
