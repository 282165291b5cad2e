"""Project source registry.

Owns the canonical in-memory text and version of every tracked file.
`replace_range` is the single mutation primitive; every higher level edit
decomposes into calls to it.
"""

import posixpath
import threading
import weakref
from dataclasses import dataclass, field
from typing import Optional

from reforge.errors import DuplicateError, NotFoundError, RangeError
from reforge.logging import get_logger

log = get_logger(__name__)


@dataclass
class TrackedFile:
    """A file tracked by the registry.

    Attributes:
        path: Canonical path, unique within the registry
        text: Current content
        version: Incremented by one on every mutation
        registry: Owning registry
    """

    path: str
    text: str
    version: int = 0
    registry: Optional["SourceRegistry"] = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of a file's text at one version."""

    path: str
    version: int
    text: str

    def get_length(self) -> int:
        return len(self.text)

    def get_text(self, start: int, end: int) -> str:
        return self.text[start:end]


class Anchor:
    """A position in a tracked file that follows edits.

    The registry shifts live anchors whenever text before them changes.
    An anchor inside a replaced range collapses to the start of the range.
    """

    __slots__ = ("path", "offset", "__weakref__")

    def __init__(self, path: str, offset: int):
        self.path = path
        self.offset = offset

    def __repr__(self) -> str:
        return f"Anchor({self.path!r}, {self.offset})"


class SourceRegistry:
    """In-memory store of every tracked source file."""

    def __init__(self, case_sensitive: bool = True):
        self.case_sensitive = case_sensitive
        self._files: dict[str, TrackedFile] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._anchors: dict[str, weakref.WeakSet] = {}

    def canonical_path(self, path: str) -> str:
        """Normalise a path to the key it is stored under."""
        canonical = posixpath.normpath(path.replace("\\", "/"))
        if not self.case_sensitive:
            canonical = canonical.lower()
        return canonical

    def add_file(self, path: str, initial_text: str = "") -> TrackedFile:
        """Register a new file at version 0.

        Raises:
            DuplicateError: If the path is already tracked
        """
        key = self.canonical_path(path)
        if key in self._files:
            raise DuplicateError(key)

        tracked = TrackedFile(path=key, text=initial_text, registry=self)
        self._files[key] = tracked
        self._locks[key] = threading.Lock()
        self._anchors[key] = weakref.WeakSet()
        log.info("file_added", path=key, length=len(initial_text))
        return tracked

    def has_file(self, path: str) -> bool:
        return self.canonical_path(path) in self._files

    def get_file(self, path: str) -> TrackedFile:
        key = self.canonical_path(path)
        try:
            return self._files[key]
        except KeyError:
            raise NotFoundError(key) from None

    def get_text(self, path: str) -> str:
        return self.get_file(path).text

    def get_version(self, path: str) -> int:
        return self.get_file(path).version

    def paths(self) -> list[str]:
        """Tracked paths in registration order."""
        return list(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def snapshot(self, path: str) -> Snapshot:
        tracked = self.get_file(path)
        with self._locks[tracked.path]:
            return Snapshot(path=tracked.path, version=tracked.version, text=tracked.text)

    def track(self, path: str, offset: int) -> Anchor:
        """Create an anchor at offset that follows later edits."""
        tracked = self.get_file(path)
        if offset < 0 or offset > len(tracked.text):
            raise RangeError(tracked.path, offset, offset, len(tracked.text))
        anchor = Anchor(tracked.path, offset)
        self._anchors[tracked.path].add(anchor)
        return anchor

    def replace_range(self, path: str, start: int, end: int, new_text: str) -> None:
        """Replace ``[start, end)`` of the file's current text.

        Raises:
            NotFoundError: If the path is not tracked
            RangeError: If the range does not fit the current text
        """
        tracked = self.get_file(path)
        with self._locks[tracked.path]:
            length = len(tracked.text)
            if start < 0 or start > end or end > length:
                raise RangeError(tracked.path, start, end, length)

            tracked.text = tracked.text[:start] + new_text + tracked.text[end:]
            tracked.version += 1
            self._shift_anchors(tracked.path, start, end, len(new_text))

        log.debug(
            "range_replaced",
            path=tracked.path,
            start=start,
            end=end,
            inserted=len(new_text),
            version=tracked.version,
        )

    def _shift_anchors(self, path: str, start: int, end: int, inserted: int) -> None:
        delta = inserted - (end - start)
        for anchor in list(self._anchors[path]):
            if start == end:
                if anchor.offset > start:
                    anchor.offset += delta
            elif anchor.offset >= end:
                anchor.offset += delta
            elif anchor.offset > start:
                anchor.offset = start

    def capture(self) -> dict[str, str]:
        """Texts of every tracked file, for a later `restore`."""
        return {path: tracked.text for path, tracked in self._files.items()}

    def restore(self, captured: dict[str, str]) -> None:
        """Put back texts returned by `capture`.

        Files whose text already matches are left alone. Restoring goes
        through `replace_range`, so versions keep increasing.
        """
        for path, text in captured.items():
            tracked = self.get_file(path)
            if tracked.text != text:
                self.replace_range(tracked.path, 0, len(tracked.text), text)
        log.info("registry_restored", files=len(captured))
