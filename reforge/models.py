"""Value types shared by the resolver, grouper and orchestrator."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reforge.registry import TrackedFile


@dataclass(frozen=True, order=True)
class TextSpan:
    """A contiguous region of one file's text.

    Attributes:
        start: Character offset of the first character
        length: Number of characters covered
    """

    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length

    def overlaps(self, other: "TextSpan") -> bool:
        """Whether the two spans share at least one character."""
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class ReferenceLocation:
    """A reference to a symbol: the owning file path and the span."""

    path: str
    span: TextSpan


@dataclass
class EditBatch:
    """Edits destined for one file, in the order they must be applied.

    Attributes:
        file: Tracked file the spans refer to
        spans: Non-overlapping spans sorted by descending start offset
    """

    file: "TrackedFile"
    spans: tuple[TextSpan, ...]

    @property
    def path(self) -> str:
        return self.file.path


def line_starts(text: str) -> list[int]:
    """Offsets at which each line of text begins (lines split on ``\\n``)."""
    starts = [0]
    for index, char in enumerate(text):
        if char == "\n":
            starts.append(index + 1)
    return starts
