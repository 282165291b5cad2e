"""Node handles and the capabilities they expose.

Callers ask for a capability (`isinstance(node, Renameable)`) instead of
relying on a class hierarchy.
"""

import re
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from reforge.orchestrator import RenameOrchestrator
    from reforge.registry import Anchor, SourceRegistry

# Unicode letters or underscore first; `$` and a leading `#` for script sources.
IDENTIFIER = re.compile(r"\#?(?:[^\W\d]|\$)[\w$]*")


@runtime_checkable
class HasSourceFile(Protocol):
    def get_source_file_path(self) -> Optional[str]: ...

    def get_start(self) -> int: ...


@runtime_checkable
class HasName(Protocol):
    def get_name(self) -> str: ...


@runtime_checkable
class Renameable(Protocol):
    def rename(self, new_name: str) -> None: ...


class Node:
    """A position in a tracked file.

    The position is held by a registry anchor, so it keeps pointing at the
    same text while other parts of the file are edited.
    """

    def __init__(
        self,
        anchor: Optional["Anchor"],
        registry: Optional["SourceRegistry"] = None,
        kind: str = "node",
        start: int = 0,
    ):
        self.anchor = anchor
        self.registry = registry
        self.kind = kind
        self._start = start

    @staticmethod
    def detached(start: int = 0, kind: str = "node") -> "Node":
        """A node with no owning source file."""
        return Node(None, None, kind, start=start)

    def get_source_file_path(self) -> Optional[str]:
        return self.anchor.path if self.anchor is not None else None

    def get_start(self) -> int:
        if self.anchor is None:
            return self._start
        return self.anchor.offset

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.get_source_file_path()!r}, {self.get_start()})"


class IdentifierNode(Node):
    """An identifier that can report its name and be renamed."""

    def __init__(
        self,
        anchor: "Anchor",
        registry: "SourceRegistry",
        orchestrator: "RenameOrchestrator",
    ):
        super().__init__(anchor, registry, kind="identifier")
        self.orchestrator = orchestrator

    def get_name(self) -> str:
        text = self.registry.get_text(self.anchor.path)
        match = IDENTIFIER.match(text, self.anchor.offset)
        return match.group(0) if match else ""

    def rename(self, new_name: str) -> None:
        self.orchestrator.rename(self, new_name)
