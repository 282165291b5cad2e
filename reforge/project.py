"""Project: wires the registry, analysis engine and rename pipeline."""

from typing import Callable, Optional

from reforge.config import ProjectConfig
from reforge.engine.host import AnalysisHost, RegistryHost
from reforge.engine.service import AnalysisEngine
from reforge.errors import AnalysisError, RangeError
from reforge.grouper import EditGrouper
from reforge.models import EditBatch, ReferenceLocation, line_starts
from reforge.nodes import HasSourceFile, IdentifierNode
from reforge.orchestrator import RenameOrchestrator
from reforge.registry import SourceRegistry, TrackedFile
from reforge.resolver import ReferenceResolver


class Project:
    """A set of in-memory source files that can be analysed and renamed.

    Collaborators are built in dependency order and handed to each other at
    construction time: registry, host, engine, resolver, grouper and
    orchestrator.

    Args:
        config: Project settings. Defaults to `ProjectConfig()`.
        engine_factory: Builds the analysis engine from its host. Defaults
            to `AnalysisEngine`.
    """

    def __init__(
        self,
        config: Optional[ProjectConfig] = None,
        engine_factory: Optional[Callable[[AnalysisHost], AnalysisEngine]] = None,
    ):
        self.config = config or ProjectConfig()
        self.registry = SourceRegistry(case_sensitive=self.config.case_sensitive_file_names)
        self.host = RegistryHost(self.registry, self.config)
        self.engine = (engine_factory or AnalysisEngine)(self.host)
        self.resolver = ReferenceResolver(self.registry, self.engine)
        self.grouper = EditGrouper(self.registry)
        self.orchestrator = RenameOrchestrator(self.registry, self.resolver, self.grouper)

    # Files

    def add_file(self, path: str, text: str = "") -> TrackedFile:
        return self.registry.add_file(path, text)

    def has_file(self, path: str) -> bool:
        return self.registry.has_file(path)

    def get_source_files(self) -> list[str]:
        return self.registry.paths()

    def get_text(self, path: str) -> str:
        return self.registry.get_text(path)

    def get_version(self, path: str) -> int:
        return self.registry.get_version(path)

    def get_new_line(self) -> str:
        return self.config.get_new_line()

    # Positions

    def get_offset(self, path: str, line: int, column: int) -> int:
        """Character offset of a 1-based line and column."""
        text = self.registry.get_text(path)
        starts = line_starts(text)
        if line < 1 or line > len(starts) or column < 1:
            raise RangeError(
                path, 0, 0, len(text),
                message=f"Position {line}:{column} is outside {path}",
            )
        line_end = starts[line] - 1 if line < len(starts) else len(text)
        offset = starts[line - 1] + column - 1
        if offset > line_end:
            raise RangeError(
                path, offset, offset, len(text),
                message=f"Position {line}:{column} is outside {path}",
            )
        return offset

    def get_position(self, path: str, offset: int) -> tuple[int, int]:
        """1-based line and column of a character offset."""
        starts = line_starts(self.registry.get_text(path))
        line = 0
        for index, start in enumerate(starts):
            if start > offset:
                break
            line = index
        return line + 1, offset - starts[line] + 1

    # Nodes

    def get_identifier_at(self, path: str, offset: int) -> IdentifierNode:
        """Node for the identifier covering offset.

        Raises:
            NotFoundError: If the path is not tracked
            AnalysisError: If no identifier covers offset
        """
        tracked = self.registry.get_file(path)
        ident = self.engine.get_identifier_at(tracked.path, offset)
        if ident is None:
            raise AnalysisError(
                f"No identifier at {tracked.path}:{offset}",
                path=tracked.path,
                position=offset,
            )
        anchor = self.registry.track(tracked.path, ident.start)
        return IdentifierNode(anchor, self.registry, self.orchestrator)

    # Operations

    def find_references(self, node: HasSourceFile) -> list[ReferenceLocation]:
        return self.resolver.find_references(node)

    def rename(self, node: HasSourceFile, new_name: str) -> list[EditBatch]:
        return self.orchestrator.rename(node, new_name)

    def capture(self) -> dict[str, str]:
        return self.registry.capture()

    def restore(self, captured: dict[str, str]) -> None:
        self.registry.restore(captured)
