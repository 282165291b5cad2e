"""Reference resolver: turns a node into raw reference locations."""

from reforge.engine.service import AnalysisEngine
from reforge.errors import AnalysisError, RangeError
from reforge.logging import get_logger
from reforge.models import ReferenceLocation, TextSpan
from reforge.nodes import HasSourceFile
from reforge.registry import SourceRegistry

log = get_logger(__name__)


class ReferenceResolver:
    """Adapter around the analysis engine's rename query.

    Holds no state between calls. The node's position is read against the
    registry's current text on every call, so locations computed before an
    edit are never reused.
    """

    def __init__(self, registry: SourceRegistry, engine: AnalysisEngine):
        self.registry = registry
        self.engine = engine

    def find_references(self, node: HasSourceFile) -> list[ReferenceLocation]:
        """Every location referring to the same symbol as node.

        The result is unordered and may contain duplicates; see
        `EditGrouper.group`.

        Raises:
            AnalysisError: If node has no owning tracked file, or the engine
                finds no symbol at its position
            NotFoundError: If the engine reports a location in an untracked file
        """
        path = node.get_source_file_path()
        if path is None or not self.registry.has_file(path):
            raise AnalysisError("Node is not part of a tracked source file", path=path)

        tracked = self.registry.get_file(path)
        position = node.get_start()
        if position < 0 or position > len(tracked.text):
            raise RangeError(tracked.path, position, position, len(tracked.text))

        raw = self.engine.find_rename_locations(tracked.path, position)
        if raw is None:
            raise AnalysisError(
                f"No symbol found at {tracked.path}:{position}",
                path=tracked.path,
                position=position,
            )

        locations = []
        for location in raw:
            owner = self.registry.get_file(location.file_name)
            locations.append(
                ReferenceLocation(
                    owner.path,
                    TextSpan(location.text_span.start, location.text_span.length),
                )
            )

        log.info(
            "references_resolved",
            path=tracked.path,
            position=position,
            version=tracked.version,
            references=len(locations),
        )
        return locations
