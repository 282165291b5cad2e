"""Edit grouper: partitions reference locations into per-file batches."""

from typing import Iterable

from reforge.errors import OverlapError
from reforge.logging import get_logger
from reforge.models import EditBatch, ReferenceLocation, TextSpan
from reforge.registry import SourceRegistry

log = get_logger(__name__)


class EditGrouper:
    """Builds one `EditBatch` per file from raw reference locations.

    Spans in a batch are sorted by descending start offset. Applying them in
    that order means each replacement only changes text after the spans
    still to come, so every span can use its original offset.
    """

    def __init__(self, registry: SourceRegistry):
        self.registry = registry

    def group(self, locations: Iterable[ReferenceLocation]) -> list[EditBatch]:
        """Partition, deduplicate and order locations.

        Batches come out in order of first appearance of their file.

        Raises:
            OverlapError: If two distinct spans in one file overlap
            NotFoundError: If a location names an untracked file
        """
        spans_by_path: dict[str, set[TextSpan]] = {}
        for location in locations:
            spans_by_path.setdefault(location.path, set()).add(location.span)

        batches = []
        for path, spans in spans_by_path.items():
            ordered = sorted(spans, key=lambda s: (s.start, s.length), reverse=True)
            self._check_overlaps(path, ordered)
            batches.append(EditBatch(file=self.registry.get_file(path), spans=tuple(ordered)))

        log.debug(
            "edits_grouped",
            files=len(batches),
            spans=sum(len(b.spans) for b in batches),
        )
        return batches

    def _check_overlaps(self, path: str, ordered: list[TextSpan]) -> None:
        for later, earlier in zip(ordered, ordered[1:]):
            if earlier.overlaps(later):
                log.error(
                    "overlapping_references",
                    path=path,
                    first=(earlier.start, earlier.length),
                    second=(later.start, later.length),
                )
                raise OverlapError(path, earlier, later)
