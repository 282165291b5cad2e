"""Rename orchestrator: resolve, group and apply."""

from reforge.grouper import EditGrouper
from reforge.logging import get_logger
from reforge.models import EditBatch
from reforge.nodes import HasSourceFile
from reforge.registry import SourceRegistry
from reforge.resolver import ReferenceResolver

log = get_logger(__name__)


class RenameOrchestrator:
    """Public entry point for renaming a symbol across the project.

    Each call is a complete resolve, group and apply cycle. There is no
    rollback: if a replacement fails partway through a batch, the file keeps
    the edits already applied. Callers that need an all-or-nothing rename
    should `SourceRegistry.capture` before and `restore` on failure.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        resolver: ReferenceResolver,
        grouper: EditGrouper,
    ):
        self.registry = registry
        self.resolver = resolver
        self.grouper = grouper

    def rename(self, node: HasSourceFile, new_name: str) -> list[EditBatch]:
        """Replace every reference to node's symbol with new_name.

        Returns:
            The batches that were applied
        """
        log.info("rename_started", path=node.get_source_file_path(), new_name=new_name)

        batches = self.grouper.group(self.resolver.find_references(node))
        for batch in batches:
            self.apply_batch(batch, new_name)

        log.info(
            "rename_applied",
            new_name=new_name,
            files=len(batches),
            occurrences=sum(len(b.spans) for b in batches),
        )
        return batches

    def apply_batch(self, batch: EditBatch, new_text: str) -> None:
        """Apply one batch in its prescribed order using original offsets."""
        try:
            for span in batch.spans:
                self.registry.replace_range(batch.path, span.start, span.end, new_text)
        except Exception as e:
            log.error("batch_failed", path=batch.path, error=str(e))
            raise
