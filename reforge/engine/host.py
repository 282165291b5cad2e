"""Host interface between the analysis engine and the project registry.

The engine never touches the registry directly. It asks its host for the
tracked files, a version token per file and an immutable snapshot of the
text, and must drop any cached analysis for a file once the token changes.
"""

import posixpath
from abc import ABC, abstractmethod
from typing import Optional

from reforge.config import ProjectConfig
from reforge.registry import Snapshot, SourceRegistry


class AnalysisHost(ABC):
    """Callbacks the analysis engine requires from its environment."""

    @abstractmethod
    def list_tracked_files(self) -> list[str]:
        """Paths of every file the engine should analyse."""

    @abstractmethod
    def get_version_token(self, path: str) -> Optional[str]:
        """Token that changes whenever the text of path changes."""

    @abstractmethod
    def get_snapshot(self, path: str) -> Optional[Snapshot]:
        """Current text of path, or None if the path is unknown."""

    @abstractmethod
    def get_default_library(self) -> str:
        pass

    @abstractmethod
    def get_current_directory(self) -> str:
        pass

    @abstractmethod
    def get_new_line(self) -> str:
        pass

    @abstractmethod
    def use_case_sensitive_file_names(self) -> bool:
        pass

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def read_file(self, path: str) -> Optional[str]:
        pass

    @abstractmethod
    def directory_exists(self, path: str) -> bool:
        pass


class RegistryHost(AnalysisHost):
    """Analysis host backed by a `SourceRegistry`.

    Unknown paths answer "not found" instead of raising, since the engine
    may probe speculative paths.
    """

    def __init__(self, registry: SourceRegistry, config: ProjectConfig):
        self.registry = registry
        self.config = config

    def list_tracked_files(self) -> list[str]:
        return self.registry.paths()

    def get_version_token(self, path: str) -> Optional[str]:
        if not self.registry.has_file(path):
            return None
        return str(self.registry.get_version(path))

    def get_snapshot(self, path: str) -> Optional[Snapshot]:
        if not self.registry.has_file(path):
            return None
        return self.registry.snapshot(path)

    def get_default_library(self) -> str:
        return self.config.default_library

    def get_current_directory(self) -> str:
        return self.config.current_directory

    def get_new_line(self) -> str:
        return self.config.get_new_line()

    def use_case_sensitive_file_names(self) -> bool:
        return self.registry.case_sensitive

    def file_exists(self, path: str) -> bool:
        return self.registry.has_file(path)

    def read_file(self, path: str) -> Optional[str]:
        snapshot = self.get_snapshot(path)
        return snapshot.text if snapshot is not None else None

    def directory_exists(self, path: str) -> bool:
        directory = self.registry.canonical_path(path) if path else "."
        if directory == ".":
            return True
        prefix = directory.rstrip("/") + "/"
        return any(p.startswith(prefix) for p in self.registry.paths())
