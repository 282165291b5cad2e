"""Analysis engine and its host interface."""

from reforge.engine.host import AnalysisHost, RegistryHost
from reforge.engine.service import AnalysisEngine, RenameLocation

__all__ = [
    "AnalysisHost",
    "RegistryHost",
    "AnalysisEngine",
    "RenameLocation",
]
