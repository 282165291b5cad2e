"""reforge - cross-file symbol renaming.

Tracks source files in memory, asks an analysis engine for every reference
to a symbol and rewrites them without corrupting offsets.
"""

__version__ = "0.1.0"

from reforge.config import ProjectConfig
from reforge.project import Project

__all__ = [
    "__version__",
    "Project",
    "ProjectConfig",
]
