"""Reading tracked files from disk and writing them back."""

from pathlib import Path
from typing import Iterable, Optional

import aiofiles

from reforge.logging import get_logger
from reforge.project import Project

log = get_logger(__name__)


def _discover(root: Path, patterns: list[str], skip_dirs: set[str]) -> list[Path]:
    found = []
    for pattern in patterns:
        for file_path in sorted(root.rglob(pattern)):
            if not file_path.is_file():
                continue
            if any(part in skip_dirs for part in file_path.relative_to(root).parts[:-1]):
                continue
            if file_path not in found:
                found.append(file_path)
    return found


async def load_directory(
    project: Project,
    root: str | Path,
    patterns: Optional[list[str]] = None,
) -> list[str]:
    """Add every matching file under root to the project.

    Files are registered under POSIX paths relative to root. Paths the
    project already tracks are skipped.

    Returns:
        Paths that were added
    """
    root_path = Path(root).expanduser().resolve()
    config = project.config
    patterns = patterns or config.include

    added = []
    for file_path in _discover(root_path, patterns, set(config.skip_dirs)):
        relative = file_path.relative_to(root_path).as_posix()
        if project.has_file(relative):
            continue

        async with aiofiles.open(file_path, "r", encoding=config.encoding, newline="") as f:
            text = await f.read()
        project.add_file(relative, text)
        added.append(relative)

    log.info("directory_loaded", root=str(root_path), files=len(added))
    return added


async def save_files(project: Project, root: str | Path, paths: Iterable[str]) -> list[Path]:
    """Write the current text of paths to disk under root."""
    root_path = Path(root).expanduser().resolve()
    written = []
    for path in paths:
        target = root_path / path
        target.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(
            target, "w", encoding=project.config.encoding, newline=""
        ) as f:
            await f.write(project.get_text(path))
        written.append(target)

    log.info("files_saved", root=str(root_path), files=len(written))
    return written
