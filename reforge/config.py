"""Configuration for reforge with validation."""

from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reforge.logging import get_logger

log = get_logger(__name__)

DEFAULT_SKIP_DIRS = [
    "node_modules", "__pycache__", ".git", ".svn", ".hg",
    "dist", "build", "target", "venv", ".venv", "env",
    ".tox", ".nox", ".pytest_cache", ".mypy_cache",
]

NEW_LINES = {
    "lf": "\n",
    "crlf": "\r\n",
}


class ProjectConfig(BaseModel):
    """Settings for a reforge project."""

    model_config = ConfigDict(validate_assignment=True)

    # Analysis host
    new_line: str = Field(default="lf", pattern="^(lf|crlf)$")
    current_directory: str = ""
    default_library: str = "builtins.pyi"
    case_sensitive_file_names: bool = True

    # Loading from disk
    include: list[str] = Field(default_factory=lambda: ["*.py"], min_length=1)
    skip_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_SKIP_DIRS))
    encoding: str = "utf-8"

    # Logging
    log_level: str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")
    log_file: Optional[Path] = None
    json_logs: bool = False

    @field_validator("include")
    @classmethod
    def patterns_not_blank(cls, v):
        patterns = [p.strip() for p in v]
        if any(not p for p in patterns):
            raise ValueError("include patterns cannot be empty")
        return patterns

    def get_new_line(self) -> str:
        return NEW_LINES[self.new_line]

    @classmethod
    def load(cls, path: Optional[str] = None) -> "ProjectConfig":
        """Load configuration from a TOML file.

        Search order if path not provided:
        1. ./reforge.toml (project-specific)
        2. ~/.reforge/config.toml (user default)

        Args:
            path: Optional explicit config file path

        Returns:
            ProjectConfig instance
        """
        if path is None:
            candidates = [
                Path("reforge.toml"),
                Path("~/.reforge/config.toml").expanduser(),
            ]
            for candidate in candidates:
                if candidate.exists():
                    path = str(candidate)
                    log.info("config_found", path=path)
                    break

        if path and Path(path).exists():
            try:
                data = toml.load(path)
                log.info("config_loaded", path=path)
                return cls(**data)
            except Exception as e:
                log.error("config_load_failed", path=path, error=str(e))
                return cls()

        log.info("config_using_defaults")
        return cls()

    def save(self, path: str):
        """Save configuration to a TOML file."""
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            data = self.model_dump(mode="json", exclude_none=True)
            toml.dump(data, f)
        log.info("config_saved", path=path)
