"""Error taxonomy for reforge.

Every failure in the rename core is raised synchronously to the caller.
Nothing here is retried or rolled back; `classify_error` only exists so
outer surfaces (the CLI) can present a failure with a suggestion.
"""

import errno
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorCategory(Enum):
    """Categories of errors for display decisions."""

    USAGE = "usage"         # Untracked or duplicate paths
    STALE = "stale"         # Edits computed against an outdated text
    DEFECT = "defect"       # Analysis engine broke its contract
    ANALYSIS = "analysis"   # Node could not be resolved
    IO = "io"               # Reading or writing files on disk
    UNKNOWN = "unknown"


class ReforgeError(Exception):
    """Base class for all reforge errors."""

    category = ErrorCategory.UNKNOWN
    suggestion: Optional[str] = None

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(ReforgeError):
    """An operation referenced a path that is not tracked."""

    category = ErrorCategory.USAGE
    suggestion = "Add the file to the project before using it"

    def __init__(self, path: str):
        super().__init__(f"File is not tracked: {path}", path=path)
        self.path = path


class DuplicateError(ReforgeError):
    """A path was registered twice."""

    category = ErrorCategory.USAGE
    suggestion = "Each path can only be added once"

    def __init__(self, path: str):
        super().__init__(f"File is already tracked: {path}", path=path)
        self.path = path


class RangeError(ReforgeError):
    """A replacement fell outside the current text bounds."""

    category = ErrorCategory.STALE
    suggestion = "Offsets were probably computed before another edit; resolve references again"

    def __init__(
        self,
        path: str,
        start: int,
        end: int,
        length: int,
        message: Optional[str] = None,
    ):
        super().__init__(
            message or f"Range [{start}, {end}) is invalid for {path} (length {length})",
            path=path,
            start=start,
            end=end,
            length=length,
        )
        self.path = path
        self.start = start
        self.end = end
        self.length = length


class OverlapError(ReforgeError):
    """Two reference spans in the same file overlap."""

    category = ErrorCategory.DEFECT
    suggestion = "The analysis engine reported overlapping references; this is a bug"

    def __init__(self, path: str, first, second):
        super().__init__(
            f"Overlapping references in {path}: "
            f"[{first.start}, {first.end}) and [{second.start}, {second.end})",
            path=path,
        )
        self.path = path
        self.first = first
        self.second = second


class AnalysisError(ReforgeError):
    """The analysis engine could not resolve a node."""

    category = ErrorCategory.ANALYSIS
    suggestion = "Point at an identifier inside a tracked file"

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        position: Optional[int] = None,
    ):
        super().__init__(message, path=path, position=position)
        self.path = path
        self.position = position


@dataclass
class ClassifiedError:
    """A classified error with display metadata."""

    category: ErrorCategory
    message: str
    retryable: bool = False
    suggestion: Optional[str] = None
    original_exception: Optional[Exception] = None

    def __str__(self) -> str:
        parts = [self.message]
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        return " | ".join(parts)


# OSError errno values that indicate transient failures
TRANSIENT_ERRNO = {
    errno.EAGAIN,
    errno.EINTR,
    errno.EBUSY,
    errno.ETIMEDOUT,
}

IO_SUGGESTIONS = {
    errno.ENOENT: "Check that the project root and file paths exist",
    errno.EACCES: "Check file permissions",
    errno.EISDIR: "Expected a file path, not a directory",
    errno.ENOSPC: "Free up disk space on the device",
}


def classify_error(error: Exception) -> ClassifiedError:
    """Classify an exception for presentation.

    Args:
        error: The exception to classify

    Returns:
        ClassifiedError with category and suggestion
    """
    if isinstance(error, ReforgeError):
        return ClassifiedError(
            category=error.category,
            message=error.message,
            retryable=False,
            suggestion=error.suggestion,
            original_exception=error,
        )

    if isinstance(error, OSError):
        return ClassifiedError(
            category=ErrorCategory.IO,
            message=str(error),
            retryable=error.errno in TRANSIENT_ERRNO,
            suggestion=IO_SUGGESTIONS.get(error.errno),
            original_exception=error,
        )

    if isinstance(error, UnicodeError):
        return ClassifiedError(
            category=ErrorCategory.IO,
            message=str(error),
            suggestion="Set 'encoding' in reforge.toml to match the files",
            original_exception=error,
        )

    return ClassifiedError(
        category=ErrorCategory.UNKNOWN,
        message=f"{type(error).__name__}: {error}",
        original_exception=error,
    )
