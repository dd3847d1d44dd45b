"""Error taxonomy for Bookshelf ingestion and placement.

Every error raised by this package derives from BookshelfError, so callers
(the CLI in particular) can catch one type and report it. Errors are never
recovered from inside the package: a single bad record fails the file.
"""

from typing import Optional


class BookshelfError(Exception):
    """Base class for all package errors."""


class BookshelfIOError(BookshelfError, OSError):
    """A file could not be opened or read."""

    def __init__(self, path: str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class MissingFileError(BookshelfIOError):
    """A file referenced by the aux manifest does not exist."""

    def __init__(self, path: str, referenced_by: Optional[str] = None):
        self.referenced_by = referenced_by
        reason = "file does not exist"
        if referenced_by:
            reason += f" (referenced by {referenced_by})"
        super().__init__(path, reason)


class EncodingError(BookshelfError):
    """File content is not valid text."""

    def __init__(self, path: str, line: int, reason: str):
        self.path = str(path)
        self.line = line
        self.reason = reason
        super().__init__(f"{self.path}:{line}: invalid text ({reason})")


class AuxFormatError(BookshelfError):
    """The aux manifest line is malformed."""

    def __init__(self, path: str, reason: str, line: int = 0):
        self.path = str(path)
        self.line = line
        self.reason = reason
        where = f"{self.path}:{line}" if line else self.path
        super().__init__(f"{where}: {reason}")


class FormatError(BookshelfError):
    """Grammar violation, count mismatch or bad reference in a format file.

    Attributes:
        file: File the error was found in
        line: 1-based line number (0 when the error concerns the whole file)
        reason: Human-readable description
    """

    def __init__(self, file: str, line: int, reason: str):
        self.file = str(file)
        self.line = line
        self.reason = reason
        super().__init__(f"{self.file}:{line}: {reason}")


class PlacementOverflowError(BookshelfError):
    """The block placer could not find a legal position for a cell."""

    def __init__(self, cell_name: str, reason: str):
        self.cell_name = cell_name
        self.reason = reason
        super().__init__(f"cannot place cell {cell_name}: {reason}")


class ConfigError(BookshelfError, ValueError):
    """Invalid run configuration."""


class PlacementVerificationError(BookshelfError):
    """The placer's own legality check rejected its result."""

    def __init__(self, violations: list):
        self.violations = list(violations)
        shown = ", ".join(repr(v) for v in self.violations[:5])
        super().__init__(f"block placer produced an illegal placement ({len(self.violations)} violations): {shown}")
