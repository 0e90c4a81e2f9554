"""Failure types raised by the extraction and assembly pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable


REMEDIATION_CHECKLIST = """This usually means:
1. Full Disk Access permission is not granted to your terminal
2. Photos.app is currently running (try closing it)
3. The database is locked by another process

Please:
- Go to System Settings > Privacy & Security > Full Disk Access
- Add your terminal application to the list
- Close Photos.app if it's running
- Try again"""


class PhotosHeatmapError(Exception):
    """Base class for pipeline failures."""

    error_code = "PHOTOS_HEATMAP_ERROR"


class NotFoundError(PhotosHeatmapError):
    """Raised when a database path does not exist."""

    error_code = "NOT_FOUND"

    def __init__(self, message: str, paths: Iterable[str | Path] = ()):
        super().__init__(message)
        self.paths = [Path(p) for p in paths]


class LibraryNotFoundError(PhotosHeatmapError):
    """Raised when the photo library directory itself is missing."""

    error_code = "LIBRARY_NOT_FOUND"

    def __init__(self, path: str | Path):
        super().__init__(f"Photos Library not found at: {path}")
        self.path = Path(path)


class DatabaseAccessError(PhotosHeatmapError):
    """Raised when the photo database cannot be opened or queried."""

    error_code = "DATABASE_ACCESS"

    def __init__(self, detail: str):
        super().__init__(f"Cannot access Photos database: {detail}\n\n{REMEDIATION_CHECKLIST}")
        self.detail = detail


class UnsupportedFormatError(PhotosHeatmapError):
    error_code = "UNSUPPORTED_FORMAT"

    def __init__(self, output_format: str):
        super().__init__(f"Unsupported format: {output_format}")
        self.format = output_format


class OutputWriteError(PhotosHeatmapError):
    error_code = "OUTPUT_WRITE"

    def __init__(self, path: str | Path, detail: str):
        super().__init__(f"Cannot write heatmap to {path}: {detail}")
        self.path = Path(path)
