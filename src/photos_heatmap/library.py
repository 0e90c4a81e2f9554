from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, Protocol

from photos_heatmap.adapters import LocalFileSystem
from photos_heatmap.config import (
    DATABASE_CANDIDATES,
    DEFAULT_LIBRARY_PATH,
    EXPLORE_MAX_DEPTH,
    LIBRARY_PATH_ENV,
)
from photos_heatmap.errors import LibraryNotFoundError, NotFoundError


class LibraryFileSystem(Protocol):
    def exists(self, path: str | Path) -> bool: ...

    def is_dir(self, path: str | Path) -> bool: ...

    def read_dir(self, path: str | Path) -> list[str]: ...


def default_library_path() -> Path:
    override = os.environ.get(LIBRARY_PATH_ENV)
    return Path(override).expanduser() if override else DEFAULT_LIBRARY_PATH


def candidate_database_paths(library_path: str | Path) -> list[Path]:
    return [Path(library_path) / candidate for candidate in DATABASE_CANDIDATES]


def require_library(library_path: str | Path | None, filesystem: LibraryFileSystem) -> Path:
    library_path = Path(library_path) if library_path else default_library_path()
    if not filesystem.exists(library_path):
        raise LibraryNotFoundError(library_path)
    return library_path


def _missing_database_message(tried: list[Path]) -> str:
    lines = ["Could not find Photos database. Tried:"]
    lines.extend(f"  - {path}" for path in tried)
    lines.extend(
        [
            "",
            "This app requires Full Disk Access permission.",
            "Please go to System Settings > Privacy & Security > Full Disk Access",
            "and add your terminal application to the list.",
            "",
            "Alternatively, you can specify a custom database path with:",
            '  --photos-db "/path/to/Photos Library.photoslibrary/database/photos.db"',
        ]
    )
    return "\n".join(lines)


def find_photos_database(
    custom_path: str | Path | None = None,
    library_path: str | Path | None = None,
    filesystem: LibraryFileSystem | None = None,
) -> Path:
    filesystem = filesystem or LocalFileSystem()

    if custom_path:
        if not filesystem.exists(custom_path):
            raise NotFoundError(f"Custom database path not found: {custom_path}", paths=[custom_path])
        return Path(custom_path)

    library_path = require_library(library_path, filesystem)
    tried = candidate_database_paths(library_path)
    for path in tried:
        try:
            if filesystem.exists(path):
                return path
        except OSError:
            continue

    raise NotFoundError(_missing_database_message(tried), paths=tried)


def explore_library(
    library_path: str | Path | None = None,
    filesystem: LibraryFileSystem | None = None,
    max_depth: int = EXPLORE_MAX_DEPTH,
) -> Iterator[str]:
    filesystem = filesystem or LocalFileSystem()
    library_path = require_library(library_path, filesystem)
    yield from _walk(library_path, filesystem, 0, max_depth)


def _walk(directory: Path, filesystem: LibraryFileSystem, depth: int, max_depth: int) -> Iterator[str]:
    if depth > max_depth:
        return

    indent = "  " * depth
    try:
        items = filesystem.read_dir(directory)
    except OSError:
        yield f"{indent}❌ Cannot read directory"
        return

    for item in items:
        full_path = directory / item
        try:
            is_dir = filesystem.is_dir(full_path)
        except OSError:
            yield f"{indent}❌ {item} (permission denied)"
            continue

        if is_dir:
            yield f"{indent}📁 {item}/"
            yield from _walk(full_path, filesystem, depth + 1, max_depth)
        else:
            yield f"{indent}📄 {item}"
