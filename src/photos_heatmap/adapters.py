"""Concrete database and filesystem collaborators."""

from __future__ import annotations

import logging
import stat
import sqlite3
from pathlib import Path
from typing import Any, Protocol, Sequence

import pandas as pd


logger = logging.getLogger(__name__)


class Database(Protocol):
    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict]: ...

    def close(self) -> None: ...


class FileSystem(Protocol):
    def exists(self, path: str | Path) -> bool: ...

    def write_file(self, path: str | Path, content: str) -> None: ...


class SQLiteDatabase:
    """Read-only sqlite connection, opened on first query."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._conn: sqlite3.Connection | None = None

    def _connect(self) -> sqlite3.Connection:
        if self._conn is None:
            uri = f"{self.path.resolve().as_uri()}?mode=ro"
            logger.debug("opening %s read-only", self.path)
            self._conn = sqlite3.connect(uri, uri=True)
        return self._conn

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict]:
        frame = pd.read_sql_query(sql, self._connect(), params=tuple(params))
        return frame.to_dict(orient="records")

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None


class LocalFileSystem:
    def exists(self, path: str | Path) -> bool:
        return Path(path).exists()

    def is_dir(self, path: str | Path) -> bool:
        return stat.S_ISDIR(Path(path).stat().st_mode)

    def read_dir(self, path: str | Path) -> list[str]:
        return sorted(entry.name for entry in Path(path).iterdir())

    def read_file(self, path: str | Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_file(self, path: str | Path, content: str) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
