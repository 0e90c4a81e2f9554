"""Read geotagged assets from a Photos library database."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from photos_heatmap.adapters import Database, FileSystem, LocalFileSystem, SQLiteDatabase
from photos_heatmap.aggregate import apple_timestamp_to_datetime, coerce_float, is_missing
from photos_heatmap.errors import DatabaseAccessError, NotFoundError
from photos_heatmap.models import LocationRecord, is_valid_location


logger = logging.getLogger(__name__)

LOCATIONS_QUERY = """
SELECT
    ZASSET.ZLATITUDE AS latitude,
    ZASSET.ZLONGITUDE AS longitude,
    ZASSET.ZDATECREATED AS timestamp,
    ZASSET.ZFILENAME AS filename
FROM ZASSET
WHERE ZASSET.ZLATITUDE IS NOT NULL
  AND ZASSET.ZLONGITUDE IS NOT NULL
  AND ZASSET.ZLATITUDE != 0
  AND ZASSET.ZLONGITUDE != 0
  AND ZASSET.ZLATITUDE != -180.0
  AND ZASSET.ZLONGITUDE != -180.0
  AND ZASSET.ZLATITUDE BETWEEN ? AND ?
  AND ZASSET.ZLONGITUDE BETWEEN ? AND ?
ORDER BY ZASSET.ZDATECREATED DESC
""".strip()
LOCATIONS_QUERY_PARAMS = (-90, 90, -180, 180)


@dataclass(frozen=True)
class ExtractorConfig:
    """Wiring for a LocationExtractor.

    database_path: sqlite file to read; checked for existence before any
        query. May be omitted when a ready-made ``database`` is supplied.
    database: query/close collaborator. Defaults to a read-only
        ``SQLiteDatabase`` on ``database_path``.
    filesystem: exists() collaborator. Defaults to ``LocalFileSystem``.
    """

    database_path: str | Path | None = None
    database: Database | None = None
    filesystem: FileSystem | None = None


def row_to_record(row: dict) -> LocationRecord | None:
    latitude = coerce_float(row.get("latitude"))
    longitude = coerce_float(row.get("longitude"))
    if latitude is None or longitude is None:
        return None
    if not is_valid_location(latitude, longitude):
        return None

    filename = row.get("filename")
    return LocationRecord(
        latitude=latitude,
        longitude=longitude,
        timestamp=apple_timestamp_to_datetime(row.get("timestamp")),
        filename=None if is_missing(filename) else str(filename),
    )


def rows_to_records(rows: Iterable[dict]) -> list[LocationRecord]:
    records = []
    rejected = 0
    for row in rows:
        record = row_to_record(row)
        if record is None:
            rejected += 1
            continue
        records.append(record)
    if rejected:
        logger.info("discarded %d rows with placeholder or out-of-range coordinates", rejected)
    return records


class LocationExtractor:
    def __init__(self, config: ExtractorConfig):
        if config.database_path is None and config.database is None:
            raise ValueError("ExtractorConfig needs a database_path or a database.")
        self.database_path = Path(config.database_path) if config.database_path else None
        self.database = config.database or SQLiteDatabase(self.database_path)
        self.filesystem = config.filesystem or LocalFileSystem()

    @classmethod
    def from_path(cls, database_path: str | Path) -> LocationExtractor:
        return cls(ExtractorConfig(database_path=database_path))

    def extract_locations(self) -> list[LocationRecord]:
        try:
            if self.database_path is not None and not self.filesystem.exists(self.database_path):
                raise NotFoundError(
                    f"Photos database not found at: {self.database_path}",
                    paths=[self.database_path],
                )
            try:
                rows = self.database.query(LOCATIONS_QUERY, LOCATIONS_QUERY_PARAMS)
            except Exception as exc:
                raise DatabaseAccessError(str(exc)) from exc
        except BaseException:
            self._close_quietly()
            raise
        self._close()

        logger.debug("query returned %d rows", len(rows))
        return rows_to_records(rows)

    def _close(self) -> None:
        try:
            self.database.close()
        except Exception as exc:
            raise DatabaseAccessError(str(exc)) from exc

    def _close_quietly(self) -> None:
        # Keeps the error already being raised; the close failure is only logged.
        try:
            self.database.close()
        except Exception:
            logger.warning("failed to close Photos database", exc_info=True)
