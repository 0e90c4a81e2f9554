import sqlite3
from datetime import UTC, datetime
from pathlib import Path

import pytest

from photos_heatmap.errors import DatabaseAccessError, NotFoundError
from photos_heatmap.extractor import (
    LOCATIONS_QUERY,
    ExtractorConfig,
    LocationExtractor,
    row_to_record,
)


class FakeDatabase:
    def __init__(self, rows=None, error: Exception | None = None, close_error: Exception | None = None):
        self.rows = rows or []
        self.error = error
        self.close_error = close_error
        self.queries = []
        self.close_calls = 0

    def query(self, sql, params=()):
        self.queries.append((sql, params))
        if self.error:
            raise self.error
        return self.rows

    def close(self):
        self.close_calls += 1
        if self.close_error:
            raise self.close_error


class FakeFileSystem:
    def __init__(self, existing=()):
        self.existing = {str(p) for p in existing}

    def exists(self, path):
        return str(path) in self.existing

    def write_file(self, path, content):
        raise AssertionError("extractor must not write")


def make_extractor(rows=None, error=None, database_path=None, existing=(), close_error=None):
    database = FakeDatabase(rows=rows, error=error, close_error=close_error)
    extractor = LocationExtractor(
        ExtractorConfig(
            database_path=database_path,
            database=database,
            filesystem=FakeFileSystem(existing),
        )
    )
    return extractor, database


def test_extract_locations_keeps_valid_rows_in_order():
    rows = [
        {"latitude": 35.6938, "longitude": 139.7035, "timestamp": 725817600, "filename": "b.jpg"},
        {"latitude": 35.6762, "longitude": 139.6503, "timestamp": None, "filename": "a.jpg"},
    ]
    extractor, database = make_extractor(rows=rows)

    records = extractor.extract_locations()

    assert [(r.latitude, r.longitude) for r in records] == [(35.6938, 139.7035), (35.6762, 139.6503)]
    assert records[0].timestamp == datetime(2024, 1, 1, 16, tzinfo=UTC)
    assert records[0].filename == "b.jpg"
    assert records[1].timestamp is None
    assert database.queries[0][0] == LOCATIONS_QUERY
    assert database.close_calls == 1


def test_extract_locations_revalidates_rows_the_query_should_have_filtered():
    rows = [
        {"latitude": 0, "longitude": 139.65, "timestamp": None, "filename": None},
        {"latitude": 35.67, "longitude": 0, "timestamp": None, "filename": None},
        {"latitude": -180, "longitude": 139.65, "timestamp": None, "filename": None},
        {"latitude": 35.67, "longitude": -180, "timestamp": None, "filename": None},
        {"latitude": 95.0, "longitude": 139.65, "timestamp": None, "filename": None},
        {"latitude": 35.67, "longitude": 181.0, "timestamp": None, "filename": None},
        {"latitude": None, "longitude": 139.65, "timestamp": None, "filename": None},
        {"latitude": 35.67, "longitude": 139.65, "timestamp": None, "filename": None},
    ]
    extractor, database = make_extractor(rows=rows)

    records = extractor.extract_locations()

    assert len(records) == 1
    assert (records[0].latitude, records[0].longitude) == (35.67, 139.65)
    assert database.close_calls == 1


def test_extract_locations_keeps_duplicates():
    row = {"latitude": 35.67, "longitude": 139.65, "timestamp": None, "filename": None}
    extractor, _ = make_extractor(rows=[row, dict(row)])

    assert len(extractor.extract_locations()) == 2


def test_missing_database_file_never_queries(tmp_path: Path):
    missing = tmp_path / "Photos.sqlite"
    extractor, database = make_extractor(database_path=missing)

    with pytest.raises(NotFoundError) as excinfo:
        extractor.extract_locations()

    assert str(missing) in str(excinfo.value)
    assert excinfo.value.paths == [missing]
    assert database.queries == []


def test_query_failure_is_wrapped_and_connection_closed():
    extractor, database = make_extractor(error=RuntimeError("database is locked"))

    with pytest.raises(DatabaseAccessError) as excinfo:
        extractor.extract_locations()

    message = str(excinfo.value)
    assert "database is locked" in message
    assert "Full Disk Access" in message
    assert "Photos.app is currently running" in message
    assert "locked by another process" in message
    assert "Try again" in message
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert database.close_calls == 1
    assert len(database.queries) == 1


def test_existing_path_is_queried(tmp_path: Path):
    db_path = tmp_path / "Photos.sqlite"
    rows = [{"latitude": 51.5, "longitude": -0.12, "timestamp": 0, "filename": "x.jpg"}]
    extractor, database = make_extractor(rows=rows, database_path=db_path, existing=[db_path])

    records = extractor.extract_locations()

    assert records[0].timestamp == datetime(2001, 1, 1, tzinfo=UTC)
    assert database.close_calls == 1


def test_config_requires_a_database_source():
    with pytest.raises(ValueError):
        LocationExtractor(ExtractorConfig())


def test_row_to_record_treats_nan_as_missing():
    record = row_to_record(
        {"latitude": 10.5, "longitude": 20.5, "timestamp": float("nan"), "filename": float("nan")}
    )

    assert record.timestamp is None
    assert record.filename is None


def create_photos_db(path: Path, rows) -> None:
    conn = sqlite3.connect(path)
    try:
        conn.execute(
            "CREATE TABLE ZASSET (Z_PK INTEGER PRIMARY KEY, ZLATITUDE REAL, ZLONGITUDE REAL, "
            "ZDATECREATED REAL, ZFILENAME TEXT)"
        )
        conn.executemany(
            "INSERT INTO ZASSET (ZLATITUDE, ZLONGITUDE, ZDATECREATED, ZFILENAME) VALUES (?, ?, ?, ?)",
            rows,
        )
        conn.commit()
    finally:
        conn.close()


def test_extract_from_sqlite_database(tmp_path: Path):
    db_path = tmp_path / "Photos Library.photoslibrary" / "database" / "Photos.sqlite"
    db_path.parent.mkdir(parents=True)
    create_photos_db(
        db_path,
        [
            (35.6762, 139.6503, 725817600.0, "IMG_0001.HEIC"),
            (35.6586, 139.7454, 730000000.0, "IMG_0002.HEIC"),
            (0.0, 0.0, 731000000.0, "IMG_0003.HEIC"),
            (-180.0, -180.0, 732000000.0, "IMG_0004.HEIC"),
            (None, None, 733000000.0, "IMG_0005.HEIC"),
            (35.6595, 139.7006, None, "IMG_0006.HEIC"),
        ],
    )

    records = LocationExtractor.from_path(db_path).extract_locations()

    assert [r.filename for r in records] == ["IMG_0002.HEIC", "IMG_0001.HEIC", "IMG_0006.HEIC"]
    assert records[1].timestamp == datetime(2024, 1, 1, 16, tzinfo=UTC)
    assert records[2].timestamp is None


def test_sqlite_schema_mismatch_raises_database_access_error(tmp_path: Path):
    db_path = tmp_path / "Photos.sqlite"
    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE OTHER (id INTEGER)")
    conn.commit()
    conn.close()

    with pytest.raises(DatabaseAccessError) as excinfo:
        LocationExtractor.from_path(db_path).extract_locations()

    assert "ZASSET" in str(excinfo.value)


def test_missing_file_error_survives_failing_close(tmp_path: Path):
    missing = tmp_path / "Photos.sqlite"
    extractor, database = make_extractor(
        database_path=missing, close_error=RuntimeError("close failed")
    )

    with pytest.raises(NotFoundError):
        extractor.extract_locations()

    assert database.queries == []
    assert database.close_calls == 1


def test_query_error_survives_failing_close():
    extractor, database = make_extractor(
        error=RuntimeError("disk I/O error"), close_error=RuntimeError("close failed")
    )

    with pytest.raises(DatabaseAccessError) as excinfo:
        extractor.extract_locations()

    assert "disk I/O error" in str(excinfo.value)
    assert "close failed" not in str(excinfo.value)
    assert database.close_calls == 1


def test_close_failure_after_successful_query_is_reported():
    rows = [{"latitude": 35.67, "longitude": 139.65, "timestamp": None, "filename": None}]
    extractor, _ = make_extractor(rows=rows, close_error=RuntimeError("close failed"))

    with pytest.raises(DatabaseAccessError) as excinfo:
        extractor.extract_locations()

    assert "close failed" in str(excinfo.value)


def test_out_of_range_timestamp_keeps_record():
    rows = [{"latitude": 35.0, "longitude": 139.0, "timestamp": 1e20, "filename": "odd.jpg"}]
    extractor, _ = make_extractor(rows=rows)

    records = extractor.extract_locations()

    assert len(records) == 1
    assert records[0].timestamp is None
    assert records[0].filename == "odd.jpg"
