import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "attendance_test.db"
    # Point the app to this temp DB
    os.environ["ATTENDANCE_DB_PATH"] = str(path)
    schema = Path(_PROJECT_ROOT / "schema.sql").read_text(encoding="utf-8")
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(schema)
        conn.commit()
    finally:
        conn.close()
    return str(path)


@pytest.fixture()
def client(tmp_db_path):
    # Import app after DB ready so startup hooks can use it
    from attendance.api import app
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Safety: only ever wipe the temp DB
    assert os.environ.get("ATTENDANCE_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        conn.execute("DELETE FROM attendance")
        conn.commit()
    finally:
        conn.close()
    yield


@pytest.fixture()
def seed_attendance(tmp_db_path):
    def _seed(rows):
        conn = sqlite3.connect(tmp_db_path)
        try:
            conn.executemany(
                "INSERT INTO attendance(date, year, month, day, hour, minute, count) "
                "VALUES(:date, :year, :month, :day, :hour, :minute, :count)",
                rows,
            )
            conn.commit()
        finally:
            conn.close()
    return _seed
