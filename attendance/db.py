from __future__ import annotations

# attendance/db.py
import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Sequence, Union
import os
import yaml

logger = logging.getLogger(__name__)

# DB path resolution order:
# 1) ATTENDANCE_DB_PATH env var (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path
# 4) fallback: <project root>/attendance.db
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "attendance.db")

# Result markers handed back by execute_query
SUCCESS = 200
FAILURE = 500

QueryParams = Union[Mapping[str, Any], Sequence[Any], None]
QueryResult = Union[int, list[dict[str, Any]]]
Executor = Callable[..., QueryResult]


def _read_config_yaml() -> dict:
    cfg_path = os.path.join(_PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("config.yaml ignored: %s", e)
        return {}
    out = {}
    for k in ("db_path", "test_db_path"):
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    return out


def get_db_path() -> str:
    env_path = os.environ.get("ATTENDANCE_DB_PATH")
    cfg = _read_config_yaml()
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg.get("test_db_path"):
        path = cfg["test_db_path"]
    elif cfg.get("db_path"):
        path = cfg["db_path"]
    else:
        path = _ROOT_DB

    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """
    Open a SQLite connection. An explicit db_path wins over get_db_path().
    Rows come back as sqlite3.Row.
    """
    path = db_path or get_db_path()
    conn = sqlite3.connect(
        path,
        detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
        check_same_thread=False,
        isolation_level=None,
    )
    try:
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()


def execute_query(query: str, params: QueryParams = None, db_path: str | None = None) -> QueryResult:
    """
    Run one finished statement.

    Returns:
        list of row dicts when the statement produced a result set (may be empty),
        SUCCESS when it did not,
        FAILURE when the database rejected it.
    """
    try:
        with get_conn(db_path) as conn:
            cur = conn.execute(query, params or ())
            if cur.description is not None:
                return [dict(r) for r in cur.fetchall()]
            return SUCCESS
    except sqlite3.Error as e:
        logger.error("execute_query failed: %s", e)
        logger.error("failed query: %s", query)
        return FAILURE
