from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from ..db import FAILURE, SUCCESS, Executor, QueryResult, execute_query, get_conn
from ..domain.query_builder import MAX_ROWS
from ..repository import attendance_repo

logger = logging.getLogger(__name__)


def ensure_attendance_schema():
    with get_conn() as conn:
        attendance_repo.ensure_schema(conn)
        conn.commit()


def make_attendance_row(count: int | None, now: datetime | None = None) -> dict[str, Any]:
    """Snapshot of the visitor count, keyed by epoch milliseconds (UTC)."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return {
        "date": int(now.timestamp() * 1000),
        "year": now.year,
        "month": now.month,
        "day": now.day,
        "hour": now.hour,
        "minute": now.minute,
        "count": count,
    }


def save_attendance(execute: Executor, count: int | None, now: datetime | None = None) -> QueryResult:
    """
    Save one visitor-count snapshot.

    `execute` must run YQL (UPSERT INTO). The local SQLite execute_query
    rejects it, so there is no default executor for writes.

    Returns the snapshot's `date` on success, otherwise whatever the executor
    returned (a failure code).
    """
    row = make_attendance_row(count, now)
    result = attendance_repo.upsert_one(execute, row)
    logger.debug("save_attendance result=%s", result)
    if result == SUCCESS:
        logger.info("attendance saved: date=%s count=%s", row["date"], count)
        return row["date"]
    return result


def save_attendance_many(execute: Executor, rows: list[dict[str, Any]]) -> int:
    # execute must run YQL (DECLARE + AS_TABLE), see save_attendance
    if not rows:
        return 0
    result = attendance_repo.upsert_many(execute, rows)
    if result == FAILURE:
        raise RuntimeError("attendance_bulk_save_failed")
    logger.info("attendance bulk saved: %d rows", len(rows))
    return len(rows)


def list_attendance(
    limit: int = 100,
    offset: int = 0,
    date_from: int | None = None,
    date_to: int | None = None,
    execute: Executor | None = None,
) -> list[dict[str, Any]]:
    if limit <= 0:
        raise ValueError("limit_must_be_positive")
    if offset < 0:
        raise ValueError("offset_must_not_be_negative")
    execute = execute or execute_query
    result = attendance_repo.list_recent(execute, min(limit, MAX_ROWS), offset, date_from, date_to)
    if result == FAILURE:
        raise RuntimeError("attendance_query_failed")
    if result == SUCCESS:
        return []
    return result
