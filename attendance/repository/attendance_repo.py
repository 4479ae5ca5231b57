from __future__ import annotations

from sqlite3 import Connection
from typing import Any

from ..db import Executor, QueryResult
from ..domain.query_builder import MAX_ROWS, StructDescriptor, bulk_upsert, select, upsert

TABLE = "attendance"

ATTENDANCE_STRUCT = StructDescriptor(
    "$rows",
    {
        "date": "Uint64",
        "year": "Uint32",
        "month": "Uint8",
        "day": "Uint8",
        "hour": "Uint8",
        "minute": "Uint8",
        "count": "Uint32",
    },
)


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS attendance (
            date INTEGER PRIMARY KEY,
            year INTEGER NOT NULL,
            month INTEGER NOT NULL,
            day INTEGER NOT NULL,
            hour INTEGER NOT NULL,
            minute INTEGER NOT NULL,
            count INTEGER
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_attendance_ymd ON attendance(year, month, day)")


def upsert_one(execute: Executor, row: dict[str, Any]) -> QueryResult:
    # row must carry the primary key (date)
    query = upsert(row).into(TABLE).build()
    return execute(query)


def upsert_many(execute: Executor, rows: list[dict[str, Any]]) -> QueryResult:
    query = bulk_upsert(ATTENDANCE_STRUCT).into(TABLE).build()
    return execute(query, {ATTENDANCE_STRUCT.name: rows})


def build_list_query(
    limit: int = 100,
    offset: int = 0,
    date_from: int | None = None,
    date_to: int | None = None,
) -> str:
    predicates = []
    if date_from is not None:
        predicates.append(f"date >= {int(date_from)}")
    if date_to is not None:
        predicates.append(f"date <= {int(date_to)}")
    return (
        select(list(ATTENDANCE_STRUCT.fields))
        .from_(TABLE)
        .where(predicates)
        .order_by("date DESC")
        .limit(min(int(limit), MAX_ROWS))
        .offset(int(offset))
        .build()
    )


def list_recent(
    execute: Executor,
    limit: int = 100,
    offset: int = 0,
    date_from: int | None = None,
    date_to: int | None = None,
) -> QueryResult:
    return execute(build_list_query(limit, offset, date_from, date_to))
