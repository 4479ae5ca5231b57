from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from ..domain.query_builder import MAX_ROWS
from ..services.attendance_svc import list_attendance

router = APIRouter()


@router.get("/api/attendance")
def api_attendance(
    limit: int = Query(100, ge=1, le=MAX_ROWS),
    offset: int = Query(0, ge=0),
    date_from: int | None = None,
    date_to: int | None = None,
):
    """Visitor-count snapshots, newest first. date_from/date_to are epoch milliseconds."""
    try:
        items = list_attendance(limit=limit, offset=offset, date_from=date_from, date_to=date_to)
        return {"items": items}
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
